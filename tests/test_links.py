from __future__ import annotations

import unittest

from xhs_media.links import extract_links, is_short_link, normalize_link


class TestExtractLinks(unittest.TestCase):
    def test_finds_links_mixed_with_prose(self) -> None:
        text = (
            "看看这篇 http://xhslink.com/a/AbCd，复制本条信息 "
            "还有 https://www.xiaohongshu.com/explore/66aa01?xsec_token=t1 结束"
        )
        links = extract_links(text)

        self.assertEqual(
            [(link.kind, link.text) for link in links],
            [
                ("short", "http://xhslink.com/a/AbCd"),
                ("explore", "https://www.xiaohongshu.com/explore/66aa01?xsec_token=t1"),
            ],
        )

    def test_each_kind_is_recognized(self) -> None:
        text = "\n".join(
            [
                "www.xiaohongshu.com/discovery/item/abc123",
                "https://www.xiaohongshu.com/user/profile/5f00aa/64f1b2",
                "https://WWW.XIAOHONGSHU.COM/explore/ABC",
            ]
        )
        kinds = [link.kind for link in extract_links(text)]
        self.assertEqual(kinds, ["discovery_item", "user_profile", "explore"])

    def test_short_link_takes_precedence_within_a_token(self) -> None:
        token = "https://www.xiaohongshu.com/explore/abc?from=xhslink.com/q1"
        links = extract_links(token)
        self.assertEqual(len(links), 1)
        self.assertEqual(links[0].kind, "short")
        self.assertEqual(links[0].text, "xhslink.com/q1")

    def test_duplicates_are_kept_in_order(self) -> None:
        text = "xhslink.com/a/1 xhslink.com/a/2 xhslink.com/a/1"
        self.assertEqual(
            [link.text for link in extract_links(text)],
            ["xhslink.com/a/1", "xhslink.com/a/2", "xhslink.com/a/1"],
        )

    def test_no_links_returns_empty(self) -> None:
        self.assertEqual(extract_links("just some words https://example.com/x"), [])
        self.assertEqual(extract_links(""), [])

    def test_normalize_link_adds_scheme(self) -> None:
        self.assertEqual(normalize_link(" xhslink.com/a/1 "), "https://xhslink.com/a/1")
        self.assertEqual(normalize_link("HTTP://xhslink.com/a/1"), "HTTP://xhslink.com/a/1")
        self.assertEqual(normalize_link("   "), "")

    def test_is_short_link(self) -> None:
        self.assertTrue(is_short_link("https://XHSLINK.com/a/1"))
        self.assertFalse(is_short_link("https://www.xiaohongshu.com/explore/1"))


if __name__ == "__main__":
    unittest.main()
