from __future__ import annotations

import unittest

from xhs_media.post_id import extract_post_id


class TestExtractPostId(unittest.TestCase):
    def test_explore_and_item_paths(self) -> None:
        self.assertEqual(
            extract_post_id("https://www.xiaohongshu.com/explore/64f1a2b3c4?xsec_token=abc"),
            "64f1a2b3c4",
        )
        self.assertEqual(
            extract_post_id("https://www.xiaohongshu.com/discovery/item/abc_DEF-1/"),
            "abc_DEF-1",
        )

    def test_user_profile_path(self) -> None:
        url = "https://www.xiaohongshu.com/user/profile/5f00aa/64f1b2?xsec_source=pc"
        self.assertEqual(extract_post_id(url), "64f1b2")

    def test_short_link_uses_last_segment(self) -> None:
        self.assertEqual(extract_post_id("http://xhslink.com/a/AbCdEf"), "AbCdEf")
        self.assertEqual(extract_post_id("http://xhslink.com/a/AbCdEf?x=1"), "AbCdEf")

    def test_short_link_skips_placeholder_segment(self) -> None:
        self.assertEqual(extract_post_id("http://xhslink.com/abc/o"), "abc")
        self.assertEqual(extract_post_id("http://xhslink.com/o/8nS2x"), "8nS2x")

    def test_unrecognized_url_has_no_id(self) -> None:
        self.assertIsNone(extract_post_id("https://example.com/some/page"))
        self.assertIsNone(extract_post_id(""))


if __name__ == "__main__":
    unittest.main()
