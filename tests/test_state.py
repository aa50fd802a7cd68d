from __future__ import annotations

import unittest

from xhs_media.state import evaluate_state, extract_state_expression, load_state


_PAGE = (
    "<html><head><script>var a = 1;</script></head><body>"
    '<script>window.__INITIAL_STATE__={"note":{"firstNoteId":"n1",'
    '"serverRequestInfo":undefined}};</script>'
    "</body></html>"
)


class TestStateExtraction(unittest.TestCase):
    def test_extracts_right_hand_side(self) -> None:
        expr = extract_state_expression(_PAGE)
        self.assertEqual(
            expr, '{"note":{"firstNoteId":"n1","serverRequestInfo":undefined}}'
        )

    def test_missing_markers(self) -> None:
        self.assertIsNone(extract_state_expression("<html><body>nothing</body></html>"))
        self.assertIsNone(extract_state_expression("<script>window.__INITIAL_STATE__={}"))

    def test_load_state_evaluates_object(self) -> None:
        state = load_state(_PAGE)
        self.assertEqual(state, {"note": {"firstNoteId": "n1", "serverRequestInfo": None}})

    def test_unreadable_or_non_object_state_is_none(self) -> None:
        self.assertIsNone(evaluate_state("{note: "))
        self.assertIsNone(evaluate_state("[1, 2]"))
        self.assertIsNone(evaluate_state(None))


if __name__ == "__main__":
    unittest.main()
