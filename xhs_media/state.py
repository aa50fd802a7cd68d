from __future__ import annotations

from typing import Any

from .js_literal import JSLiteralError, parse_js_literal

STATE_MARKER = "window.__INITIAL_STATE__="
SCRIPT_END_MARKER = "</script>"


def extract_state_expression(html: str) -> str | None:
    """
    Return the right-hand side of the embedded initial-state assignment.

    None when the assignment marker or the closing script tag is missing.
    """
    text = html or ""
    start = text.find(STATE_MARKER)
    if start == -1:
        return None

    end = text.find(SCRIPT_END_MARKER, start)
    if end == -1:
        return None

    assignment = text[start:end]
    _, sep, expression = assignment.partition("=")
    if not sep:
        return None

    expression = expression.strip()
    while expression.endswith(";"):
        expression = expression[:-1].rstrip()
    return expression or None


def evaluate_state(expression: str | None) -> dict[str, Any] | None:
    if not expression:
        return None
    try:
        value = parse_js_literal(expression)
    except JSLiteralError:
        return None
    if not isinstance(value, dict):
        return None
    return value


def load_state(html: str) -> dict[str, Any] | None:
    return evaluate_state(extract_state_expression(html))
