from __future__ import annotations

import re

_POST_ID_RE = re.compile(r"(?:explore|item)/([a-zA-Z0-9_\-]+)/?(?:\?|$)", re.IGNORECASE)
_USER_POST_ID_RE = re.compile(
    r"user/profile/[a-z0-9]+/([a-zA-Z0-9_\-]+)/?(?:\?|$)", re.IGNORECASE
)

# Short links of the form xhslink.com/o/<code> carry this placeholder segment.
_SHORT_LINK_PLACEHOLDER = "o"


def _strip_query(segment: str) -> str:
    return segment.split("?", 1)[0]


def extract_post_id(url: str) -> str | None:
    """
    Derive a stable post identifier from a resolved post URL.

    Returns None when nothing plausible is found; callers generate a random token.
    """
    value = (url or "").strip()
    if not value:
        return None

    for pattern in (_POST_ID_RE, _USER_POST_ID_RE):
        match = pattern.search(value)
        if match:
            return match.group(1)

    if "xhslink.com/" in value:
        parts = [p for p in value.split("/") if p]
        if not parts:
            return None
        last = _strip_query(parts[-1])
        if last and last != _SHORT_LINK_PLACEHOLDER:
            return last
        if len(parts) > 1:
            return _strip_query(parts[-2]) or None

    return None
