from __future__ import annotations

import re

from .media import ExtractedLink, LinkKind

SHORT_LINK_RE = re.compile(
    r"(?:https?://)?xhslink\.com/[^\s\"<>\\^`{|}，。；！？、【】《》]+",
    re.IGNORECASE,
)
DISCOVERY_ITEM_RE = re.compile(
    r"(?:https?://)?www\.xiaohongshu\.com/discovery/item/\S+", re.IGNORECASE
)
EXPLORE_RE = re.compile(r"(?:https?://)?www\.xiaohongshu\.com/explore/\S+", re.IGNORECASE)
USER_PROFILE_RE = re.compile(
    r"(?:https?://)?www\.xiaohongshu\.com/user/profile/[a-z0-9]+/\S+", re.IGNORECASE
)

# Precedence matters: a token is classified by the first pattern that matches.
_LINK_PATTERNS: tuple[tuple[LinkKind, re.Pattern[str]], ...] = (
    ("short", SHORT_LINK_RE),
    ("discovery_item", DISCOVERY_ITEM_RE),
    ("explore", EXPLORE_RE),
    ("user_profile", USER_PROFILE_RE),
)


def classify_token(token: str) -> ExtractedLink | None:
    for kind, pattern in _LINK_PATTERNS:
        match = pattern.search(token)
        if match:
            return ExtractedLink(text=match.group(0), kind=kind)
    return None


def extract_links(text: str) -> list[ExtractedLink]:
    """
    Find share links in free text, one per whitespace-delimited token.

    Order of first appearance is kept and duplicates are not removed.
    """
    out: list[ExtractedLink] = []
    for token in (text or "").split():
        link = classify_token(token)
        if link is not None:
            out.append(link)
    return out


def normalize_link(raw: str) -> str:
    value = (raw or "").strip()
    if not value:
        return ""
    if not value.lower().startswith("http"):
        value = "https://" + value
    return value


def is_short_link(url: str) -> bool:
    return "xhslink.com" in (url or "").lower()
