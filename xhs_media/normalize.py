from __future__ import annotations

import uuid
from typing import Callable, Iterable
from urllib.parse import quote, urlsplit

from .media import MediaType, RemoteMedia

CDN_IMAGE_TEMPLATE = "https://ci.xiaohongshu.com/{token}?imageView2/format/png"

_CDN_HOST_MARKER = "xhscdn.com"
_VIDEO_HOST_MARKER = "sns-video"

# "video" and "stream" are plain substring checks, so an image whose path
# happens to contain either word is classified as a video.
_VIDEO_MARKERS = (".mp4", ".mov", ".avi", ".webm", "video", "stream", _VIDEO_HOST_MARKER)

# Characters allowed unescaped in a URL fragment, plus '%' so existing escapes survive.
_URL_SAFE_CHARS = "!$&'()*+,/:;=?@%"

# Index of the first path segment after "https:", "", "<host>", and two leading path parts.
_TOKEN_SEGMENT_INDEX = 5

TokenFactory = Callable[[], str]


def _random_token() -> str:
    return uuid.uuid4().hex[:8]


def is_video_url(url: str) -> bool:
    lower = (url or "").lower()
    return any(marker in lower for marker in _VIDEO_MARKERS)


def media_type_for(url: str) -> MediaType:
    return "video" if is_video_url(url) else "image"


def extract_image_token(url: str) -> str | None:
    """
    Reduce an image CDN URL to the path remainder that identifies the image.

    Size-variant suffixes ("!...") and query strings are removed.
    """
    sanitized = (url or "").replace("\\/", "/").replace("\\u002F", "/")
    sanitized = sanitized.replace("\\", "").strip()

    http_at = sanitized.lower().find("http")
    if http_at != -1:
        sanitized = sanitized[http_at:]

    parts = sanitized.split("/")
    if len(parts) <= _TOKEN_SEGMENT_INDEX:
        return None

    token = "/".join(parts[_TOKEN_SEGMENT_INDEX:])
    token = token.split("!", 1)[0]
    token = token.split("?", 1)[0]
    return token or None


def transform_cdn_url(url: str) -> str:
    """Rewrite an image CDN URL to the canonical PNG endpoint; other URLs pass through."""
    if _CDN_HOST_MARKER not in url or "video" in url or _VIDEO_HOST_MARKER in url:
        return url
    token = extract_image_token(url)
    if token is None:
        return url
    return CDN_IMAGE_TEMPLATE.format(token=token)


def encode_url(url: str) -> str | None:
    """
    Percent-encode unsafe characters; None when the result is not a usable absolute URL.

    Protocol-relative URLs ("//host/...") are given the https scheme.
    """
    value = (url or "").strip()
    if not value:
        return None
    if value.startswith("//"):
        value = "https:" + value

    encoded = quote(value, safe=_URL_SAFE_CHARS)
    try:
        parts = urlsplit(encoded)
    except ValueError:
        return None

    if not parts.scheme or not parts.netloc:
        return None
    return encoded


def build_remote_media(
    urls: Iterable[str],
    post_id: str | None,
    *,
    token_factory: TokenFactory | None = None,
) -> list[RemoteMedia]:
    """
    Turn raw media URLs of one post into resource descriptors.

    File base names are "<post id>_<ordinal>", with a random token standing in
    for a missing post id. Unusable URLs are skipped but still consume an ordinal.
    """
    base = post_id or (token_factory or _random_token)()
    out: list[RemoteMedia] = []

    for index, raw in enumerate(urls, start=1):
        media_type = media_type_for(raw)
        if media_type == "image":
            url = encode_url(transform_cdn_url(raw)) or encode_url(raw)
        else:
            url = encode_url(raw)
        if url is None:
            continue

        out.append(
            RemoteMedia(
                url=url,
                type=media_type,
                file_base_name=f"{base}_{index}",
                original_url=raw,
            )
        )

    return out
