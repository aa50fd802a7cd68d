from __future__ import annotations

import re

IMG_SRC_RE = re.compile(r"<img[^>]+src\s*=\s*['\"]([^'\"]+)['\"][^>]*>", re.IGNORECASE)
MEDIA_URL_RE = re.compile(
    r"https?://[\w\-._~:/?#\[\]@!$&'()*+,;=%]+\."
    r"(?:jpg|jpeg|png|gif|mp4|avi|mov|webm|wmv|flv|f4v|swf|mpg|mpeg|asf|3gp|3g2|mkv|webp|heic|heif)",
    re.IGNORECASE,
)

CDN_HOST_MARKER = "xhscdn.com"
_MEDIA_MARKERS = (".jpg", ".jpeg", ".png", ".gif", ".webp", ".mp4", ".mov")


def is_media_candidate(url: str) -> bool:
    lower = (url or "").lower()
    if CDN_HOST_MARKER in lower:
        return True
    return any(marker in lower for marker in _MEDIA_MARKERS)


def scan_html(html: str) -> list[str]:
    """
    Recover media URLs from raw markup: <img> sources first, then bare media URLs.
    """
    text = html or ""
    out: list[str] = []
    seen: set[str] = set()

    candidates = [m.group(1) for m in IMG_SRC_RE.finditer(text)]
    candidates.extend(m.group(0) for m in MEDIA_URL_RE.finditer(text))

    for url in candidates:
        if url in seen or not is_media_candidate(url):
            continue
        seen.add(url)
        out.append(url)
    return out
