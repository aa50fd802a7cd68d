from __future__ import annotations

from typing import Any, Callable, Mapping

from .html_scan import scan_html
from .state import load_state

VIDEO_HOST_TEMPLATE = "https://sns-video-bd.xhscdn.com/{key}"
TRACE_IMAGE_TEMPLATE = "https://sns-img-qc.xhscdn.com/{trace_id}"

_IMAGE_URL_KEYS = ("originUrl", "urlDefault", "url")

StateProbe = Callable[[Mapping[str, Any]], list[str]]


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None


def _as_str(value: Any) -> str | None:
    # A present string field wins even when empty; unusable values are dropped later.
    return value if isinstance(value, str) else None


def _stream_urls(stream: Any) -> list[str]:
    s = _as_mapping(stream)
    if s is None:
        return []
    entries = s.get("h264")
    if not isinstance(entries, list):
        return []

    urls: list[str] = []
    for entry in entries:
        if isinstance(entry, str):
            if entry.startswith("http"):
                urls.append(entry)
            continue
        obj = _as_mapping(entry)
        if obj is None:
            continue
        url = _as_str(obj.get("masterUrl"))
        if url is None:
            url = _as_str(obj.get("url"))
        if url is not None:
            urls.append(url)
    return urls


def _video_urls(video: Any) -> list[str]:
    v = _as_mapping(video)
    if v is None:
        return []

    urls: list[str] = []

    consumer = _as_mapping(v.get("consumer"))
    if consumer is not None:
        key = _as_str(consumer.get("originVideoKey"))
        if key is not None:
            urls.append(VIDEO_HOST_TEMPLATE.format(key=key))

    media = _as_mapping(v.get("media"))
    if media is not None:
        urls.extend(_stream_urls(media.get("stream")))

    url = _as_str(v.get("url"))
    if url is not None:
        urls.append(url)

    return urls


def preferred_image_url(image: Any) -> str | None:
    """Pick the best available URL for one image object, untransformed."""
    obj = _as_mapping(image)
    if obj is None:
        return None

    for key in _IMAGE_URL_KEYS:
        url = _as_str(obj.get(key))
        if url is not None:
            return url

    trace_id = _as_str(obj.get("traceId"))
    if trace_id is not None:
        return TRACE_IMAGE_TEMPLATE.format(trace_id=trace_id)

    info_list = obj.get("infoList")
    if isinstance(info_list, list):
        for info in info_list:
            info_obj = _as_mapping(info)
            if info_obj is None:
                continue
            url = _as_str(info_obj.get("url"))
            if url is not None:
                return url

    return None


def _image_objects(note: Mapping[str, Any]) -> list[Any]:
    image_list = note.get("imageList")
    if isinstance(image_list, list):
        return image_list
    images = note.get("images")
    if isinstance(images, list):
        return images
    image = _as_mapping(note.get("image"))
    if image is not None:
        return [image]
    return []


def collect_note_urls(note: Mapping[str, Any]) -> list[str]:
    """
    Collect raw media URLs from a single post object.

    Order: videos, then each image followed by its live-photo streams, then the cover.
    """
    urls: list[str] = []

    urls.extend(_video_urls(note.get("video")))
    urls.extend(_video_urls(note.get("media")))

    for image in _image_objects(note):
        url = preferred_image_url(image)
        if url is not None:
            urls.append(url)
        image_obj = _as_mapping(image)
        if image_obj is not None:
            urls.extend(_stream_urls(image_obj.get("stream")))

    cover_url = preferred_image_url(note.get("cover"))
    if cover_url is not None:
        urls.append(cover_url)

    return urls


def _walk_detail_map(detail_map: Any) -> list[str]:
    m = _as_mapping(detail_map)
    if m is None:
        return []

    urls: list[str] = []
    for value in m.values():
        detail = _as_mapping(value)
        if detail is None:
            continue
        note = _as_mapping(detail.get("note"))
        urls.extend(collect_note_urls(note if note is not None else detail))
    return urls


def _walk_note_root(root: Mapping[str, Any]) -> list[str]:
    detail_map = _as_mapping(root.get("noteDetailMap"))
    if detail_map is not None:
        return _walk_detail_map(detail_map)
    note = _as_mapping(root.get("note"))
    if note is not None:
        return collect_note_urls(note)
    return collect_note_urls(root)


def _probe_note(state: Mapping[str, Any]) -> list[str]:
    root = _as_mapping(state.get("note"))
    if root is None:
        return []
    return _walk_note_root(root)


def _probe_detail_map(state: Mapping[str, Any]) -> list[str]:
    return _walk_detail_map(state.get("noteDetailMap"))


def _probe_feed(state: Mapping[str, Any]) -> list[str]:
    feed = _as_mapping(state.get("feed"))
    if feed is None:
        return []
    items = feed.get("items")
    if not isinstance(items, list):
        return []

    urls: list[str] = []
    for item in items:
        obj = _as_mapping(item)
        if obj is None:
            continue
        payload = _as_mapping(obj.get("noteCard")) or _as_mapping(obj.get("note")) or obj
        urls.extend(collect_note_urls(payload))
    return urls


def _probe_self(state: Mapping[str, Any]) -> list[str]:
    return _walk_note_root(state)


STATE_PROBES: tuple[StateProbe, ...] = (
    _probe_note,
    _probe_detail_map,
    _probe_feed,
    _probe_self,
)


def _unique(urls: list[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for url in urls:
        if url in seen:
            continue
        seen.add(url)
        out.append(url)
    return out


def collect_state_urls(state: Mapping[str, Any]) -> list[str]:
    """Try each known state shape in priority order; the first non-empty result wins."""
    for probe in STATE_PROBES:
        urls = probe(state)
        if urls:
            return _unique(urls)
    return []


def parse_post_details(html: str) -> list[str]:
    """
    Extract raw media URLs from a post page.

    The embedded initial state is preferred; the raw markup is scanned when the
    state is missing, unreadable, or contains no media.
    """
    state = load_state(html)
    if state is not None:
        urls = collect_state_urls(state)
        if urls:
            return urls
    return scan_html(html)
