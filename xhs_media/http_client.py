from __future__ import annotations

import httpx

from .config_schema import HttpConfig

PAGE_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=1.0,"
    "image/avif,image/webp,image/apng,*/*;q=1.0"
)

# The short-link host only redirects clients that identify as the app.
_SHORT_LINK_UA_SUFFIX = " xiaohongshu"


def decode_body(data: bytes) -> str | None:
    """Decode a page body as UTF-8, falling back to ASCII; None if neither fits."""
    for encoding in ("utf-8", "ascii"):
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return None


class XhsHttpClient:
    """
    Blocking HTTP access for short-link resolution and post page retrieval.

    Neither operation raises on network or HTTP failure; both report None instead.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        *,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config or HttpConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)

    @property
    def config(self) -> HttpConfig:
        return self._config

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "XhsHttpClient":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def resolve_short_link(self, url: str) -> str | None:
        headers = {"User-Agent": self._config.user_agent + _SHORT_LINK_UA_SUFFIX}
        try:
            response = self._client.get(
                url,
                headers=headers,
                timeout=self._config.short_link_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError:
            return None
        return str(response.url)

    def fetch_page(self, url: str) -> str | None:
        headers = {
            "User-Agent": self._config.user_agent,
            "Accept": PAGE_ACCEPT,
        }
        try:
            response = self._client.get(
                url,
                headers=headers,
                timeout=self._config.page_timeout_seconds,
                follow_redirects=True,
            )
        except httpx.HTTPError:
            return None

        if not (200 <= response.status_code < 300):
            return None

        return decode_body(response.content)
