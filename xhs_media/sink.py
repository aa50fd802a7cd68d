from __future__ import annotations

import os
import posixpath
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Sequence
from urllib.parse import urlsplit

import httpx

from .config_schema import AppConfig
from .errors import DownloadError
from .http_retry import is_retryable_http_exception
from .media import MediaType, RemoteMedia
from .retry import OnRetryFn, RetryConfig, SleepFn, call_with_retries

REFERER = "https://www.xiaohongshu.com/"
MEDIA_ACCEPT = "image/jpeg,image/png,image/*;q=0.8,video/mp4,video/*;q=0.8,*/*;q=0.5"

_CONTENT_TYPE_EXTENSIONS = (
    ("png", "png"),
    ("webp", "webp"),
    ("gif", "gif"),
    ("jpeg", "jpg"),
    ("jpg", "jpg"),
    ("mp4", "mp4"),
    ("quicktime", "mov"),
)

_CHUNK_SIZE = 256 * 1024


def session_timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%y%m%d")


def extension_for(content_type: str | None, url: str, media_type: MediaType) -> str:
    """
    Pick a file extension: response Content-Type, then the URL path, then a type default.
    """
    ct = (content_type or "").lower()
    for marker, ext in _CONTENT_TYPE_EXTENSIONS:
        if marker in ct:
            return ext

    try:
        path = urlsplit(url).path
    except ValueError:
        path = ""
    ext = posixpath.splitext(path)[1].lstrip(".").lower()
    if ext:
        return ext

    return "mp4" if media_type == "video" else "jpg"


def output_name(prefix: str, session_ts: str, media: RemoteMedia, ext: str) -> str:
    return f"{prefix}_{session_ts}_{media.file_base_name}.{ext}"


@dataclass(frozen=True)
class DownloadOutcome:
    media: RemoteMedia
    path: Path | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.path is not None


class MediaDownloader:
    """
    Fetch resolved media to disk.

    Each file is streamed into a temporary file beside its destination and then
    moved into place, replacing any existing file of the same name.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        client: httpx.Client | None = None,
        retry: RetryConfig | None = None,
        on_retry: OnRetryFn | None = None,
        sleep_fn: SleepFn | None = None,
    ) -> None:
        self._config = config or AppConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self._retry = retry or RetryConfig(max_attempts=self._config.download.max_attempts)
        self._on_retry = on_retry
        self._sleep_fn = sleep_fn

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "MediaDownloader":
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def _headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._config.http.user_agent,
            "Referer": REFERER,
            "Accept": MEDIA_ACCEPT,
        }

    def _fetch_once(self, media: RemoteMedia, out_dir: Path, session_ts: str) -> Path:
        timeout = self._config.http.download_timeout_seconds

        with self._client.stream(
            "GET", media.url, headers=self._headers(), timeout=timeout
        ) as response:
            response.raise_for_status()

            fd, tmp_name = tempfile.mkstemp(prefix=".xhs-", suffix=".part", dir=out_dir)
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "wb") as fp:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        if chunk:
                            fp.write(chunk)

                ext = extension_for(response.headers.get("Content-Type"), media.url, media.type)
                dest = out_dir / output_name(
                    self._config.download.file_prefix, session_ts, media, ext
                )
                os.replace(tmp_path, dest)
            except BaseException:
                tmp_path.unlink(missing_ok=True)
                raise

        return dest

    def download(self, media: RemoteMedia, *, out_dir: str | Path, session_ts: str) -> Path:
        target_dir = Path(out_dir)
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DownloadError(f"Cannot create output directory {target_dir}: {e}") from e

        try:
            return call_with_retries(
                lambda: self._fetch_once(media, target_dir, session_ts),
                cfg=self._retry,
                is_retryable=is_retryable_http_exception,
                operation="download_media",
                on_retry=self._on_retry,
                sleep_fn=self._sleep_fn,
                context_url=media.url,
            )
        except httpx.HTTPStatusError as e:
            raise DownloadError(
                f"HTTP {e.response.status_code} while downloading {media.url}"
            ) from e
        except httpx.HTTPError as e:
            raise DownloadError(f"Failed to download {media.url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Failed to save {media.url}: {e}") from e

    def download_all(
        self,
        media: Sequence[RemoteMedia],
        *,
        out_dir: str | Path,
        session_ts: str | None = None,
    ) -> list[DownloadOutcome]:
        """Download independently in a thread pool; outcomes keep the input order."""
        ts = session_ts or session_timestamp()

        def _one(item: RemoteMedia) -> DownloadOutcome:
            try:
                path = self.download(item, out_dir=out_dir, session_ts=ts)
                return DownloadOutcome(media=item, path=path)
            except DownloadError as e:
                return DownloadOutcome(media=item, error=str(e))

        if not media:
            return []

        workers = min(self._config.download.max_workers, len(media))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(_one, media))
