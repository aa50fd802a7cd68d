from __future__ import annotations

import tempfile
import unittest
from datetime import datetime
from pathlib import Path

import httpx

from xhs_media.config_schema import AppConfig, DownloadConfig
from xhs_media.errors import DownloadError
from xhs_media.media import RemoteMedia
from xhs_media.retry import RetryConfig
from xhs_media.sink import (
    REFERER,
    MediaDownloader,
    extension_for,
    output_name,
    session_timestamp,
)

_IMAGE = RemoteMedia(
    url="https://ci.xiaohongshu.com/tok?imageView2/format/png",
    type="image",
    file_base_name="p1_1",
    original_url="https://sns-webpic-qc.xhscdn.com/202401/abc/tok!nd_dft",
)
_VIDEO = RemoteMedia(
    url="https://sns-video-bd.xhscdn.com/v123",
    type="video",
    file_base_name="p1_2",
    original_url="https://sns-video-bd.xhscdn.com/v123",
)

_NO_WAIT = RetryConfig(max_attempts=3, base_delay_seconds=0.0, max_delay_seconds=0.0, jitter_ratio=0.0)


def _downloader(handler, **kwargs) -> MediaDownloader:
    client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
    kwargs.setdefault("retry", _NO_WAIT)
    return MediaDownloader(client=client, **kwargs)


class TestNaming(unittest.TestCase):
    def test_session_timestamp(self) -> None:
        self.assertEqual(session_timestamp(datetime(2025, 1, 2, 13, 45)), "250102")

    def test_extension_from_content_type(self) -> None:
        self.assertEqual(extension_for("image/png", "https://x/y", "image"), "png")
        self.assertEqual(extension_for("image/jpeg; charset=binary", "https://x/y", "image"), "jpg")
        self.assertEqual(extension_for("video/quicktime", "https://x/y", "video"), "mov")

    def test_extension_from_url_then_default(self) -> None:
        self.assertEqual(extension_for(None, "https://x/clip.MP4?sig=1", "video"), "mp4")
        self.assertEqual(extension_for("application/octet-stream", "https://x/v123", "video"), "mp4")
        self.assertEqual(extension_for(None, "https://x/tok", "image"), "jpg")

    def test_output_name(self) -> None:
        self.assertEqual(output_name("xhs", "250102", _IMAGE, "png"), "xhs_250102_p1_1.png")


class TestMediaDownloader(unittest.TestCase):
    def test_saves_with_prefix_and_referer(self) -> None:
        captured: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["referer"] = request.headers["Referer"]
            return httpx.Response(200, headers={"Content-Type": "image/png"}, content=b"PNGDATA")

        with tempfile.TemporaryDirectory() as d:
            with _downloader(handler) as downloader:
                path = downloader.download(_IMAGE, out_dir=d, session_ts="250102")

            self.assertEqual(path, Path(d) / "xhs_250102_p1_1.png")
            self.assertEqual(path.read_bytes(), b"PNGDATA")
            self.assertEqual([p.name for p in Path(d).iterdir()], ["xhs_250102_p1_1.png"])

        self.assertEqual(captured["referer"], REFERER)

    def test_existing_file_is_replaced(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Type": "image/png"}, content=b"new")

        with tempfile.TemporaryDirectory() as d:
            target = Path(d) / "xhs_250102_p1_1.png"
            target.write_bytes(b"old")

            with _downloader(handler) as downloader:
                downloader.download(_IMAGE, out_dir=d, session_ts="250102")

            self.assertEqual(target.read_bytes(), b"new")

    def test_custom_prefix(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Type": "video/mp4"}, content=b"v")

        cfg = AppConfig(download=DownloadConfig(file_prefix="red"))
        with tempfile.TemporaryDirectory() as d:
            with _downloader(handler, config=cfg) as downloader:
                path = downloader.download(_VIDEO, out_dir=d, session_ts="250102")
            self.assertEqual(path.name, "red_250102_p1_2.mp4")

    def test_server_error_is_retried(self) -> None:
        calls = {"n": 0}
        sleeps: list[float] = []
        events = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, headers={"Content-Type": "image/png"}, content=b"ok")

        retry = RetryConfig(max_attempts=3, base_delay_seconds=0.5, max_delay_seconds=0.5, jitter_ratio=0.0)
        with tempfile.TemporaryDirectory() as d:
            with _downloader(
                handler, retry=retry, on_retry=events.append, sleep_fn=sleeps.append
            ) as downloader:
                path = downloader.download(_IMAGE, out_dir=d, session_ts="250102")
            self.assertEqual(path.read_bytes(), b"ok")

        self.assertEqual(calls["n"], 2)
        self.assertEqual(sleeps, [0.5])
        self.assertEqual(len(events), 1)
        self.assertEqual(events[0].reason, "http_503")
        self.assertEqual(events[0].context_url, _IMAGE.url)

    def test_client_error_is_not_retried(self) -> None:
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            return httpx.Response(404, text="gone")

        with tempfile.TemporaryDirectory() as d:
            with _downloader(handler) as downloader:
                with self.assertRaises(DownloadError) as ctx:
                    downloader.download(_IMAGE, out_dir=d, session_ts="250102")
            self.assertEqual(list(Path(d).iterdir()), [])

        self.assertEqual(calls["n"], 1)
        self.assertIn("HTTP 404", str(ctx.exception))

    def test_network_failure_exhausts_attempts(self) -> None:
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            raise httpx.ConnectError("refused", request=request)

        with tempfile.TemporaryDirectory() as d:
            with _downloader(handler) as downloader:
                with self.assertRaises(DownloadError):
                    downloader.download(_IMAGE, out_dir=d, session_ts="250102")

        self.assertEqual(calls["n"], 3)

    def test_download_all_keeps_order_and_isolates_failures(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "sns-video-bd.xhscdn.com":
                return httpx.Response(403, text="denied")
            return httpx.Response(200, headers={"Content-Type": "image/png"}, content=b"img")

        with tempfile.TemporaryDirectory() as d:
            with _downloader(handler) as downloader:
                outcomes = downloader.download_all([_IMAGE, _VIDEO], out_dir=d, session_ts="250102")

            self.assertEqual([o.media.file_base_name for o in outcomes], ["p1_1", "p1_2"])
            self.assertTrue(outcomes[0].ok)
            self.assertFalse(outcomes[1].ok)
            self.assertIn("HTTP 403", outcomes[1].error or "")

    def test_download_all_empty(self) -> None:
        with _downloader(lambda r: httpx.Response(200)) as downloader:
            self.assertEqual(downloader.download_all([], out_dir="unused"), [])


if __name__ == "__main__":
    unittest.main()
