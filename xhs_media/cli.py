from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config
from .errors import ConfigError, DownloadError, OperationCancelled
from .http_client import XhsHttpClient
from .pipeline import MediaCollector
from .run_log import RunLogger
from .sink import MediaDownloader, session_timestamp


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="xhs_media")

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve = subparsers.add_parser(
        "resolve",
        help="Resolve share text into downloadable media URLs.",
    )
    resolve.add_argument(
        "text",
        nargs="+",
        help="Share text or links; use '-' to read from stdin.",
    )
    resolve.add_argument("--config", help="Path to YAML config file.")
    resolve.add_argument(
        "--json",
        action="store_true",
        help="Print the resolved media as a JSON array.",
    )
    resolve.set_defaults(_handler=_cmd_resolve)

    download = subparsers.add_parser(
        "download",
        help="Resolve share text and download every media file.",
    )
    download.add_argument(
        "text",
        nargs="+",
        help="Share text or links; use '-' to read from stdin.",
    )
    download.add_argument("--config", help="Path to YAML config file.")
    download.add_argument(
        "--out",
        required=True,
        help="Output directory for media files and run.log.",
    )
    download.set_defaults(_handler=_cmd_download)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _read_text(parts: Sequence[str]) -> str:
    if list(parts) == ["-"]:
        return sys.stdin.read()
    return " ".join(parts)


def _cmd_resolve(args: argparse.Namespace) -> int:
    cfg = load_config(args.config)
    text = _read_text(args.text)

    with XhsHttpClient(cfg.http) as client:
        media = MediaCollector(client, notify=_eprint).collect(text)

    if args.json:
        payload = [
            {
                "id": item.id,
                "type": item.type,
                "url": item.url,
                "file_base_name": item.file_base_name,
                "original_url": item.original_url,
            }
            for item in media
        ]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
    else:
        for item in media:
            print(f"{item.type}\t{item.file_base_name}\t{item.url}")

    return 0


def _cmd_download(args: argparse.Namespace) -> int:
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    log_path = out_dir / "run.log"
    with RunLogger.open(log_path, overwrite=True, echo=_eprint) as log:
        log.info("download_command_started", config_path=args.config, out_dir=str(out_dir))

        try:
            cfg = load_config(args.config)
            text = _read_text(args.text)

            with XhsHttpClient(cfg.http) as client:
                media = MediaCollector(client, notify=log.progress).collect(text)
            log.info("collection_completed", media=len(media))

            session_ts = session_timestamp()
            with MediaDownloader(cfg, on_retry=log.retry) as downloader:
                outcomes = downloader.download_all(media, out_dir=out_dir, session_ts=session_ts)

            failed = 0
            for outcome in outcomes:
                if outcome.ok:
                    log.info("media_saved", url=outcome.media.url, path=str(outcome.path))
                    print(f"saved={outcome.path}")
                else:
                    failed += 1
                    log.error("media_failed", url=outcome.media.url, error=outcome.error)
                    _eprint(f"failed={outcome.media.url} {outcome.error}")

            log.info("download_command_completed", saved=len(outcomes) - failed, failed=failed)
            print(f"media={len(media)}")
            print(f"saved_count={len(outcomes) - failed}")
            print(f"failed_count={failed}")
            print(f"run_log={log_path}")

            return 3 if failed else 0
        except Exception as e:
            log.exception("download_command_failed", exc=e)
            raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except DownloadError as e:
        _eprint(str(e))
        return 3
    except (OperationCancelled, KeyboardInterrupt):
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
