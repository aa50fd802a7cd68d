from __future__ import annotations

from .config import load_config
from .config_schema import AppConfig
from .errors import ConfigError, DownloadError, OperationCancelled
from .media import LinkContext, RemoteMedia
from .pipeline import MediaCollector, collect_media

__all__ = [
    "AppConfig",
    "ConfigError",
    "DownloadError",
    "LinkContext",
    "MediaCollector",
    "OperationCancelled",
    "RemoteMedia",
    "collect_media",
    "load_config",
]
