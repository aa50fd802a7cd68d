from __future__ import annotations


class ConfigError(RuntimeError):
    """Raised when configuration is missing or invalid."""


class DownloadError(RuntimeError):
    """Raised when a media resource cannot be downloaded or saved."""


class OperationCancelled(RuntimeError):
    """Raised when a collection run is cancelled between links."""
