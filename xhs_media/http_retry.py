from __future__ import annotations

import httpx

from .retry import Classification


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = (response.headers.get("Retry-After") or "").strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def is_retryable_http_exception(exc: BaseException) -> Classification:
    """
    Download retry policy:
    - transport errors and timeouts
    - HTTP 429 (honoring Retry-After) and HTTP 5xx
    """
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        if code == 429:
            return True, _retry_after_seconds(exc.response), "http_429"
        if code >= 500:
            return True, None, f"http_{code}"
        return False, None, f"http_{code}"

    if isinstance(exc, httpx.TimeoutException):
        return True, None, "timeout"

    if isinstance(exc, httpx.TransportError):
        return True, None, "network_error"

    return False, None, None
