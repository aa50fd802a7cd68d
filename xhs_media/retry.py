from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    Exponential backoff policy for media downloads.

    - max_attempts includes the first try (3 => 1 try + 2 retries).
    - jitter_ratio scales each delay by a random factor in [1-jitter, 1+jitter].
    - retry_after_cap_seconds bounds a server-provided Retry-After (0 = no bound).
    """

    max_attempts: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 15.0
    jitter_ratio: float = 0.2
    retry_after_cap_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("delays must be >= 0")
        if self.max_delay_seconds < self.base_delay_seconds:
            raise ValueError("max_delay_seconds must be >= base_delay_seconds")
        if not (0.0 <= self.jitter_ratio <= 1.0):
            raise ValueError("jitter_ratio must be between 0 and 1")
        if self.retry_after_cap_seconds < 0:
            raise ValueError("retry_after_cap_seconds must be >= 0")

    def delay_for(self, failure_attempt: int, retry_after: float | None = None) -> float:
        exponent = max(0, int(failure_attempt) - 1)
        delay = min(self.max_delay_seconds, self.base_delay_seconds * (2**exponent))

        if retry_after is not None and retry_after >= 0:
            hint = float(retry_after)
            if self.retry_after_cap_seconds > 0:
                hint = min(hint, self.retry_after_cap_seconds)
            delay = max(delay, hint)

        if delay > 0 and self.jitter_ratio > 0:
            delay *= random.uniform(1.0 - self.jitter_ratio, 1.0 + self.jitter_ratio)
        return max(0.0, delay)


@dataclass(frozen=True)
class RetryEvent:
    operation: str
    failure_attempt: int
    max_attempts: int
    delay_seconds: float
    reason: str | None
    error_type: str
    error_message: str
    context_url: str | None


Classification = tuple[bool, float | None, str | None]
IsRetryableFn = Callable[[BaseException], Classification]
OnRetryFn = Callable[[RetryEvent], None]
SleepFn = Callable[[float], None]


def call_with_retries(
    fn: Callable[[], T],
    *,
    cfg: RetryConfig,
    is_retryable: IsRetryableFn,
    operation: str,
    on_retry: OnRetryFn | None = None,
    sleep_fn: SleepFn | None = None,
    context_url: str | None = None,
) -> T:
    """
    Call fn() until it succeeds, a failure is not retryable, or attempts run out.

    The last exception is re-raised unchanged.
    """
    sleeper = sleep_fn or time.sleep
    attempt = 1

    while True:
        try:
            return fn()
        except Exception as exc:
            retryable, retry_after, reason = is_retryable(exc)
            if not retryable or attempt >= cfg.max_attempts:
                raise

            delay = cfg.delay_for(attempt, retry_after)
            if on_retry is not None:
                on_retry(
                    RetryEvent(
                        operation=operation,
                        failure_attempt=attempt,
                        max_attempts=cfg.max_attempts,
                        delay_seconds=delay,
                        reason=reason,
                        error_type=type(exc).__name__,
                        error_message=(str(exc) or "").strip(),
                        context_url=context_url,
                    )
                )
            if delay > 0:
                sleeper(delay)
            attempt += 1
