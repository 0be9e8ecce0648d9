import logging
import os
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar


T = TypeVar("T")

logger = logging.getLogger("retry")


@dataclass
class RetryConfig:
    max_attempts: int = 3
    base_delay_seconds: float = 0.25
    max_delay_seconds: float = 5.0
    jitter_ratio: float = 0.30

    @classmethod
    def from_env(cls) -> "RetryConfig":
        return cls(max_attempts=max(1, int(os.getenv("GITHUB_RETRY_MAX_ATTEMPTS", "3"))))


# A single attempt, for requests that must not be replayed.
NO_RETRY = RetryConfig(max_attempts=1)


def _compute_sleep_seconds(attempt: int, config: RetryConfig) -> float:
    exponential = min(config.base_delay_seconds * (2 ** (attempt - 1)), config.max_delay_seconds)
    jitter_multiplier = 1 + random.uniform(0, config.jitter_ratio)
    return exponential * jitter_multiplier


def call_with_retry(
    operation_name: str,
    fn: Callable[[], T],
    is_retryable_exception: Callable[[Exception], bool],
    is_retryable_result: Optional[Callable[[T], bool]] = None,
    config: Optional[RetryConfig] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn`` until it succeeds, returns a non-retryable result or attempts run out.

    On the last attempt a retryable result is returned as-is so the caller's
    ``raise_for_status`` reports the real HTTP error.
    """
    cfg = config or RetryConfig()

    for attempt in range(1, cfg.max_attempts + 1):
        try:
            result = fn()
        except Exception as exc:  # noqa: BLE001
            if not is_retryable_exception(exc) or attempt == cfg.max_attempts:
                raise
            logger.warning("retrying_after_exception", extra={"extra": {"operation": operation_name, "attempt": attempt}})
            sleep(_compute_sleep_seconds(attempt, cfg))
            continue

        if is_retryable_result and is_retryable_result(result) and attempt < cfg.max_attempts:
            logger.warning("retrying_after_result", extra={"extra": {"operation": operation_name, "attempt": attempt}})
            sleep(_compute_sleep_seconds(attempt, cfg))
            continue
        return result

    raise RuntimeError(f"Retry loop exhausted unexpectedly for {operation_name}")
