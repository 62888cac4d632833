"""Retry helper used around every outbound call of the provisioning tool."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_DELAY = 2.0


def retry_with_backoff(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay: float = DEFAULT_INITIAL_DELAY,
    sleep: Optional[Callable[[float], None]] = None,
) -> T:
    """Call ``operation`` until it succeeds or ``max_attempts`` is reached.

    Every exception counts as retryable. The wait starts at ``initial_delay``
    seconds and doubles after each failure, uncapped and without jitter. When
    the attempts run out the last exception is re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1.")
    wait = sleep or time.sleep
    delay = initial_delay
    attempt = 1
    while True:
        try:
            return operation()
        except Exception:
            if attempt >= max_attempts:
                logger.error("Giving up after %d attempts", attempt, extra={"attempt": attempt})
                raise
            logger.warning(
                "Attempt failed, retrying",
                extra={"attempt": attempt, "delay": delay},
                exc_info=True,
            )
            wait(delay)
            delay *= 2
            attempt += 1
