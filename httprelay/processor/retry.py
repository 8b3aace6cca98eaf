"""Retry policy with bounded exponential backoff for HTTP round trips."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from httprelay.config.models import RetrySettings
from httprelay.processor.errors import ExhaustedFailure, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")
SleepFunc = Callable[[float], Awaitable[None]]


class RetryState(str, Enum):
    """Lifecycle of one retried round trip."""

    PENDING = "pending"
    ATTEMPTING = "attempting"
    RETRY_SCHEDULED = "retry_scheduled"
    SUCCESS = "success"
    FAILED = "failed"
    EXHAUSTED = "exhausted"


TERMINAL_STATES = frozenset({RetryState.SUCCESS, RetryState.FAILED, RetryState.EXHAUSTED})


def calculate_backoff_delay(retry_number: int, settings: RetrySettings) -> float:
    """Return the wait in seconds before retry ``retry_number`` (1-based)."""
    if retry_number <= 1:
        raw_ms = float(settings.initial_interval_ms)
    else:
        raw_ms = settings.initial_interval_ms * (settings.multiplier ** (retry_number - 1))
    return min(float(settings.max_interval_ms), raw_ms) / 1000.0


def is_retryable(error: TransportError, settings: RetrySettings) -> bool:
    """I/O failures are always retryable; error statuses only when listed."""
    if error.status_code is None:
        return True
    return error.status_code in settings.retryable_status_codes


class RetryController:
    """Run one operation under the retry policy.

    Create one controller per message: it records the attempts made and the
    delays waited for that message only.
    """

    def __init__(self, settings: RetrySettings, sleep: SleepFunc = asyncio.sleep) -> None:
        self._settings = settings
        self._sleep = sleep
        self._state = RetryState.PENDING
        self._attempts = 0
        self._delays: list[float] = []

    @property
    def state(self) -> RetryState:
        return self._state

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def delays(self) -> list[float]:
        return list(self._delays)

    @property
    def done(self) -> bool:
        return self._state in TERMINAL_STATES

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts if self._settings.enabled else 1

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        if self._state is not RetryState.PENDING:
            raise RuntimeError("RetryController instances are single-use")
        max_attempts = self.max_attempts
        while True:
            self._attempts += 1
            self._transition(RetryState.ATTEMPTING)
            try:
                result = await operation()
            except TransportError as exc:
                if not is_retryable(exc, self._settings):
                    self._transition(RetryState.FAILED)
                    raise
                if self._attempts >= max_attempts:
                    self._transition(RetryState.EXHAUSTED)
                    raise ExhaustedFailure(self._attempts, exc) from exc
                delay = calculate_backoff_delay(self._attempts, self._settings)
                logger.warning(
                    "Attempt %d/%d failed: %s; retrying in %.3fs",
                    self._attempts,
                    max_attempts,
                    exc,
                    delay,
                )
                self._transition(RetryState.RETRY_SCHEDULED)
                self._delays.append(delay)
                await self._sleep(delay)
                continue
            self._transition(RetryState.SUCCESS)
            return result

    def _transition(self, state: RetryState) -> None:
        logger.debug("Retry state %s -> %s (attempt %d)", self._state.value, state.value, self._attempts)
        self._state = state
