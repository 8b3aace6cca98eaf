"""Tests for the retry policy and controller state machine."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from httprelay.config.models import RetrySettings
from httprelay.processor.errors import ExhaustedFailure, TransportError
from httprelay.processor.retry import (
    TERMINAL_STATES,
    RetryController,
    RetryState,
    calculate_backoff_delay,
    is_retryable,
)


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class FlakyOperation:
    def __init__(self, failures: list[TransportError], result: str = "ok") -> None:
        self._failures = list(failures)
        self._result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self._failures:
            raise self._failures.pop(0)
        return self._result


@given(
    st.integers(min_value=1, max_value=12),
    st.integers(min_value=0, max_value=2000),
    st.floats(min_value=1.0, max_value=5.0, allow_nan=False),
)
def test_backoff_delay_is_non_decreasing_and_capped(retry_number: int, initial_ms: int, multiplier: float) -> None:
    settings = RetrySettings(
        enabled=True,
        initial_interval_ms=initial_ms,
        multiplier=multiplier,
        max_interval_ms=initial_ms + 5000,
    )
    current = calculate_backoff_delay(retry_number, settings)
    nxt = calculate_backoff_delay(retry_number + 1, settings)
    assert current <= nxt
    assert nxt <= settings.max_interval_ms / 1000.0


def test_backoff_sequence_doubles_then_caps() -> None:
    settings = RetrySettings(enabled=True, initial_interval_ms=100, multiplier=2.0, max_interval_ms=300)
    delays = [calculate_backoff_delay(n, settings) for n in range(1, 5)]
    assert delays == pytest.approx([0.1, 0.2, 0.3, 0.3])


def test_is_retryable_respects_status_list() -> None:
    settings = RetrySettings(retryable_status_codes=(503,))
    assert is_retryable(TransportError("connection refused"), settings) is True
    assert is_retryable(TransportError("unavailable", status_code=503), settings) is True
    assert is_retryable(TransportError("not found", status_code=404), settings) is False


@pytest.mark.asyncio
async def test_retries_twice_then_succeeds_with_growing_waits() -> None:
    sleep = RecordingSleep()
    settings = RetrySettings(enabled=True, max_attempts=3, initial_interval_ms=100, multiplier=2.0)
    controller = RetryController(settings, sleep=sleep)
    operation = FlakyOperation([TransportError("refused"), TransportError("refused")])

    result = await controller.run(operation)

    assert result == "ok"
    assert operation.calls == 3
    assert controller.attempts == 3
    assert sleep.calls == pytest.approx([0.1, 0.2])
    assert controller.delays == pytest.approx([0.1, 0.2])
    assert controller.state is RetryState.SUCCESS


@pytest.mark.asyncio
async def test_exhausts_after_max_attempts() -> None:
    sleep = RecordingSleep()
    settings = RetrySettings(enabled=True, max_attempts=2, initial_interval_ms=10)
    controller = RetryController(settings, sleep=sleep)
    last = TransportError("still down")
    operation = FlakyOperation([TransportError("down"), last, TransportError("never reached")])

    with pytest.raises(ExhaustedFailure) as exc_info:
        await controller.run(operation)

    assert operation.calls == 2
    assert exc_info.value.attempts == 2
    assert exc_info.value.last_error is last
    assert len(sleep.calls) == 1
    assert controller.state is RetryState.EXHAUSTED


@pytest.mark.asyncio
async def test_disabled_retry_makes_exactly_one_attempt() -> None:
    sleep = RecordingSleep()
    controller = RetryController(RetrySettings(enabled=False, max_attempts=5), sleep=sleep)
    operation = FlakyOperation([TransportError("down")])

    with pytest.raises(ExhaustedFailure) as exc_info:
        await controller.run(operation)

    assert operation.calls == 1
    assert exc_info.value.attempts == 1
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_non_retryable_status_fails_immediately() -> None:
    sleep = RecordingSleep()
    controller = RetryController(RetrySettings(enabled=True, max_attempts=4), sleep=sleep)
    operation = FlakyOperation([TransportError("not found", status_code=404)])

    with pytest.raises(TransportError) as exc_info:
        await controller.run(operation)

    assert not isinstance(exc_info.value, ExhaustedFailure)
    assert exc_info.value.status_code == 404
    assert operation.calls == 1
    assert controller.state is RetryState.FAILED


@pytest.mark.asyncio
async def test_non_transport_errors_are_not_retried() -> None:
    controller = RetryController(RetrySettings(enabled=True, max_attempts=4), sleep=RecordingSleep())
    calls = {"value": 0}

    async def operation() -> str:
        calls["value"] += 1
        raise ValueError("bug")

    with pytest.raises(ValueError):
        await controller.run(operation)
    assert calls["value"] == 1


@pytest.mark.asyncio
async def test_controller_is_single_use() -> None:
    controller = RetryController(RetrySettings(), sleep=RecordingSleep())
    await controller.run(FlakyOperation([]))
    with pytest.raises(RuntimeError):
        await controller.run(FlakyOperation([]))


@pytest.mark.asyncio
async def test_controller_reports_done_only_in_terminal_states() -> None:
    controller = RetryController(RetrySettings(), sleep=RecordingSleep())
    assert controller.done is False
    await controller.run(FlakyOperation([]))
    assert controller.state in TERMINAL_STATES
    assert controller.done is True
