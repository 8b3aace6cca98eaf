"""In-memory channel for local runs and tests."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import AsyncIterator

from httprelay.channel.models import RawMessage
from httprelay.processor.models import OutboundMessage


class InMemoryChannel:
    """Deque-backed channel; consumption ends once the queue is drained."""

    def __init__(self) -> None:
        self._queue: deque[RawMessage] = deque()
        self._emitted: list[OutboundMessage] = []
        self._acked: list[str] = []
        self._dlq: list[tuple[str, str]] = []
        self._connected = False
        self._closed = False

    async def connect(self) -> None:
        self._connected = True
        self._closed = False

    async def consume(self) -> AsyncIterator[RawMessage]:
        while self._connected and not self._closed:
            if self._queue:
                yield self._queue.popleft()
                continue
            await asyncio.sleep(0)
            break

    async def emit(self, message: OutboundMessage) -> None:
        self._emitted.append(message)

    async def ack(self, message: RawMessage) -> None:
        self._acked.append(message.message_id)

    async def send_to_dlq(self, message: RawMessage, reason: str) -> None:
        self._dlq.append((message.message_id, reason))

    async def close(self) -> None:
        self._closed = True
        self._connected = False

    async def health_check(self) -> bool:
        return self._connected and not self._closed

    def enqueue(self, message: RawMessage) -> None:
        self._queue.append(message)

    def get_emitted(self) -> list[OutboundMessage]:
        return list(self._emitted)

    def get_acked(self) -> list[str]:
        return list(self._acked)

    def get_dlq(self) -> list[tuple[str, str]]:
        return list(self._dlq)

    def pending_count(self) -> int:
        return len(self._queue)
