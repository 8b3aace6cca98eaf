"""Channel protocol consumed by the binder."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol

from httprelay.channel.models import RawMessage
from httprelay.processor.models import OutboundMessage


class MessageChannel(Protocol):
    """Source of inbound messages and sink for replies."""

    async def connect(self) -> None:
        """Connect to the backing channel."""

    def consume(self) -> AsyncIterator[RawMessage]:
        """Yield inbound messages."""

    async def emit(self, message: OutboundMessage) -> None:
        """Publish a reply."""

    async def ack(self, message: RawMessage) -> None:
        """Acknowledge successful processing."""

    async def send_to_dlq(self, message: RawMessage, reason: str) -> None:
        """Dead-letter a message that failed terminally."""

    async def close(self) -> None:
        """Release channel resources."""

    async def health_check(self) -> bool:
        """Return whether the channel connection is healthy."""
