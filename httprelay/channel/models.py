"""Channel message models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from httprelay.processor.models import InboundMessage


@dataclass(slots=True)
class RawMessage:
    """Raw message delivered by a channel."""

    message_id: str
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    def to_inbound(self, parser: Any | None = None) -> InboundMessage:
        """Parse the body into an inbound message for the executor."""
        payload = parser.parse(self.body) if parser is not None else self.body
        return InboundMessage(payload=payload, headers=dict(self.headers), message_id=self.message_id)


@dataclass(slots=True)
class ProcessResult:
    """Outcome of processing one channel message."""

    message_id: str
    status: str
    detail: str | None = None
