"""Read-only evaluation contexts for message and response expressions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from httprelay.processor.models import InboundMessage, ResponseEnvelope


@dataclass(frozen=True, slots=True)
class MessageContext:
    """Expose an inbound message and ambient properties to expressions.

    Expressions see three names: ``payload``, ``headers`` and ``env``.
    """

    payload: Any
    headers: Mapping[str, str]
    env: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_message(cls, message: InboundMessage, environment: Mapping[str, str] | None = None) -> MessageContext:
        return cls(
            payload=message.payload,
            headers=message.headers,
            env=MappingProxyType(dict(environment or {})),
        )

    def as_variables(self) -> dict[str, Any]:
        return {"payload": self.payload, "headers": self.headers, "env": self.env}


@dataclass(frozen=True, slots=True)
class ResponseContext:
    """Expose a decoded response as ``status``, ``headers`` and ``body``."""

    status: int
    headers: Mapping[str, str]
    body: Any

    @classmethod
    def from_envelope(cls, envelope: ResponseEnvelope) -> ResponseContext:
        return cls(
            status=envelope.status_code,
            headers=MappingProxyType(dict(envelope.headers)),
            body=envelope.body,
        )

    def as_variables(self) -> dict[str, Any]:
        return {"status": self.status, "headers": self.headers, "body": self.body}
