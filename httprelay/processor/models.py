"""Message and request/response models for one processing cycle."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """Unit of work received from a channel."""

    payload: Any
    headers: Mapping[str, str] = field(default_factory=dict)
    message_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True, slots=True)
class ResolvedRequest:
    """Fully resolved HTTP request, reused across retry attempts."""

    method: str
    url: str
    headers: dict[str, str]
    body: Any = None


@dataclass(slots=True)
class TransportResponse:
    """Raw response of one HTTP attempt."""

    status_code: int
    headers: dict[str, str]
    content: bytes
    encoding: str | None = None


@dataclass(slots=True)
class ResponseEnvelope:
    """Response with a body decoded per the expected response type."""

    status_code: int
    headers: dict[str, str]
    body: Any


@dataclass(frozen=True, slots=True)
class OutboundMessage:
    """Reply produced for one inbound message."""

    payload: Any
    correlation_id: str | None = None
