"""HttpRelay application: settings, transport, executor and binder wiring."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import httpx

from httprelay.channel.binder import ProcessorBinder
from httprelay.channel.protocols import MessageChannel
from httprelay.config.loader import load_settings
from httprelay.config.models import RelaySettings
from httprelay.processor.executor import RequestExecutor, check_expressions
from httprelay.processor.expressions import ExpressionEvaluator, SafeExpressionEvaluator
from httprelay.processor.models import InboundMessage, OutboundMessage
from httprelay.processor.transport import HttpTransport, HttpxTransport

logger = logging.getLogger(__name__)


class HttpRelay:
    """Entry point wiring one processor configuration to a transport.

    Usage::

        async with HttpRelay.from_config("httprelay.yaml") as relay:
            reply = await relay.process("greet")
    """

    def __init__(
        self,
        settings: RelaySettings,
        transport: HttpTransport | None = None,
        evaluator: ExpressionEvaluator | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        evaluator = evaluator or SafeExpressionEvaluator()
        check_expressions(settings.processor, evaluator)
        self._owned_transport: HttpxTransport | None = None
        if transport is None:
            self._owned_transport = HttpxTransport(
                timeout_seconds=settings.processor.timeout_seconds,
                transport=http_transport,
            )
            transport = self._owned_transport
        self.executor = RequestExecutor(
            settings.processor,
            transport,
            evaluator=evaluator,
            environment=settings.properties,
        )

    @classmethod
    def from_config(
        cls,
        config_path: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> HttpRelay:
        """Load settings from YAML/env and build the relay."""
        settings = load_settings(config_path, overrides=overrides)
        logger.debug("Loaded settings from %s", config_path or "default location")
        return cls(settings, **kwargs)

    async def process(
        self,
        payload: Any,
        headers: Mapping[str, str] | None = None,
        message_id: str | None = None,
    ) -> OutboundMessage:
        """Run one payload through the executor."""
        message = InboundMessage(payload=payload, headers=dict(headers or {}), message_id=message_id)
        return await self.executor.process(message)

    def bind(self, channel: MessageChannel) -> ProcessorBinder:
        """Create a binder consuming ``channel`` with this relay's executor."""
        return ProcessorBinder(config=self.settings.channel, channel=channel, executor=self.executor)

    async def aclose(self) -> None:
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    async def __aenter__(self) -> HttpRelay:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
