"""Request executor: one inbound message in, one reply out."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from httprelay.config.models import ProcessorConfig
from httprelay.processor.decoders import decode_response
from httprelay.processor.errors import ExpressionConfigError, HttpRelayError
from httprelay.processor.expressions import ExpressionError, ExpressionEvaluator, SafeExpressionEvaluator
from httprelay.processor.models import InboundMessage, OutboundMessage, ResolvedRequest, TransportResponse
from httprelay.processor.reply import ReplyExtractor
from httprelay.processor.request_builder import RequestBuilder
from httprelay.processor.retry import RetryController, SleepFunc
from httprelay.processor.transport import HttpTransport

logger = logging.getLogger(__name__)


class RequestExecutor:
    """Build the request, send it under the retry policy and extract the reply.

    The executor holds no per-message state, so ``process`` may run
    concurrently for many messages against the same instance.
    """

    def __init__(
        self,
        config: ProcessorConfig,
        transport: HttpTransport,
        evaluator: ExpressionEvaluator | None = None,
        environment: Mapping[str, str] | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.config = config
        self._transport = transport
        self._evaluator = evaluator or SafeExpressionEvaluator()
        self._sleep = sleep
        check_expressions(config, self._evaluator)
        self._builder = RequestBuilder(config, self._evaluator, environment)
        self._extractor = ReplyExtractor(config.reply_expr, self._evaluator)

    async def process(self, message: InboundMessage) -> OutboundMessage:
        """Process one message; raise an HttpRelayError subclass on terminal failure."""
        try:
            request = self._builder.build(message)
            controller = RetryController(self.config.retry, sleep=self._sleep)
            response = await controller.run(lambda: self._send(request))
            envelope = decode_response(response, self.config.expected_response_type)
            payload = self._extractor.extract(envelope)
        except HttpRelayError as exc:
            logger.warning("Message %s failed: %s: %s", message.message_id, type(exc).__name__, exc)
            raise
        logger.debug(
            "Message %s replied after %d attempt(s) with status %d",
            message.message_id,
            controller.attempts,
            envelope.status_code,
        )
        return OutboundMessage(payload=payload, correlation_id=message.message_id)

    async def _send(self, request: ResolvedRequest) -> TransportResponse:
        return await self._transport.send(request)


def check_expressions(config: ProcessorConfig, evaluator: ExpressionEvaluator) -> None:
    """Compile every configured expression; raise ExpressionConfigError on the first bad one."""
    for field, expression in config.expressions().items():
        try:
            evaluator.compile(expression)
        except ExpressionError as exc:
            raise ExpressionConfigError(f"{field} is invalid: {exc}", field=field) from exc
