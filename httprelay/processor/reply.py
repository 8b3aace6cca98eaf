"""Derive the outbound payload from a decoded response."""

from __future__ import annotations

from typing import Any

from httprelay.processor.context import ResponseContext
from httprelay.processor.errors import ExtractionError
from httprelay.processor.expressions import ExpressionError, ExpressionEvaluator
from httprelay.processor.models import ResponseEnvelope


class ReplyExtractor:
    """Evaluate the reply expression against status, headers and body."""

    def __init__(self, reply_expr: str | None, evaluator: ExpressionEvaluator) -> None:
        self._reply_expr = reply_expr
        self._evaluator = evaluator

    def extract(self, envelope: ResponseEnvelope) -> Any:
        if not self._reply_expr:
            return envelope.body
        context = ResponseContext.from_envelope(envelope)
        try:
            return self._evaluator.evaluate(self._reply_expr, context.as_variables())
        except ExpressionError as exc:
            raise ExtractionError(f"reply_expr failed: {exc}") from exc
