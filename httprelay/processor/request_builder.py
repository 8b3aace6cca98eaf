"""Build outbound HTTP requests from inbound messages."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from httprelay.config.models import HTTP_METHODS, ProcessorConfig
from httprelay.processor.context import MessageContext
from httprelay.processor.errors import ResolutionError
from httprelay.processor.expressions import ExpressionError, ExpressionEvaluator
from httprelay.processor.models import InboundMessage, ResolvedRequest

logger = logging.getLogger(__name__)


class RequestBuilder:
    """Resolve method, URL, headers and body for one message."""

    def __init__(
        self,
        config: ProcessorConfig,
        evaluator: ExpressionEvaluator,
        environment: Mapping[str, str] | None = None,
    ) -> None:
        self._config = config
        self._evaluator = evaluator
        self._environment = dict(environment or {})

    def build(self, message: InboundMessage) -> ResolvedRequest:
        context = MessageContext.from_message(message, self._environment)
        variables = context.as_variables()
        request = ResolvedRequest(
            method=self._resolve_method(variables),
            url=self._resolve_url(variables),
            headers=self._resolve_headers(variables),
            body=self._resolve_body(message, variables),
        )
        logger.debug("Resolved request %s %s for message %s", request.method, request.url, message.message_id)
        return request

    def _resolve_url(self, variables: dict[str, Any]) -> str:
        if self._config.url_expr:
            value = self._evaluate("url_expr", self._config.url_expr, variables)
        else:
            value = self._config.url
        if not isinstance(value, str) or not value.strip():
            raise ResolutionError(f"url must resolve to a non-empty string, got {value!r}", field="url")
        url = value.strip()
        try:
            parsed = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise ResolutionError(f"malformed url {url!r}: {exc}", field="url") from exc
        if parsed.scheme not in {"http", "https"} or not parsed.host:
            raise ResolutionError(f"url must be an absolute http(s) url, got {url!r}", field="url")
        return url

    def _resolve_method(self, variables: dict[str, Any]) -> str:
        if not self._config.http_method_expr:
            return self._config.http_method
        value = self._evaluate("http_method_expr", self._config.http_method_expr, variables)
        method = str(value).strip().upper() if value is not None else ""
        if method not in HTTP_METHODS:
            raise ResolutionError(f"unresolvable http method {value!r}", field="http_method")
        return method

    def _resolve_headers(self, variables: dict[str, Any]) -> dict[str, str]:
        if not self._config.headers_expr:
            return {}
        value = self._evaluate("headers_expr", self._config.headers_expr, variables)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise ResolutionError(
                f"headers_expr must yield a mapping, got {type(value).__name__}",
                field="headers",
            )
        headers: dict[str, str] = {}
        for key, item in value.items():
            if key is None or item is None:
                continue
            headers[str(key)] = str(item)
        return headers

    def _resolve_body(self, message: InboundMessage, variables: dict[str, Any]) -> Any:
        if self._config.body is not None:
            body = self._config.body
        elif self._config.body_expr:
            body = self._evaluate("body_expr", self._config.body_expr, variables)
        else:
            body = message.payload
        if body is None or isinstance(body, str | bytes | bytearray):
            return body
        # Everything else is sent as JSON.
        try:
            json.dumps(body)
        except (TypeError, ValueError) as exc:
            raise ResolutionError(f"body is not JSON serializable: {exc}", field="body") from exc
        return body

    def _evaluate(self, field: str, expression: str, variables: dict[str, Any]) -> Any:
        try:
            return self._evaluator.evaluate(expression, variables)
        except ExpressionError as exc:
            raise ResolutionError(f"{field} failed: {exc}", field=field) from exc
