"""Shared test fixtures for httprelay."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

import httpx
import pytest

from httprelay.config.models import ProcessorConfig
from httprelay.processor.executor import RequestExecutor
from httprelay.processor.transport import HttpxTransport


@dataclass
class GreetingEndpoint:
    """In-process HTTP endpoint mirroring the greet/headers/json resources."""

    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/greet"):
            who = request.content.decode("utf-8") if request.method != "GET" and request.content else "World"
            return httpx.Response(200, text=f"Hello {who}")
        if path.endswith("/headers"):
            key1 = request.headers.get("Key1")
            key2 = request.headers.get("Key2")
            if key1 is None or key2 is None:
                return httpx.Response(400, text="missing header")
            return httpx.Response(200, text=f"{key1} {key2}")
        if path.endswith("/json") and request.method == "POST":
            try:
                data = json.loads(request.content or b"null")
            except json.JSONDecodeError:
                return httpx.Response(415, text="unsupported")
            if not isinstance(data, dict):
                return httpx.Response(400, text="expected object")
            return httpx.Response(200, text="id")
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def endpoint() -> GreetingEndpoint:
    return GreetingEndpoint()


@pytest.fixture
def make_executor(endpoint: GreetingEndpoint):
    """Build executors whose transport talks to the greeting endpoint."""

    def _make(**config: object) -> RequestExecutor:
        environment = config.pop("environment", None)
        return RequestExecutor(
            ProcessorConfig(**config),
            HttpxTransport(transport=endpoint.transport),
            environment=environment,  # type: ignore[arg-type]
        )

    return _make
