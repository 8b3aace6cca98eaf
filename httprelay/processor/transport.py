"""HTTP transport protocol and the httpx-backed implementation."""

from __future__ import annotations

import json
from typing import Any, Protocol

import httpx

from httprelay.processor.errors import TransportError
from httprelay.processor.models import ResolvedRequest, TransportResponse


class HttpTransport(Protocol):
    """Send one resolved request and return the raw response."""

    async def send(self, request: ResolvedRequest) -> TransportResponse:
        """Raise TransportError on I/O failure or a non-2xx status."""


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds, transport=transport)

    async def send(self, request: ResolvedRequest) -> TransportResponse:
        content, extra_headers = _encode_body(request.body)
        headers = httpx.Headers(extra_headers)
        headers.update(request.headers)
        try:
            response = await self._client.request(
                method=request.method,
                url=request.url,
                headers=headers,
                content=content,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc!r}") from exc
        if not response.is_success:
            raise TransportError(
                f"{request.method} {request.url} returned status {response.status_code}",
                status_code=response.status_code,
            )
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            content=response.content,
            encoding=response.charset_encoding,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _encode_body(body: Any) -> tuple[bytes | None, dict[str, str]]:
    if body is None:
        return None, {}
    if isinstance(body, bytes | bytearray):
        return bytes(body), {}
    if isinstance(body, str):
        return body.encode("utf-8"), {"content-type": "text/plain; charset=utf-8"}
    return json.dumps(body).encode("utf-8"), {"content-type": "application/json"}
