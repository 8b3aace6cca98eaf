"""Response body decoders keyed by the expected response type."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

from httprelay.config.models import ResponseType
from httprelay.processor.errors import ExtractionError
from httprelay.processor.models import ResponseEnvelope, TransportResponse


def _decode_bytes(response: TransportResponse) -> bytes:
    return response.content


def _decode_text(response: TransportResponse) -> str:
    encoding = response.encoding or "utf-8"
    try:
        return response.content.decode(encoding)
    except (LookupError, UnicodeDecodeError) as exc:
        raise ExtractionError(f"response body is not valid {encoding} text: {exc}") from exc


def _decode_json(response: TransportResponse) -> Any:
    if not response.content.strip():
        return None
    try:
        return json.loads(_decode_text(response))
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"response body is not valid JSON: {exc}") from exc


_DECODERS: dict[ResponseType, Callable[[TransportResponse], Any]] = {
    ResponseType.BYTES: _decode_bytes,
    ResponseType.TEXT: _decode_text,
    ResponseType.JSON: _decode_json,
}


def decode_response(response: TransportResponse, response_type: ResponseType) -> ResponseEnvelope:
    """Decode a raw transport response into an envelope for reply extraction."""
    body = _DECODERS[ResponseType(response_type)](response)
    return ResponseEnvelope(status_code=response.status_code, headers=dict(response.headers), body=body)
