"""httprelay: derive HTTP requests from channel messages and relay the replies."""

from httprelay.app import HttpRelay
from httprelay.config import ProcessorConfig, RelaySettings, RetrySettings, load_settings
from httprelay.processor import (
    ExhaustedFailure,
    ExtractionError,
    HttpRelayError,
    InboundMessage,
    OutboundMessage,
    RequestExecutor,
    ResolutionError,
    TransportError,
)

__all__ = [
    "ExhaustedFailure",
    "ExtractionError",
    "HttpRelay",
    "HttpRelayError",
    "InboundMessage",
    "OutboundMessage",
    "ProcessorConfig",
    "RelaySettings",
    "RequestExecutor",
    "ResolutionError",
    "RetrySettings",
    "TransportError",
    "load_settings",
]
