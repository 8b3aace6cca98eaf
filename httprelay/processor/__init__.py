"""Request building, retrying transport calls and reply extraction."""

from httprelay.processor.context import MessageContext, ResponseContext
from httprelay.processor.decoders import decode_response
from httprelay.processor.errors import (
    ExhaustedFailure,
    ExpressionConfigError,
    ExtractionError,
    HttpRelayError,
    ResolutionError,
    TransportError,
)
from httprelay.processor.executor import RequestExecutor, check_expressions
from httprelay.processor.expressions import ExpressionError, ExpressionEvaluator, SafeExpressionEvaluator
from httprelay.processor.models import (
    InboundMessage,
    OutboundMessage,
    ResolvedRequest,
    ResponseEnvelope,
    TransportResponse,
)
from httprelay.processor.reply import ReplyExtractor
from httprelay.processor.request_builder import RequestBuilder
from httprelay.processor.retry import RetryController, RetryState, calculate_backoff_delay, is_retryable
from httprelay.processor.transport import HttpTransport, HttpxTransport

__all__ = [
    "ExhaustedFailure",
    "ExpressionConfigError",
    "ExpressionError",
    "ExpressionEvaluator",
    "ExtractionError",
    "HttpRelayError",
    "HttpTransport",
    "HttpxTransport",
    "InboundMessage",
    "MessageContext",
    "OutboundMessage",
    "ReplyExtractor",
    "RequestBuilder",
    "RequestExecutor",
    "ResolutionError",
    "ResolvedRequest",
    "ResponseContext",
    "ResponseEnvelope",
    "RetryController",
    "RetryState",
    "SafeExpressionEvaluator",
    "TransportError",
    "TransportResponse",
    "calculate_backoff_delay",
    "check_expressions",
    "decode_response",
    "is_retryable",
]
