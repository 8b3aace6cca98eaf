"""Processing errors raised by the request/reply pipeline.

Construction and extraction errors are terminal. Transport errors are the
only retryable kind; the retry controller turns them into ExhaustedFailure
once the attempt budget is spent.
"""

from __future__ import annotations


class HttpRelayError(Exception):
    """Base exception for one failed request/reply cycle."""


class ResolutionError(HttpRelayError):
    """Raised when the outbound request cannot be built from a message."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class TransportError(HttpRelayError):
    """Raised when the HTTP call fails or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(HttpRelayError):
    """Raised when the reply cannot be derived from a successful response."""


class ExhaustedFailure(HttpRelayError):
    """Raised when every allowed attempt failed with a retryable error."""

    def __init__(self, attempts: int, last_error: TransportError) -> None:
        super().__init__(f"request failed after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class ExpressionConfigError(ValueError):
    """Raised at startup when a configured expression does not compile."""

    def __init__(self, message: str, field: str) -> None:
        super().__init__(message)
        self.field = field
