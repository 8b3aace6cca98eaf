"""Configuration models for httprelay."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"})
DEFAULT_RETRYABLE_STATUS_CODES = (408, 429, 500, 502, 503, 504)


class ResponseType(str, Enum):
    """Closed set of decoding targets for response bodies."""

    BYTES = "bytes"
    TEXT = "text"
    JSON = "json"


class RetrySettings(BaseModel):
    """Bounded exponential backoff policy for the HTTP round trip."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")

    enabled: bool = Field(default=False)
    max_attempts: int = Field(default=3, ge=1)
    initial_interval_ms: int = Field(default=1000, ge=0)
    multiplier: float = Field(default=2.0, ge=1.0)
    max_interval_ms: int = Field(default=10000, ge=0)
    retryable_status_codes: tuple[int, ...] = Field(default=DEFAULT_RETRYABLE_STATUS_CODES)

    @model_validator(mode="after")
    def _check_interval_bounds(self) -> RetrySettings:
        if self.max_interval_ms < self.initial_interval_ms:
            raise ValueError("max_interval_ms must be >= initial_interval_ms")
        return self


class ProcessorConfig(BaseModel):
    """How requests are derived from messages and replies from responses.

    Every ``*_expr`` field holds an expression for the configured evaluator.
    YAML keys may be written in snake_case or camelCase (``urlExpr``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")

    url: str | None = Field(default=None, description="Static request URL.")
    url_expr: str | None = Field(default=None, description="Expression yielding the request URL.")
    http_method: str = Field(default="GET")
    http_method_expr: str | None = Field(default=None)
    headers_expr: str | None = Field(default=None, description="Expression yielding a header mapping.")
    body: Any = Field(default=None, description="Static body; wins over body_expr and the payload.")
    body_expr: str | None = Field(default=None)
    expected_response_type: ResponseType = Field(default=ResponseType.TEXT)
    reply_expr: str | None = Field(default=None, description="Expression over status, headers and body.")
    timeout_seconds: float = Field(default=30.0, gt=0)
    retry: RetrySettings = Field(default_factory=RetrySettings)

    @field_validator("http_method")
    @classmethod
    def _normalize_method(cls, value: str) -> str:
        method = value.strip().upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"http_method must be one of {sorted(HTTP_METHODS)}")
        return method

    @model_validator(mode="after")
    def _require_target(self) -> ProcessorConfig:
        has_url = bool(self.url and self.url.strip())
        has_expr = bool(self.url_expr and self.url_expr.strip())
        if not has_url and not has_expr:
            raise ValueError("either url or url_expr must be configured")
        return self

    def expressions(self) -> dict[str, str]:
        """Return configured expressions keyed by field name."""
        candidates = {
            "url_expr": self.url_expr,
            "http_method_expr": self.http_method_expr,
            "headers_expr": self.headers_expr,
            "body_expr": self.body_expr,
            "reply_expr": self.reply_expr,
        }
        return {name: expr for name, expr in candidates.items() if expr}


class ChannelConfig(BaseModel):
    """Channel binder runtime configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel, extra="forbid")

    source: str = Field(default="httprelay-input")
    concurrency: int = Field(default=1, ge=1, le=256)
    parser_type: Literal["json", "text", "binary"] = Field(default="text")


class RelaySettings(BaseSettings):
    """Root configuration model for httprelay."""

    processor: ProcessorConfig
    channel: ChannelConfig = Field(default_factory=ChannelConfig)
    properties: dict[str, str] = Field(default_factory=dict)
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_prefix="HTTPRELAY_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    @field_validator("properties", mode="before")
    @classmethod
    def _stringify_properties(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value
