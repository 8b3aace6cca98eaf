"""Parsers turning raw channel bodies into message payloads."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any


class ParseError(ValueError):
    """Raised when a channel message cannot be parsed with the selected parser."""


class MessageParser(ABC):
    """Base parser contract for channel message bodies."""

    @abstractmethod
    def parse(self, body: bytes) -> Any:
        """Parse raw bytes into a payload."""


class JSONParser(MessageParser):
    """Parse UTF-8 JSON payloads into Python values."""

    def parse(self, body: bytes) -> Any:
        try:
            return json.loads(body.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(f"Failed to parse JSON payload: {exc}") from exc


class TextParser(MessageParser):
    """Parse UTF-8 text payloads into strings."""

    def parse(self, body: bytes) -> str:
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Failed to parse text payload: {exc}") from exc


class BinaryParser(MessageParser):
    """Return raw bytes payload."""

    def parse(self, body: bytes) -> bytes:
        return body


def create_parser(parser_type: str) -> MessageParser:
    parser_type = parser_type.lower().strip()
    if parser_type == "json":
        return JSONParser()
    if parser_type == "binary":
        return BinaryParser()
    if parser_type == "text":
        return TextParser()
    raise ValueError(f"unknown parser type: {parser_type}")
