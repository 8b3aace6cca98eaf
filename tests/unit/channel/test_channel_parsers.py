from __future__ import annotations

import pytest

from httprelay.channel import BinaryParser, JSONParser, ParseError, RawMessage, TextParser, create_parser


def test_json_parser_parses_object() -> None:
    payload = JSONParser().parse(b'{"event":"created","count":1}')
    assert payload == {"event": "created", "count": 1}


def test_json_parser_accepts_any_json_value() -> None:
    assert JSONParser().parse(b"[1,2,3]") == [1, 2, 3]
    assert JSONParser().parse(b'"greet"') == "greet"


def test_json_parser_rejects_malformed_input() -> None:
    with pytest.raises(ParseError):
        JSONParser().parse(b"{not json")


def test_text_parser_invalid_utf8_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        TextParser().parse(b"\xff\xfe")


def test_binary_parser_returns_raw_bytes() -> None:
    data = b"\x00\x01\x02"
    assert BinaryParser().parse(data) == data


def test_create_parser_selects_by_name() -> None:
    assert isinstance(create_parser(" JSON "), JSONParser)
    assert isinstance(create_parser("text"), TextParser)
    assert isinstance(create_parser("binary"), BinaryParser)
    with pytest.raises(ValueError, match="unknown parser type"):
        create_parser("xml")


def test_raw_message_to_inbound_keeps_id_and_headers() -> None:
    raw = RawMessage(message_id="m-1", body=b"greet", headers={"x-trace": "t1"})

    inbound = raw.to_inbound(TextParser())

    assert inbound.payload == "greet"
    assert inbound.message_id == "m-1"
    assert dict(inbound.headers) == {"x-trace": "t1"}
