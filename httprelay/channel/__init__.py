"""Channel binding: parsers, channel contract and the consumer loop."""

from httprelay.channel.binder import ProcessorBinder
from httprelay.channel.memory import InMemoryChannel
from httprelay.channel.models import ProcessResult, RawMessage
from httprelay.channel.parsers import BinaryParser, JSONParser, MessageParser, ParseError, TextParser, create_parser
from httprelay.channel.protocols import MessageChannel

__all__ = [
    "BinaryParser",
    "InMemoryChannel",
    "JSONParser",
    "MessageChannel",
    "MessageParser",
    "ParseError",
    "ProcessResult",
    "ProcessorBinder",
    "RawMessage",
    "TextParser",
    "create_parser",
]
