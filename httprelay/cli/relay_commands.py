"""Command implementations for validate, request and run."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from httprelay.app import HttpRelay
from httprelay.channel.memory import InMemoryChannel
from httprelay.channel.models import RawMessage
from httprelay.config.loader import load_settings
from httprelay.config.models import RelaySettings
from httprelay.processor.models import OutboundMessage

console = Console()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Set the root log level; unknown names fall back to WARNING."""
    logging.basicConfig(format=LOG_FORMAT)
    value = logging.getLevelName(level.strip().upper())
    logging.getLogger().setLevel(value if isinstance(value, int) else logging.WARNING)


def parse_header_options(values: list[str]) -> dict[str, str]:
    """Parse repeated ``name=value`` options into a header mapping."""
    headers: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"header must look like name=value: {item!r}")
        headers[name.strip()] = value.strip()
    return headers


def format_payload(payload: Any) -> str:
    if isinstance(payload, bytes):
        return f"<{len(payload)} bytes>"
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, ensure_ascii=False, default=str)


def validate_config_command(config: str | None = None, log_level: str | None = None) -> RelaySettings:
    """Load settings and print the effective processor configuration."""
    settings = load_settings(config)
    configure_logging(log_level or settings.log_level)
    console.print("[bold]Processor[/bold]")
    for key, value in settings.processor.model_dump(mode="json", exclude={"retry"}).items():
        if value is not None:
            console.print(f"  {key} = {escape(repr(value))}")
    console.print("[bold]Retry[/bold]")
    for key, value in settings.processor.retry.model_dump(mode="json").items():
        console.print(f"  {key} = {escape(repr(value))}")
    console.print(f"[green]OK[/green] channel concurrency={settings.channel.concurrency}")
    return settings


def request_command(
    payload: str,
    config: str | None = None,
    headers: list[str] | None = None,
    as_json: bool = False,
    log_level: str | None = None,
) -> OutboundMessage:
    """Send one payload through the relay and print the reply."""
    message_payload: Any = json.loads(payload) if as_json else payload
    header_map = parse_header_options(headers or [])
    settings = load_settings(config)
    configure_logging(log_level or settings.log_level)

    async def _run() -> OutboundMessage:
        async with HttpRelay(settings) as relay:
            return await relay.process(message_payload, headers=header_map, message_id="cli-1")

    reply = asyncio.run(_run())
    console.print(format_payload(reply.payload), markup=False)
    return reply


def run_command(
    input_file: str,
    config: str | None = None,
    log_level: str | None = None,
) -> tuple[list[OutboundMessage], list[tuple[str, str]]]:
    """Relay every non-empty line of ``input_file`` as one message."""
    path = Path(input_file)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {input_file}")
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    settings = load_settings(config)
    configure_logging(log_level or settings.log_level)

    async def _run() -> tuple[list[OutboundMessage], list[tuple[str, str]]]:
        channel = InMemoryChannel()
        for index, line in enumerate(lines, start=1):
            channel.enqueue(RawMessage(message_id=f"line-{index}", body=line.encode("utf-8")))
        async with HttpRelay(settings) as relay:
            binder = relay.bind(channel)
            await binder.start()
            await binder.join()
            await binder.stop()
        return channel.get_emitted(), channel.get_dlq()

    emitted, dead_letters = asyncio.run(_run())
    for reply in sorted(emitted, key=lambda item: item.correlation_id or ""):
        console.print(f"{reply.correlation_id}: {format_payload(reply.payload)}", markup=False)
    for message_id, reason in dead_letters:
        console.print(f"[red]DLQ[/red] {message_id}: {escape(reason)}")
    console.print(f"Replies: {len(emitted)}  Dead letters: {len(dead_letters)}")
    return emitted, dead_letters
