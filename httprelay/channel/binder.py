"""Channel binder: feeds channel messages through the request executor."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from httprelay.channel.models import ProcessResult, RawMessage
from httprelay.channel.parsers import ParseError, create_parser
from httprelay.channel.protocols import MessageChannel
from httprelay.config.models import ChannelConfig
from httprelay.processor.errors import HttpRelayError
from httprelay.processor.executor import RequestExecutor

logger = logging.getLogger(__name__)


class ProcessorBinder:
    """Consume a channel with concurrent workers and emit one reply per message.

    Terminal processing failures are dead-lettered with the error text; a
    failed message never produces a reply.
    """

    def __init__(self, *, config: ChannelConfig, channel: MessageChannel, executor: RequestExecutor) -> None:
        self.config = config
        self.channel = channel
        self.executor = executor

        self._running = False
        self._tasks: list[asyncio.Task[Any]] = []
        self._processed_count = 0
        self._failed_count = 0
        self._parser = create_parser(config.parser_type)

    async def start(self) -> None:
        """Connect the channel and start consumer workers."""
        if self._running:
            raise RuntimeError("ProcessorBinder already running")
        self._running = True
        await self.channel.connect()
        self._tasks = [
            asyncio.create_task(self._consume_loop(worker_id=i), name=f"httprelay-worker-{i}")
            for i in range(self.config.concurrency)
        ]

    async def join(self) -> None:
        """Wait until every worker has drained the channel."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Stop workers and close the channel."""
        self._running = False
        await self.channel.close()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

    async def health_check(self) -> dict[str, Any]:
        channel_healthy = await self.channel.health_check()
        active_workers = len([task for task in self._tasks if not task.done()])
        return {
            "status": "healthy" if self._running and channel_healthy else "unhealthy",
            "source": self.config.source,
            "running": self._running,
            "channel_healthy": channel_healthy,
            "active_workers": active_workers,
            "processed_count": self._processed_count,
            "failed_count": self._failed_count,
        }

    async def process_one(self, raw_message: RawMessage) -> ProcessResult:
        """Parse, process and settle one message on the channel."""
        try:
            inbound = raw_message.to_inbound(self._parser)
        except ParseError as exc:
            return await self._dead_letter(raw_message, "parse_error", str(exc))

        try:
            outbound = await self.executor.process(inbound)
        except HttpRelayError as exc:
            return await self._dead_letter(raw_message, "failed", f"{type(exc).__name__}: {exc}")
        except Exception as exc:
            logger.exception("Unexpected error processing message %s", raw_message.message_id)
            return await self._dead_letter(raw_message, "error", f"{type(exc).__name__}: {exc}")

        await self.channel.emit(outbound)
        await self.channel.ack(raw_message)
        self._processed_count += 1
        return ProcessResult(message_id=raw_message.message_id, status="processed")

    async def _dead_letter(self, raw_message: RawMessage, status: str, reason: str) -> ProcessResult:
        self._failed_count += 1
        logger.warning("Message %s from %s dead-lettered: %s", raw_message.message_id, self.config.source, reason)
        await self.channel.send_to_dlq(raw_message, reason=reason)
        return ProcessResult(message_id=raw_message.message_id, status=status, detail=reason)

    async def _settle_failure(self, raw_message: RawMessage, exc: Exception) -> None:
        try:
            await self._dead_letter(raw_message, "error", f"{type(exc).__name__}: {exc}")
        except Exception:
            logger.exception("Message %s could not be dead-lettered", raw_message.message_id)

    async def _consume_loop(self, worker_id: int) -> None:
        logger.debug("Worker %s started on %s", worker_id, self.config.source)
        try:
            async for raw_message in self.channel.consume():
                if not self._running:
                    break
                try:
                    await self.process_one(raw_message)
                except Exception as exc:
                    logger.exception("Worker %s failed to settle message %s", worker_id, raw_message.message_id)
                    await self._settle_failure(raw_message, exc)
                await asyncio.sleep(0)
        except Exception:
            logger.exception("Worker %s consume loop crashed", worker_id)
        finally:
            logger.debug("Worker %s stopped", worker_id)
