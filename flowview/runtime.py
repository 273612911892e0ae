"""Live session: the event channel feeding the global event log.

Usage:
    session = LiveSession.from_settings(get_settings())
    session.start()  # inside a running event loop
    ...
    await session.stop()
"""

from __future__ import annotations

import asyncio
import logging

from flowview.adapters.channel import StompChannel
from flowview.config import Settings
from flowview.stream.event_log import EventLog

logger = logging.getLogger(__name__)


class LiveSession:
    """Wires one StompChannel into one EventLog."""

    def __init__(self, channel: StompChannel, log: EventLog) -> None:
        self.channel = channel
        self.log = log
        self._task: asyncio.Task | None = None

    @classmethod
    def from_settings(cls, settings: Settings, log: EventLog | None = None) -> "LiveSession":
        if log is None:
            log = EventLog()
        channel = StompChannel(
            settings.ws_url,
            on_message=log.ingest,
            topic=settings.event_topic,
            reconnect_delay=settings.reconnect_delay,
            heartbeat_ms=settings.heartbeat_ms,
        )
        return cls(channel, log)

    @property
    def connected(self) -> bool:
        return self.channel.connected

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the channel loop on the running event loop."""
        if not self.running:
            self._task = asyncio.create_task(self.channel.run())
            logger.info("live session started")
        return self._task

    async def stop(self) -> None:
        self.channel.stop()
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("live session stopped")
