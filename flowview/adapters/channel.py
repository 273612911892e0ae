"""Event channel adapter: STOMP over WebSocket.

The backend publishes every lifecycle event on one global topic. This adapter
keeps a single subscription to it alive, reconnecting after a fixed delay,
and pushes each message body to ``on_message`` one at a time.

Delivery is at-most-once: events published while disconnected are lost and
nothing is replayed after a reconnect.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from flowview.adapters.stomp import (
    EOL,
    StompFrame,
    decode_frame,
    encode_frame,
    negotiate_heartbeat,
)
from flowview.errors import FrameError
from flowview.utils.identifiers import generate_subscription_id

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    connected = "connected"
    disconnected = "disconnected"


# transport faults that end one connection attempt and trigger a reconnect
TRANSPORT_ERRORS = (OSError, TimeoutError, WebSocketException, ConnectionError)


class StompChannel:
    """Push-subscribe channel for the global event topic.

    Usage:
        channel = StompChannel("ws://localhost:8080/ws/websocket", on_message=log.ingest)
        asyncio.create_task(channel.run())
    """

    def __init__(
        self,
        url: str,
        on_message: Callable[[str], Any],
        topic: str = "/topic/events",
        reconnect_delay: float = 5.0,
        heartbeat_ms: int = 4000,
        on_state_change: Callable[[ConnectionState], Any] | None = None,
        connect: Callable[[str], Awaitable[Any]] | None = None,
    ) -> None:
        """
        Args:
            url: WebSocket URL of the STOMP endpoint
            on_message: called once per inbound MESSAGE with the raw body
            topic: destination to subscribe to
            reconnect_delay: seconds to wait before reconnecting
            heartbeat_ms: heartbeat interval requested in both directions
            on_state_change: called whenever connected/disconnected flips
            connect: coroutine factory returning an open socket (tests inject one)
        """
        self.url = url
        self.on_message = on_message
        self.topic = topic
        self.reconnect_delay = reconnect_delay
        self.heartbeat_ms = heartbeat_ms
        self.on_state_change = on_state_change
        self._connect = connect or websockets.connect
        self._state = ConnectionState.disconnected
        self._stopping = False
        self.connection_count = 0

    @property
    def connection_state(self) -> ConnectionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state == ConnectionState.connected

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        self._state = state
        logger.info("event channel %s (%s)", state.value, self.url)
        if self.on_state_change:
            self.on_state_change(state)

    def stop(self) -> None:
        """Stop reconnecting once the current connection ends."""
        self._stopping = True

    async def run(self) -> None:
        """Connect, subscribe and read until stopped, reconnecting on faults."""
        self._stopping = False
        while not self._stopping:
            try:
                await self._run_once()
            except TRANSPORT_ERRORS as e:
                logger.warning("event channel fault: %s", e)
            finally:
                self._set_state(ConnectionState.disconnected)
            if self._stopping:
                break
            logger.info("reconnecting in %.1fs", self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)

    async def _run_once(self) -> None:
        socket = await self._connect(self.url)
        self.connection_count += 1
        heartbeat_task: asyncio.Task | None = None
        try:
            await socket.send(
                encode_frame(
                    "CONNECT",
                    {
                        "accept-version": "1.2",
                        "heart-beat": f"{self.heartbeat_ms},{self.heartbeat_ms}",
                    },
                )
            )
            connected = await self._await_connected(socket)
            outgoing, incoming = negotiate_heartbeat(
                (self.heartbeat_ms, self.heartbeat_ms),
                connected.headers.get("heart-beat"),
            )

            # exactly one subscription per connection
            await socket.send(
                encode_frame(
                    "SUBSCRIBE",
                    {
                        "id": f"sub-{generate_subscription_id()}",
                        "destination": self.topic,
                        "ack": "auto",
                    },
                )
            )
            logger.info("subscribed to %s", self.topic)
            self._set_state(ConnectionState.connected)

            if outgoing:
                heartbeat_task = asyncio.create_task(
                    self._send_heartbeats(socket, outgoing / 1000)
                )
            await self._read_loop(socket, incoming / 1000)
        finally:
            if heartbeat_task:
                heartbeat_task.cancel()
            await socket.close()

    async def _await_connected(self, socket: Any) -> StompFrame:
        while True:
            frame = await self._recv_frame(socket, timeout=None)
            if frame is None or frame.is_heartbeat:
                continue
            if frame.command == "CONNECTED":
                return frame
            if frame.command == "ERROR":
                raise ConnectionError(
                    f"broker refused connection: {frame.headers.get('message', frame.body)}"
                )
            logger.debug("ignoring %s frame before CONNECTED", frame.command)

    async def _read_loop(self, socket: Any, incoming_s: float) -> None:
        # the server may skip beats under load; allow twice the interval
        timeout = incoming_s * 2 if incoming_s else None
        while True:
            try:
                frame = await self._recv_frame(socket, timeout=timeout)
            except ConnectionClosed:
                return
            if frame is None or frame.is_heartbeat:
                continue
            if frame.command == "MESSAGE":
                try:
                    self.on_message(frame.body)
                except Exception:
                    logger.exception("message handler failed; continuing")
            elif frame.command == "ERROR":
                logger.warning(
                    "broker error frame: %s", frame.headers.get("message", frame.body)
                )
            else:
                logger.debug("ignoring %s frame", frame.command)

    async def _recv_frame(self, socket: Any, timeout: float | None) -> StompFrame | None:
        """Receive and decode one frame. Undecodable frames are logged and skipped."""
        if timeout:
            raw = await asyncio.wait_for(socket.recv(), timeout=timeout)
        else:
            raw = await socket.recv()
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8", errors="replace")
        try:
            return decode_frame(raw)
        except FrameError as e:
            logger.warning("dropping malformed frame: %s", e)
            return None

    async def _send_heartbeats(self, socket: Any, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            try:
                await socket.send(EOL)
            except ConnectionClosed:
                return
            logger.debug("heartbeat sent")
