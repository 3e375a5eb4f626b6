"""Connection wrapper that owns the underlying transport lifecycle."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from itertools import count
from typing import Any, Iterator, Optional

from wire.protocol import parse_message

from wkworkers.network.events import EventEmitter
from wkworkers.network.session import TransportSession
from wkworkers.network.transport.base import BaseTransport

LOGGER = logging.getLogger(__name__)


class ConnectionClosedError(RuntimeError):
    """Raised when sending over a connection that is not running."""


class ConnectionEvents:
    DISCONNECTED = "disconnected"


class Connection(EventEmitter):
    """Drives a transport and dispatches inbound messages to the root session.

    Request ids are allocated here so that they stay unique across every
    session multiplexed over the same transport.
    """

    def __init__(self, transport: BaseTransport, *, close_message: str = "Target closed.") -> None:
        super().__init__()
        self._transport = transport
        self._message_ids: Iterator[int] = count(1)
        self._recv_task: Optional[asyncio.Task[None]] = None
        self._connected = False
        self._closed = False
        self.root_session = TransportSession(self, error_text=close_message)

    def next_message_id(self) -> int:
        return next(self._message_ids)

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Connect the transport and start the receive loop."""

        if self._closed:
            raise ConnectionClosedError("Connection already closed")
        if self._recv_task and not self._recv_task.done():
            return
        await self._transport.connect()
        self._connected = True
        self._recv_task = asyncio.create_task(self._receive_loop(), name="connection-recv")

    async def stop(self) -> None:
        """Stop the receive loop, fail pending requests and close the transport."""

        recv_task = self._recv_task
        self._recv_task = None
        if recv_task and recv_task is not asyncio.current_task():
            recv_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await recv_task
        await self._close()

    async def send_raw(self, message: dict[str, Any]) -> None:
        if self._closed or not self._connected:
            raise ConnectionClosedError("Connection is not running")
        await self._transport.send(message)

    def dispatch(self, raw: dict[str, Any]) -> None:
        try:
            message = parse_message(raw)
        except ValueError as exc:
            LOGGER.warning("Dropping invalid message from transport: %s", exc)
            return
        self.root_session.dispatch_message(message)

    async def _receive_loop(self) -> None:
        while True:
            try:
                raw = await self._transport.receive()
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                LOGGER.warning("Transport receive failed, closing connection: %s", exc)
                await self._close()
                return
            self.dispatch(raw)

    async def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.root_session.dispose()
        if self._connected:
            try:
                await self._transport.close()
            except Exception:  # noqa: BLE001
                LOGGER.debug("Suppress transport close error", exc_info=True)
        self._connected = False
        self.emit(ConnectionEvents.DISCONNECTED)
