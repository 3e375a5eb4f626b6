"""Protocol sessions: request/response correlation over a raw send primitive.

A ``Session`` is the contract execution contexts are written against. Two
variants exist:
- ``TransportSession`` writes straight to a ``Connection`` transport.
- ``WorkerSession`` tunnels every message through a forward callable, which the
  worker manager binds to the page session's ``Worker.sendMessageToWorker``.

Both converge on ``SessionClosedError`` when a request can no longer complete.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Set

from wire.models import ProtocolMessage
from wire.protocol import build_request, parse_message

from wkworkers.network.events import EventEmitter
from wkworkers.network.state import SessionStateTracker, WorkerSessionState

LOGGER = logging.getLogger(__name__)
PROTOCOL_LOGGER = logging.getLogger("wkworkers.protocol")


class ProtocolError(RuntimeError):
    """Raised when a protocol request fails."""

    def __init__(
        self,
        method: str,
        message: str,
        *,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(f"Protocol error ({method}): {message}")
        self.method = method
        self.code = code
        self.data = data


class SessionClosedError(ProtocolError):
    """Raised when a request cannot complete because its session is gone."""


class MessageIdSource(Protocol):
    def next_message_id(self) -> int: ...


@dataclass
class PendingRequest:
    method: str
    future: asyncio.Future[Any]


class Session(EventEmitter, ABC):
    """A protocol peer: ``send`` requests, ``dispatch_message`` inbound traffic.

    Notifications are re-emitted on the session under their method name with
    their params as the single argument.
    """

    def __init__(self, connection: MessageIdSource, session_id: str, error_text: str) -> None:
        super().__init__()
        self.connection = connection
        self.session_id = session_id
        self.error_text = error_text
        self._callbacks: Dict[int, PendingRequest] = {}
        self._raw_sends: Set[asyncio.Future[None]] = set()
        self._disposed = False

    @abstractmethod
    async def _raw_send(self, message: Dict[str, Any]) -> None:
        ...

    async def send(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if self._disposed:
            raise SessionClosedError(method, self.error_text)
        message_id = self.connection.next_message_id()
        message = build_request(message_id, method, params)
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._callbacks[message_id] = PendingRequest(method=method, future=future)
        PROTOCOL_LOGGER.debug("SEND ► session=%s %s", self.session_id, message)
        # The caller resumes on the response or on dispose(), never on the forward itself.
        task = asyncio.ensure_future(self._raw_send(message))
        self._raw_sends.add(task)
        task.add_done_callback(partial(self._on_raw_send_done, message_id, method))
        try:
            return await future
        finally:
            self._callbacks.pop(message_id, None)

    def _on_raw_send_done(self, message_id: int, method: str, task: asyncio.Future[None]) -> None:
        self._raw_sends.discard(task)
        if task.cancelled():
            self._fail_request(message_id, asyncio.CancelledError())
            return
        exc = task.exception()
        if exc is None:
            return
        LOGGER.debug("Raw send failed session=%s method=%s: %s", self.session_id, method, exc)
        self._fail_request(message_id, exc)

    def dispatch_message(self, message: ProtocolMessage | Dict[str, Any]) -> None:
        if not isinstance(message, ProtocolMessage):
            message = parse_message(message)
        PROTOCOL_LOGGER.debug("◀ RECV session=%s %r", self.session_id, message)
        if message.id is not None:
            pending = self._callbacks.pop(message.id, None)
            if pending is None:
                # Either a duplicate or a late response for a request failed by dispose().
                LOGGER.debug(
                    "Dropping response with no pending request id=%s session=%s disposed=%s",
                    message.id,
                    self.session_id,
                    self._disposed,
                )
                return
            if pending.future.done():
                return
            if message.error is not None:
                pending.future.set_exception(
                    ProtocolError(
                        pending.method,
                        message.error.message,
                        code=message.error.code,
                        data=message.error.data,
                    )
                )
                return
            pending.future.set_result(message.result)
            return
        if not message.method:
            LOGGER.debug("Dropping message without id or method session=%s", self.session_id)
            return
        if self._disposed:
            LOGGER.debug("Dropping %s on disposed session %s", message.method, self.session_id)
            return
        self.emit(message.method, message.params or {})

    def is_disposed(self) -> bool:
        return self._disposed

    def pending_count(self) -> int:
        return len(self._callbacks)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        pending = list(self._callbacks.values())
        self._callbacks.clear()
        if pending:
            LOGGER.debug("Failing %s pending requests on session %s", len(pending), self.session_id)
        for entry in pending:
            if not entry.future.done():
                entry.future.set_exception(SessionClosedError(entry.method, self.error_text))

    def _fail_request(self, message_id: int, cause: BaseException) -> None:
        pending = self._callbacks.pop(message_id, None)
        if pending is None or pending.future.done():
            return
        error = SessionClosedError(pending.method, self.error_text)
        error.__cause__ = cause
        pending.future.set_exception(error)


class TransportSession(Session):
    """Session that owns the connection's transport directly."""

    def __init__(self, connection: Any, session_id: str = "", error_text: str = "Target closed.") -> None:
        super().__init__(connection, session_id, error_text)

    async def _raw_send(self, message: Dict[str, Any]) -> None:
        await self.connection.send_raw(message)


class WorkerSession(Session):
    """Virtual session for one worker, relayed through its page session."""

    def __init__(
        self,
        connection: MessageIdSource,
        worker_id: str,
        error_text: str,
        forward: Callable[[Dict[str, Any]], Awaitable[None]],
    ) -> None:
        super().__init__(connection, worker_id, error_text)
        self._forward = forward
        self.tracker = SessionStateTracker()

    @property
    def worker_id(self) -> str:
        return self.session_id

    @property
    def state(self) -> WorkerSessionState:
        return self.tracker.state

    async def _raw_send(self, message: Dict[str, Any]) -> None:
        await self._forward(message)

    def begin_initialization(self) -> bool:
        return self._try_transition(WorkerSessionState.INITIALIZING)

    def mark_ready(self) -> bool:
        return self._try_transition(WorkerSessionState.READY)

    def dispose(self) -> None:
        self._try_transition(WorkerSessionState.DISPOSED)
        super().dispose()

    def _try_transition(self, state: WorkerSessionState) -> bool:
        try:
            self.tracker.transition(state)
        except ValueError:
            LOGGER.debug(
                "Ignoring invalid worker session transition %s -> %s worker=%s",
                self.tracker.state.value,
                state.value,
                self.session_id,
            )
            return False
        return True
