"""Minimal publish/subscribe primitive for protocol notifications."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Set

LOGGER = logging.getLogger(__name__)

Listener = Callable[..., Awaitable[None] | None]


class EventEmitter:
    """Synchronous event emitter.

    Listeners run in registration order inside ``emit``. A listener returning
    an awaitable is scheduled as a task on the running loop; a listener that
    raises is logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)
        self._listener_tasks: Set[asyncio.Task[Any]] = set()

    def on(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def remove_all_listeners(self, event: str | None = None) -> None:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)

    def emit(self, event: str, *args: Any) -> bool:
        listeners = list(self._listeners.get(event, []))
        for listener in listeners:
            try:
                result = listener(*args)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._listener_tasks.add(task)
                    task.add_done_callback(self._on_listener_task_done)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Listener for %s failed", event)
        return bool(listeners)

    def _on_listener_task_done(self, task: asyncio.Task[Any]) -> None:
        self._listener_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Async listener failed", exc_info=exc)


@dataclass(frozen=True)
class RegisteredListener:
    emitter: EventEmitter
    event: str
    listener: Listener


def add_event_listener(emitter: EventEmitter, event: str, listener: Listener) -> RegisteredListener:
    """Subscribe ``listener`` and return a token that can detach it later."""

    emitter.on(event, listener)
    return RegisteredListener(emitter=emitter, event=event, listener=listener)


def remove_event_listeners(listeners: Iterable[RegisteredListener]) -> None:
    for registered in listeners:
        registered.emitter.off(registered.event, registered.listener)
