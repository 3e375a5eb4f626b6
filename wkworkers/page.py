"""Host page model: the externally visible workers and console messages."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from wkworkers.execution import ExecutionContext, JSHandle
from wkworkers.network.events import EventEmitter

LOGGER = logging.getLogger(__name__)


class PageEvents:
    WORKER = "worker"
    CONSOLE = "console"


class WorkerEvents:
    CLOSE = "close"


@dataclass(frozen=True)
class ConsoleLocation:
    url: Optional[str]
    line_number: int
    column_number: int


@dataclass
class ConsoleMessage:
    type: str
    args: List[JSHandle] = field(default_factory=list)
    location: Optional[ConsoleLocation] = None
    _text: Optional[str] = None

    @property
    def text(self) -> str:
        if self._text is None:
            self._text = " ".join(arg.preview() for arg in self.args)
        return self._text


class Worker(EventEmitter):
    """A dedicated worker spawned by the page."""

    def __init__(self, url: str) -> None:
        super().__init__()
        self.url = url
        self._execution_context: Optional[ExecutionContext] = None
        self._context_ready = asyncio.Event()

    def _create_execution_context(self, context: ExecutionContext) -> None:
        self._execution_context = context
        self._context_ready.set()

    @property
    def existing_execution_context(self) -> Optional[ExecutionContext]:
        return self._execution_context

    async def execution_context(self) -> ExecutionContext:
        await self._context_ready.wait()
        assert self._execution_context is not None
        return self._execution_context

    def __repr__(self) -> str:
        return f"Worker(url={self.url!r})"


class Page(EventEmitter):
    """Tracks the page's live workers and publishes console messages."""

    def __init__(self) -> None:
        super().__init__()
        self._workers: Dict[str, Worker] = {}
        self._release_tasks: set[asyncio.Task[None]] = set()

    def workers(self) -> List[Worker]:
        return list(self._workers.values())

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        return self._workers.get(worker_id)

    def add_worker(self, worker_id: str, worker: Worker) -> None:
        self._workers[worker_id] = worker
        self.emit(PageEvents.WORKER, worker)

    def remove_worker(self, worker_id: str) -> None:
        worker = self._workers.pop(worker_id, None)
        if worker is None:
            return
        worker.emit(WorkerEvents.CLOSE, worker)

    def clear_workers(self) -> None:
        for worker_id in list(self._workers):
            self.remove_worker(worker_id)

    def add_console_message(
        self,
        message_type: str,
        args: List[JSHandle],
        location: ConsoleLocation,
        text: Optional[str] = None,
    ) -> None:
        if not self.listener_count(PageEvents.CONSOLE):
            for arg in args:
                self._release(arg)
            return
        self.emit(PageEvents.CONSOLE, ConsoleMessage(type=message_type, args=args, location=location, _text=text))

    def _release(self, handle: JSHandle) -> None:
        task = asyncio.ensure_future(handle.dispose())
        self._release_tasks.add(task)
        task.add_done_callback(self._release_tasks.discard)
