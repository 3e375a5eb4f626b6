"""Worker lifecycle management over a page session.

The page session reports workers through ``Worker.*`` notifications. For each
worker a ``WorkerSession`` is fabricated that tunnels its traffic through
``Worker.sendMessageToWorker`` and receives replies from
``Worker.dispatchMessageFromWorker``, so execution contexts can talk to the
worker as if it were a standalone protocol peer.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set

from pydantic import ValidationError

from wire.models import (
    ConsoleMessageAddedEvent,
    DispatchMessageFromWorkerEvent,
    WorkerCreatedEvent,
    WorkerInitializedParams,
    WorkerTerminatedEvent,
)
from wire.protocol import parse_message, wrap_for_worker

from wkworkers.config import WorkersSettings, get_settings
from wkworkers.execution import ExecutionContext, JSHandle
from wkworkers.network.events import RegisteredListener, add_event_listener, remove_event_listeners
from wkworkers.network.session import Session, WorkerSession
from wkworkers.page import ConsoleLocation, Worker
from wkworkers.workers.console import translate_console_message

LOGGER = logging.getLogger(__name__)


class WorkerInitializationError(RuntimeError):
    """Raised when the page session rejects ``Worker.initialized``."""


class WorkerHost(Protocol):
    def add_worker(self, worker_id: str, worker: Worker) -> None: ...

    def remove_worker(self, worker_id: str) -> None: ...

    def clear_workers(self) -> None: ...

    def add_console_message(
        self,
        message_type: str,
        args: List[JSHandle],
        location: ConsoleLocation,
        text: Optional[str] = None,
    ) -> None: ...


@dataclass
class WorkerRecord:
    worker: Worker
    session: WorkerSession
    visible: bool = True


@dataclass
class WorkerManager:
    """Owns the worker id -> session registry for the active page session."""

    page: WorkerHost
    settings: WorkersSettings = field(default_factory=get_settings)

    _session: Optional[Session] = field(default=None, init=False, repr=False)
    _session_listeners: List[RegisteredListener] = field(default_factory=list, init=False, repr=False)
    _workers: Dict[str, WorkerRecord] = field(default_factory=dict, init=False, repr=False)
    _init_tasks: Set[asyncio.Task[None]] = field(default_factory=set, init=False, repr=False)

    def set_session(self, session: Session) -> None:
        """Rebind to ``session``; every worker of the previous session is dropped."""

        remove_event_listeners(self._session_listeners)
        self._session_listeners = []
        self._cancel_init_tasks()
        self._dispose_workers()
        self.page.clear_workers()
        self._session = session
        self._session_listeners = [
            add_event_listener(
                session,
                "Worker.workerCreated",
                functools.partial(self._on_worker_created, session),
            ),
            add_event_listener(session, "Worker.dispatchMessageFromWorker", self._on_dispatch_message_from_worker),
            add_event_listener(session, "Worker.workerTerminated", self._on_worker_terminated),
        ]

    async def initialize_session(self, session: Session) -> None:
        await session.send("Worker.enable")

    def dispose(self) -> None:
        remove_event_listeners(self._session_listeners)
        self._session_listeners = []
        self._session = None
        self._cancel_init_tasks()
        self._dispose_workers()
        self.page.clear_workers()

    def get_session(self, worker_id: str) -> Optional[WorkerSession]:
        record = self._workers.get(worker_id)
        return record.session if record else None

    def get_worker(self, worker_id: str) -> Optional[Worker]:
        record = self._workers.get(worker_id)
        return record.worker if record else None

    def worker_ids(self) -> List[str]:
        return list(self._workers)

    def _cancel_init_tasks(self) -> None:
        tasks = list(self._init_tasks)
        self._init_tasks.clear()
        for task in tasks:
            task.cancel()

    def _dispose_workers(self) -> None:
        records = list(self._workers.values())
        self._workers.clear()
        for record in records:
            record.visible = False
            record.session.dispose()

    def _on_worker_created(self, parent: Session, params: Dict[str, Any]) -> None:
        try:
            event = WorkerCreatedEvent.model_validate(params)
        except ValidationError as exc:
            LOGGER.warning("Dropping invalid Worker.workerCreated: %s", exc)
            return
        worker_id = event.worker_id
        previous = self._workers.pop(worker_id, None)
        if previous is not None:
            LOGGER.warning("Worker %s reported twice; dropping the previous session", worker_id)
            previous.visible = False
            previous.session.dispose()
            self.page.remove_worker(worker_id)

        worker = Worker(event.url)
        session = WorkerSession(
            parent.connection,
            worker_id,
            self.settings.worker_closed_message,
            self._make_forwarder(parent, worker_id),
        )
        record = WorkerRecord(worker=worker, session=session)
        self._workers[worker_id] = record
        worker._create_execution_context(ExecutionContext(session))
        self.page.add_worker(worker_id, worker)
        if self.settings.enable_console:
            session.on("Console.messageAdded", functools.partial(self._on_console_message, record))
        LOGGER.info("Worker created id=%s url=%s", worker_id, event.url)

        task = asyncio.create_task(self._initialize_worker(parent, record), name=f"worker-init-{worker_id}")
        self._init_tasks.add(task)
        task.add_done_callback(self._init_tasks.discard)

    def _make_forwarder(self, parent: Session, worker_id: str):
        async def forward(message: Dict[str, Any]) -> None:
            await parent.send("Worker.sendMessageToWorker", wrap_for_worker(worker_id, message))

        return forward

    async def _initialize_worker(self, parent: Session, record: WorkerRecord) -> None:
        session = record.session
        worker_id = session.worker_id
        if not session.begin_initialization():
            return
        steps = [session.send("Runtime.enable")]
        if self.settings.enable_console:
            steps.append(session.send("Console.enable"))
        steps.append(self._notify_initialized(parent, record))
        results = await asyncio.gather(*steps, return_exceptions=True)
        failures = [result for result in results if isinstance(result, BaseException)]
        for failure in failures:
            if session.is_disposed():
                LOGGER.debug("Worker %s closed during initialization: %s", worker_id, failure)
            else:
                LOGGER.warning("Worker %s initialization step failed: %s", worker_id, failure)
        if not failures and session.mark_ready():
            LOGGER.debug("Worker %s ready", worker_id)

    async def _notify_initialized(self, parent: Session, record: WorkerRecord) -> None:
        worker_id = record.session.worker_id
        params = WorkerInitializedParams(workerId=worker_id).model_dump(by_alias=True)
        try:
            await parent.send("Worker.initialized", params)
        except Exception as exc:  # noqa: BLE001
            # Worker can go away while we are initializing it.
            record.visible = False
            if self._workers.get(worker_id) is record:
                self.page.remove_worker(worker_id)
            raise WorkerInitializationError(f"Worker {worker_id} was not initialized: {exc}") from exc

    def _on_dispatch_message_from_worker(self, params: Dict[str, Any]) -> None:
        try:
            event = DispatchMessageFromWorkerEvent.model_validate(params)
        except ValidationError as exc:
            LOGGER.warning("Dropping invalid Worker.dispatchMessageFromWorker: %s", exc)
            return
        record = self._workers.get(event.worker_id)
        if record is None:
            LOGGER.debug("Dropping message for unknown worker %s", event.worker_id)
            return
        try:
            message = parse_message(event.message)
        except ValueError as exc:
            LOGGER.warning("Dropping malformed message from worker %s: %s", event.worker_id, exc)
            return
        record.session.dispatch_message(message)

    def _on_worker_terminated(self, params: Dict[str, Any]) -> None:
        try:
            event = WorkerTerminatedEvent.model_validate(params)
        except ValidationError as exc:
            LOGGER.warning("Dropping invalid Worker.workerTerminated: %s", exc)
            return
        worker_id = event.worker_id
        record = self._workers.pop(worker_id, None)
        if record is None:
            LOGGER.debug("Ignoring termination of unknown worker %s", worker_id)
            return
        record.visible = False
        record.session.dispose()
        self.page.remove_worker(worker_id)
        LOGGER.info("Worker terminated id=%s", worker_id)

    def _on_console_message(self, record: WorkerRecord, params: Dict[str, Any]) -> None:
        if not record.visible or record.session.is_disposed():
            LOGGER.debug("Dropping console message from detached worker %s", record.session.worker_id)
            return
        context = record.worker.existing_execution_context
        if context is None:
            return
        try:
            event = ConsoleMessageAddedEvent.model_validate(params)
        except ValidationError as exc:
            LOGGER.warning("Dropping invalid Console.messageAdded: %s", exc)
            return
        translated = translate_console_message(event.message, context)
        self.page.add_console_message(translated.type, translated.args, translated.location, translated.text)
