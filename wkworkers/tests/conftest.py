import asyncio
import json
from itertools import count
from typing import Any, Optional

import pytest

from wkworkers.config import WorkersSettings
from wkworkers.network.events import EventEmitter
from wkworkers.network.transport.base import BaseTransport
from wkworkers.page import Page
from wkworkers.workers import WorkerManager


class FakeConnection:
    def __init__(self) -> None:
        self._ids = count(1)

    def next_message_id(self) -> int:
        return next(self._ids)


class FakePageSession(EventEmitter):
    """Page session double answering Worker.* commands.

    Requests tunnelled to workers whose method is listed in ``auto_reply`` get
    an empty result dispatched back on the next loop iteration.
    """

    def __init__(self) -> None:
        super().__init__()
        self.connection = FakeConnection()
        self.sent: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.auto_reply: set[str] = {"Runtime.enable", "Console.enable"}

    async def send(self, method: str, params: Optional[dict[str, Any]] = None) -> Any:
        params = params or {}
        self.sent.append((method, params))
        gate = self.gates.get(method)
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(method)
        if failure is not None:
            raise failure
        if method == "Worker.sendMessageToWorker":
            inner = json.loads(params["message"])
            if inner.get("method") in self.auto_reply:
                asyncio.get_running_loop().call_soon(
                    self.reply_from_worker, params["workerId"], {"id": inner["id"], "result": {}}
                )
        return {}

    def reply_from_worker(self, worker_id: str, message: dict[str, Any]) -> None:
        self.emit(
            "Worker.dispatchMessageFromWorker",
            {"workerId": worker_id, "message": json.dumps(message)},
        )

    def forwarded(self, worker_id: Optional[str] = None) -> list[dict[str, Any]]:
        return [
            json.loads(params["message"])
            for method, params in self.sent
            if method == "Worker.sendMessageToWorker" and (worker_id is None or params["workerId"] == worker_id)
        ]

    def calls(self, method: str) -> list[dict[str, Any]]:
        return [params for sent_method, params in self.sent if sent_method == method]


class FakeTransport(BaseTransport):
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.inbox: asyncio.Queue = asyncio.Queue()
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        self.connected = True

    async def send(self, message: dict[str, Any]) -> None:
        self.sent.append(message)

    async def receive(self) -> dict[str, Any]:
        item = await self.inbox.get()
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(monkeypatch, tmp_path) -> WorkersSettings:
    monkeypatch.delenv("WKWORKERS_CONFIG_FILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return WorkersSettings()


@pytest.fixture
def page_session() -> FakePageSession:
    return FakePageSession()


@pytest.fixture
def page() -> Page:
    return Page()


@pytest.fixture
def manager(page: Page, page_session: FakePageSession, settings: WorkersSettings) -> WorkerManager:
    manager = WorkerManager(page=page, settings=settings)
    manager.set_session(page_session)
    return manager


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def make_page_session():
    return FakePageSession
