"""Worker session multiplexing over a single page protocol connection."""

from wkworkers.bootstrap import attach_page
from wkworkers.config import WorkersSettings, get_settings
from wkworkers.execution import ExecutionContext, JSHandle
from wkworkers.network import (
    Connection,
    ProtocolError,
    Session,
    SessionClosedError,
    TransportSession,
    WorkerSession,
)
from wkworkers.page import ConsoleLocation, ConsoleMessage, Page, PageEvents, Worker, WorkerEvents
from wkworkers.workers import WorkerManager

__all__ = [
    "Connection",
    "ConsoleLocation",
    "ConsoleMessage",
    "ExecutionContext",
    "JSHandle",
    "Page",
    "PageEvents",
    "ProtocolError",
    "Session",
    "SessionClosedError",
    "TransportSession",
    "Worker",
    "WorkerEvents",
    "WorkerManager",
    "WorkerSession",
    "WorkersSettings",
    "attach_page",
    "get_settings",
]
