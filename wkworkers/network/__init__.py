"""Protocol plumbing: connection, sessions and event subscriptions."""

from wkworkers.network.connection import Connection, ConnectionClosedError, ConnectionEvents
from wkworkers.network.events import EventEmitter, RegisteredListener, add_event_listener, remove_event_listeners
from wkworkers.network.session import (
    ProtocolError,
    Session,
    SessionClosedError,
    TransportSession,
    WorkerSession,
)
from wkworkers.network.state import SessionStateTracker, WorkerSessionState
from wkworkers.network.transport.base import BaseTransport

__all__ = [
    "BaseTransport",
    "Connection",
    "ConnectionClosedError",
    "ConnectionEvents",
    "EventEmitter",
    "ProtocolError",
    "RegisteredListener",
    "Session",
    "SessionClosedError",
    "SessionStateTracker",
    "TransportSession",
    "WorkerSession",
    "WorkerSessionState",
    "add_event_listener",
    "remove_event_listeners",
]
