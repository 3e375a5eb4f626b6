from .console import ConsoleMessageAddedEvent, ConsolePayload
from .message import ErrorPayload, ProtocolMessage
from .runtime import RemoteObject
from .worker import (
    DispatchMessageFromWorkerEvent,
    SendMessageToWorkerParams,
    WorkerCreatedEvent,
    WorkerInitializedParams,
    WorkerTerminatedEvent,
)

__all__ = [
    "ConsoleMessageAddedEvent",
    "ConsolePayload",
    "ErrorPayload",
    "ProtocolMessage",
    "RemoteObject",
    "DispatchMessageFromWorkerEvent",
    "SendMessageToWorkerParams",
    "WorkerCreatedEvent",
    "WorkerInitializedParams",
    "WorkerTerminatedEvent",
]
