"""Worker lifecycle, routing and console translation."""

from .console import derive_console_type, translate_console_message
from .manager import WorkerHost, WorkerInitializationError, WorkerManager, WorkerRecord

__all__ = [
    "WorkerHost",
    "WorkerInitializationError",
    "WorkerManager",
    "WorkerRecord",
    "derive_console_type",
    "translate_console_message",
]
