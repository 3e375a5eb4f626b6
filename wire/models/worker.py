from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class WorkerCreatedEvent(BaseModel):
    """Worker.workerCreated notification from the page session."""

    worker_id: str = Field(alias="workerId")
    url: str
    name: Optional[str] = None


class DispatchMessageFromWorkerEvent(BaseModel):
    """Worker.dispatchMessageFromWorker notification; ``message`` is JSON text."""

    worker_id: str = Field(alias="workerId")
    message: str


class WorkerTerminatedEvent(BaseModel):
    """Worker.workerTerminated notification from the page session."""

    worker_id: str = Field(alias="workerId")


class SendMessageToWorkerParams(BaseModel):
    worker_id: str = Field(alias="workerId")
    message: str


class WorkerInitializedParams(BaseModel):
    worker_id: str = Field(alias="workerId")
