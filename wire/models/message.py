from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ErrorPayload(BaseModel):
    """Error object carried by a failed protocol response."""

    model_config = ConfigDict(extra="allow")

    message: str = ""
    code: Optional[int] = None
    data: Optional[Any] = None


class ProtocolMessage(BaseModel):
    """Request, response or notification exchanged with a protocol peer.

    Requests carry ``id`` + ``method`` (+ ``params``), responses carry ``id`` +
    ``result``/``error`` and notifications carry ``method`` (+ ``params``) only.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[int] = None
    method: Optional[str] = None
    params: Optional[Dict[str, Any]] = None
    result: Optional[Any] = None
    error: Optional[ErrorPayload] = None

    @property
    def is_response(self) -> bool:
        return self.id is not None and self.method is None

    @property
    def is_notification(self) -> bool:
        return self.id is None and self.method is not None
