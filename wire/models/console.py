from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .runtime import RemoteObject


class ConsolePayload(BaseModel):
    """Console.ConsoleMessage as reported by the inspected worker.

    ``line`` and ``column`` are 1-based.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    source: str = "console-api"
    level: str = "log"
    text: str = ""
    type: Optional[str] = None
    url: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None
    repeat_count: Optional[int] = Field(default=None, alias="repeatCount")
    parameters: Optional[List[RemoteObject]] = None
    stack_trace: Optional[List[Dict[str, Any]]] = Field(default=None, alias="stackTrace")


class ConsoleMessageAddedEvent(BaseModel):
    """Console.messageAdded notification."""

    message: ConsolePayload
