from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class RemoteObject(BaseModel):
    """Mirror object referencing a value that lives in the inspected context."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str
    subtype: Optional[str] = None
    class_name: Optional[str] = Field(default=None, alias="className")
    value: Optional[Any] = None
    description: Optional[str] = None
    object_id: Optional[str] = Field(default=None, alias="objectId")
    size: Optional[int] = None
    preview: Optional[Dict[str, Any]] = None
