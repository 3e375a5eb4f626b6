"""Helpers for building/parsing the message envelope tunnelled to workers."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError

from wire.models import ProtocolMessage, SendMessageToWorkerParams

Payload = Dict[str, Any] | BaseModel


def _payload_dict(payload: Payload) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(exclude_none=True, by_alias=True)
    return {key: value for key, value in payload.items() if value is not None}


def build_request(message_id: int, method: str, params: Optional[Payload] = None) -> Dict[str, Any]:
    """Construct a request dict ready for the transport."""

    message: Dict[str, Any] = {"id": message_id, "method": method}
    if params is not None:
        message["params"] = _payload_dict(params)
    return message


def serialize_message(message: Payload) -> str:
    """Serialize a message to the compact JSON text used on the wire."""

    return json.dumps(_payload_dict(message), separators=(",", ":"))


def parse_message(raw: str | bytes | Dict[str, Any]) -> ProtocolMessage:
    """Validate and parse a raw message (JSON text or dict).

    Raises ``ValueError`` when the text is not JSON or does not describe a
    protocol message.
    """

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid protocol message: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError("Protocol message must be a JSON object")
    try:
        return ProtocolMessage.model_validate(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid protocol message: {exc}") from exc


def wrap_for_worker(worker_id: str, message: Payload) -> Dict[str, Any]:
    """Build Worker.sendMessageToWorker params carrying ``message``."""

    params = SendMessageToWorkerParams(workerId=worker_id, message=serialize_message(message))
    return params.model_dump(by_alias=True)
