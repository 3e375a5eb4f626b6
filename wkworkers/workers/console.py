"""Translation of worker ``Console.messageAdded`` events into page console messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from wire.models import ConsolePayload

from wkworkers.execution import ExecutionContext, JSHandle
from wkworkers.page import ConsoleLocation

_TYPE_OVERRIDES = {"timing": "timeEnd"}


def derive_console_type(message_type: Optional[str], level: str) -> str:
    """``log`` messages take their level as type, ``timing`` becomes ``timeEnd``."""

    message_type = message_type or "log"
    if message_type == "log":
        return level
    return _TYPE_OVERRIDES.get(message_type, message_type)


def to_location(payload: ConsolePayload) -> ConsoleLocation:
    # Protocol positions are 1-based; a missing position maps to 0.
    return ConsoleLocation(
        url=payload.url,
        line_number=max((payload.line or 0) - 1, 0),
        column_number=max((payload.column or 0) - 1, 0),
    )


@dataclass(frozen=True)
class TranslatedConsoleMessage:
    type: str
    args: List[JSHandle]
    location: ConsoleLocation
    text: Optional[str]


def translate_console_message(payload: ConsolePayload, context: ExecutionContext) -> TranslatedConsoleMessage:
    handles = [context.create_handle(parameter) for parameter in payload.parameters or []]
    return TranslatedConsoleMessage(
        type=derive_console_type(payload.type, payload.level),
        args=handles,
        location=to_location(payload),
        text=None if handles else payload.text,
    )
