import pytest

from wire.models import ConsolePayload

from wkworkers.execution import ExecutionContext
from wkworkers.workers.console import derive_console_type, to_location, translate_console_message


class _NullSession:
    session_id = "worker-1"


@pytest.mark.parametrize(
    ("message_type", "level", "expected"),
    [
        ("log", "warning", "warning"),
        ("log", "error", "error"),
        ("timing", "log", "timeEnd"),
        ("error", "error", "error"),
        ("dir", "log", "dir"),
        (None, "info", "info"),
    ],
)
def test_derive_console_type(message_type, level, expected):
    assert derive_console_type(message_type, level) == expected


def test_location_is_zero_based():
    location = to_location(ConsolePayload(url="http://localhost/w.js", line=5, column=10))
    assert (location.url, location.line_number, location.column_number) == ("http://localhost/w.js", 4, 9)


def test_missing_location_maps_to_origin():
    location = to_location(ConsolePayload())
    assert (location.url, location.line_number, location.column_number) == (None, 0, 0)


def test_text_kept_without_parameters():
    context = ExecutionContext(session=_NullSession())
    translated = translate_console_message(ConsolePayload(type="log", level="log", text="hello"), context)
    assert translated.type == "log"
    assert translated.args == []
    assert translated.text == "hello"


def test_parameters_replace_text_with_handles():
    context = ExecutionContext(session=_NullSession())
    payload = ConsolePayload.model_validate(
        {
            "type": "log",
            "level": "info",
            "text": "value 42",
            "parameters": [
                {"type": "string", "value": "value"},
                {"type": "number", "value": 42, "description": "42"},
            ],
        }
    )

    translated = translate_console_message(payload, context)

    assert translated.text is None
    assert [handle.preview() for handle in translated.args] == ["value", "42"]
    assert all(handle.context is context for handle in translated.args)
