from .envelope import build_request, parse_message, serialize_message, wrap_for_worker

__all__ = [
    "build_request",
    "parse_message",
    "serialize_message",
    "wrap_for_worker",
]
