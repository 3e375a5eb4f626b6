"""Execution contexts and remote value handles."""

from .context import ExecutionContext, JSHandle

__all__ = ["ExecutionContext", "JSHandle"]
