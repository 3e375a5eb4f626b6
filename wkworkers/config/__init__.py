"""Configuration primitives for the worker bridge."""

from .settings import WorkersSettings, get_settings

__all__ = ["WorkersSettings", "get_settings"]
