"""Process-wide logging setup."""

from __future__ import annotations

import logging

from wkworkers.config import WorkersSettings


def configure_logging(settings: WorkersSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )
