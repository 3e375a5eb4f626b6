"""Wiring of a page and its worker manager onto a running connection."""

from __future__ import annotations

import logging
from typing import Optional

from wkworkers.config import WorkersSettings, get_settings
from wkworkers.log import configure_logging
from wkworkers.network.connection import Connection
from wkworkers.page import Page
from wkworkers.workers import WorkerManager

LOGGER = logging.getLogger(__name__)


async def attach_page(
    connection: Connection,
    page: Optional[Page] = None,
    settings: Optional[WorkersSettings] = None,
) -> tuple[Page, WorkerManager]:
    """Bind worker tracking to the connection's root session and enable it."""

    settings = settings or get_settings()
    configure_logging(settings)
    page = page or Page()
    manager = WorkerManager(page=page, settings=settings)
    session = connection.root_session
    manager.set_session(session)
    LOGGER.debug("Enabling worker notifications on session %r", session.session_id)
    await manager.initialize_session(session)
    return page, manager
