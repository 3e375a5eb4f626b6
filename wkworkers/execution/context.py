"""Execution context bound to one protocol session, and the handles it mints."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from wire.models import RemoteObject

from wkworkers.network.session import ProtocolError, Session

LOGGER = logging.getLogger(__name__)


@dataclass
class ExecutionContext:
    """Scope for handles created from remote objects reported by ``session``."""

    session: Session

    def create_handle(self, remote_object: RemoteObject | Dict[str, Any]) -> "JSHandle":
        if not isinstance(remote_object, RemoteObject):
            remote_object = RemoteObject.model_validate(remote_object)
        return JSHandle(context=self, remote_object=remote_object)


@dataclass
class JSHandle:
    context: ExecutionContext
    remote_object: RemoteObject
    _disposed: bool = field(default=False, init=False, repr=False)

    @property
    def object_id(self) -> str | None:
        return self.remote_object.object_id

    @property
    def disposed(self) -> bool:
        return self._disposed

    def preview(self) -> str:
        """Plain-text rendering used for console output."""

        remote = self.remote_object
        if remote.object_id:
            return remote.description or remote.subtype or remote.type
        if remote.type == "undefined":
            return "undefined"
        if remote.type == "string":
            return str(remote.value)
        if remote.description is not None:
            return remote.description
        return json.dumps(remote.value)

    async def dispose(self) -> None:
        """Release the remote object; a closed session is not an error."""

        if self._disposed:
            return
        self._disposed = True
        if not self.object_id:
            return
        try:
            await self.context.session.send("Runtime.releaseObject", {"objectId": self.object_id})
        except ProtocolError as exc:
            # The worker may already be gone.
            LOGGER.debug("Failed to release remote object %s: %s", self.object_id, exc)

    def __str__(self) -> str:
        remote = self.remote_object
        if remote.object_id:
            return f"JSHandle@{remote.subtype or remote.type}"
        return f"JSHandle:{self.preview()}"
