"""Lifecycle tracking for worker sessions."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone


class WorkerSessionState(enum.Enum):
    CREATED = "CREATED"
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    DISPOSED = "DISPOSED"


@dataclass
class SessionStateTracker:
    """In-memory session state with validated transitions."""

    state: WorkerSessionState = WorkerSessionState.CREATED
    last_transition_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def transition(self, next_state: WorkerSessionState) -> None:
        """Move the session into a new state, validating allowed transitions."""

        if not self._is_valid_transition(self.state, next_state):
            raise ValueError(f"Invalid transition {self.state.value} → {next_state.value}")
        self.state = next_state
        self.last_transition_at = datetime.now(tz=timezone.utc)

    @staticmethod
    def _is_valid_transition(current: WorkerSessionState, nxt: WorkerSessionState) -> bool:
        allowed = {
            WorkerSessionState.CREATED: {WorkerSessionState.INITIALIZING, WorkerSessionState.DISPOSED},
            WorkerSessionState.INITIALIZING: {WorkerSessionState.READY, WorkerSessionState.DISPOSED},
            WorkerSessionState.READY: {WorkerSessionState.DISPOSED},
            WorkerSessionState.DISPOSED: set(),
        }
        return nxt in allowed.get(current, set())
