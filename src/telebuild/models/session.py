"""
Session data models.

A BuildSession scopes one build attempt: a fresh identifier, the session
root derived from it, the handshake file paths, and the state machine
that the orchestration components advance.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

from ..validation import TelebuildError

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "settings.json"
OUTPUT_FILE_NAME = "output.json"
LOG_FILE_NAME = "build.log"


class SessionState(Enum):
    """States a build session moves through."""

    CREATED = "created"
    SETTINGS_WRITTEN = "settings_written"
    SPAWNED = "spawned"
    RUNNING = "running"
    COMPLETED = "completed"
    OUTPUT_LOADED = "output_loaded"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[SessionState] = frozenset({
    SessionState.OUTPUT_LOADED,
    SessionState.CANCELLED,
    SessionState.FAILED,
})

_TRANSITIONS: Dict[SessionState, FrozenSet[SessionState]] = {
    SessionState.CREATED: frozenset({SessionState.SETTINGS_WRITTEN, SessionState.FAILED}),
    SessionState.SETTINGS_WRITTEN: frozenset({SessionState.SPAWNED, SessionState.FAILED}),
    SessionState.SPAWNED: frozenset({SessionState.RUNNING, SessionState.FAILED}),
    SessionState.RUNNING: frozenset({
        SessionState.COMPLETED, SessionState.CANCELLED, SessionState.FAILED
    }),
    SessionState.COMPLETED: frozenset({SessionState.OUTPUT_LOADED, SessionState.FAILED}),
    SessionState.OUTPUT_LOADED: frozenset(),
    SessionState.CANCELLED: frozenset(),
    SessionState.FAILED: frozenset(),
}


class InvalidStateTransition(RuntimeError):
    """Raised when a component tries to move a session along an edge the state machine lacks."""

    def __init__(self, current: SessionState, requested: SessionState):
        super().__init__(f"Illegal session transition {current.value} -> {requested.value}")
        self.current = current
        self.requested = requested


def new_session_id() -> str:
    """Return a time-ordered identifier that is unique within and across processes."""
    return str(uuid.uuid1())


@dataclass
class BuildSession:
    """
    Encapsulates the identity, paths and state of a single build attempt.

    The session root is `<project_path>/<root_base>/<session_id>`. Because
    the identifier is freshly generated for every session, two sessions
    never share a root even when they build the same project concurrently.
    """

    session_id: str
    project_path: Path
    root_base: Path
    log_subdir: Path

    state: SessionState = SessionState.CREATED
    history: List[SessionState] = field(default_factory=lambda: [SessionState.CREATED])
    failure: Optional[TelebuildError] = None
    exit_code: Optional[int] = None
    # asyncio.subprocess.Process owned by this session while it runs
    process: Optional[Any] = None

    @classmethod
    def create(cls, project_path: Path, root_base: Path, log_subdir: Path) -> "BuildSession":
        """Create a session with a newly minted identifier."""
        session = cls(
            session_id=new_session_id(),
            project_path=Path(project_path).absolute(),
            root_base=Path(root_base),
            log_subdir=Path(log_subdir),
        )
        logger.debug(f"Created session {session.session_id} for {session.project_path}")
        return session

    # --- Paths ---

    @property
    def relative_root(self) -> Path:
        """Session root relative to the project directory."""
        return self.root_base / self.session_id

    @property
    def root(self) -> Path:
        return self.project_path / self.relative_root

    @property
    def log_dir(self) -> Path:
        return self.root / self.log_subdir

    @property
    def log_path(self) -> Path:
        return self.log_dir / LOG_FILE_NAME

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILE_NAME

    @property
    def output_path(self) -> Path:
        return self.root / OUTPUT_FILE_NAME

    # --- State machine ---

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def transition(self, new_state: SessionState) -> None:
        """
        Move the session to a new state.

        Raises:
            InvalidStateTransition: If the state machine has no such edge
        """
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidStateTransition(self.state, new_state)
        logger.debug(f"Session {self.session_id}: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def fail(self, error: TelebuildError) -> None:
        """Record the failure and move to the terminal failed state."""
        self.failure = error
        self.transition(SessionState.FAILED)

    @property
    def failure_kind(self) -> Optional[str]:
        return self.failure.kind if self.failure is not None else None
