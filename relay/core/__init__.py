"""Core framework components for Imposter Relay."""

from relay.core.types import (
    Outcome,
    Phase,
    Player,
    PlayerStatus,
    Role,
    Task,
    TaskKind,
    TaskTotals,
    Winner,
)
from relay.core.exceptions import (
    RelayException,
    InvalidActionError,
    InvalidStateError,
    ConfigurationError,
)
from relay.core.utils import clamp, generate_session_id, new_id

__all__ = [
    "Outcome",
    "Phase",
    "Player",
    "PlayerStatus",
    "Role",
    "Task",
    "TaskKind",
    "TaskTotals",
    "Winner",
    "RelayException",
    "InvalidActionError",
    "InvalidStateError",
    "ConfigurationError",
    "clamp",
    "generate_session_id",
    "new_id",
]
