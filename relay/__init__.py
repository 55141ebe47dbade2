"""Imposter Relay - run a social deduction round from a single shared device."""

__version__ = "0.1.0"

from relay.core.types import Outcome, Phase, Player, Role, Task, TaskKind, Winner
from relay.core.exceptions import (
    RelayException,
    InvalidActionError,
    InvalidStateError,
    ConfigurationError,
)
from relay.round import RoundConfig, RoundSession, SessionState, reduce

__all__ = [
    "__version__",
    "Outcome",
    "Phase",
    "Player",
    "Role",
    "Task",
    "TaskKind",
    "Winner",
    "RelayException",
    "InvalidActionError",
    "InvalidStateError",
    "ConfigurationError",
    "RoundConfig",
    "RoundSession",
    "SessionState",
    "reduce",
]
