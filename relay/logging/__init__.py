"""Event logging for Imposter Relay sessions."""

from relay.logging.game_logger import GameLogger
from relay.logging.formats import DomainEvent, EventType, LogEntry, MissionLogEntry

__all__ = [
    "GameLogger",
    "DomainEvent",
    "EventType",
    "LogEntry",
    "MissionLogEntry",
]
