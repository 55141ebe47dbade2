"""Event and log entry types shared by the reducer and the logger."""

from enum import Enum, auto
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional
from datetime import datetime

from relay.core.utils import safe_json_dumps


class EventType(Enum):
    """Everything a transition can report."""
    
    # Lobby
    PLAYER_JOINED = auto()
    PLAYER_REMOVED = auto()
    
    # Round lifecycle
    ROUND_ARMED = auto()
    ROLES_ASSIGNED = auto()
    CARD_REVEALED = auto()
    PHASE_CHANGE = auto()
    ROUND_END = auto()
    ROUND_RESET = auto()
    LOBBY_RESET = auto()
    
    # Mission and meeting
    TASK_TOGGLED = auto()
    STATUS_TOGGLED = auto()
    MEETING_CALLED = auto()
    PLAYER_EJECTED = auto()
    VOTE_SKIPPED = auto()
    PROMPT_DRAWN = auto()
    
    # System events
    ERROR = auto()


@dataclass(frozen=True)
class DomainEvent:
    """Something a single transition did, as seen by observers.
    
    Events with a message are also shown in the mission log.
    """
    
    event_type: EventType
    timestamp: datetime
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    player_id: Optional[str] = None
    is_private: bool = False


@dataclass(frozen=True)
class MissionLogEntry:
    """Single line of the on-screen mission log."""
    
    timestamp: datetime
    message: str
    event_type: EventType
    
    def __str__(self) -> str:
        return f"[{self.timestamp.strftime('%H:%M')}] {self.message}"
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
            "event_type": self.event_type.name,
            "text": str(self),
        }


@dataclass(frozen=True)
class LogEntry:
    """A DomainEvent as recorded by GameLogger, one JSONL line each."""
    
    timestamp: datetime
    event_type: EventType
    session_id: str
    round_number: int
    data: Dict[str, Any] = field(default_factory=dict)
    player_id: Optional[str] = None
    is_private: bool = False
    
    @property
    def message(self) -> Optional[str]:
        return self.data.get("message")
    
    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["timestamp"] = self.timestamp.isoformat()
        result["event_type"] = self.event_type.name
        return result
    
    def to_json(self) -> str:
        return safe_json_dumps(self.to_dict())
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogEntry":
        """Inverse of to_dict(); accepts a parsed JSONL line."""
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            event_type=EventType[data["event_type"]],
            session_id=data["session_id"],
            round_number=data.get("round_number", 0),
            data=dict(data.get("data") or {}),
            player_id=data.get("player_id"),
            is_private=data.get("is_private", False),
        )
