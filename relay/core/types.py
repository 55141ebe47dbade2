"""Common types and enums shared by the round engine."""

import math
from enum import Enum
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass


class Phase(Enum):
    """Round phases.
    
    ENDED is never stored on the session; it is only produced by the
    displayed-phase projection.
    """
    
    LOBBY = "lobby"
    REVEAL = "reveal"
    MISSION = "mission"
    MEETING = "meeting"
    ENDED = "ended"


class Role(Enum):
    """Hidden roles handed out at round start."""
    
    CREWMATE = "Crewmate"
    IMPOSTOR = "Impostor"
    ANALYST = "Analyst"
    
    @property
    def is_crew_aligned(self) -> bool:
        return self is not Role.IMPOSTOR


class TaskKind(Enum):
    """Kind of a task, fixed by the owner's role at assignment time."""
    
    CREW = "crew"
    IMPOSTOR = "impostor"
    SUPPORT = "support"


class PlayerStatus(Enum):
    ALIVE = "alive"
    ELIMINATED = "eliminated"


class Winner(Enum):
    CREWMATES = "Crewmates"
    IMPOSTORS = "Impostors"


ROLE_TASK_KIND = {
    Role.CREWMATE: TaskKind.CREW,
    Role.IMPOSTOR: TaskKind.IMPOSTOR,
    Role.ANALYST: TaskKind.SUPPORT,
}

ROLE_DESCRIPTIONS = {
    Role.CREWMATE: "Complete critical ship tasks and keep an eye out for sabotage.",
    Role.ANALYST: "Support the crew with intel, track alibis, and confirm suspicious activity.",
    Role.IMPOSTOR: "Blend in, derail task completion, and eliminate the crew without exposure.",
}

PHASE_LABELS = {
    Phase.LOBBY: "Player Lobby",
    Phase.REVEAL: "Card Reveal",
    Phase.MISSION: "Mission Control",
    Phase.MEETING: "Emergency Meeting",
    Phase.ENDED: "Round Summary",
}

TASK_KIND_LABELS = {
    TaskKind.CREW: "Crew Task",
    TaskKind.SUPPORT: "Intel Task",
    TaskKind.IMPOSTOR: "Secret Play",
}


@dataclass(frozen=True)
class Task:
    """A single objective owned by one player."""
    
    task_id: str
    name: str
    kind: TaskKind
    completed: bool = False
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert task to dictionary."""
        return {
            "task_id": self.task_id,
            "name": self.name,
            "kind": self.kind.value,
            "kind_label": TASK_KIND_LABELS[self.kind],
            "completed": self.completed,
        }


@dataclass(frozen=True)
class Player:
    """A roster entry.
    
    Attributes:
        player_id: Opaque unique identifier
        name: Display name, trimmed and unique (case-insensitive)
        role: Current role; CREWMATE until a round is armed
        status: Alive or eliminated
        tasks: Ordered task list for the current round
        card_seen: Whether the role card has been privately shown
    """
    
    player_id: str
    name: str
    role: Role = Role.CREWMATE
    status: PlayerStatus = PlayerStatus.ALIVE
    tasks: Tuple[Task, ...] = ()
    card_seen: bool = False
    
    @property
    def is_alive(self) -> bool:
        return self.status is PlayerStatus.ALIVE
    
    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert player to dictionary."""
        return {
            "player_id": self.player_id,
            "name": self.name,
            "role": self.role.value,
            "status": self.status.value,
            "tasks": [task.to_dict() for task in self.tasks],
            "card_seen": self.card_seen,
        }


@dataclass(frozen=True)
class Outcome:
    """Winner of a round together with a human-readable reason."""
    
    winner: Winner
    reason: str
    
    def to_dict(self) -> Dict[str, Any]:
        return {"winner": self.winner.value, "reason": self.reason}


@dataclass(frozen=True)
class TaskTotals:
    """Completion counts over every non-impostor task on the roster."""
    
    completed: int = 0
    total: int = 0
    
    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        # Half rounds up
        return math.floor(self.completed * 100 / self.total + 0.5)

