"""Session state for an Imposter Relay round."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from relay.core.types import (
    PHASE_LABELS,
    ROLE_DESCRIPTIONS,
    Outcome,
    Phase,
    Player,
    Role,
    TaskTotals,
)
from relay.logging.formats import DomainEvent, MissionLogEntry
from relay.round.config import DEFAULT_CONFIG, RoundConfig
from relay.round.rules import crew_task_totals, max_impostors, sorted_roster


def displayed_phase(phase: Phase, outcome: Optional[Outcome]) -> Phase:
    """Phase shown to the host.
    
    Mission and meeting are shown as ENDED while an outcome stands; the
    stored phase itself is never ENDED.
    """
    if outcome is not None and phase not in (Phase.LOBBY, Phase.REVEAL):
        return Phase.ENDED
    return phase


@dataclass(frozen=True)
class SessionState:
    """Complete state of one shared-device session.
    
    Every transition produces a new value through the reducer.
    
    Attributes:
        players: Roster in join order
        phase: Stored phase (LOBBY, REVEAL, MISSION or MEETING)
        impostor_count: Impostor selector value
        reveal_index: Cursor into players during the reveal
        show_role: Whether the current reveal card is face up
        selected_suspect: Player picked during a meeting
        prompt: Last drawn prompt card
        error: Current validation message
        outcome: Last evaluated outcome
        mission_log: On-screen history, newest first
        round_number: Rounds armed so far in this session
        events: Events emitted by the transition that produced this state
    """
    players: Tuple[Player, ...] = ()
    phase: Phase = Phase.LOBBY
    impostor_count: int = 1
    reveal_index: int = 0
    show_role: bool = False
    selected_suspect: Optional[str] = None
    prompt: Optional[str] = None
    error: Optional[str] = None
    outcome: Optional[Outcome] = None
    mission_log: Tuple[MissionLogEntry, ...] = ()
    round_number: int = 0
    events: Tuple[DomainEvent, ...] = field(default=(), compare=False)
    
    @property
    def displayed_phase(self) -> Phase:
        return displayed_phase(self.phase, self.outcome)
    
    @property
    def is_ended(self) -> bool:
        return self.displayed_phase is Phase.ENDED
    
    def find_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None
    
    def find_player_by_name(self, name: str) -> Optional[Player]:
        folded = name.strip().casefold()
        for player in self.players:
            if player.name.casefold() == folded:
                return player
        return None
    
    @property
    def current_reveal_player(self) -> Optional[Player]:
        """Player holding the device during the reveal, if any."""
        if self.phase is not Phase.REVEAL:
            return None
        if 0 <= self.reveal_index < len(self.players):
            return self.players[self.reveal_index]
        return None
    
    def get_alive_crew(self) -> List[Player]:
        return [p for p in self.players if p.is_alive and p.role.is_crew_aligned]
    
    def get_alive_impostors(self) -> List[Player]:
        return [p for p in self.players if p.is_alive and p.role is Role.IMPOSTOR]
    
    def task_totals(self) -> TaskTotals:
        return crew_task_totals(self.players)
    
    def impostor_options(self, config: RoundConfig = DEFAULT_CONFIG) -> List[int]:
        return list(range(1, max_impostors(len(self.players), config) + 1))
    
    def impostor_value(self, config: RoundConfig = DEFAULT_CONFIG) -> int:
        return min(self.impostor_count, max_impostors(len(self.players), config))
    
    def to_dict(self, config: RoundConfig = DEFAULT_CONFIG) -> Dict[str, Any]:
        """Everything the presentation layer consumes.
        
        Returns:
            JSON-serialisable dictionary
        """
        phase = self.displayed_phase
        totals = self.task_totals()
        reveal_player = self.current_reveal_player
        
        reveal = None
        if reveal_player is not None:
            reveal = {
                "player_id": reveal_player.player_id,
                "name": reveal_player.name,
                "show_role": self.show_role,
                "role": reveal_player.role.value if self.show_role else None,
                "description": ROLE_DESCRIPTIONS[reveal_player.role] if self.show_role else None,
                "position": self.reveal_index + 1,
                "of": len(self.players),
            }
        
        return {
            "phase": phase.value,
            "phase_label": PHASE_LABELS[phase],
            "stored_phase": self.phase.value,
            "round_number": self.round_number,
            "players": [p.to_dict() for p in self.players],
            "summary_order": [p.player_id for p in sorted_roster(self.players)],
            "outcome": self.outcome.to_dict() if self.outcome else None,
            "mission_log": [str(entry) for entry in self.mission_log],
            "prompt": self.prompt,
            "error": self.error,
            "selected_suspect": self.selected_suspect,
            "impostor_count": self.impostor_value(config),
            "impostor_options": self.impostor_options(config),
            "reveal": reveal,
            "tasks": {
                "completed": totals.completed,
                "total": totals.total,
                "percent": totals.percent,
            },
            "alive_crew": len(self.get_alive_crew()),
            "alive_impostors": len(self.get_alive_impostors()),
        }
    
    def __str__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"phase={self.displayed_phase.value}, "
            f"round={self.round_number}, "
            f"players={len(self.players)})"
        )


INITIAL_STATE = SessionState()
