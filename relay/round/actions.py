"""Actions accepted by the round reducer."""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Dict, Optional


class ActionType(Enum):
    """Everything the host can do from the shared device."""
    
    # Lobby
    ADD_PLAYER = auto()
    REMOVE_PLAYER = auto()
    SET_IMPOSTOR_COUNT = auto()
    START_ROUND = auto()
    
    # Reveal
    TOGGLE_REVEAL = auto()
    ADVANCE_CARD = auto()
    SKIP_REVEAL = auto()
    
    # Mission
    TOGGLE_TASK = auto()
    TOGGLE_STATUS = auto()
    CALL_MEETING = auto()
    DRAW_PROMPT = auto()
    
    # Meeting
    SELECT_SUSPECT = auto()
    CONFIRM_EJECTION = auto()
    SKIP_VOTE = auto()
    
    # Resets
    RESET_ROUND = auto()
    RESET_LOBBY = auto()


@dataclass(frozen=True)
class Action:
    """A single host action.
    
    Only the fields relevant to the action type are set.
    """
    
    action_type: ActionType
    player_id: Optional[str] = None
    task_id: Optional[str] = None
    name: Optional[str] = None
    count: Optional[int] = None
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert action to dictionary."""
        return {
            "action_type": self.action_type.name,
            "player_id": self.player_id,
            "task_id": self.task_id,
            "name": self.name,
            "count": self.count,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        """Create action from dictionary."""
        data = data.copy()
        data["action_type"] = ActionType[data["action_type"]]
        return cls(**data)


def add_player(name: str) -> Action:
    return Action(ActionType.ADD_PLAYER, name=name)


def remove_player(player_id: str) -> Action:
    return Action(ActionType.REMOVE_PLAYER, player_id=player_id)


def set_impostor_count(count: int) -> Action:
    return Action(ActionType.SET_IMPOSTOR_COUNT, count=count)


def start_round() -> Action:
    return Action(ActionType.START_ROUND)


def toggle_reveal() -> Action:
    return Action(ActionType.TOGGLE_REVEAL)


def advance_card() -> Action:
    return Action(ActionType.ADVANCE_CARD)


def skip_reveal() -> Action:
    return Action(ActionType.SKIP_REVEAL)


def toggle_task(player_id: str, task_id: str) -> Action:
    return Action(ActionType.TOGGLE_TASK, player_id=player_id, task_id=task_id)


def toggle_status(player_id: str) -> Action:
    return Action(ActionType.TOGGLE_STATUS, player_id=player_id)


def call_meeting() -> Action:
    return Action(ActionType.CALL_MEETING)


def draw_prompt() -> Action:
    return Action(ActionType.DRAW_PROMPT)


def select_suspect(player_id: Optional[str]) -> Action:
    """Select a suspect; passing None or the current suspect clears it."""
    return Action(ActionType.SELECT_SUSPECT, player_id=player_id)


def confirm_ejection() -> Action:
    return Action(ActionType.CONFIRM_EJECTION)


def skip_vote() -> Action:
    return Action(ActionType.SKIP_VOTE)


def reset_round() -> Action:
    return Action(ActionType.RESET_ROUND)


def reset_lobby() -> Action:
    return Action(ActionType.RESET_LOBBY)
