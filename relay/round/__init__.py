"""Single-device social deduction round."""

from relay.round.actions import Action, ActionType
from relay.round.banks import ContentBanks
from relay.round.config import DEFAULT_CONFIG, RoundConfig, load_round_config, load_settings
from relay.round.reducer import reduce
from relay.round.rules import assign_roles, evaluate_outcome, max_impostors
from relay.round.session import RoundSession
from relay.round.state import INITIAL_STATE, SessionState, displayed_phase

__all__ = [
    "Action",
    "ActionType",
    "ContentBanks",
    "DEFAULT_CONFIG",
    "RoundConfig",
    "load_round_config",
    "load_settings",
    "reduce",
    "assign_roles",
    "evaluate_outcome",
    "max_impostors",
    "RoundSession",
    "INITIAL_STATE",
    "SessionState",
    "displayed_phase",
]
