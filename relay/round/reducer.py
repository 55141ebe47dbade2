"""Round state machine: one pure transition per host action."""

import random
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from relay.core.exceptions import InvalidActionError
from relay.core.types import Outcome, Phase, Player, PlayerStatus, Role
from relay.core.utils import clamp, new_id
from relay.logging.formats import DomainEvent, EventType, MissionLogEntry
from relay.round.actions import Action, ActionType
from relay.round.config import DEFAULT_CONFIG, RoundConfig
from relay.round.rules import (
    assign_roles,
    evaluate_outcome,
    max_impostors,
    normalize_name,
    validate_ejection,
    validate_player_name,
    validate_round_start,
)
from relay.round.state import SessionState


_default_rng = random.Random()


class _Transition:
    """Collects the events of one transition and builds the next state."""

    def __init__(self, state: SessionState, rng: random.Random, config: RoundConfig, now: datetime):
        self.state = state
        self.rng = rng
        self.config = config
        self.now = now
        self.events: List[DomainEvent] = []

    def emit(
        self,
        event_type: EventType,
        message: Optional[str] = None,
        player_id: Optional[str] = None,
        is_private: bool = False,
        **data
    ) -> None:
        self.events.append(
            DomainEvent(
                event_type=event_type,
                timestamp=self.now,
                message=message,
                data=data,
                player_id=player_id,
                is_private=is_private,
            )
        )

    def unchanged(self) -> SessionState:
        """Silent no-op: only the previous transition's events are dropped."""
        if not self.state.events:
            return self.state
        return replace(self.state, events=())

    def reject(self, message: str) -> SessionState:
        """Validation failure: record the message, touch nothing else."""
        self.emit(EventType.ERROR, error=message)
        return replace(self.state, error=message, events=tuple(self.events))

    def commit(self, clear_log: bool = False, **changes) -> SessionState:
        """Accept the transition, clearing the error and extending the log."""
        previous = () if clear_log else self.state.mission_log
        fresh = [
            MissionLogEntry(timestamp=e.timestamp, message=e.message, event_type=e.event_type)
            for e in reversed(self.events)
            if e.message is not None
        ]
        mission_log = tuple(fresh + list(previous))[: self.config.log_capacity]

        changes.setdefault("error", None)
        return replace(
            self.state,
            mission_log=mission_log,
            events=tuple(self.events),
            **changes
        )

    def sync_outcome(self, players: Sequence[Player], phase: Phase) -> Optional[Outcome]:
        """Re-evaluate the outcome for the phase the transition lands in.

        A changed, non-empty outcome is announced exactly once.
        """
        if phase in (Phase.LOBBY, Phase.REVEAL):
            return None

        evaluated = evaluate_outcome(players)
        if evaluated is not None and evaluated != self.state.outcome:
            self.emit(
                EventType.ROUND_END,
                f"{evaluated.winner.value} locked the round: {evaluated.reason}",
                winner=evaluated.winner.value,
                reason=evaluated.reason,
            )
        return evaluated

    def change_phase(self, new_phase: Phase, message: Optional[str] = None) -> None:
        self.emit(
            EventType.PHASE_CHANGE,
            message,
            old_phase=self.state.phase.value,
            new_phase=new_phase.value,
        )


def _replace_player(players: Sequence[Player], updated: Player) -> tuple:
    return tuple(updated if p.player_id == updated.player_id else p for p in players)


# ---------------------------------------------------------------------------
# Lobby
# ---------------------------------------------------------------------------

def _add_player(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if state.phase is not Phase.LOBBY:
        return tr.unchanged()

    is_valid, error = validate_player_name(action.name, state.players)
    if not is_valid:
        return tr.reject(error)

    player = Player(player_id=new_id(), name=normalize_name(action.name))
    tr.emit(EventType.PLAYER_JOINED, player_id=player.player_id, name=player.name)
    return tr.commit(players=state.players + (player,))


def _remove_player(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    target = state.find_player(action.player_id)
    if target is None:
        return tr.unchanged()

    removed_index = state.players.index(target)
    players = tuple(p for p in state.players if p.player_id != target.player_id)
    impostor_count = min(state.impostor_count, max_impostors(len(players), tr.config))
    tr.emit(EventType.PLAYER_REMOVED, player_id=target.player_id, name=target.name)

    if not players:
        return tr.commit(
            clear_log=True,
            players=(),
            phase=Phase.LOBBY,
            impostor_count=impostor_count,
            outcome=None,
            prompt=None,
            selected_suspect=None,
            reveal_index=0,
            show_role=False,
        )

    # Keep the reveal cursor on the same player
    reveal_index = state.reveal_index
    show_role = state.show_role
    if removed_index < reveal_index:
        reveal_index -= 1
    elif removed_index == reveal_index:
        show_role = False
    reveal_index = clamp(reveal_index, 0, len(players) - 1)

    selected = state.selected_suspect
    if selected == target.player_id:
        selected = None

    return tr.commit(
        players=players,
        impostor_count=impostor_count,
        reveal_index=reveal_index,
        show_role=show_role,
        selected_suspect=selected,
        outcome=tr.sync_outcome(players, state.phase),
    )


def _set_impostor_count(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if state.phase is not Phase.LOBBY or action.count is None:
        return tr.unchanged()

    value = clamp(int(action.count), 1, max_impostors(len(state.players), tr.config))
    return tr.commit(impostor_count=value)


def _start_round(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if state.phase is not Phase.LOBBY:
        return tr.unchanged()

    is_valid, error = validate_round_start(len(state.players), tr.config)
    if not is_valid:
        return tr.reject(error)

    impostor_target = clamp(state.impostor_count, 1, max_impostors(len(state.players), tr.config))
    players = assign_roles(state.players, impostor_target, tr.rng, tr.config)
    round_number = state.round_number + 1

    tr.emit(
        EventType.ROLES_ASSIGNED,
        is_private=True,
        round=round_number,
        role_map={p.name: p.role.value for p in players},
    )
    tr.change_phase(Phase.REVEAL)
    plural = "s" if impostor_target > 1 else ""
    tr.emit(
        EventType.ROUND_ARMED,
        f"Round armed with {impostor_target} impostor{plural}. "
        "Reveal cards privately before continuing.",
        round=round_number,
        players=len(players),
        impostors=impostor_target,
        analysts=sum(1 for p in players if p.role is Role.ANALYST),
    )

    return tr.commit(
        clear_log=True,
        players=players,
        phase=Phase.REVEAL,
        impostor_count=impostor_target,
        outcome=None,
        reveal_index=0,
        show_role=False,
        selected_suspect=None,
        prompt=None,
        round_number=round_number,
    )


# ---------------------------------------------------------------------------
# Reveal
# ---------------------------------------------------------------------------

def _toggle_reveal(tr: _Transition, action: Action) -> SessionState:
    current = tr.state.current_reveal_player
    if current is None:
        return tr.unchanged()

    shown = not tr.state.show_role
    tr.emit(EventType.CARD_REVEALED, player_id=current.player_id, shown=shown)
    return tr.commit(show_role=shown)


def _advance_card(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    current = state.current_reveal_player
    if current is None:
        return tr.unchanged()

    players = _replace_player(state.players, replace(current, card_seen=True))

    if state.reveal_index + 1 >= len(players):
        tr.change_phase(Phase.MISSION, "All cards viewed. Mission control live.")
        return tr.commit(
            players=players,
            phase=Phase.MISSION,
            show_role=False,
            outcome=tr.sync_outcome(players, Phase.MISSION),
        )

    return tr.commit(
        players=players,
        reveal_index=state.reveal_index + 1,
        show_role=False,
    )


def _skip_reveal(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if state.phase is not Phase.REVEAL:
        return tr.unchanged()

    players = tuple(p if p.card_seen else replace(p, card_seen=True) for p in state.players)
    tr.change_phase(Phase.MISSION, "Card reveal skipped. Mission control live.")
    return tr.commit(
        players=players,
        phase=Phase.MISSION,
        show_role=False,
        outcome=tr.sync_outcome(players, Phase.MISSION),
    )


# ---------------------------------------------------------------------------
# Mission
# ---------------------------------------------------------------------------

def _mission_open(state: SessionState) -> bool:
    return state.phase is Phase.MISSION and not state.is_ended


def _toggle_task(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if not _mission_open(state):
        return tr.unchanged()

    player = state.find_player(action.player_id)
    if player is None or not player.is_alive:
        return tr.unchanged()
    task = player.find_task(action.task_id)
    if task is None:
        return tr.unchanged()

    updated_task = replace(task, completed=not task.completed)
    updated_player = replace(
        player,
        tasks=tuple(updated_task if t.task_id == task.task_id else t for t in player.tasks),
    )
    players = _replace_player(state.players, updated_player)

    verb = "completed" if updated_task.completed else "reopened"
    tr.emit(
        EventType.TASK_TOGGLED,
        f'{player.name} {verb} "{task.name}".',
        player_id=player.player_id,
        task_id=task.task_id,
        completed=updated_task.completed,
    )
    return tr.commit(players=players, outcome=tr.sync_outcome(players, state.phase))


def _toggle_status(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if not _mission_open(state):
        return tr.unchanged()

    player = state.find_player(action.player_id)
    if player is None:
        return tr.unchanged()

    if player.is_alive:
        status, label = PlayerStatus.ELIMINATED, "eliminated"
    else:
        status, label = PlayerStatus.ALIVE, "safe"
    players = _replace_player(state.players, replace(player, status=status))

    tr.emit(
        EventType.STATUS_TOGGLED,
        f"{player.name} is now marked {label}.",
        player_id=player.player_id,
        status=status.value,
    )
    return tr.commit(players=players, outcome=tr.sync_outcome(players, state.phase))


def _call_meeting(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if state.phase is not Phase.MISSION or state.outcome is not None:
        return tr.unchanged()

    tr.emit(EventType.MEETING_CALLED, "Emergency meeting called. Resolve accusations swiftly.")
    return tr.commit(
        phase=Phase.MEETING,
        selected_suspect=None,
        outcome=tr.sync_outcome(state.players, Phase.MEETING),
    )


def _draw_prompt(tr: _Transition, action: Action) -> SessionState:
    if tr.state.is_ended:
        return tr.unchanged()

    deck = tr.config.banks.prompts
    card = tr.rng.choice(deck) if deck else None
    if card is not None:
        tr.emit(EventType.PROMPT_DRAWN, f"New prompt drawn: {card}", prompt=card)
    return tr.commit(prompt=card)


# ---------------------------------------------------------------------------
# Meeting
# ---------------------------------------------------------------------------

def _meeting_open(state: SessionState) -> bool:
    return state.phase is Phase.MEETING and not state.is_ended


def _select_suspect(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if not _meeting_open(state):
        return tr.unchanged()
    if action.player_id is not None and state.find_player(action.player_id) is None:
        return tr.unchanged()

    if action.player_id == state.selected_suspect:
        selected = None
    else:
        selected = action.player_id
    return tr.commit(selected_suspect=selected)


def _confirm_ejection(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if not _meeting_open(state):
        return tr.unchanged()

    is_valid, error = validate_ejection(state.selected_suspect)
    if not is_valid:
        return tr.reject(error)

    players = state.players
    suspect = state.find_player(state.selected_suspect)
    if suspect is not None:
        players = _replace_player(players, replace(suspect, status=PlayerStatus.ELIMINATED))
        tr.emit(
            EventType.PLAYER_EJECTED,
            f"{suspect.name} was ejected during the meeting.",
            player_id=suspect.player_id,
            role=suspect.role.value,
        )

    return tr.commit(
        players=players,
        phase=Phase.MISSION,
        selected_suspect=None,
        outcome=tr.sync_outcome(players, Phase.MISSION),
    )


def _skip_vote(tr: _Transition, action: Action) -> SessionState:
    state = tr.state
    if not _meeting_open(state):
        return tr.unchanged()

    tr.emit(EventType.VOTE_SKIPPED, "Vote skipped. Mission resumes.")
    return tr.commit(
        phase=Phase.MISSION,
        selected_suspect=None,
        outcome=tr.sync_outcome(state.players, Phase.MISSION),
    )


# ---------------------------------------------------------------------------
# Resets
# ---------------------------------------------------------------------------

def _reset_round(tr: _Transition, action: Action) -> SessionState:
    players = tuple(
        replace(p, role=Role.CREWMATE, tasks=(), status=PlayerStatus.ALIVE, card_seen=False)
        for p in tr.state.players
    )
    tr.emit(EventType.ROUND_RESET, players=len(players))
    return tr.commit(
        clear_log=True,
        players=players,
        phase=Phase.LOBBY,
        outcome=None,
        reveal_index=0,
        show_role=False,
        selected_suspect=None,
        prompt=None,
    )


def _reset_lobby(tr: _Transition, action: Action) -> SessionState:
    tr.emit(EventType.LOBBY_RESET)
    return tr.commit(
        clear_log=True,
        players=(),
        phase=Phase.LOBBY,
        impostor_count=1,
        outcome=None,
        reveal_index=0,
        show_role=False,
        selected_suspect=None,
        prompt=None,
    )


_HANDLERS: Dict[ActionType, Callable[[_Transition, Action], SessionState]] = {
    ActionType.ADD_PLAYER: _add_player,
    ActionType.REMOVE_PLAYER: _remove_player,
    ActionType.SET_IMPOSTOR_COUNT: _set_impostor_count,
    ActionType.START_ROUND: _start_round,
    ActionType.TOGGLE_REVEAL: _toggle_reveal,
    ActionType.ADVANCE_CARD: _advance_card,
    ActionType.SKIP_REVEAL: _skip_reveal,
    ActionType.TOGGLE_TASK: _toggle_task,
    ActionType.TOGGLE_STATUS: _toggle_status,
    ActionType.CALL_MEETING: _call_meeting,
    ActionType.DRAW_PROMPT: _draw_prompt,
    ActionType.SELECT_SUSPECT: _select_suspect,
    ActionType.CONFIRM_EJECTION: _confirm_ejection,
    ActionType.SKIP_VOTE: _skip_vote,
    ActionType.RESET_ROUND: _reset_round,
    ActionType.RESET_LOBBY: _reset_lobby,
}


def reduce(
    state: SessionState,
    action: Action,
    rng: Optional[random.Random] = None,
    config: RoundConfig = DEFAULT_CONFIG,
    now: Optional[datetime] = None,
) -> SessionState:
    """Apply one host action.

    Args:
        state: Current session state
        action: Action to apply
        rng: Source of randomness for shuffles, sampling and prompt draws
        config: Round configuration
        now: Timestamp for emitted events (defaults to the wall clock)

    Returns:
        The next state. Rejected actions carry an error message and are
        otherwise unchanged; actions illegal in the current phase return
        the state as it was.

    Raises:
        InvalidActionError: If action is not a known action
    """
    if not isinstance(action, Action):
        raise InvalidActionError(
            "Expected an Action",
            details={"got": type(action).__name__},
        )
    handler = _HANDLERS.get(action.action_type)
    if handler is None:
        raise InvalidActionError(f"Unhandled action type: {action.action_type}")

    tr = _Transition(state, rng or _default_rng, config, now or datetime.now())
    return handler(tr, action)
