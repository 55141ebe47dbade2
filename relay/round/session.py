"""Shared-device session host.

Holds the current state, the injected source of randomness and the
optional GameLogger observer. Every host action goes through dispatch(),
which runs the reducer and forwards the transition's events to the logger.
"""

import random
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from relay.core.types import PHASE_LABELS, ROLE_DESCRIPTIONS, TASK_KIND_LABELS, Phase, Player
from relay.core.utils import generate_session_id
from relay.logging.game_logger import GameLogger
from relay.round import actions
from relay.round.actions import Action
from relay.round.config import DEFAULT_CONFIG, RoundConfig
from relay.round.reducer import reduce
from relay.round.rules import sorted_roster
from relay.round.state import INITIAL_STATE, SessionState


class RoundSession:
    """One party session on one device."""

    def __init__(
        self,
        config: Optional[RoundConfig] = None,
        rng: Optional[random.Random] = None,
        logger: Optional[GameLogger] = None,
        session_id: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize session.

        Args:
            config: RoundConfig instance
            rng: Random number generator (inject a seeded one for replays)
            logger: Optional GameLogger receiving every domain event
            session_id: Optional session ID
            clock: Callable returning the current time
        """
        self.config = config or DEFAULT_CONFIG
        self.rng = rng or random.Random()
        self.logger = logger
        if session_id:
            self.session_id = session_id
        elif logger:
            self.session_id = logger.session_id
        else:
            self.session_id = generate_session_id()
        self.clock = clock or datetime.now
        self.state: SessionState = INITIAL_STATE

    def dispatch(self, action: Action) -> SessionState:
        """Apply an action and notify the logger."""
        previous_round = self.state.round_number
        self.state = reduce(self.state, action, rng=self.rng, config=self.config, now=self.clock())

        if self.logger:
            if self.state.round_number != previous_round:
                self.logger.log_round_start(self.state.round_number)
            for event in self.state.events:
                self.logger.log_event(event)

        return self.state

    # Host actions

    def add_player(self, name: str) -> SessionState:
        return self.dispatch(actions.add_player(name))

    def remove_player(self, player_id: str) -> SessionState:
        return self.dispatch(actions.remove_player(player_id))

    def set_impostor_count(self, count: int) -> SessionState:
        return self.dispatch(actions.set_impostor_count(count))

    def start_round(self) -> SessionState:
        return self.dispatch(actions.start_round())

    def toggle_reveal(self) -> SessionState:
        return self.dispatch(actions.toggle_reveal())

    def advance_card(self) -> SessionState:
        return self.dispatch(actions.advance_card())

    def skip_reveal(self) -> SessionState:
        return self.dispatch(actions.skip_reveal())

    def toggle_task(self, player_id: str, task_id: str) -> SessionState:
        return self.dispatch(actions.toggle_task(player_id, task_id))

    def toggle_status(self, player_id: str) -> SessionState:
        return self.dispatch(actions.toggle_status(player_id))

    def call_meeting(self) -> SessionState:
        return self.dispatch(actions.call_meeting())

    def select_suspect(self, player_id: Optional[str]) -> SessionState:
        return self.dispatch(actions.select_suspect(player_id))

    def confirm_ejection(self) -> SessionState:
        return self.dispatch(actions.confirm_ejection())

    def skip_vote(self) -> SessionState:
        return self.dispatch(actions.skip_vote())

    def draw_prompt(self) -> SessionState:
        return self.dispatch(actions.draw_prompt())

    def reset_round(self) -> SessionState:
        return self.dispatch(actions.reset_round())

    def reset_lobby(self) -> SessionState:
        return self.dispatch(actions.reset_lobby())

    # Queries

    @property
    def phase(self) -> Phase:
        """Displayed phase."""
        return self.state.displayed_phase

    @property
    def players(self) -> List[Player]:
        return list(self.state.players)

    def get_winner(self) -> Optional[str]:
        """Get the winning team, if the round is over."""
        return self.state.outcome.winner.value if self.state.outcome else None

    def get_win_reason(self) -> Optional[str]:
        return self.state.outcome.reason if self.state.outcome else None

    def snapshot(self) -> Dict[str, Any]:
        """State as consumed by the presentation layer."""
        data = self.state.to_dict(self.config)
        data["session_id"] = self.session_id
        return data

    def render(self) -> str:
        """Plain-text rendering of the current state."""
        state = self.state
        phase = state.displayed_phase
        lines = [f"== {PHASE_LABELS[phase]} == (round {state.round_number})"]

        if phase is Phase.LOBBY:
            lines.append(
                f"Impostors: {state.impostor_value(self.config)} "
                f"(options {state.impostor_options(self.config)})"
            )
            if not state.players:
                lines.append(
                    f"No players yet. Add at least {self.config.min_players} "
                    "names to launch a round."
                )
            for index, player in enumerate(state.players, 1):
                lines.append(f"  {index}. {player.name}")

        elif phase is Phase.REVEAL:
            current = state.current_reveal_player
            if current is not None:
                lines.append(f"Pass device to {current.name} ({state.reveal_index + 1}/{len(state.players)})")
                if state.show_role:
                    lines.append(f"  Role: {current.role.value}")
                    lines.append(f"  {ROLE_DESCRIPTIONS[current.role]}")
                    for task in current.tasks:
                        lines.append(f"   - {task.name}")
                else:
                    lines.append("  (role hidden)")

        else:
            totals = state.task_totals()
            lines.append(f"Crew tasks: {totals.completed}/{totals.total} ({totals.percent}%)")
            roster = sorted_roster(state.players) if phase is Phase.ENDED else state.players
            for index, player in enumerate(roster, 1):
                marker = ""
                if player.player_id == state.selected_suspect:
                    marker = "  <- suspect"
                status = "On mission" if player.is_alive else "Eliminated"
                lines.append(f"  {index}. {player.name} [{player.role.value}] {status}{marker}")
                for task_index, task in enumerate(player.tasks, 1):
                    check = "x" if task.completed else " "
                    lines.append(
                        f"      [{check}] {task_index}. {task.name} ({TASK_KIND_LABELS[task.kind]})"
                    )

        if state.outcome:
            lines.append(f"Winner: {state.outcome.winner.value}. {state.outcome.reason}")
        if state.prompt:
            lines.append(f"Prompt: {state.prompt}")
        if state.error:
            lines.append(f"! {state.error}")
        if state.mission_log:
            lines.append("Mission log:")
            lines.extend(f"  {entry}" for entry in state.mission_log)

        return "\n".join(lines)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(session_id={self.session_id}, {self.state})"
