"""
Pytest fixtures for Imposter Relay tests.
"""

import random
from datetime import datetime

import pytest

from relay.core.types import Player, PlayerStatus, Role, Task, TaskKind
from relay.core.utils import new_id
from relay.round import actions
from relay.round.reducer import reduce
from relay.round.session import RoundSession
from relay.round.state import INITIAL_STATE


FIXED_NOW = datetime(2026, 1, 1, 20, 15)

NAMES = ["Ada", "Bo", "Cy", "Dee", "Eli", "Fay", "Gus", "Hal", "Ivy", "Jo", "Kit", "Lu"]


@pytest.fixture
def rng():
    """Deterministic source of randomness."""
    return random.Random(1234)


@pytest.fixture
def session(rng):
    """Fresh in-memory session with a fixed clock."""
    return RoundSession(rng=rng, clock=lambda: FIXED_NOW)


def apply(state, *steps, rng=None):
    """Run several actions through the reducer."""
    rng = rng or random.Random(0)
    for step in steps:
        state = reduce(state, step, rng=rng, now=FIXED_NOW)
    return state


def lobby_state(n_players, impostors=1):
    """Lobby holding the first n names with the impostor selector set."""
    steps = [actions.add_player(name) for name in NAMES[:n_players]]
    steps.append(actions.set_impostor_count(impostors))
    return apply(INITIAL_STATE, *steps)


def mission_state(n_players, impostors=1, seed=0):
    """Round armed and the reveal skipped."""
    state = lobby_state(n_players, impostors)
    return apply(state, actions.start_round(), actions.skip_reveal(), rng=random.Random(seed))


def players_with_role(state, role):
    return [p for p in state.players if p.role is role]


def crew_aligned(state):
    return [p for p in state.players if p.role is not Role.IMPOSTOR]


def make_player(name, role=Role.CREWMATE, alive=True, tasks=()):
    """Hand-built roster entry for evaluator tests."""
    return Player(
        player_id=new_id(),
        name=name,
        role=role,
        status=PlayerStatus.ALIVE if alive else PlayerStatus.ELIMINATED,
        tasks=tuple(tasks),
        card_seen=True,
    )


def make_tasks(kind, done, total):
    return [
        Task(task_id=new_id(), name=f"{kind.value} {i}", kind=kind, completed=i < done)
        for i in range(total)
    ]
