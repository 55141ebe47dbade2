"""Game rules: role assignment, outcome evaluation and validation."""

import random
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple

from relay.core.exceptions import InvalidStateError
from relay.core.types import (
    ROLE_TASK_KIND,
    Outcome,
    Player,
    PlayerStatus,
    Role,
    Task,
    TaskKind,
    TaskTotals,
    Winner,
)
from relay.core.utils import clamp, new_id
from relay.round.config import DEFAULT_CONFIG, RoundConfig


REASON_IMPOSTORS_NEUTRALIZED = "All impostors were neutralized."
REASON_PARITY = "Impostors reached player parity and seized control."
REASON_TASKS_COMPLETE = "Every critical task was completed before sabotage spiked."

ERROR_EMPTY_NAME = "Enter a player name before adding."
ERROR_DUPLICATE_NAME = "That player name is already in the lobby."
ERROR_NO_SUSPECT = "Select a suspect before confirming the vote."


def max_impostors(player_count: int, config: RoundConfig = DEFAULT_CONFIG) -> int:
    """Largest impostor count allowed for a roster size.
    
    One impostor per three players, at least one, at most the configured cap.
    """
    return clamp(player_count // 3 or 1, 1, config.max_impostor_cap)


def sample_items(source: Sequence[str], count: int, rng: random.Random) -> List[str]:
    """Draw up to count items uniformly without replacement."""
    if not source or count <= 0:
        return []
    return rng.sample(list(source), min(count, len(source)))


def build_tasks(names: Iterable[str], kind: TaskKind) -> Tuple[Task, ...]:
    return tuple(Task(task_id=new_id(), name=name, kind=kind) for name in names)


def draw_tasks(role: Role, rng: random.Random, config: RoundConfig = DEFAULT_CONFIG) -> Tuple[Task, ...]:
    """Sample a fresh task list for a role from its content bank."""
    banks = config.banks
    if role is Role.IMPOSTOR:
        names = sample_items(banks.impostor_objectives, config.impostor_objectives_per_player, rng)
    elif role is Role.ANALYST:
        names = sample_items(banks.support_routines, config.support_routines_per_player, rng)
    else:
        names = sample_items(banks.crew_tasks, config.crew_tasks_per_player, rng)
    return build_tasks(names, ROLE_TASK_KIND[role])


def assign_roles(
    players: Sequence[Player],
    impostor_count: int,
    rng: random.Random,
    config: RoundConfig = DEFAULT_CONFIG,
) -> Tuple[Player, ...]:
    """Assign roles and task lists to every player.
    
    Args:
        players: Roster in display order
        impostor_count: Requested impostors, clamped to [1, max_impostors]
        rng: Random number generator
        config: Round configuration
        
    Returns:
        Roster in the same order with roles, fresh tasks, alive status
        and unseen cards
        
    Raises:
        InvalidStateError: If the roster is below the minimum size; callers
            are expected to validate with validate_round_start first
    """
    if len(players) < config.min_players:
        raise InvalidStateError(
            "Not enough players to assign roles",
            details={"players": len(players), "min_players": config.min_players},
        )
    
    impostor_target = clamp(impostor_count, 1, max_impostors(len(players), config))
    
    shuffled_ids = [p.player_id for p in players]
    rng.shuffle(shuffled_ids)
    
    impostor_ids = set(shuffled_ids[:impostor_target])
    crew_candidates = shuffled_ids[impostor_target:]
    
    analyst_id = None
    if len(players) >= config.analyst_min_players and crew_candidates:
        analyst_id = rng.choice(crew_candidates)
    
    assigned = []
    for player in players:
        if player.player_id in impostor_ids:
            role = Role.IMPOSTOR
        elif player.player_id == analyst_id:
            role = Role.ANALYST
        else:
            role = Role.CREWMATE
        
        assigned.append(
            replace(
                player,
                role=role,
                tasks=draw_tasks(role, rng, config),
                status=PlayerStatus.ALIVE,
                card_seen=False,
            )
        )
    
    return tuple(assigned)


def crew_task_totals(players: Iterable[Player]) -> TaskTotals:
    """Count completed and total tasks that are not impostor objectives."""
    completed = 0
    total = 0
    for player in players:
        for task in player.tasks:
            if task.kind is TaskKind.IMPOSTOR:
                continue
            total += 1
            if task.completed:
                completed += 1
    return TaskTotals(completed=completed, total=total)


def evaluate_outcome(players: Sequence[Player]) -> Optional[Outcome]:
    """Decide whether the round is over.
    
    Rules are checked in order and the first match wins. A roster with
    nobody alive at all is an impostor win: the zero-impostor crew win
    needs at least one living crew-aligned player, and the parity rule
    then matches on 0 >= 0.
    
    Args:
        players: Current roster
        
    Returns:
        Outcome, or None while the round continues
    """
    if not players:
        return None
    
    alive_crew = sum(1 for p in players if p.is_alive and p.role.is_crew_aligned)
    alive_impostors = sum(1 for p in players if p.is_alive and p.role is Role.IMPOSTOR)
    
    if alive_impostors == 0 and alive_crew > 0:
        return Outcome(Winner.CREWMATES, REASON_IMPOSTORS_NEUTRALIZED)
    
    if alive_crew == 0 or alive_impostors >= alive_crew:
        return Outcome(Winner.IMPOSTORS, REASON_PARITY)
    
    totals = crew_task_totals(players)
    if totals.total > 0 and totals.completed == totals.total:
        return Outcome(Winner.CREWMATES, REASON_TASKS_COMPLETE)
    
    return None


def normalize_name(name: str) -> str:
    return (name or "").strip()


def validate_player_name(name: str, players: Sequence[Player]) -> Tuple[bool, str]:
    """Validate a name for a new lobby player.
    
    Args:
        name: Raw name as typed
        players: Current roster
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    trimmed = normalize_name(name)
    if not trimmed:
        return False, ERROR_EMPTY_NAME
    
    folded = trimmed.casefold()
    if any(p.name.casefold() == folded for p in players):
        return False, ERROR_DUPLICATE_NAME
    
    return True, ""


def validate_round_start(player_count: int, config: RoundConfig = DEFAULT_CONFIG) -> Tuple[bool, str]:
    """Validate that a round can be armed with this many players."""
    if player_count < config.min_players:
        return False, (
            f"You need at least {config.min_players} players to start a deduction round."
        )
    return True, ""


def validate_ejection(suspect_id: Optional[str]) -> Tuple[bool, str]:
    """Validate a meeting ejection."""
    if suspect_id is None:
        return False, ERROR_NO_SUSPECT
    return True, ""


ROLE_SORT_ORDER = {Role.IMPOSTOR: 0, Role.ANALYST: 1, Role.CREWMATE: 2}


def sorted_roster(players: Iterable[Player]) -> List[Player]:
    """Impostors first, then analysts, then crewmates; names break ties."""
    return sorted(players, key=lambda p: (ROLE_SORT_ORDER[p.role], p.name.casefold()))
