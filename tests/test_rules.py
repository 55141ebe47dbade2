"""
Tests for role assignment, outcome evaluation and validators.
"""

import random

import pytest

from conftest import NAMES, make_player, make_tasks
from relay.core.exceptions import InvalidStateError
from relay.core.types import Player, PlayerStatus, Role, TaskKind, TaskTotals, Winner
from relay.round.banks import CREW_TASK_BANK, IMPOSTOR_OBJECTIVES, SUPPORT_ROUTINES
from relay.round.rules import (
    ERROR_DUPLICATE_NAME,
    ERROR_EMPTY_NAME,
    ERROR_NO_SUSPECT,
    REASON_IMPOSTORS_NEUTRALIZED,
    REASON_PARITY,
    REASON_TASKS_COMPLETE,
    assign_roles,
    crew_task_totals,
    evaluate_outcome,
    max_impostors,
    sample_items,
    sorted_roster,
    validate_ejection,
    validate_player_name,
    validate_round_start,
)


def roster(n):
    return tuple(Player(player_id=f"p{i}", name=NAMES[i]) for i in range(n))


@pytest.mark.parametrize("count, expected", [
    (0, 1), (2, 1), (4, 1), (5, 1), (6, 2), (8, 2), (9, 3), (12, 3), (30, 3),
])
def test_max_impostors(count, expected):
    assert max_impostors(count) == expected


@pytest.mark.parametrize("n", range(4, 13))
def test_assign_roles_invariants(n):
    """Role counts, task counts and task kinds match for every valid request."""
    expected_counts = {Role.CREWMATE: 4, Role.IMPOSTOR: 3, Role.ANALYST: 3}
    expected_kind = {
        Role.CREWMATE: TaskKind.CREW,
        Role.IMPOSTOR: TaskKind.IMPOSTOR,
        Role.ANALYST: TaskKind.SUPPORT,
    }
    players = roster(n)

    for impostors in range(1, max_impostors(n) + 1):
        for seed in range(10):
            assigned = assign_roles(players, impostors, random.Random(seed))

            roles = [p.role for p in assigned]
            analysts = roles.count(Role.ANALYST)
            assert roles.count(Role.IMPOSTOR) == impostors
            assert analysts == (1 if n >= 6 else 0)
            assert roles.count(Role.CREWMATE) == n - impostors - analysts

            for player in assigned:
                assert len(player.tasks) == expected_counts[player.role]
                assert all(t.kind is expected_kind[player.role] for t in player.tasks)
                assert len({t.name for t in player.tasks}) == len(player.tasks)
                assert not any(t.completed for t in player.tasks)
                assert player.status is PlayerStatus.ALIVE
                assert not player.card_seen


def test_assign_roles_keeps_roster_order_and_identity():
    players = roster(7)
    assigned = assign_roles(players, 2, random.Random(3))

    assert [p.player_id for p in assigned] == [p.player_id for p in players]
    assert [p.name for p in assigned] == [p.name for p in players]


def test_assign_roles_samples_from_matching_bank():
    assigned = assign_roles(roster(8), 2, random.Random(5))

    for player in assigned:
        names = {t.name for t in player.tasks}
        if player.role is Role.IMPOSTOR:
            assert names <= set(IMPOSTOR_OBJECTIVES)
        elif player.role is Role.ANALYST:
            assert names <= set(SUPPORT_ROUTINES)
        else:
            assert names <= set(CREW_TASK_BANK)


@pytest.mark.parametrize("requested, n, expected", [
    (0, 4, 1),
    (-2, 9, 1),
    (3, 4, 1),
    (5, 7, 2),
    (9, 12, 3),
])
def test_assign_roles_clamps_impostor_count(requested, n, expected):
    assigned = assign_roles(roster(n), requested, random.Random(0))
    assert sum(1 for p in assigned if p.role is Role.IMPOSTOR) == expected


def test_assign_roles_resets_status_and_card_flag():
    players = tuple(
        Player(player_id=f"p{i}", name=NAMES[i], status=PlayerStatus.ELIMINATED, card_seen=True)
        for i in range(5)
    )
    assigned = assign_roles(players, 1, random.Random(1))

    assert all(p.is_alive and not p.card_seen for p in assigned)


def test_assign_roles_is_reproducible_with_seed():
    first = assign_roles(roster(9), 3, random.Random(42))
    second = assign_roles(roster(9), 3, random.Random(42))

    assert [p.role for p in first] == [p.role for p in second]
    assert [[t.name for t in p.tasks] for p in first] == [[t.name for t in p.tasks] for p in second]


def test_assign_roles_rejects_small_roster():
    with pytest.raises(InvalidStateError):
        assign_roles(roster(3), 1, random.Random(0))


def test_sample_items():
    rng = random.Random(0)
    assert sample_items([], 3, rng) == []
    assert sample_items(["a", "b"], 0, rng) == []
    assert sorted(sample_items(["a", "b"], 5, rng)) == ["a", "b"]
    drawn = sample_items(CREW_TASK_BANK, 4, rng)
    assert len(drawn) == len(set(drawn)) == 4


def test_evaluate_empty_roster():
    assert evaluate_outcome([]) is None


def test_evaluate_all_impostors_neutralized():
    """Scenario: the only impostor is eliminated while crew live."""
    players = [
        make_player("Ada"),
        make_player("Bo"),
        make_player("Cy"),
        make_player("Dee", Role.IMPOSTOR, alive=False),
    ]
    outcome = evaluate_outcome(players)

    assert outcome.winner is Winner.CREWMATES
    assert outcome.reason == REASON_IMPOSTORS_NEUTRALIZED


def test_evaluate_parity():
    """Scenario: two of three crew eliminated leaves one against one."""
    players = [
        make_player("Ada"),
        make_player("Bo", alive=False),
        make_player("Cy", alive=False),
        make_player("Dee", Role.IMPOSTOR),
    ]
    outcome = evaluate_outcome(players)

    assert outcome.winner is Winner.IMPOSTORS
    assert outcome.reason == REASON_PARITY


def test_evaluate_analyst_counts_as_crew():
    players = [
        make_player("Ada", Role.ANALYST),
        make_player("Bo"),
        make_player("Cy", Role.IMPOSTOR),
    ]
    assert evaluate_outcome(players) is None


def test_evaluate_everyone_eliminated_is_impostor_win():
    players = [
        make_player("Ada", alive=False),
        make_player("Bo", Role.IMPOSTOR, alive=False),
    ]
    outcome = evaluate_outcome(players)

    assert outcome.winner is Winner.IMPOSTORS
    assert outcome.reason == REASON_PARITY


def test_evaluate_no_crew_left():
    players = [make_player("Ada", Role.IMPOSTOR), make_player("Bo", Role.IMPOSTOR)]
    assert evaluate_outcome(players).winner is Winner.IMPOSTORS


def test_evaluate_tasks_complete_excludes_impostor_tasks():
    """Scenario: every crew task done, impostor objectives untouched."""
    players = [
        make_player(name, tasks=make_tasks(TaskKind.CREW, 4, 4))
        for name in ("Ada", "Bo", "Cy", "Dee")
    ]
    players.append(make_player("Eli", Role.IMPOSTOR, tasks=make_tasks(TaskKind.IMPOSTOR, 0, 3)))
    outcome = evaluate_outcome(players)

    assert outcome.winner is Winner.CREWMATES
    assert outcome.reason == REASON_TASKS_COMPLETE


def test_evaluate_counts_support_and_eliminated_players_tasks():
    players = [
        make_player("Ada", tasks=make_tasks(TaskKind.CREW, 4, 4)),
        make_player("Bo", tasks=make_tasks(TaskKind.CREW, 4, 4)),
        make_player("Cy", Role.ANALYST, tasks=make_tasks(TaskKind.SUPPORT, 2, 3)),
        make_player("Dee", alive=False, tasks=make_tasks(TaskKind.CREW, 4, 4)),
        make_player("Eli", Role.IMPOSTOR, tasks=make_tasks(TaskKind.IMPOSTOR, 3, 3)),
    ]
    assert evaluate_outcome(players) is None


def test_evaluate_without_any_tasks_continues():
    players = [make_player("Ada"), make_player("Bo"), make_player("Cy", Role.IMPOSTOR)]
    assert evaluate_outcome(players) is None


def test_evaluate_is_deterministic():
    players = [
        make_player("Ada", tasks=make_tasks(TaskKind.CREW, 2, 4)),
        make_player("Bo", alive=False),
        make_player("Cy", Role.IMPOSTOR),
        make_player("Dee"),
    ]
    assert evaluate_outcome(players) == evaluate_outcome(players)


def test_crew_task_totals():
    players = [
        make_player("Ada", tasks=make_tasks(TaskKind.CREW, 1, 4)),
        make_player("Bo", Role.ANALYST, tasks=make_tasks(TaskKind.SUPPORT, 0, 3)),
        make_player("Cy", Role.IMPOSTOR, tasks=make_tasks(TaskKind.IMPOSTOR, 3, 3)),
    ]
    assert crew_task_totals(players) == TaskTotals(completed=1, total=7)


@pytest.mark.parametrize("completed, total, percent", [
    (0, 0, 0), (1, 8, 13), (3, 16, 19), (8, 8, 100), (1, 3, 33),
])
def test_task_totals_percent(completed, total, percent):
    assert TaskTotals(completed=completed, total=total).percent == percent


def test_validate_player_name():
    players = [make_player("Ada")]

    assert validate_player_name("", players) == (False, ERROR_EMPTY_NAME)
    assert validate_player_name("   ", players) == (False, ERROR_EMPTY_NAME)
    assert validate_player_name("  aDA ", players) == (False, ERROR_DUPLICATE_NAME)
    assert validate_player_name("Bo", players) == (True, "")


def test_validate_round_start():
    assert validate_round_start(3) == (
        False, "You need at least 4 players to start a deduction round."
    )
    assert validate_round_start(4) == (True, "")


def test_validate_ejection():
    assert validate_ejection(None) == (False, ERROR_NO_SUSPECT)
    assert validate_ejection("p1") == (True, "")


def test_sorted_roster():
    players = [
        make_player("cy"),
        make_player("Bo", Role.IMPOSTOR),
        make_player("ada"),
        make_player("Zed", Role.ANALYST),
        make_player("Al", Role.IMPOSTOR),
    ]
    assert [p.name for p in sorted_roster(players)] == ["Al", "Bo", "Zed", "ada", "cy"]
