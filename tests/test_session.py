"""
Tests for the session host and its logger wiring.
"""

import json
import random

from conftest import FIXED_NOW, NAMES
from relay.core.types import Phase, Role
from relay.logging.formats import EventType, LogEntry
from relay.logging.game_logger import GameLogger
from relay.round.session import RoundSession


def start_session(session, n_players=5, impostors=1):
    for name in NAMES[:n_players]:
        session.add_player(name)
    session.set_impostor_count(impostors)
    session.start_round()
    session.skip_reveal()
    return session


def test_session_runs_round_to_crewmate_win(session):
    start_session(session, 4)
    impostor = next(p for p in session.players if p.role is Role.IMPOSTOR)

    session.call_meeting()
    session.select_suspect(impostor.player_id)
    session.confirm_ejection()

    assert session.phase is Phase.ENDED
    assert session.get_winner() == "Crewmates"
    assert session.get_win_reason() == "All impostors were neutralized."
    assert session.state.round_number == 1


def test_session_forwards_events_to_logger():
    logger = GameLogger(session_id="test")
    session = RoundSession(rng=random.Random(3), logger=logger, clock=lambda: FIXED_NOW)
    start_session(session, 6, 2)

    assert session.session_id == "test"
    assert len(logger.get_entries(EventType.PLAYER_JOINED)) == 6
    assert len(logger.get_entries(EventType.ROUND_ARMED)) == 1
    assert logger.get_entries(EventType.ROLES_ASSIGNED) == []

    private = logger.get_entries(EventType.ROLES_ASSIGNED, include_private=True)
    assert len(private) == 1
    assert private[0].round_number == 1
    assert set(private[0].data["role_map"].values()) == {"Crewmate", "Impostor", "Analyst"}

    armed = logger.get_entries(EventType.ROUND_ARMED)[0]
    assert armed.data["message"].startswith("Round armed with 2 impostors")
    assert armed.timestamp == FIXED_NOW


def test_logger_can_drop_private_events():
    logger = GameLogger(log_private=False)
    session = RoundSession(rng=random.Random(3), logger=logger)
    start_session(session, 4)

    assert logger.get_entries(EventType.ROLES_ASSIGNED, include_private=True) == []
    assert logger.get_stats()["private_entries"] == 0


def test_logger_writes_jsonl(tmp_path):
    logger = GameLogger(session_id="night", output_dir=tmp_path)
    session = RoundSession(rng=random.Random(5), logger=logger)
    start_session(session, 4)
    session.add_player("")

    lines = (tmp_path / "night.jsonl").read_text().splitlines()
    assert len(lines) == len(logger.entries)

    entries = [LogEntry.from_dict(json.loads(line)) for line in lines]
    assert entries[0].event_type is EventType.PLAYER_JOINED
    assert all(e.session_id == "night" for e in entries)


def test_rejected_action_is_logged_as_error():
    logger = GameLogger()
    session = RoundSession(rng=random.Random(1), logger=logger)
    session.start_round()

    errors = logger.get_entries(EventType.ERROR)
    assert len(errors) == 1
    assert errors[0].data["error"] == "You need at least 4 players to start a deduction round."
    assert session.state.error == errors[0].data["error"]


def test_noop_does_not_relog_previous_events():
    logger = GameLogger()
    session = RoundSession(rng=random.Random(1), logger=logger)
    session.add_player("Ada")
    session.advance_card()

    assert len(logger.entries) == 1


def test_export_to_json(tmp_path):
    logger = GameLogger()
    session = RoundSession(rng=random.Random(2), logger=logger)
    start_session(session, 5)

    target = tmp_path / "export.json"
    logger.export_to_json(target, include_private=True)
    data = json.loads(target.read_text())

    assert len(data) == len(logger.entries)
    assert {d["event_type"] for d in data} >= {"PLAYER_JOINED", "ROLES_ASSIGNED", "ROUND_ARMED"}


def test_snapshot_is_json_serialisable(session):
    start_session(session, 6, 2)
    session.draw_prompt()
    snapshot = session.snapshot()

    json.dumps(snapshot)
    assert snapshot["phase"] == "mission"
    assert snapshot["phase_label"] == "Mission Control"
    assert snapshot["impostor_options"] == [1, 2]
    assert snapshot["impostor_count"] == 2
    assert snapshot["tasks"]["total"] == 4 * 3 + 3
    assert snapshot["tasks"]["percent"] == 0
    assert snapshot["mission_log"][0] == f"[20:15] New prompt drawn: {snapshot['prompt']}"
    assert len(snapshot["summary_order"]) == 6
    assert snapshot["reveal"] is None


def test_snapshot_reveal_hides_role_until_shown(session):
    for name in NAMES[:4]:
        session.add_player(name)
    session.start_round()

    hidden = session.snapshot()["reveal"]
    assert hidden["name"] == NAMES[0]
    assert hidden["role"] is None

    session.toggle_reveal()
    shown = session.snapshot()["reveal"]
    assert shown["role"] == session.players[0].role.value
    assert shown["description"]


def test_render_phases(session):
    assert "Player Lobby" in session.render()
    assert "No players yet" in session.render()

    for name in NAMES[:4]:
        session.add_player(name)
    session.start_round()
    assert "Pass device to Ada" in session.render()
    assert "(role hidden)" in session.render()

    session.skip_reveal()
    text = session.render()
    assert "Mission Control" in text
    assert "Crew tasks: 0/12 (0%)" in text

    impostor = next(p for p in session.players if p.role is Role.IMPOSTOR)
    session.toggle_status(impostor.player_id)
    text = session.render()
    assert "Round Summary" in text
    assert "Winner: Crewmates." in text


def test_logger_role_map_and_messages_per_round():
    logger = GameLogger()
    session = RoundSession(rng=random.Random(8), logger=logger)
    start_session(session, 4)
    first = {p.name: p.role.value for p in session.players}

    session.reset_round()
    session.start_round()
    second = {p.name: p.role.value for p in session.players}

    assert logger.role_map(1) == first
    assert logger.role_map() == second
    assert logger.role_map(5) == {}
    assert logger.messages(1) == [
        "Round armed with 1 impostor. Reveal cards privately before continuing.",
        "Card reveal skipped. Mission control live.",
    ]
    assert logger.get_stats()["event_type_counts"]["ROUND_ARMED"] == 2


def test_disabled_logger_records_nothing():
    logger = GameLogger(enabled=False)
    session = RoundSession(rng=random.Random(8), logger=logger)
    start_session(session, 4)

    assert logger.entries == []
    assert logger.role_map() == {}
