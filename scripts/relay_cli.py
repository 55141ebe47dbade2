#!/usr/bin/env python3
"""Command-line host for Imposter Relay."""

import argparse
import random
import shlex
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from relay.analysis.stats import AssignmentAnalyzer
from relay.core.exceptions import ConfigurationError
from relay.logging.game_logger import GameLogger
from relay.round.config import DEFAULT_CONFIG, load_settings
from relay.round.session import RoundSession


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "configs" / "relay.yaml"

HELP_TEXT = """Commands:
  add NAME              add a player to the lobby
  remove NAME           remove a player
  impostors N           choose the impostor count
  start                 assign roles and begin the card reveal
  reveal                show or hide the current role card
  next                  pass the device to the next player
  skip                  skip the rest of the reveal
  task NAME INDEX       toggle a task (1-based index)
  status NAME           toggle alive / eliminated
  meeting               call an emergency meeting
  suspect NAME          select (or clear) the suspect
  eject                 eject the selected suspect
  skip-vote             end the meeting without an ejection
  prompt                draw a prompt card
  reset-round           back to the lobby, keeping players
  reset-lobby           clear everything
  show                  print the current state
  quit                  leave"""


def load_config(path):
    """Load config and settings, falling back to defaults when no file exists.

    Returns:
        Tuple of (round_config, settings)
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        if path:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return DEFAULT_CONFIG, {"logging": {}, "cli": {}}
    return load_settings(config_path)


def _player_id(session, name):
    player = session.state.find_player_by_name(name)
    if player is None:
        print(f"No player named '{name}'")
        return None
    return player.player_id


def execute_command(session, line):
    """Run one host command.

    Returns:
        False when the host asked to quit, True otherwise
    """
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"Could not parse command: {e}")
        return True
    if not parts:
        return True

    command, args = parts[0].lower(), parts[1:]
    name = " ".join(args)

    if command in ("quit", "exit"):
        return False
    if command == "help":
        print(HELP_TEXT)
        return True
    if command == "show":
        print(session.render())
        return True

    if command == "add":
        session.add_player(name)
    elif command == "remove":
        player_id = _player_id(session, name)
        if player_id is None:
            return True
        session.remove_player(player_id)
    elif command == "impostors":
        if not args or not args[0].isdigit():
            print("Usage: impostors N")
            return True
        session.set_impostor_count(int(args[0]))
    elif command == "start":
        session.start_round()
    elif command == "reveal":
        session.toggle_reveal()
    elif command == "next":
        session.advance_card()
    elif command == "skip":
        session.skip_reveal()
    elif command == "task":
        if len(args) < 2 or not args[-1].isdigit():
            print("Usage: task NAME INDEX")
            return True
        player_id = _player_id(session, " ".join(args[:-1]))
        if player_id is None:
            return True
        player = session.state.find_player(player_id)
        index = int(args[-1]) - 1
        if not 0 <= index < len(player.tasks):
            print(f"{player.name} has no task {args[-1]}")
            return True
        session.toggle_task(player_id, player.tasks[index].task_id)
    elif command == "status":
        player_id = _player_id(session, name)
        if player_id is None:
            return True
        session.toggle_status(player_id)
    elif command == "meeting":
        session.call_meeting()
    elif command == "suspect":
        player_id = _player_id(session, name) if name else None
        if name and player_id is None:
            return True
        session.select_suspect(player_id)
    elif command == "eject":
        session.confirm_ejection()
    elif command == "skip-vote":
        session.skip_vote()
    elif command == "prompt":
        session.draw_prompt()
    elif command == "reset-round":
        session.reset_round()
    elif command == "reset-lobby":
        session.reset_lobby()
    else:
        print(f"Unknown command '{command}'. Type 'help' for the list.")
        return True

    print(session.render())
    return True


def cmd_play(args):
    """Host a session interactively."""
    config, settings = load_config(args.config)
    logging_settings = settings.get("logging", {})
    cli_settings = settings.get("cli", {})

    seed = args.seed if args.seed is not None else cli_settings.get("seed")
    rng = random.Random(seed)

    output_dir = args.output_dir or logging_settings.get("output_dir")
    logger = GameLogger(
        output_dir=Path(output_dir) if output_dir else None,
        log_private=logging_settings.get("log_private", True),
    )

    session = RoundSession(config=config, rng=rng, logger=logger)

    print("Imposter Relay Control Center")
    print("=" * 70)
    print(f"  • Session: {session.session_id}")
    if logger.log_file:
        print(f"  • Logs: {logger.log_file}")
    print("Type 'help' for commands.")
    print(session.render())

    try:
        while True:
            try:
                line = input("relay> ")
            except EOFError:
                break
            if not execute_command(session, line):
                break
    except KeyboardInterrupt:
        print("\n\nSession interrupted by host")

    stats = logger.get_stats()
    print(f"\n{stats['total_entries']} events logged over {stats['current_round']} round(s)")


def cmd_stats(args):
    """Print Monte Carlo statistics for role assignment."""
    config, _ = load_config(args.config)
    if args.players < config.min_players:
        print(f"Need at least {config.min_players} players, got {args.players}")
        return

    analyzer = AssignmentAnalyzer(config)
    rng = random.Random(args.seed)
    counts = analyzer.sample(args.players, args.impostors, args.trials, rng)

    print(f"Role assignment over {args.trials} rounds with {args.players} players")
    print("-" * 70)
    summary = analyzer.role_count_summary(counts, args.trials)
    print(f"  • Max impostors: {summary.pop('max_impostors')}")
    for role, row in summary.items():
        print(f"  • {role}: {row['per_round']:.2f} per round, {row['seat_rate_pct']}% of seats")

    print("\nSeat uniformity (chi-square):")
    for role, result in analyzer.seat_uniformity(counts).items():
        if not result["tested"]:
            print(f"  • {role}: never assigned")
            continue
        verdict = "uniform" if result["uniform"] else "BIASED"
        print(f"  • {role}: chi2={result['statistic']:.2f}, p={result['p_value']:.4f} ({verdict})")

    low, high = analyzer.seat_impostor_interval(counts)
    print(f"\nImpostor draws per seat, 95% CI: [{low:.1f}, {high:.1f}]")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Imposter Relay - host a social deduction round from one device",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Host a session
  python scripts/relay_cli.py play

  # Reproducible session with JSONL logs
  python scripts/relay_cli.py play --seed 7 --output-dir experiments/relay

  # Check role assignment fairness for 8 players and 2 impostors
  python scripts/relay_cli.py stats --players 8 --impostors 2 --trials 5000
        """
    )
    parser.add_argument("--config", help="Path to YAML config (default: configs/relay.yaml)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_play = subparsers.add_parser("play", help="Host a session")
    parser_play.add_argument("--seed", type=int, help="Random seed")
    parser_play.add_argument("--output-dir", help="Output directory for logs")
    parser_play.set_defaults(func=cmd_play)

    parser_stats = subparsers.add_parser("stats", help="Role assignment statistics")
    parser_stats.add_argument("--players", type=int, default=8, help="Roster size (default: 8)")
    parser_stats.add_argument("--impostors", type=int, default=2, help="Requested impostors (default: 2)")
    parser_stats.add_argument("--trials", type=int, default=2000, help="Rounds to sample (default: 2000)")
    parser_stats.add_argument("--seed", type=int, help="Random seed")
    parser_stats.set_defaults(func=cmd_stats)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
