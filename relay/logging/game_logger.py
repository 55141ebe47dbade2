"""Structured event log for a relay session.

The round reducer emits DomainEvents; RoundSession hands each one to
GameLogger.log_event(), which stamps it with the session and round and
keeps it in memory and, optionally, in ``<output_dir>/<session_id>.jsonl``.
"""

import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from relay.core.utils import generate_session_id
from relay.logging.formats import DomainEvent, EventType, LogEntry


class GameLogger:
    """Observer that records every domain event of a session.

    The role map written when a round is armed is private. It is kept
    unless log_private is False, and private entries are left out of
    queries and exports unless asked for.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        output_dir: Optional[Union[str, Path]] = None,
        log_private: bool = True,
        enabled: bool = True,
    ):
        """Initialize the logger.

        Args:
            session_id: Session identifier (generated when omitted)
            output_dir: Directory for the JSONL file (None keeps logs in memory)
            log_private: Record private events such as the role map
            enabled: Record anything at all
        """
        self.session_id = session_id or generate_session_id()
        self.log_private = log_private
        self.enabled = enabled
        self.entries: List[LogEntry] = []
        self.current_round = 0

        self.log_file: Optional[Path] = None
        if output_dir:
            directory = Path(output_dir)
            directory.mkdir(parents=True, exist_ok=True)
            self.log_file = directory / f"{self.session_id}.jsonl"

    def log_round_start(self, round_number: int) -> None:
        """Tag subsequent entries with a new round number."""
        self.current_round = round_number

    def log_event(self, event: DomainEvent) -> Optional[LogEntry]:
        """Record one domain event.

        Returns:
            The stored entry, or None when the event was not recorded
        """
        if not self.enabled or (event.is_private and not self.log_private):
            return None

        data = dict(event.data)
        if event.message is not None:
            data["message"] = event.message

        entry = LogEntry(
            timestamp=event.timestamp,
            event_type=event.event_type,
            session_id=self.session_id,
            round_number=self.current_round,
            data=data,
            player_id=event.player_id,
            is_private=event.is_private,
        )
        self.entries.append(entry)
        if self.log_file:
            self._append(entry)
        return entry

    def _append(self, entry: LogEntry) -> None:
        try:
            with open(self.log_file, "a") as f:
                f.write(entry.to_json() + "\n")
        except OSError as e:
            print(f"Warning: could not write to {self.log_file}: {e}")

    # Queries

    def get_entries(
        self,
        event_type: Optional[EventType] = None,
        player_id: Optional[str] = None,
        round_number: Optional[int] = None,
        include_private: bool = False,
    ) -> List[LogEntry]:
        """Entries in recording order, filtered by any of the given fields."""
        return [
            e for e in self.entries
            if (event_type is None or e.event_type is event_type)
            and (player_id is None or e.player_id == player_id)
            and (round_number is None or e.round_number == round_number)
            and (include_private or not e.is_private)
        ]

    def role_map(self, round_number: Optional[int] = None) -> Dict[str, str]:
        """Player name to role as dealt in a round (the latest by default).

        Empty when no round was armed or private events were not recorded.
        """
        assigned = self.get_entries(
            EventType.ROLES_ASSIGNED, round_number=round_number, include_private=True
        )
        if not assigned:
            return {}
        return dict(assigned[-1].data.get("role_map", {}))

    def messages(self, round_number: Optional[int] = None) -> List[str]:
        """Mission-log messages, oldest first, without the on-screen cap."""
        return [
            e.data["message"]
            for e in self.get_entries(round_number=round_number)
            if "message" in e.data
        ]

    def export_to_json(self, filepath: Union[str, Path], include_private: bool = False) -> None:
        """Write the entries to a single JSON array."""
        data = [e.to_dict() for e in self.get_entries(include_private=include_private)]
        with open(filepath, "w") as f:
            json.dump(data, f, indent=2)

    def get_stats(self) -> Dict[str, Any]:
        counts = Counter(e.event_type.name for e in self.entries)
        return {
            "session_id": self.session_id,
            "total_entries": len(self.entries),
            "current_round": self.current_round,
            "private_entries": sum(1 for e in self.entries if e.is_private),
            "event_type_counts": dict(counts),
        }

    def clear(self) -> None:
        self.entries.clear()
        self.current_round = 0
