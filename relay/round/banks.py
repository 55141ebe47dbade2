"""Content banks: fixed pools sampled without replacement."""

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from relay.core.exceptions import ConfigurationError


CREW_TASK_BANK = (
    "Calibrate hydroponics valves",
    "Align telescope array and report spectra",
    "Prime navigation thrusters",
    "Divert power to security grid",
    "Reset reactor coolant equilibrator",
    "Refuel the landing shuttle",
    "Run diagnostics on med-scanner",
    "Patch hull microfractures",
    "Reboot comms uplink",
    "Secure cargo bay manifests",
    "Sweep ventilation ducts",
    "Sync shipboard chronometer",
)

IMPOSTOR_OBJECTIVES = (
    "Sabotage oxygen recyclers unnoticed",
    "Stage a false security alert",
    "Shadow the analyst and gain trust",
    "Plant decoy clues in electrical",
    "Force a strategic split-up",
    "Fake a task completion convincingly",
    "Trigger lights out mid-mission",
    "Frame a crewmate near a vent",
)

SUPPORT_ROUTINES = (
    "Scan the field deck for anomalies",
    "Verify DNA tags for the crew",
    "Audit task completion logs",
    "Run probability matrix on accusations",
    "Coordinate safe routes between zones",
    "Ping silent players for status",
    "Check security feeds for patterns",
)

PROMPT_DECK = (
    "Flash mission: everyone share their location in under 5 seconds.",
    "Quiet round: complete a task without saying a word.",
    "Mini-challenge: swap a task card with the player on your left.",
    "Truth pull: each player states who they trust the most this round.",
    "Speed check: complete any task within 30 seconds or call a meeting.",
    "Silent signal: analysts can secretly approve one crewmate this cycle.",
    "Saboteur stunt: impostors must orchestrate a distraction in 2 minutes.",
    "Paranoia push: vote to lock a room for the next minute.",
)


@dataclass(frozen=True)
class ContentBanks:
    """The four string pools used to build task lists and prompt cards.
    
    Attributes:
        crew_tasks: Tasks handed to crewmates
        impostor_objectives: Secret plays handed to impostors
        support_routines: Intel tasks handed to the analyst
        prompts: Prompt cards drawn during the mission
    """
    crew_tasks: Tuple[str, ...] = CREW_TASK_BANK
    impostor_objectives: Tuple[str, ...] = IMPOSTOR_OBJECTIVES
    support_routines: Tuple[str, ...] = SUPPORT_ROUTINES
    prompts: Tuple[str, ...] = PROMPT_DECK
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentBanks":
        """Build banks from a mapping, keeping defaults for missing pools."""
        known = {"crew_tasks", "impostor_objectives", "support_routines", "prompts"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                "Unknown content bank",
                details={"unknown": sorted(unknown), "allowed": sorted(known)},
            )
        pools = {}
        for key, values in data.items():
            values = values or []
            if isinstance(values, str) or not all(isinstance(v, str) for v in values):
                raise ConfigurationError(f"Bank '{key}' must be a list of strings")
            # Duplicates dropped, first occurrence wins
            pools[key] = tuple(dict.fromkeys(v.strip() for v in values if v.strip()))
        return cls(**pools)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "crew_tasks": list(self.crew_tasks),
            "impostor_objectives": list(self.impostor_objectives),
            "support_routines": list(self.support_routines),
            "prompts": list(self.prompts),
        }
