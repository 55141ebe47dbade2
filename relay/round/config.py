"""Configuration for an Imposter Relay round."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from relay.core.exceptions import ConfigurationError
from relay.round.banks import ContentBanks


@dataclass(frozen=True)
class RoundConfig:
    """Configuration for a single-device round.
    
    Attributes:
        min_players: Players needed before a round can be armed
        max_impostor_cap: Upper bound on impostors regardless of roster size
        analyst_min_players: Roster size from which one analyst is drawn
        crew_tasks_per_player: Tasks sampled for each crewmate
        impostor_objectives_per_player: Objectives sampled for each impostor
        support_routines_per_player: Routines sampled for the analyst
        log_capacity: Entries kept in the mission log
        banks: Content pools to sample from
    """
    min_players: int = 4
    max_impostor_cap: int = 3
    analyst_min_players: int = 6
    crew_tasks_per_player: int = 4
    impostor_objectives_per_player: int = 3
    support_routines_per_player: int = 3
    log_capacity: int = 18
    banks: ContentBanks = field(default_factory=ContentBanks)
    
    def __post_init__(self):
        """Validate configuration."""
        if self.min_players < 1:
            raise ConfigurationError("min_players must be at least 1")
        if self.max_impostor_cap < 1:
            raise ConfigurationError("max_impostor_cap must be at least 1")
        if self.analyst_min_players < 1:
            raise ConfigurationError("analyst_min_players must be at least 1")
        
        for name in (
            "crew_tasks_per_player",
            "impostor_objectives_per_player",
            "support_routines_per_player",
        ):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} cannot be negative")
        
        for bank, draw in (
            ("crew_tasks", "crew_tasks_per_player"),
            ("impostor_objectives", "impostor_objectives_per_player"),
            ("support_routines", "support_routines_per_player"),
        ):
            if len(getattr(self.banks, bank)) < getattr(self, draw):
                raise ConfigurationError(
                    f"Bank '{bank}' is smaller than {draw}",
                    details={"size": len(getattr(self.banks, bank)), draw: getattr(self, draw)},
                )
        
        if self.log_capacity < 1:
            raise ConfigurationError("log_capacity must be at least 1")
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundConfig":
        """Create config from a mapping such as a parsed YAML document."""
        data = dict(data)
        valid = {f.name for f in fields(cls)}
        unknown = set(data) - valid
        if unknown:
            raise ConfigurationError(
                "Unknown round settings",
                details={"unknown": sorted(unknown)},
            )
        if "banks" in data:
            data["banks"] = ContentBanks.from_dict(data["banks"] or {})
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError("Invalid round settings", details={"error": str(e)})
    
    def to_dict(self) -> Dict[str, Any]:
        result = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "banks"}
        result["banks"] = self.banks.to_dict()
        return result


DEFAULT_CONFIG = RoundConfig()

# Sections of the YAML file that do not belong to the round itself
SETTINGS_SECTIONS = ("logging", "cli")


def load_settings(path: Union[str, Path]) -> Tuple[RoundConfig, Dict[str, Any]]:
    """Load round configuration and auxiliary settings from YAML.
    
    Args:
        path: Path to the YAML file
        
    Returns:
        Tuple of (round_config, settings) where settings holds the
        non-round sections keyed by name
        
    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")
    
    with open(config_path) as f:
        try:
            yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Could not parse {config_path}", details={"error": str(e)})
    
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")
    
    settings = {k: yaml_config.get(k) or {} for k in SETTINGS_SECTIONS}
    round_section = {k: v for k, v in yaml_config.items() if k not in SETTINGS_SECTIONS}
    
    return RoundConfig.from_dict(round_section), settings


def load_round_config(path: Union[str, Path]) -> RoundConfig:
    """Load only the round configuration from a YAML file."""
    config, _ = load_settings(path)
    return config
