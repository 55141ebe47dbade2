"""Shared utility functions for Imposter Relay."""

import json
import uuid
from datetime import datetime
from enum import Enum
from typing import Any


def generate_session_id(prefix: str = "relay") -> str:
    """Session ID of the form ``<prefix>_<YYYYmmdd_HHMMSS>_<8 hex>``."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}_{uuid.uuid4().hex[:8]}"


def new_id() -> str:
    """Opaque identifier for players and tasks."""
    return uuid.uuid4().hex


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high]; high wins if the bounds cross."""
    return min(max(value, low), high)


def _encode(obj: Any) -> Any:
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """json.dumps that also accepts datetimes, enums and domain objects."""
    return json.dumps(obj, default=_encode, **kwargs)


def percentage(numerator: float, denominator: float, decimals: int = 2) -> float:
    """Percentage rounded to decimals; 0.0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round(100.0 * numerator / denominator, decimals)
