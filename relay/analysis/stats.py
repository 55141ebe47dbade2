"""Monte Carlo checks of the role assignment engine."""

import random
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np
from scipy import stats as scipy_stats

from relay.core.types import Player, Role
from relay.core.utils import percentage
from relay.round.config import DEFAULT_CONFIG, RoundConfig
from relay.round.rules import assign_roles, max_impostors


ROLE_COLUMNS = (Role.CREWMATE, Role.IMPOSTOR, Role.ANALYST)


class AssignmentAnalyzer:
    """Samples many role assignments and tests them for seat bias.
    
    Seats are roster positions; a fair shuffle gives every seat the same
    chance of every role.
    """
    
    def __init__(self, config: RoundConfig = DEFAULT_CONFIG):
        self.config = config
    
    def sample(
        self,
        n_players: int,
        impostor_count: int,
        trials: int,
        rng: Optional[random.Random] = None,
    ) -> np.ndarray:
        """Run role assignment repeatedly.
        
        Args:
            n_players: Roster size
            impostor_count: Requested impostors
            trials: Number of assignments to draw
            rng: Random number generator
            
        Returns:
            Integer array of shape (n_players, 3): how often each seat
            received each role, columns ordered as ROLE_COLUMNS
        """
        rng = rng or random.Random()
        roster = [Player(player_id=f"seat-{i}", name=f"Seat {i + 1}") for i in range(n_players)]
        counts = np.zeros((n_players, len(ROLE_COLUMNS)), dtype=int)
        column = {role: i for i, role in enumerate(ROLE_COLUMNS)}
        
        for _ in range(trials):
            for seat, player in enumerate(assign_roles(roster, impostor_count, rng, self.config)):
                counts[seat, column[player.role]] += 1
        
        return counts
    
    def seat_uniformity(self, counts: np.ndarray, significance: float = 0.01) -> Dict[str, Any]:
        """Chi-square goodness-of-fit of each role across seats.
        
        Args:
            counts: Output of sample()
            significance: Threshold below which a role is flagged as biased
            
        Returns:
            Per-role statistic, p-value and verdict; roles never drawn are
            reported as untested
        """
        results = {}
        for i, role in enumerate(ROLE_COLUMNS):
            observed = counts[:, i]
            if observed.sum() == 0:
                results[role.value] = {"tested": False}
                continue
            statistic, p_value = scipy_stats.chisquare(observed)
            results[role.value] = {
                "tested": True,
                "statistic": float(statistic),
                "p_value": float(p_value),
                "uniform": bool(p_value >= significance),
            }
        return results
    
    def role_count_summary(self, counts: np.ndarray, trials: int) -> Dict[str, Any]:
        """Average number of each role per round and per-seat rates."""
        n_players = counts.shape[0]
        totals = counts.sum(axis=0)
        summary = {}
        for i, role in enumerate(ROLE_COLUMNS):
            summary[role.value] = {
                "per_round": float(totals[i] / trials) if trials else 0.0,
                "seat_rate_pct": percentage(totals[i], trials * n_players),
            }
        summary["max_impostors"] = max_impostors(n_players, self.config)
        return summary
    
    def calculate_confidence_interval(
        self,
        data: Sequence[float],
        confidence_level: float = 0.95,
    ) -> Tuple[float, float]:
        """Student-t interval for the mean of data.

        Returns:
            (lower, upper); (0.0, 0.0) for fewer than two points, and the
            mean itself when every point is equal
        """
        values = np.asarray(data, dtype=float)
        if values.size < 2:
            return (0.0, 0.0)
        mean = float(values.mean())
        if np.allclose(values, mean):
            return (mean, mean)
        low, high = scipy_stats.t.interval(
            confidence_level, values.size - 1, loc=mean, scale=scipy_stats.sem(values)
        )
        return (float(low), float(high))
    
    def seat_impostor_interval(
        self,
        counts: np.ndarray,
        confidence_level: float = 0.95
    ) -> Tuple[float, float]:
        """Confidence interval of the impostor count across seats."""
        column = ROLE_COLUMNS.index(Role.IMPOSTOR)
        return self.calculate_confidence_interval(
            counts[:, column].astype(float).tolist(), confidence_level
        )
