"""Analysis tools."""

from relay.analysis.stats import AssignmentAnalyzer

__all__ = [
    "AssignmentAnalyzer",
]
