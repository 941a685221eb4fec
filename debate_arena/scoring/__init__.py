"""Heuristic scoring of debate arguments."""

from .base import (
    ArgumentScore,
    CriteriaAverages,
    Criterion,
    DebateAnalytics,
    RoundResult,
    ScoringCriteria,
    Winner,
)
from .engine import ScoringContext, ScoringEngine

__all__ = [
    "ArgumentScore",
    "CriteriaAverages",
    "Criterion",
    "DebateAnalytics",
    "RoundResult",
    "ScoringContext",
    "ScoringCriteria",
    "ScoringEngine",
    "Winner",
]
