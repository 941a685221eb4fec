"""Score and analytics data types."""

from dataclasses import dataclass, field
from enum import Enum

from debate_arena.debate_engine.types import Speaker


class Criterion(Enum):
    """Heuristic scoring criteria."""

    LOGIC = "logic"
    EVIDENCE = "evidence"
    PERSUASIVENESS = "persuasiveness"
    RELEVANCE = "relevance"
    CLARITY = "clarity"


@dataclass(frozen=True)
class ScoringCriteria:
    """Per-criterion scores, each 0.0 to 10.0."""

    logic: float
    evidence: float
    persuasiveness: float
    relevance: float
    clarity: float

    def get(self, criterion: Criterion) -> float:
        return getattr(self, criterion.value)


@dataclass(frozen=True)
class ArgumentScore:
    """Score for a single argument."""

    message_id: str
    round: int
    speaker: Speaker
    criteria: ScoringCriteria
    total_score: float  # 0.0 to 10.0
    feedback: str


@dataclass(frozen=True)
class CriteriaAverages(ScoringCriteria):
    """Mean criteria for one side, plus the mean total score."""

    total: float = 0.0


class Winner(Enum):
    SIDE_A = "side_a"
    SIDE_B = "side_b"
    TIE = "tie"

    @classmethod
    def compare(cls, side_a: float, side_b: float) -> "Winner":
        if side_a > side_b:
            return cls.SIDE_A
        if side_b > side_a:
            return cls.SIDE_B
        return cls.TIE


@dataclass(frozen=True)
class RoundResult:
    round: int
    winner: Winner
    margin: float


@dataclass(frozen=True)
class DebateAnalytics:
    """Derived view over the stored scores; recomputed on every request."""

    total_arguments: int
    average_scores: dict[Speaker, CriteriaAverages]
    round_winners: list[RoundResult]
    overall_winner: Winner
    winner_margin: float
    strongest_arguments: dict[Speaker, ArgumentScore | None] = field(default_factory=dict)
