"""Heuristic argument scoring.

Scores are a deterministic function of the argument text: keyword hits for
logic, evidence and persuasiveness, topic-word overlap for relevance, and
average sentence length for clarity. Keyword lists and weights are fixed so
results are reproducible.
"""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass

from debate_arena.debate_engine.models import DebateMessage
from debate_arena.debate_engine.types import Speaker

from .base import (
    ArgumentScore,
    CriteriaAverages,
    Criterion,
    DebateAnalytics,
    RoundResult,
    ScoringCriteria,
    Winner,
)

logger = logging.getLogger(__name__)

LOGIC_INDICATORS = (
    "because",
    "therefore",
    "however",
    "furthermore",
    "consequently",
    "thus",
    "since",
    "given that",
)
EVIDENCE_INDICATORS = (
    "study",
    "research",
    "data",
    "statistics",
    "example",
    "according to",
    "evidence",
    "fact",
    "report",
)
PERSUASIVE_INDICATORS = (
    "clearly",
    "obviously",
    "undoubtedly",
    "essential",
    "crucial",
    "vital",
    "must",
    "should",
    "will",
)

WEIGHTS: dict[Criterion, float] = {
    Criterion.LOGIC: 0.25,
    Criterion.EVIDENCE: 0.25,
    Criterion.PERSUASIVENESS: 0.20,
    Criterion.RELEVANCE: 0.20,
    Criterion.CLARITY: 0.10,
}

# (strength phrase, improvement phrase); clarity is not reported
FEEDBACK_RULES: dict[Criterion, tuple[str, str]] = {
    Criterion.LOGIC: ("strong logical structure", "clearer logical connections"),
    Criterion.EVIDENCE: ("good use of evidence", "more supporting evidence"),
    Criterion.PERSUASIVENESS: ("compelling arguments", "more persuasive language"),
    Criterion.RELEVANCE: ("stays on topic", "better focus on the topic"),
}
STRENGTH_THRESHOLD = 7.0
IMPROVEMENT_THRESHOLD = 5.0

SENTENCE_SPLIT = re.compile(r"[.!?]+")
IDEAL_SENTENCE_LENGTH = 20


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like a UI would (halves go up), not banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def clamp(value: float, low: float = 0.0, high: float = 10.0) -> float:
    return max(low, min(high, value))


def count_indicators(content: str, indicators: Sequence[str]) -> int:
    """Number of distinct indicators present as substrings (content is lowercase)."""
    return sum(1 for indicator in indicators if indicator in content)


@dataclass(frozen=True)
class ScoringContext:
    topic: str
    opponent_args: Sequence[DebateMessage] = ()


class ScoringEngine:
    """Scores arguments once each and derives debate analytics."""

    def __init__(self):
        self._scores: dict[str, ArgumentScore] = {}

    def __len__(self) -> int:
        return len(self._scores)

    def score(self, message: DebateMessage, context: ScoringContext) -> ArgumentScore:
        """Score ``message``; a message that was already scored returns its cached score."""
        existing = self._scores.get(message.id)
        if existing is not None:
            logger.debug(f"Message {message.id} already scored, reusing cached score")
            return existing

        criteria = self.analyze(message.content, context.topic)
        total = self.total_score(criteria)
        score = ArgumentScore(
            message_id=message.id,
            round=message.round,
            speaker=message.speaker,
            criteria=criteria,
            total_score=total,
            feedback=self.feedback(criteria),
        )
        self._scores[message.id] = score

        logger.info(
            f"Scored round {message.round} argument by {message.speaker.value}: {total:.1f}/10"
        )
        return score

    def analyze(self, content: str, topic: str) -> ScoringCriteria:
        lowered = content.lower()
        word_count = len(content.split(" "))

        logic = clamp(3 + count_indicators(lowered, LOGIC_INDICATORS) * 1.5)
        evidence = clamp(2 + count_indicators(lowered, EVIDENCE_INDICATORS) * 2)
        persuasiveness = clamp(4 + count_indicators(lowered, PERSUASIVE_INDICATORS) * 1.2)

        topic_words = [word for word in topic.lower().split(" ") if len(word) > 3]
        relevance_matches = sum(1 for word in topic_words if word in lowered)
        relevance = clamp(5 + relevance_matches * 2)

        sentences = [s for s in SENTENCE_SPLIT.split(content) if s.strip()]
        if sentences:
            avg_sentence_length = word_count / len(sentences)
            clarity = clamp(
                10 - abs(avg_sentence_length - IDEAL_SENTENCE_LENGTH) / 5, low=3
            )
        else:
            clarity = 3.0

        return ScoringCriteria(
            logic=round_half_up(logic),
            evidence=round_half_up(evidence),
            persuasiveness=round_half_up(persuasiveness),
            relevance=round_half_up(relevance),
            clarity=round_half_up(clarity),
        )

    @staticmethod
    def total_score(criteria: ScoringCriteria) -> float:
        total = sum(criteria.get(criterion) * weight for criterion, weight in WEIGHTS.items())
        return clamp(round_half_up(total))

    @staticmethod
    def feedback(criteria: ScoringCriteria) -> str:
        strengths: list[str] = []
        improvements: list[str] = []

        for criterion, (strength, improvement) in FEEDBACK_RULES.items():
            value = criteria.get(criterion)
            if value >= STRENGTH_THRESHOLD:
                strengths.append(strength)
            elif value < IMPROVEMENT_THRESHOLD:
                improvements.append(improvement)

        feedback = ""
        if strengths:
            feedback += f"Strengths: {', '.join(strengths)}. "
        if improvements:
            feedback += f"Could improve: {', '.join(improvements)}."

        return feedback.strip() or "Solid argument overall."

    def get_score(self, message_id: str) -> ArgumentScore | None:
        return self._scores.get(message_id)

    def all_scores(self) -> list[ArgumentScore]:
        return list(self._scores.values())

    def reset(self) -> None:
        """Drop every stored score (new debate)."""
        self._scores.clear()

    def analytics(self, messages: Sequence[DebateMessage]) -> DebateAnalytics:
        by_side = {
            speaker: [s for s in self._scores.values() if s.speaker is speaker]
            for speaker in Speaker
        }
        averages = {speaker: self._averages(scores) for speaker, scores in by_side.items()}

        rounds = max((m.round for m in messages), default=0)
        round_winners: list[RoundResult] = []
        for round_number in range(1, rounds + 1):
            means = {
                speaker: self._mean_total(
                    [s for s in scores if s.round == round_number]
                )
                for speaker, scores in by_side.items()
            }
            side_a, side_b = means[Speaker.SIDE_A], means[Speaker.SIDE_B]
            round_winners.append(
                RoundResult(
                    round=round_number,
                    winner=Winner.compare(side_a, side_b),
                    margin=round_half_up(abs(side_a - side_b)),
                )
            )

        total_a = averages[Speaker.SIDE_A].total
        total_b = averages[Speaker.SIDE_B].total

        return DebateAnalytics(
            total_arguments=len(messages),
            average_scores=averages,
            round_winners=round_winners,
            overall_winner=Winner.compare(total_a, total_b),
            winner_margin=round_half_up(abs(total_a - total_b)),
            strongest_arguments={
                speaker: self._strongest(scores) for speaker, scores in by_side.items()
            },
        )

    @staticmethod
    def _mean_total(scores: list[ArgumentScore]) -> float:
        if not scores:
            return 0.0
        return sum(s.total_score for s in scores) / len(scores)

    @staticmethod
    def _averages(scores: list[ArgumentScore]) -> CriteriaAverages:
        if not scores:
            return CriteriaAverages(
                logic=0.0,
                evidence=0.0,
                persuasiveness=0.0,
                relevance=0.0,
                clarity=0.0,
                total=0.0,
            )

        count = len(scores)

        def mean(criterion: Criterion) -> float:
            return round_half_up(sum(s.criteria.get(criterion) for s in scores) / count)

        return CriteriaAverages(
            logic=mean(Criterion.LOGIC),
            evidence=mean(Criterion.EVIDENCE),
            persuasiveness=mean(Criterion.PERSUASIVENESS),
            relevance=mean(Criterion.RELEVANCE),
            clarity=mean(Criterion.CLARITY),
            total=round_half_up(sum(s.total_score for s in scores) / count),
        )

    @staticmethod
    def _strongest(scores: list[ArgumentScore]) -> ArgumentScore | None:
        best: ArgumentScore | None = None
        for score in scores:
            if best is None or score.total_score > best.total_score:
                best = score
        return best
