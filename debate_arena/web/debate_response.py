from pydantic import BaseModel

from debate_arena.debate_engine.models import DebateSnapshot
from debate_arena.scoring import ArgumentScore, DebateAnalytics
from debate_arena.web.message_response import MessageResponse


class TurnErrorResponse(BaseModel):
    kind: str
    message: str
    speaker: str


class DebateResponse(BaseModel):
    """Response model for debate information."""

    id: str
    status: str
    topic: str
    model_a: str
    model_b: str
    max_rounds: int
    current_round: int
    is_active: bool
    is_complete: bool
    auto_mode: bool
    is_generating: bool
    current_speaker: str | None = None
    scores: dict[str, int]
    retry_count: int
    error: TurnErrorResponse | None = None
    messages: list[MessageResponse]

    @classmethod
    def from_snapshot(cls, debate_id: str, snapshot: DebateSnapshot) -> "DebateResponse":
        error = None
        if snapshot.error is not None:
            # Upstream text stays in the logs; clients get the readable version
            error = TurnErrorResponse(
                kind=snapshot.error.kind.value,
                message=snapshot.error.user_message,
                speaker=snapshot.error.speaker.value,
            )
        return cls(
            id=debate_id,
            status=snapshot.status.value,
            topic=snapshot.topic,
            model_a=snapshot.model_a,
            model_b=snapshot.model_b,
            max_rounds=snapshot.max_rounds,
            current_round=snapshot.current_round,
            is_active=snapshot.is_active,
            is_complete=snapshot.is_complete,
            auto_mode=snapshot.auto_mode,
            is_generating=snapshot.is_generating,
            current_speaker=(
                snapshot.current_speaker.value if snapshot.current_speaker else None
            ),
            scores={speaker.value: score for speaker, score in snapshot.scores.items()},
            retry_count=snapshot.retry_count,
            error=error,
            messages=[MessageResponse.from_message(m) for m in snapshot.messages],
        )


class ArgumentScoreResponse(BaseModel):
    message_id: str
    round: int
    speaker: str
    logic: float
    evidence: float
    persuasiveness: float
    relevance: float
    clarity: float
    total_score: float
    feedback: str

    @classmethod
    def from_score(cls, score: ArgumentScore) -> "ArgumentScoreResponse":
        return cls(
            message_id=score.message_id,
            round=score.round,
            speaker=score.speaker.value,
            logic=score.criteria.logic,
            evidence=score.criteria.evidence,
            persuasiveness=score.criteria.persuasiveness,
            relevance=score.criteria.relevance,
            clarity=score.criteria.clarity,
            total_score=score.total_score,
            feedback=score.feedback,
        )


class RoundResultResponse(BaseModel):
    round: int
    winner: str
    margin: float


class AnalyticsResponse(BaseModel):
    """Response model for debate analytics."""

    total_arguments: int
    average_scores: dict[str, dict[str, float]]
    round_winners: list[RoundResultResponse]
    overall_winner: str
    winner_margin: float
    strongest_arguments: dict[str, ArgumentScoreResponse | None]
    scores: list[ArgumentScoreResponse]

    @classmethod
    def from_analytics(
        cls, analytics: DebateAnalytics, scores: list[ArgumentScore]
    ) -> "AnalyticsResponse":
        return cls(
            total_arguments=analytics.total_arguments,
            average_scores={
                speaker.value: {
                    "logic": avg.logic,
                    "evidence": avg.evidence,
                    "persuasiveness": avg.persuasiveness,
                    "relevance": avg.relevance,
                    "clarity": avg.clarity,
                    "total": avg.total,
                }
                for speaker, avg in analytics.average_scores.items()
            },
            round_winners=[
                RoundResultResponse(
                    round=result.round, winner=result.winner.value, margin=result.margin
                )
                for result in analytics.round_winners
            ],
            overall_winner=analytics.overall_winner.value,
            winner_margin=analytics.winner_margin,
            strongest_arguments={
                speaker.value: ArgumentScoreResponse.from_score(score) if score else None
                for speaker, score in analytics.strongest_arguments.items()
            },
            scores=[ArgumentScoreResponse.from_score(s) for s in scores],
        )
