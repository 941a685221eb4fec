"""Data models for the debate engine."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone

from debate_arena.models.providers.exceptions import ErrorKind

from .types import DebateStatus, Speaker


@dataclass(frozen=True)
class DebateMessage:
    """A single argument in the debate."""

    id: str
    speaker: Speaker
    content: str
    round: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def word_count(self) -> int:
        return len(self.content.split())


def _zero_scores() -> dict[Speaker, int]:
    return {Speaker.SIDE_A: 0, Speaker.SIDE_B: 0}


@dataclass
class DebateSession:
    """Full state of one debate. Mutated only by its orchestrator."""

    topic: str
    model_a: str
    model_b: str
    max_rounds: int = 3
    messages: list[DebateMessage] = field(default_factory=list)
    current_round: int = 0
    is_active: bool = False
    scores: dict[Speaker, int] = field(default_factory=_zero_scores)

    @property
    def next_speaker(self) -> Speaker:
        """Side A speaks on even message counts, side B on odd ones."""
        return Speaker.SIDE_A if len(self.messages) % 2 == 0 else Speaker.SIDE_B

    @property
    def next_round(self) -> int:
        """Round number the next argument belongs to."""
        return len(self.messages) // 2 + 1

    @property
    def is_complete(self) -> bool:
        return math.ceil(len(self.messages) / 2) >= self.max_rounds

    def model_for(self, speaker: Speaker) -> str:
        return self.model_a if speaker is Speaker.SIDE_A else self.model_b

    def arguments_by(self, speaker: Speaker) -> list[DebateMessage]:
        return [m for m in self.messages if m.speaker is speaker]


@dataclass(frozen=True)
class TurnError:
    """The failure that interrupted the most recent turn."""

    kind: ErrorKind
    message: str
    user_message: str
    speaker: Speaker


@dataclass(frozen=True)
class DebateSnapshot:
    """Read-only view of a session handed to the UI layer."""

    status: DebateStatus
    topic: str
    model_a: str
    model_b: str
    max_rounds: int
    current_round: int
    is_active: bool
    is_complete: bool
    messages: tuple[DebateMessage, ...]
    scores: dict[Speaker, int]
    auto_mode: bool
    is_generating: bool
    current_speaker: Speaker | None
    error: TurnError | None
    retry_count: int
