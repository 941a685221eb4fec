"""Shared types and enums for the debate engine."""

from enum import Enum


class Position(Enum):
    """Debate stances."""

    PRO = "for"
    CON = "against"

    @property
    def opponent(self) -> "Position":
        return Position.CON if self is Position.PRO else Position.PRO


class Speaker(Enum):
    """The two debaters. Side A always argues for the topic."""

    SIDE_A = "side_a"
    SIDE_B = "side_b"

    @property
    def position(self) -> Position:
        return Position.PRO if self is Speaker.SIDE_A else Position.CON

    @property
    def opponent(self) -> "Speaker":
        return Speaker.SIDE_B if self is Speaker.SIDE_A else Speaker.SIDE_A


class DebatePhase(Enum):
    """Rhetorical stage of a round."""

    OPENING = "opening"
    DEVELOPMENT = "development"
    REBUTTAL = "rebuttal"
    CLOSING = "closing"


class StrategyPhase(Enum):
    """Coarse position of a round in the debate, used to pick a strategy."""

    EARLY = "early"
    MIDDLE = "middle"
    LATE = "late"
    FINAL = "final"


class DebateStatus(Enum):
    """Lifecycle of a debate session."""

    AWAITING_SETUP = "awaiting_setup"
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETE = "complete"
    ERROR = "error"
