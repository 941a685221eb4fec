"""Debate flow: prompting, turn orchestration and session state.

The orchestrator lives in ``debate_arena.debate_engine.core``.
"""

from .exceptions import DebateStateError, InvalidTransition, RetryLimitExceeded
from .models import DebateMessage, DebateSession, DebateSnapshot, TurnError
from .prompt_builder import ArgumentContext, ArgumentGenerator, PromptBuilder
from .types import DebatePhase, DebateStatus, Position, Speaker, StrategyPhase

__all__ = [
    "ArgumentContext",
    "ArgumentGenerator",
    "DebateMessage",
    "DebatePhase",
    "DebateSession",
    "DebateSnapshot",
    "DebateStateError",
    "DebateStatus",
    "InvalidTransition",
    "Position",
    "PromptBuilder",
    "RetryLimitExceeded",
    "Speaker",
    "StrategyPhase",
    "TurnError",
]
