"""Prompt construction and argument generation for a single turn."""

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass

from debate_arena.models.providers.base_model_provider import (
    BaseModelProvider,
    ChatMessageDict,
)

from .models import DebateMessage
from .types import DebatePhase, Position, StrategyPhase

logger = logging.getLogger(__name__)

STRATEGIES: dict[Position, dict[StrategyPhase, str]] = {
    Position.PRO: {
        StrategyPhase.EARLY: "Focus on benefits, positive outcomes, and why this topic is necessary or beneficial.",
        StrategyPhase.MIDDLE: "Provide concrete evidence, statistics, and real-world examples supporting your position.",
        StrategyPhase.LATE: "Address common objections and reinforce why the benefits outweigh any concerns.",
        StrategyPhase.FINAL: "Synthesize your strongest points and paint a compelling vision of the positive future.",
    },
    Position.CON: {
        StrategyPhase.EARLY: "Highlight risks, problems, and negative consequences of this topic.",
        StrategyPhase.MIDDLE: "Present evidence of failures, unintended consequences, and alternative solutions.",
        StrategyPhase.LATE: "Reinforce the dangers and show why the risks are too great to ignore.",
        StrategyPhase.FINAL: "Emphasize the critical importance of avoiding these negative outcomes.",
    },
}

OPPONENT_ARGUMENTS_IN_CONTEXT = 2


@dataclass(frozen=True)
class ArgumentContext:
    """Everything a debater needs to know to produce the next argument."""

    topic: str
    round: int
    max_rounds: int
    history: Sequence[DebateMessage] = ()


def debate_phase(round_number: int, max_rounds: int) -> DebatePhase:
    """Rhetorical stage for a round.

    Short debates (three rounds or fewer) go opening, rebuttal, closing.
    Longer ones build with evidence through the first half and rebut in the
    second.
    """
    if round_number == 1:
        return DebatePhase.OPENING
    if max_rounds <= 3:
        return DebatePhase.REBUTTAL if round_number == 2 else DebatePhase.CLOSING
    if round_number == max_rounds:
        return DebatePhase.CLOSING
    if round_number <= math.ceil(max_rounds / 2):
        return DebatePhase.DEVELOPMENT
    return DebatePhase.REBUTTAL


def strategy_phase(round_number: int, max_rounds: int) -> StrategyPhase:
    if round_number == 1:
        return StrategyPhase.EARLY
    if round_number == max_rounds:
        return StrategyPhase.FINAL
    if round_number <= math.ceil(max_rounds / 2):
        return StrategyPhase.MIDDLE
    return StrategyPhase.LATE


class PromptBuilder:
    """Builds the system prompt and conversation context for a turn."""

    def __init__(self, min_words: int = 150, max_words: int = 250):
        self.min_words = min_words
        self.max_words = max_words

    def round_instruction(self, round_number: int, max_rounds: int) -> str:
        phase = debate_phase(round_number, max_rounds)
        short = max_rounds <= 3

        if phase is DebatePhase.OPENING:
            if short:
                return "ROUND 1: Opening statements - Present your strongest initial argument with key evidence."
            return "ROUND 1: Opening statements - Present your strongest initial argument."
        if phase is DebatePhase.CLOSING:
            if short:
                return "FINAL ROUND: Closing arguments - Deliver your most compelling summary and final points."
            return "FINAL ROUND: Closing arguments - Summarize your position and deliver your most compelling points."
        if phase is DebatePhase.DEVELOPMENT:
            return f"ROUND {round_number}: Development phase - Build upon your arguments with evidence and examples."
        if short:
            return "ROUND 2: Rebuttal and reinforcement - Address opponent's points while strengthening your position."
        return f"ROUND {round_number}: Rebuttal phase - Address opponent's arguments while strengthening your position."

    def strategy(self, position: Position, round_number: int, max_rounds: int) -> str:
        return STRATEGIES[position][strategy_phase(round_number, max_rounds)]

    def system_prompt(self, position: Position, context: ArgumentContext) -> str:
        side = position.value.upper()
        return f"""You are participating in a formal debate about: "{context.topic}"

POSITION: You are arguing {side} this topic.

DEBATE RULES:
- Keep responses between {self.min_words}-{self.max_words} words
- Use logical reasoning and evidence
- Address counterpoints when relevant
- Stay focused on the topic
- Be persuasive but respectful
- Use specific examples when possible

{self.round_instruction(context.round, context.max_rounds)}

DEBATE STRATEGY:
{self.strategy(position, context.round, context.max_rounds)}

Provide a compelling, well-structured argument that advances your position."""

    def context_messages(
        self, position: Position, context: ArgumentContext
    ) -> list[ChatMessageDict]:
        """Topic reminder plus, once the opponent has spoken, their last two arguments."""
        messages: list[ChatMessageDict] = [
            {
                "role": "user",
                "content": f'The debate topic is: "{context.topic}". You are arguing {position.value.upper()}.',
            }
        ]

        opponent_args = [
            msg for msg in context.history if msg.speaker.position is not position
        ][-OPPONENT_ARGUMENTS_IN_CONTEXT:]

        if opponent_args:
            quoted = "\n\n".join(f'"{arg.content}"' for arg in opponent_args)
            messages.append(
                {
                    "role": "user",
                    "content": (
                        f"Your opponent (arguing {position.opponent.value.upper()}) recently argued:"
                        f"\n\n{quoted}\n\n"
                        "Address these points while advancing your own position."
                    ),
                }
            )

        return messages

    def build(self, position: Position, context: ArgumentContext) -> list[ChatMessageDict]:
        return [
            {"role": "system", "content": self.system_prompt(position, context)},
            *self.context_messages(position, context),
        ]


class ArgumentGenerator:
    """Produces the next argument's text for a speaker."""

    def __init__(
        self, provider: BaseModelProvider, prompt_builder: PromptBuilder | None = None
    ):
        self.provider = provider
        self.prompt_builder = prompt_builder or PromptBuilder()

    async def generate(self, model: str, position: Position, context: ArgumentContext) -> str:
        """Generate an argument; provider failures propagate unchanged."""
        messages = self.prompt_builder.build(position, context)

        start_time = time.time()
        response = await self.provider.generate_response(model, messages)
        generation_time = time.time() - start_time

        logger.info(
            f"Generated round {context.round} argument {position.value.upper()} with {model}"
            f" ({len(response.split())} words, {generation_time:.2f}s)"
        )
        return response
