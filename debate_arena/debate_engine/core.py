"""Turn orchestration for a single debate session."""

import asyncio
import logging
import uuid

from debate_arena.config.settings import DebateConfig
from debate_arena.models.providers.exceptions import ErrorKind, InferenceError
from debate_arena.scoring import (
    ArgumentScore,
    DebateAnalytics,
    ScoringContext,
    ScoringEngine,
)
from debate_arena.scoring.engine import round_half_up

from .exceptions import DebateStateError, InvalidTransition, RetryLimitExceeded
from .models import DebateMessage, DebateSession, DebateSnapshot, TurnError
from .prompt_builder import ArgumentContext, ArgumentGenerator
from .types import DebateStatus, Speaker

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[DebateStatus, frozenset[DebateStatus]] = {
    DebateStatus.AWAITING_SETUP: frozenset({DebateStatus.IN_PROGRESS}),
    DebateStatus.IN_PROGRESS: frozenset(
        {DebateStatus.PAUSED, DebateStatus.COMPLETE, DebateStatus.ERROR}
    ),
    # A turn dispatched before pausing may still finish or fail.
    DebateStatus.PAUSED: frozenset(
        {DebateStatus.IN_PROGRESS, DebateStatus.COMPLETE, DebateStatus.ERROR}
    ),
    DebateStatus.ERROR: frozenset({DebateStatus.IN_PROGRESS}),
    DebateStatus.COMPLETE: frozenset(),
}

UNEXPECTED_ERROR_MESSAGE = (
    "Something went wrong while generating the argument. You can retry the turn."
)


class TurnOrchestrator:
    """Decides whose turn is next, runs it, scores it, and drives auto mode.

    State machine: AWAITING_SETUP -> IN_PROGRESS <-> PAUSED, IN_PROGRESS ->
    COMPLETE, IN_PROGRESS -> ERROR -> IN_PROGRESS (resume/retry). ``reset()``
    returns to AWAITING_SETUP from anywhere. Auto mode only exists while
    IN_PROGRESS; every other transition switches it off and cancels the
    pending continuation.
    """

    def __init__(
        self,
        generator: ArgumentGenerator,
        config: DebateConfig | None = None,
        scoring_engine: ScoringEngine | None = None,
    ):
        self.generator = generator
        self.config = config or DebateConfig()
        self.scoring_engine = scoring_engine or ScoringEngine()

        self._session: DebateSession | None = None
        self._status = DebateStatus.AWAITING_SETUP
        self._auto_mode = False
        self._generating = False
        self._current_speaker: Speaker | None = None
        self._error: TurnError | None = None
        self._retry_count = 0
        self._scheduled: asyncio.Task[None] | None = None
        # Bumped on reset so a turn dispatched earlier cannot write into a new session
        self._epoch = 0

    @property
    def status(self) -> DebateStatus:
        return self._status

    @property
    def auto_mode(self) -> bool:
        return self._auto_mode

    @property
    def is_generating(self) -> bool:
        return self._generating

    @property
    def is_complete(self) -> bool:
        return self._session is not None and self._session.is_complete

    @property
    def error(self) -> TurnError | None:
        return self._error

    @property
    def retry_count(self) -> int:
        return self._retry_count

    @property
    def has_pending_turn(self) -> bool:
        return self._scheduled is not None and not self._scheduled.done()

    def _require_session(self) -> DebateSession:
        if self._session is None:
            raise DebateStateError("No active debate - call start_debate() first")
        return self._session

    def _transition(self, target: DebateStatus) -> None:
        if target not in ALLOWED_TRANSITIONS[self._status]:
            raise InvalidTransition(self._status, target)

        logger.info(f"Debate status {self._status.value} -> {target.value}")
        self._status = target
        if self._session is not None:
            self._session.is_active = target is DebateStatus.IN_PROGRESS
        if target is not DebateStatus.IN_PROGRESS:
            self._auto_mode = False
            self._cancel_scheduled()

    def start_debate(
        self, topic: str, model_a: str, model_b: str, max_rounds: int | None = None
    ) -> DebateSnapshot:
        """Begin a new debate, discarding any previous one."""
        topic = topic.strip()
        if not topic:
            raise ValueError("Debate topic must not be empty")
        if not model_a or not model_b:
            raise ValueError("Both debaters need a model id")
        rounds = max_rounds if max_rounds is not None else self.config.max_rounds
        if rounds < 1:
            raise ValueError("max_rounds must be at least 1")

        self.reset()
        self._session = DebateSession(
            topic=topic, model_a=model_a, model_b=model_b, max_rounds=rounds
        )
        self._transition(DebateStatus.IN_PROGRESS)

        logger.info(f"Started debate: '{topic}' ({model_a} vs {model_b}, {rounds} rounds)")
        return self.snapshot()

    async def advance_turn(self) -> DebateMessage | None:
        """Generate the next argument.

        Returns None without doing anything when a turn is already being
        generated, the debate is complete, or the debate is not in progress.
        Inference failures are recorded on the session and re-raised.
        """
        session = self._require_session()
        if self._generating or session.is_complete:
            return None
        if self._status is not DebateStatus.IN_PROGRESS:
            logger.info(f"Ignoring turn request while debate is {self._status.value}")
            return None

        # A manual turn supersedes any pending auto-mode continuation
        self._cancel_scheduled()
        return await self._execute_turn(session.next_speaker)

    async def retry(self) -> DebateMessage | None:
        """Re-run the turn that failed last."""
        self._require_session()
        if self._error is None:
            raise DebateStateError("No failed turn to retry")
        if self._generating:
            return None
        if self._retry_count >= self.config.max_manual_retries:
            raise RetryLimitExceeded(self.config.max_manual_retries)

        self._retry_count += 1
        speaker = self._error.speaker
        logger.info(
            f"Retrying {speaker.value} turn (attempt {self._retry_count}/{self.config.max_manual_retries})"
        )

        self._error = None
        if self._status in (DebateStatus.ERROR, DebateStatus.PAUSED):
            self._transition(DebateStatus.IN_PROGRESS)
        self._cancel_scheduled()
        return await self._execute_turn(speaker)

    def pause(self) -> None:
        if self._status is DebateStatus.IN_PROGRESS:
            self._transition(DebateStatus.PAUSED)

    def resume(self) -> None:
        """Reactivate a paused or failed debate. Auto mode stays off."""
        if self._status in (DebateStatus.PAUSED, DebateStatus.ERROR):
            self._error = None
            self._transition(DebateStatus.IN_PROGRESS)

    def set_auto_mode(self, enabled: bool) -> None:
        """Turn auto mode on or off. Must be called from a running event loop."""
        session = self._require_session()

        if not enabled:
            self._auto_mode = False
            self._cancel_scheduled()
            logger.info("Auto mode disabled")
            return

        if session.is_complete:
            logger.info("Debate already complete, auto mode not started")
            return
        self.resume()
        self._auto_mode = True
        logger.info("Auto mode enabled")

        if not self._generating:
            self._schedule(self.config.auto_delay if session.messages else 0)

    def reset(self) -> None:
        """Clear messages, scores, counters and error state."""
        self._cancel_scheduled()
        self._epoch += 1
        self.scoring_engine.reset()

        self._session = None
        self._auto_mode = False
        self._generating = False
        self._current_speaker = None
        self._error = None
        self._retry_count = 0
        if self._status is not DebateStatus.AWAITING_SETUP:
            logger.info(f"Debate status {self._status.value} -> awaiting_setup (reset)")
        self._status = DebateStatus.AWAITING_SETUP

    def adjust_score(self, speaker: Speaker, delta: int) -> int:
        """Manually nudge a side's session score; never drops below zero."""
        session = self._require_session()
        session.scores[speaker] = max(0, session.scores[speaker] + delta)
        return session.scores[speaker]

    def score_argument(self, message_id: str) -> ArgumentScore:
        """Score a stored argument; repeated requests return the same score."""
        session = self._require_session()
        for message in session.messages:
            if message.id == message_id:
                return self._score(message)
        raise KeyError(f"Unknown message id: {message_id}")

    def analytics(self) -> DebateAnalytics:
        messages = self._session.messages if self._session else []
        return self.scoring_engine.analytics(messages)

    def snapshot(self) -> DebateSnapshot:
        session = self._session
        return DebateSnapshot(
            status=self._status,
            topic=session.topic if session else "",
            model_a=session.model_a if session else "",
            model_b=session.model_b if session else "",
            max_rounds=session.max_rounds if session else self.config.max_rounds,
            current_round=session.current_round if session else 0,
            is_active=session.is_active if session else False,
            is_complete=session.is_complete if session else False,
            messages=tuple(session.messages) if session else (),
            scores=dict(session.scores) if session else {s: 0 for s in Speaker},
            auto_mode=self._auto_mode,
            is_generating=self._generating,
            current_speaker=self._current_speaker,
            error=self._error,
            retry_count=self._retry_count,
        )

    async def _execute_turn(self, speaker: Speaker) -> DebateMessage | None:
        session = self._require_session()
        epoch = self._epoch
        context = ArgumentContext(
            topic=session.topic,
            round=session.next_round,
            max_rounds=session.max_rounds,
            history=tuple(session.messages),
        )
        model = session.model_for(speaker)

        self._generating = True
        self._current_speaker = speaker
        logger.info(f"Round {context.round}: {speaker.value} ({model}) is speaking")

        try:
            content = await self.generator.generate(model, speaker.position, context)
        except asyncio.CancelledError:
            if epoch == self._epoch:
                self._generating = False
                self._current_speaker = None
            raise
        except Exception as e:
            if epoch != self._epoch:
                logger.info(f"Ignoring failure from a reset debate: {e}")
                return None
            self._generating = False
            self._current_speaker = None
            self._handle_failure(speaker, e)
            raise

        if epoch != self._epoch:
            logger.info("Discarding argument generated for a debate that has since been reset")
            return None

        self._generating = False
        self._current_speaker = None
        return self._record_argument(session, speaker, content)

    def _record_argument(
        self, session: DebateSession, speaker: Speaker, content: str
    ) -> DebateMessage:
        message = DebateMessage(
            id=uuid.uuid4().hex,
            speaker=speaker,
            content=content,
            round=session.next_round,
        )
        session.messages.append(message)
        if speaker is Speaker.SIDE_B:
            session.current_round += 1

        self._retry_count = 0
        self._error = None
        logger.info(
            f"Round {message.round}: {speaker.value} argued ({message.word_count} words)"
        )

        if self.config.auto_scoring:
            self._score(message)

        if session.is_complete:
            self._transition(DebateStatus.COMPLETE)
            logger.info(f"Debate complete after {len(session.messages)} arguments")
        elif self._auto_mode and self._status is DebateStatus.IN_PROGRESS:
            self._schedule(self.config.auto_delay)

        return message

    def _score(self, message: DebateMessage) -> ArgumentScore:
        session = self._require_session()
        score = self.scoring_engine.score(
            message,
            ScoringContext(
                topic=session.topic,
                opponent_args=tuple(session.arguments_by(message.speaker.opponent)),
            ),
        )
        analytics = self.scoring_engine.analytics(session.messages)
        session.scores = {
            speaker: int(round_half_up(averages.total * 10, digits=0))
            for speaker, averages in analytics.average_scores.items()
        }
        return score

    def _handle_failure(self, speaker: Speaker, error: Exception) -> None:
        if isinstance(error, InferenceError):
            kind = error.kind
            user_message = error.user_message
        else:
            kind = ErrorKind.UNEXPECTED
            user_message = UNEXPECTED_ERROR_MESSAGE
        self._error = TurnError(
            kind=kind, message=str(error), user_message=user_message, speaker=speaker
        )

        if kind is ErrorKind.RATE_LIMIT_EXCEEDED:
            logger.warning(f"{speaker.value} turn rate limited: {error}")
            if self._auto_mode and self._status is DebateStatus.IN_PROGRESS:
                logger.info(
                    f"Auto mode will retry in {self.config.rate_limit_retry_delay:.0f}s"
                )
                self._schedule(self.config.rate_limit_retry_delay)
            return

        logger.error(f"{speaker.value} turn failed ({kind.value}): {error}")
        if self._status is not DebateStatus.ERROR:
            self._transition(DebateStatus.ERROR)

    def _schedule(self, delay: float) -> None:
        if self.has_pending_turn:
            logger.debug("A turn is already scheduled, not scheduling another")
            return
        self._scheduled = asyncio.create_task(self._run_scheduled_turn(delay, self._epoch))

    def _cancel_scheduled(self) -> None:
        task = self._scheduled
        self._scheduled = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            logger.debug("Cancelled pending auto-mode turn")

    async def _run_scheduled_turn(self, delay: float, epoch: int) -> None:
        await asyncio.sleep(delay)
        if self._scheduled is asyncio.current_task():
            self._scheduled = None

        if epoch != self._epoch or not self._auto_mode:
            return
        if self._status is not DebateStatus.IN_PROGRESS or self._generating:
            return
        session = self._require_session()
        if session.is_complete:
            return

        try:
            await self._execute_turn(session.next_speaker)
        except Exception as e:
            # Already recorded on the session by _handle_failure
            logger.debug(f"Scheduled turn ended with {type(e).__name__}")
