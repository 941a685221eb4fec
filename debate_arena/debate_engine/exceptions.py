"""Errors raised by turn orchestration policy."""

from .types import DebateStatus


class DebateStateError(Exception):
    """The requested operation does not fit the debate's current state."""

    @property
    def user_message(self) -> str:
        return str(self)


class RetryLimitExceeded(DebateStateError):
    """The failed turn has already been retried the maximum number of times."""

    def __init__(self, max_retries: int):
        super().__init__(f"Failed turn was already retried {max_retries} times")
        self.max_retries = max_retries

    @property
    def user_message(self) -> str:
        return "Maximum retry attempts reached. Please check your API key and try again later."


class InvalidTransition(DebateStateError):
    """A debate state change that the session lifecycle does not allow."""

    def __init__(self, current: DebateStatus, target: DebateStatus):
        super().__init__(f"Cannot move debate from {current.value} to {target.value}")
        self.current = current
        self.target = target
