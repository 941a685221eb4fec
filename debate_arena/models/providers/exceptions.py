"""Classified failures raised by inference providers."""

from enum import Enum


class ErrorKind(Enum):
    """Kinds of inference failure, as seen by the turn orchestrator."""

    INVALID_API_KEY = "invalid_api_key"
    INSUFFICIENT_CREDITS = "insufficient_credits"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    SERVER_ERROR = "server_error"
    EMPTY_RESPONSE = "empty_response"
    INFERENCE_ERROR = "inference_error"
    UNEXPECTED = "unexpected"


class InferenceError(Exception):
    """Generic upstream failure from the inference API.

    ``message`` carries the upstream text; ``user_message`` is what a UI
    should display instead.
    """

    kind = ErrorKind.INFERENCE_ERROR
    user_message = "The model provider returned an error. You can retry the turn."

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class InvalidApiKey(InferenceError):
    kind = ErrorKind.INVALID_API_KEY
    user_message = "Invalid API key. Please check your OpenRouter API key in settings."


class InsufficientCredits(InferenceError):
    kind = ErrorKind.INSUFFICIENT_CREDITS
    user_message = (
        "Insufficient credits in your OpenRouter account. Please add credits to continue."
    )


class RateLimitExceeded(InferenceError):
    kind = ErrorKind.RATE_LIMIT_EXCEEDED
    user_message = (
        "Rate limit reached. The debate will continue automatically in a moment."
        " You can also try manual mode."
    )


class ServerError(InferenceError):
    kind = ErrorKind.SERVER_ERROR
    user_message = "The model provider is having trouble right now. Please retry shortly."


class EmptyResponse(InferenceError):
    kind = ErrorKind.EMPTY_RESPONSE
    user_message = "The model returned an empty response. Please retry the turn."
