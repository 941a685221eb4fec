"""Model providers package."""

from .base_model_provider import BaseModelProvider, ChatMessageDict
from .exceptions import (
    EmptyResponse,
    ErrorKind,
    InferenceError,
    InsufficientCredits,
    InvalidApiKey,
    RateLimitExceeded,
    ServerError,
)
from .open_router_provider import OpenRouterProvider
from .rate_limiter import RateLimitState, RequestGate, is_free_tier

__all__ = [
    "BaseModelProvider",
    "ChatMessageDict",
    "EmptyResponse",
    "ErrorKind",
    "InferenceError",
    "InsufficientCredits",
    "InvalidApiKey",
    "OpenRouterProvider",
    "RateLimitExceeded",
    "RateLimitState",
    "RequestGate",
    "ServerError",
    "is_free_tier",
]
