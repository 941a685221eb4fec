from abc import ABC, abstractmethod
from typing import TypedDict

from debate_arena.models.openrouter_types import CatalogModel


class ChatMessageDict(TypedDict):
    role: str
    content: str


class BaseModelProvider(ABC):
    """Abstract base class for model providers."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @abstractmethod
    async def generate_response(
        self, model: str, messages: list[ChatMessageDict], **overrides
    ) -> str:
        """Generate a completion for ``messages`` and return its text."""
        pass

    @abstractmethod
    async def validate_key(self) -> bool:
        """Check whether the configured credentials are accepted.

        Never raises for authentication failures; returns False instead.
        """
        pass

    @abstractmethod
    async def get_available_models(self) -> list[CatalogModel]:
        """Get list of debate-capable models from this provider."""
        pass
