"""Registry of live debates sharing one admission gate."""

import logging
import uuid

import httpx
from fastapi import HTTPException

from debate_arena.config.settings import AppConfig
from debate_arena.debate_engine.core import TurnOrchestrator
from debate_arena.debate_engine.models import DebateSnapshot
from debate_arena.debate_engine.prompt_builder import ArgumentGenerator, PromptBuilder
from debate_arena.models.openrouter_types import CatalogModel
from debate_arena.models.providers import OpenRouterProvider, RequestGate
from debate_arena.web.debate_setup_request import DebateSetupRequest

logger = logging.getLogger(__name__)


class DebateManager:
    """Manages active debates.

    Every debate gets its own provider (so each can carry its own API key)
    but all providers share ``self.gate``: the external quota is per
    process, not per debate.
    """

    def __init__(
        self,
        config: AppConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        gate: RequestGate | None = None,
    ):
        self.config = config
        self.transport = transport
        self.gate = gate or RequestGate(config.rate_limits)
        self.active_debates: dict[str, TurnOrchestrator] = {}
        self._catalog: OpenRouterProvider | None = None

    def _provider(self, api_key: str | None = None) -> OpenRouterProvider:
        return OpenRouterProvider(
            self.config.openrouter, self.gate, api_key=api_key, transport=self.transport
        )

    def create_debate(self, setup: DebateSetupRequest) -> str:
        """Create a debate and start it in manual mode."""
        debate_id = str(uuid.uuid4())

        generator = ArgumentGenerator(
            self._provider(setup.api_key),
            PromptBuilder(self.config.debate.min_words, self.config.debate.max_words),
        )
        orchestrator = TurnOrchestrator(generator, self.config.debate)
        try:
            orchestrator.start_debate(
                setup.topic, setup.model_a, setup.model_b, setup.max_rounds
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        self.active_debates[debate_id] = orchestrator
        logger.info(f"Created debate {debate_id}: {setup.topic}")
        return debate_id

    def get_debate(self, debate_id: str) -> TurnOrchestrator:
        orchestrator = self.active_debates.get(debate_id)
        if orchestrator is None:
            raise HTTPException(status_code=404, detail="Debate not found")
        return orchestrator

    def reset_debate(self, debate_id: str) -> DebateSnapshot:
        """Reset the debate and release its id; a new debate must be created."""
        orchestrator = self.get_debate(debate_id)
        orchestrator.reset()
        del self.active_debates[debate_id]
        logger.info(f"Reset debate {debate_id}")
        return orchestrator.snapshot()

    def delete_debate(self, debate_id: str) -> None:
        """Stop any scheduled work and forget the debate."""
        orchestrator = self.get_debate(debate_id)
        orchestrator.reset()
        del self.active_debates[debate_id]
        logger.info(f"Deleted debate {debate_id}")

    def shutdown(self) -> None:
        for debate_id in list(self.active_debates):
            self.delete_debate(debate_id)

    async def validate_key(self, api_key: str) -> bool:
        return await self._provider(api_key).validate_key()

    async def get_models(self) -> list[CatalogModel]:
        # Kept across requests so the catalogue cache survives
        if self._catalog is None:
            self._catalog = self._provider()
        return await self._catalog.get_available_models()
