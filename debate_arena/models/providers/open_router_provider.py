import logging
import time

import httpx
from openai import AsyncOpenAI, OpenAIError
from pydantic import ValidationError

from debate_arena.config.settings import OpenRouterConfig
from debate_arena.models.openrouter_types import (
    FALLBACK_MODELS,
    CatalogModel,
    OpenRouterChatCompletionResponse,
    OpenRouterModelFilter,
    OpenRouterModelsResponse,
)

from .base_model_provider import BaseModelProvider, ChatMessageDict
from .exceptions import (
    EmptyResponse,
    InferenceError,
    InsufficientCredits,
    InvalidApiKey,
    RateLimitExceeded,
    ServerError,
)
from .rate_limiter import RequestGate

logger = logging.getLogger(__name__)


class OpenRouterProvider(BaseModelProvider):
    """OpenRouter chat-completion client.

    Every completion request passes through the shared ``RequestGate``: the
    gate is held for the whole retry loop, so at most one request is in
    flight per process and the rate-limit state is updated before each
    attempt.
    """

    def __init__(
        self,
        config: OpenRouterConfig,
        gate: RequestGate,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._gate = gate
        self._api_key = api_key or config.resolve_api_key()
        self._transport = transport
        self._models_cache: list[CatalogModel] | None = None
        self._models_cached_at = 0.0

        if not self._api_key:
            logger.warning(
                "No OpenRouter API key found. Set OPENROUTER_API_KEY or configure in system settings."
            )

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self.config.site_url:
            headers["HTTP-Referer"] = self.config.site_url
        if self.config.app_name:
            headers["X-Title"] = self.config.app_name
        return headers

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.config.timeout)

    async def generate_response(
        self, model: str, messages: list[ChatMessageDict], **overrides
    ) -> str:
        """Generate a response using OpenRouter."""
        if not model:
            raise ValueError("model must be a non-empty identifier")
        if not messages:
            raise ValueError("messages must contain at least one entry")
        if not self._api_key:
            raise InvalidApiKey("OpenRouter API key is not configured", 401)

        max_retries: int = overrides.get("max_retries", self.config.max_retries)
        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": overrides.get("max_tokens", self.config.max_tokens),
            "temperature": overrides.get("temperature", self.config.temperature),
        }
        url = f"{self.config.base_url}/chat/completions"
        limits = self._gate.limits

        async with self._gate.admission(model):
            for attempt in range(1, max_retries + 1):
                await self._gate.wait_for_rate_limit(model)
                logger.info(
                    f"Attempt {attempt}/{max_retries}: generating response with model {model}"
                )

                try:
                    async with self._http_client() as client:
                        response = await client.post(
                            url, json=payload, headers=self._headers()
                        )
                except httpx.TransportError as e:
                    logger.warning(f"Attempt {attempt}/{max_retries} failed to connect: {e}")
                    if attempt < max_retries:
                        await self._gate.pause(limits.transport_error_backoff * attempt)
                        continue
                    raise InferenceError(f"OpenRouter request failed: {e}") from e

                status = response.status_code
                if response.is_success:
                    content = self._parse_completion(response)
                    logger.info(
                        f"Successfully generated {len(content)} chars with {model} on attempt {attempt}"
                    )
                    return content

                error_message = self._error_message(response)

                if status == 429:
                    logger.warning(f"Rate limited on attempt {attempt}/{max_retries} ({model})")
                    if attempt < max_retries:
                        delay = min(
                            limits.rate_limit_backoff_cap,
                            limits.rate_limit_backoff_base * 2 ** (attempt - 1),
                        )
                        await self._gate.pause(delay)
                        continue
                    raise RateLimitExceeded(
                        "Rate limit exceeded. Please try again in a few minutes.", status
                    )
                if status == 401:
                    raise InvalidApiKey(
                        f"Invalid API key. Please check your OpenRouter API key. ({error_message})",
                        status,
                    )
                if status == 402:
                    raise InsufficientCredits(
                        f"Insufficient credits. Please check your OpenRouter account balance. ({error_message})",
                        status,
                    )
                if status >= 500:
                    logger.warning(
                        f"Server error on attempt {attempt}/{max_retries}: {error_message}"
                    )
                    if attempt < max_retries:
                        await self._gate.pause(limits.server_error_backoff * attempt)
                        continue
                    raise ServerError(f"OpenRouter server error: {error_message}", status)

                raise InferenceError(f"OpenRouter API error: {error_message}", status)

        raise InferenceError("Failed to generate response after all retries")

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Extract the upstream error message, falling back to the raw body."""
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}: {response.reason_phrase}"
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.text or f"HTTP {response.status_code}: {response.reason_phrase}"

    @staticmethod
    def _parse_completion(response: httpx.Response) -> str:
        try:
            body = OpenRouterChatCompletionResponse.model_validate(response.json())
        except ValueError as e:  # also covers pydantic.ValidationError
            raise InferenceError(
                f"OpenRouter API error: malformed response body ({e})", response.status_code
            ) from e

        if body.error is not None:
            raise InferenceError(
                f"OpenRouter API error: {body.error.message}", response.status_code
            )

        content = body.first_content()
        if not content or not content.strip():
            raise EmptyResponse(
                "No response content received from the model", response.status_code
            )
        return content.strip()

    async def validate_key(self) -> bool:
        """Check the key against the authenticated models listing."""
        if not self._api_key:
            return False

        headers = {}
        if self.config.site_url:
            headers["HTTP-Referer"] = self.config.site_url
        if self.config.app_name:
            headers["X-Title"] = self.config.app_name

        http_client = (
            httpx.AsyncClient(transport=self._transport) if self._transport else None
        )
        try:
            async with AsyncOpenAI(
                base_url=self.config.base_url,
                api_key=self._api_key,
                timeout=self.config.timeout,
                max_retries=0,
                default_headers=headers,
                http_client=http_client,
            ) as client:
                await client.models.list()
        except OpenAIError as e:
            logger.warning(f"OpenRouter API key validation failed: {e}")
            return False

        logger.info("OpenRouter API key validated")
        return True

    async def get_available_models(self) -> list[CatalogModel]:
        """Get the curated, tier-sorted model catalogue (cached)."""
        now = time.monotonic()
        if (
            self._models_cache is not None
            and now - self._models_cached_at < self.config.models_cache_ttl
        ):
            logger.debug(f"Using cached OpenRouter models ({len(self._models_cache)} models)")
            return self._models_cache

        try:
            async with self._http_client() as client:
                response = await client.get(
                    f"{self.config.base_url}/models",
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
            models_response = OpenRouterModelsResponse.model_validate(response.json())
        except (httpx.HTTPError, ValidationError, ValueError) as e:
            logger.error(f"Failed to fetch OpenRouter models, using fallback list: {e}")
            return list(FALLBACK_MODELS)

        catalog = OpenRouterModelFilter.filter_and_sort(models_response.data)
        self._models_cache = catalog
        self._models_cached_at = now
        logger.info(
            f"OpenRouter: fetched {len(models_response.data)} models, "
            f"filtered down to {len(catalog)} debate-capable options"
        )
        return catalog
