"""
OpenRouter API types and model catalogue filtering.
Handles completion payload parsing, tier classification and sorting.
"""

from enum import Enum

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: str
    content: str | None = None


class ChatChoice(BaseModel):
    message: ChatMessage | None = None
    finish_reason: str | None = None


class OpenRouterErrorBody(BaseModel):
    message: str = "Unknown error"
    type: str | None = None
    code: str | int | None = None


class OpenRouterChatCompletionResponse(BaseModel):
    id: str | None = None
    choices: list[ChatChoice] = Field(default_factory=list)
    error: OpenRouterErrorBody | None = None

    def first_content(self) -> str | None:
        """Text of the first completion choice, if any."""
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content


class OpenRouterPricing(BaseModel):
    prompt: str = "0"
    completion: str = "0"
    image: str = "0"
    request: str = "0"

    @property
    def prompt_price(self) -> float:
        return float(self.prompt)

    @property
    def completion_price(self) -> float:
        return float(self.completion)

    @property
    def avg_price(self) -> float:
        return (self.prompt_price + self.completion_price) / 2


class OpenRouterArchitecture(BaseModel):
    modality: str = "text->text"
    input_modalities: list[str] = Field(default_factory=list)
    output_modalities: list[str] = Field(default_factory=lambda: ["text"])
    tokenizer: str | None = None
    instruct_type: str | None = None


class OpenRouterTopProvider(BaseModel):
    is_moderated: bool = False
    context_length: int | None = None
    max_completion_tokens: int | None = None


class OpenRouterModel(BaseModel):
    id: str
    name: str
    created: int | None = None
    description: str = ""
    context_length: int = 0
    pricing: OpenRouterPricing = Field(default_factory=OpenRouterPricing)
    top_provider: OpenRouterTopProvider = Field(default_factory=OpenRouterTopProvider)
    architecture: OpenRouterArchitecture = Field(default_factory=OpenRouterArchitecture)


class OpenRouterModelsResponse(BaseModel):
    data: list[OpenRouterModel]


class ModelTier(Enum):
    FREE = "free"
    STANDARD = "standard"
    PREMIUM = "premium"


_TIER_ORDER = {ModelTier.FREE: 0, ModelTier.STANDARD: 1, ModelTier.PREMIUM: 2}

PROVIDER_DISPLAY_NAMES: dict[str, str] = {
    "openai": "OpenAI",
    "anthropic": "Anthropic",
    "meta-llama": "Meta",
    "google": "Google",
    "microsoft": "Microsoft",
    "mistralai": "Mistral AI",
    "cohere": "Cohere",
    "ai21": "AI21 Labs",
    "baidu": "Baidu",
    "z-ai": "Z.AI",
    "qwen": "Qwen",
    "deepseek": "DeepSeek",
}


class CatalogModel(BaseModel):
    """A debate-ready model as presented to the UI."""

    id: str
    name: str
    provider: str
    tier: ModelTier
    description: str
    context_length: int
    prompt_price: float
    completion_price: float
    modality: str
    is_moderated: bool


class OpenRouterModelFilter:
    """Selects and classifies models suitable for debating."""

    FREE_MAX_AVG_PRICE = 0.0000005
    PREMIUM_MIN_AVG_PRICE = 0.000005
    MIN_CONTEXT_LENGTH = 4000
    MAX_PROMPT_PRICE = 0.0001

    @classmethod
    def categorize(cls, model: OpenRouterModel) -> ModelTier:
        avg_price = model.pricing.avg_price
        if avg_price <= cls.FREE_MAX_AVG_PRICE or "free" in model.id:
            return ModelTier.FREE
        if avg_price > cls.PREMIUM_MIN_AVG_PRICE:
            return ModelTier.PREMIUM
        return ModelTier.STANDARD

    @staticmethod
    def extract_provider(model_id: str, model_name: str) -> str:
        if "/" in model_id:
            prefix = model_id.split("/")[0]
            return PROVIDER_DISPLAY_NAMES.get(prefix, prefix[:1].upper() + prefix[1:])
        if ":" in model_name:
            return model_name.split(":")[0]
        return "Unknown"

    @classmethod
    def is_debate_capable(cls, model: OpenRouterModel) -> bool:
        return (
            "text" in model.architecture.output_modalities
            and model.context_length >= cls.MIN_CONTEXT_LENGTH
            and model.pricing.prompt_price < cls.MAX_PROMPT_PRICE
        )

    @classmethod
    def filter_and_sort(cls, models: list[OpenRouterModel]) -> list[CatalogModel]:
        """Keep debate-capable models, cheapest first within each tier."""
        catalog = [
            CatalogModel(
                id=model.id,
                name=model.name,
                provider=cls.extract_provider(model.id, model.name),
                tier=cls.categorize(model),
                description=model.description,
                context_length=model.context_length,
                prompt_price=model.pricing.prompt_price,
                completion_price=model.pricing.completion_price,
                modality=model.architecture.modality,
                is_moderated=model.top_provider.is_moderated,
            )
            for model in models
            if cls.is_debate_capable(model)
        ]
        catalog.sort(
            key=lambda m: (_TIER_ORDER[m.tier], m.prompt_price + m.completion_price)
        )
        return catalog


FALLBACK_MODELS: list[CatalogModel] = [
    CatalogModel(
        id="anthropic/claude-3.5-sonnet",
        name="Claude 3.5 Sonnet",
        provider="Anthropic",
        tier=ModelTier.PREMIUM,
        description="Most capable model for complex reasoning tasks",
        context_length=200000,
        prompt_price=0.000003,
        completion_price=0.000015,
        modality="text->text",
        is_moderated=False,
    ),
    CatalogModel(
        id="openai/gpt-4o",
        name="GPT-4o",
        provider="OpenAI",
        tier=ModelTier.PREMIUM,
        description="Latest GPT-4 model with improved reasoning",
        context_length=128000,
        prompt_price=0.0000025,
        completion_price=0.00001,
        modality="text+image->text",
        is_moderated=True,
    ),
    CatalogModel(
        id="openai/gpt-4o-mini",
        name="GPT-4o Mini",
        provider="OpenAI",
        tier=ModelTier.STANDARD,
        description="Faster, more affordable GPT-4 model",
        context_length=128000,
        prompt_price=0.00000015,
        completion_price=0.0000006,
        modality="text+image->text",
        is_moderated=True,
    ),
    CatalogModel(
        id="meta-llama/llama-3.1-8b-instruct:free",
        name="Llama 3.1 8B",
        provider="Meta",
        tier=ModelTier.FREE,
        description="Free open-source model with good performance",
        context_length=128000,
        prompt_price=0,
        completion_price=0,
        modality="text->text",
        is_moderated=False,
    ),
]
