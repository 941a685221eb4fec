from pydantic import BaseModel, Field, field_validator

from debate_arena.debate_engine.types import Speaker


class DebateSetupRequest(BaseModel):
    """Request model for creating a new debate."""

    topic: str
    model_a: str = Field(description="Model arguing for the topic")
    model_b: str = Field(description="Model arguing against the topic")
    max_rounds: int | None = Field(default=None, ge=1)
    api_key: str | None = Field(
        default=None, description="OpenRouter key for this debate; defaults to the configured one"
    )

    @field_validator("topic", "model_a", "model_b")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class AutoModeRequest(BaseModel):
    enabled: bool


class ScoreAdjustmentRequest(BaseModel):
    """Manual nudge of one side's session score."""

    speaker: Speaker
    delta: int


class ValidateKeyRequest(BaseModel):
    api_key: str
