"""Model catalogue and API key endpoints."""

from fastapi import APIRouter, Request

from debate_arena.web.debate_setup_request import ValidateKeyRequest

router = APIRouter(prefix="/api")


@router.get("/models")
async def get_models(request: Request):
    """Debate-capable OpenRouter models, free tier first."""
    models = await request.app.state.debate_manager.get_models()

    models_by_tier: dict[str, list[str]] = {}
    for model in models:
        models_by_tier.setdefault(model.tier.value, []).append(model.id)

    return {
        "models": [model.model_dump(mode="json") for model in models],
        "models_by_tier": models_by_tier,
    }


@router.post("/validate-key")
async def validate_key(body: ValidateKeyRequest, request: Request):
    """Check an OpenRouter key without spending any quota."""
    valid = await request.app.state.debate_manager.validate_key(body.api_key)
    return {"valid": valid}
