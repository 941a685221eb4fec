"""Debate lifecycle endpoints."""

from fastapi import APIRouter, Request

from debate_arena.debate_engine.core import TurnOrchestrator
from debate_arena.web.debate_manager import DebateManager
from debate_arena.web.debate_response import AnalyticsResponse, DebateResponse
from debate_arena.web.debate_setup_request import (
    AutoModeRequest,
    DebateSetupRequest,
    ScoreAdjustmentRequest,
)

router = APIRouter(prefix="/api")


def get_debate_manager(request: Request) -> DebateManager:
    return request.app.state.debate_manager


def _response(debate_id: str, orchestrator: TurnOrchestrator) -> DebateResponse:
    return DebateResponse.from_snapshot(debate_id, orchestrator.snapshot())


@router.post("/debates", response_model=DebateResponse, status_code=201)
async def create_debate(setup: DebateSetupRequest, request: Request):
    """Create a new debate; turns are then advanced manually or in auto mode."""
    debate_manager = get_debate_manager(request)
    debate_id = debate_manager.create_debate(setup)
    return _response(debate_id, debate_manager.get_debate(debate_id))


@router.get("/debates/{debate_id}", response_model=DebateResponse)
async def get_debate(debate_id: str, request: Request):
    """Get debate status, messages and scores."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/turn", response_model=DebateResponse)
async def advance_turn(debate_id: str, request: Request):
    """Generate the next argument and wait for it."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    await orchestrator.advance_turn()
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/retry", response_model=DebateResponse)
async def retry_turn(debate_id: str, request: Request):
    """Retry the turn that failed last."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    await orchestrator.retry()
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/pause", response_model=DebateResponse)
async def pause_debate(debate_id: str, request: Request):
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    orchestrator.pause()
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/resume", response_model=DebateResponse)
async def resume_debate(debate_id: str, request: Request):
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    orchestrator.resume()
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/reset", response_model=DebateResponse)
async def reset_debate(debate_id: str, request: Request):
    """Clear the debate back to awaiting setup and release its id."""
    snapshot = get_debate_manager(request).reset_debate(debate_id)
    return DebateResponse.from_snapshot(debate_id, snapshot)


@router.post("/debates/{debate_id}/auto", response_model=DebateResponse)
async def set_auto_mode(debate_id: str, body: AutoModeRequest, request: Request):
    """Turn auto mode on or off."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    orchestrator.set_auto_mode(body.enabled)
    return _response(debate_id, orchestrator)


@router.post("/debates/{debate_id}/score", response_model=DebateResponse)
async def adjust_score(debate_id: str, body: ScoreAdjustmentRequest, request: Request):
    """Manually adjust one side's session score."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    orchestrator.adjust_score(body.speaker, body.delta)
    return _response(debate_id, orchestrator)


@router.get("/debates/{debate_id}/analytics", response_model=AnalyticsResponse)
async def get_analytics(debate_id: str, request: Request):
    """Per-side averages, round winners and the strongest arguments."""
    orchestrator = get_debate_manager(request).get_debate(debate_id)
    return AnalyticsResponse.from_analytics(
        orchestrator.analytics(), orchestrator.scoring_engine.all_scores()
    )


@router.delete("/debates/{debate_id}")
async def delete_debate(debate_id: str, request: Request):
    get_debate_manager(request).delete_debate(debate_id)
    return {"status": "deleted", "debate_id": debate_id}
