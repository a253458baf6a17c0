"""
Sessions API Routes

Endpoint for structured session scoring.
"""

from fastapi import APIRouter, Depends

from trainload.aggregator import SessionAggregator
from trainload.api.dependencies import get_engine_config
from trainload.api.models.requests import SessionScoreRequest
from trainload.api.models.responses import BlockScore, SessionScoreResponse
from trainload.schemas import EngineConfig

router = APIRouter()


@router.post("/sessions/score", response_model=SessionScoreResponse)
async def score_session(
    request: SessionScoreRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> SessionScoreResponse:
    """
    Score a structured session.

    A single invalid block refuses the whole score with 400.

    Args:
        request: SessionScoreRequest with session and profile

    Returns:
        SessionScoreResponse with the score, its persisted form and per-block rows
    """
    aggregator = SessionAggregator(config)
    rows = aggregator.block_breakdown(request.session)
    result = aggregator.score(request.session, request.profile)

    return SessionScoreResponse(
        score=result,
        record=result.as_record(),
        workout_type=request.session.workout_type,
        primary_zone=request.session.primary_zone,
        blocks=[
            BlockScore(
                index=i,
                block_type=block.block_type,
                zone=block.zone,
                effective_duration_minutes=duration,
                tss=tss,
            )
            for i, (block, duration, tss) in enumerate(rows)
        ],
    )
