"""
API Response Models

Pydantic models for API responses.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from trainload.plan_schemas import (
    BlockType,
    ScheduledSession,
    SeasonCalendar,
    SessionScore,
    ZoneTable,
)
from trainload.schemas import TrainingZone


class ZonesResponse(BaseModel):
    """Response for POST /api/zones."""

    power: Optional[ZoneTable] = Field(None, description="Power zones (None without FTP)")
    hr: Optional[ZoneTable] = Field(None, description="Heart-rate zones (None without HR anchors)")
    weekly_tss_capacity: Optional[int] = Field(
        None, description="Estimated weekly TSS capacity from FTP"
    )


class BlockScore(BaseModel):
    """Per-block contribution to a session score."""

    index: int = Field(..., ge=0, description="Block position in the session")
    block_type: BlockType = Field(..., description="Kind of block")
    zone: TrainingZone = Field(..., description="Target zone")
    effective_duration_minutes: float = Field(..., ge=0, description="Effective duration")
    tss: float = Field(..., ge=0, description="Block TSS")


class SessionScoreResponse(BaseModel):
    """Response for POST /api/sessions/score."""

    score: SessionScore = Field(..., description="Unrounded session score")
    record: Dict[str, Optional[float]] = Field(..., description="Rounded, persisted form")
    workout_type: str = Field(..., description="Derived workout type")
    primary_zone: TrainingZone = Field(..., description="Derived primary zone")
    blocks: List[BlockScore] = Field(..., description="Per-block breakdown")


class PlanResponse(BaseModel):
    """Response for POST /api/plans."""

    calendar: SeasonCalendar = Field(..., description="Phased season calendar")
    phase_breakdown: Dict[str, int] = Field(..., description="Weeks per phase")
    warnings: List[str] = Field(default_factory=list, description="Warning messages")


class ScheduleResponse(BaseModel):
    """Response for POST /api/plans/schedule."""

    calendar: SeasonCalendar = Field(..., description="Phased season calendar")
    sessions: List[ScheduledSession] = Field(..., description="Dated sessions in order")
    session_count: int = Field(..., ge=0, description="Number of sessions")
    total_tss: int = Field(..., ge=0, description="Sum of session TSS")
