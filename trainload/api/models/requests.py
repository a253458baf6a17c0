"""
API Request Models

Pydantic models for API request validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from trainload.plan_schemas import Session
from trainload.schemas import HRZoneModel, PhysiologicalProfile, SeasonPlan, Weekday, ZoneKind


class ZonesRequest(BaseModel):
    """Request model for zone calculation."""

    profile: PhysiologicalProfile = Field(..., description="Physiological inputs")
    hr_zone_model: Optional[HRZoneModel] = Field(
        None, description="Reference HR for the HR zones (engine default if omitted)"
    )


class SessionScoreRequest(BaseModel):
    """Request model for session scoring."""

    session: Session = Field(..., description="Structured session to score")
    profile: PhysiologicalProfile = Field(..., description="Physiological inputs")


class PlanRequest(BaseModel):
    """Request model for season planning."""

    season: SeasonPlan = Field(..., description="Season inputs")


class ScheduleRequest(BaseModel):
    """Request model for season planning plus weekly session assignment."""

    season: SeasonPlan = Field(..., description="Season inputs")
    profile: Optional[PhysiologicalProfile] = Field(
        None, description="Physiological inputs for session target ranges"
    )
    sport: str = Field("cycling", min_length=1, description="Sport recorded on each session")
    zone_kind: ZoneKind = Field(ZoneKind.POWER, description="Zone table for target ranges")
    rest_days: List[Weekday] = Field(
        default_factory=list, description="Weekdays kept free of sessions"
    )
