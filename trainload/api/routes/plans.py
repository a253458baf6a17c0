"""
Season Plans API Routes

Endpoints for season planning and weekly session assignment.
"""

from typing import List

from fastapi import APIRouter, Depends

from trainload.api.dependencies import get_engine_config
from trainload.api.models.requests import PlanRequest, ScheduleRequest
from trainload.api.models.responses import PlanResponse, ScheduleResponse
from trainload.plan_schemas import SeasonCalendar
from trainload.planner import MesocyclePlanner
from trainload.scheduler import WeeklyScheduleAssigner
from trainload.schemas import EngineConfig

router = APIRouter()


def _calendar_warnings(calendar: SeasonCalendar) -> List[str]:
    warnings = []
    if calendar.planned_weeks != calendar.total_weeks:
        warnings.append(
            f"Phase rounding planned {calendar.planned_weeks} weeks for a "
            f"{calendar.total_weeks}-week season window"
        )
    if calendar.total_weeks < calendar.mesocycle_length_weeks:
        warnings.append(
            f"Season window ({calendar.total_weeks} weeks) is shorter than one mesocycle"
        )
    return warnings


@router.post("/plans", response_model=PlanResponse)
async def create_plan(
    request: PlanRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> PlanResponse:
    """
    Plan a phased season.

    Seasons without a resolvable goal date are refused with 400 before
    anything is planned.

    Args:
        request: PlanRequest with season inputs

    Returns:
        PlanResponse with the calendar and its phase breakdown
    """
    calendar = MesocyclePlanner(request.season, config).plan()
    return PlanResponse(
        calendar=calendar,
        phase_breakdown=calendar.get_phase_breakdown(),
        warnings=_calendar_warnings(calendar),
    )


@router.post("/plans/schedule", response_model=ScheduleResponse)
async def create_schedule(
    request: ScheduleRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> ScheduleResponse:
    """
    Plan a season and assign dated sessions to every week.

    Args:
        request: ScheduleRequest with season inputs and scheduling options

    Returns:
        ScheduleResponse with the calendar and its sessions
    """
    calendar = MesocyclePlanner(request.season, config).plan()
    sessions = WeeklyScheduleAssigner(config).assign(
        calendar,
        sport=request.sport,
        profile=request.profile,
        zone_kind=request.zone_kind,
        rest_days=request.rest_days,
    )
    return ScheduleResponse(
        calendar=calendar,
        sessions=sessions,
        session_count=len(sessions),
        total_tss=sum(s.tss for s in sessions),
    )
