"""
Input validation for the engine.

The engine refuses to compute on inputs it cannot make sense of rather than
guessing defaults or clamping values. Each check here runs before the
corresponding computation and raises a specific error from
trainload.errors, so a caller always learns exactly which input to fix.
"""

from datetime import date
from typing import Optional

from loguru import logger

from trainload.errors import InvalidBlock, InvalidProfile, UnplannableSeason
from trainload.plan_schemas import BlockType, WorkoutBlock
from trainload.schemas import EventType, PhysiologicalProfile, SeasonPlan


def validate_hr_profile(profile: PhysiologicalProfile) -> None:
    """
    Check that the heart-rate anchors are present and ordered.

    Args:
        profile: Physiological inputs

    Raises:
        InvalidProfile: If any anchor is missing or rest >= threshold or threshold > max
    """
    missing = [
        name
        for name in ("hr_max", "hr_threshold", "hr_rest")
        if getattr(profile, name) is None
    ]
    if missing:
        raise InvalidProfile(
            f"Heart-rate zones need {', '.join(missing)}"
        )

    if profile.hr_rest >= profile.hr_threshold:
        raise InvalidProfile(
            f"hr_rest ({profile.hr_rest}) must be below hr_threshold ({profile.hr_threshold})"
        )
    if profile.hr_threshold > profile.hr_max:
        raise InvalidProfile(
            f"hr_threshold ({profile.hr_threshold}) cannot exceed hr_max ({profile.hr_max})"
        )


def require_ftp(profile: PhysiologicalProfile) -> float:
    """
    Return the profile's FTP or refuse.

    Args:
        profile: Physiological inputs

    Returns:
        FTP in watts

    Raises:
        InvalidProfile: If FTP is missing
    """
    if profile.ftp_watts is None:
        raise InvalidProfile("Power zones and power estimates need ftp_watts")
    return profile.ftp_watts


def validate_block(block: WorkoutBlock, block_index: Optional[int] = None) -> None:
    """
    Check interval-field consistency for one block.

    An interval block (num_intervals set, or block_type "intervals") needs
    num_intervals >= 1, interval_duration_seconds and
    rest_between_intervals_seconds.

    Args:
        block: Block to check
        block_index: Position in the session, used in the error message

    Raises:
        InvalidBlock: If the interval fields are inconsistent
    """
    if block.num_intervals is None:
        if block.block_type == BlockType.INTERVALS:
            raise InvalidBlock("intervals block is missing num_intervals", block_index)
        return

    interval_fields = {
        "interval_duration_seconds": block.interval_duration_seconds,
        "rest_between_intervals_seconds": block.rest_between_intervals_seconds,
    }

    if block.num_intervals < 1:
        raise InvalidBlock(
            f"num_intervals must be at least 1, got {block.num_intervals}", block_index
        )

    missing = [name for name, value in interval_fields.items() if value is None]
    if missing:
        raise InvalidBlock(
            f"interval block is missing {', '.join(missing)}", block_index
        )


def resolve_goal_date(season: SeasonPlan) -> date:
    """
    Resolve the season's main goal date.

    Resolution order: explicit main_goal_date, then the earliest event_a,
    then the latest event of any type.

    Args:
        season: Season inputs

    Returns:
        The goal date

    Raises:
        UnplannableSeason: If there is no explicit date and no events
    """
    if season.main_goal_date is not None:
        return season.main_goal_date

    if not season.events:
        raise UnplannableSeason(
            "Cannot plan a season without a main goal date or at least one event"
        )

    events = sorted(season.events, key=lambda e: e.event_date)
    a_events = [e for e in events if e.event_type == EventType.EVENT_A]
    goal_event = a_events[0] if a_events else events[-1]

    logger.debug(
        f"Resolved goal date {goal_event.event_date} from event '{goal_event.name}' "
        f"({goal_event.event_type.value})"
    )
    return goal_event.event_date
