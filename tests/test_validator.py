"""
Tests for input validation.

Covers:
- Heart-rate anchor presence and ordering
- FTP requirement
- Interval block consistency
- Goal date resolution
"""

from datetime import date

import pytest

from trainload.errors import EngineError, InvalidBlock, InvalidProfile, UnplannableSeason
from trainload.plan_schemas import BlockType, WorkoutBlock
from trainload.schemas import Event, EventType, PhysiologicalProfile, SeasonPlan
from trainload.validator import (
    require_ftp,
    resolve_goal_date,
    validate_block,
    validate_hr_profile,
)


def test_hr_profile_valid():
    validate_hr_profile(PhysiologicalProfile(hr_max=190, hr_threshold=170, hr_rest=50))


def test_hr_profile_missing_anchors():
    with pytest.raises(InvalidProfile, match="hr_threshold, hr_rest"):
        validate_hr_profile(PhysiologicalProfile(hr_max=190))


def test_hr_profile_rest_equal_threshold():
    with pytest.raises(InvalidProfile, match="must be below"):
        validate_hr_profile(PhysiologicalProfile(hr_max=190, hr_threshold=170, hr_rest=170))


def test_hr_profile_threshold_above_max():
    with pytest.raises(InvalidProfile, match="cannot exceed"):
        validate_hr_profile(PhysiologicalProfile(hr_max=168, hr_threshold=170, hr_rest=50))


def test_threshold_equal_max_allowed():
    validate_hr_profile(PhysiologicalProfile(hr_max=170, hr_threshold=170, hr_rest=50))


def test_require_ftp():
    assert require_ftp(PhysiologicalProfile(ftp_watts=250)) == 250
    with pytest.raises(InvalidProfile, match="ftp_watts"):
        require_ftp(PhysiologicalProfile())


def test_simple_block_valid():
    validate_block(WorkoutBlock(block_type=BlockType.ENDURANCE, zone="Z2", total_duration_minutes=60))


def test_interval_block_valid():
    validate_block(
        WorkoutBlock(
            block_type=BlockType.THRESHOLD,
            zone="Z4",
            num_intervals=2,
            interval_duration_seconds=1200,
            rest_between_intervals_seconds=300,
        )
    )


def test_intervals_type_needs_count():
    block = WorkoutBlock(block_type=BlockType.INTERVALS, zone="Z5", total_duration_minutes=20)
    with pytest.raises(InvalidBlock, match="Block 2: intervals block is missing num_intervals"):
        validate_block(block, block_index=2)


def test_interval_block_missing_fields():
    block = WorkoutBlock(block_type=BlockType.INTERVALS, zone="Z5", num_intervals=5)
    with pytest.raises(InvalidBlock) as exc_info:
        validate_block(block)

    message = str(exc_info.value)
    assert "interval_duration_seconds" in message
    assert "rest_between_intervals_seconds" in message
    assert exc_info.value.block_index is None


def test_errors_are_value_errors():
    """Engine errors can be caught as plain ValueError."""
    for error in (InvalidProfile, InvalidBlock, UnplannableSeason):
        assert issubclass(error, EngineError)
        assert issubclass(error, ValueError)


def test_resolve_goal_prefers_explicit_date():
    season = SeasonPlan(
        year=2024,
        main_goal_date=date(2024, 9, 1),
        events=[Event(name="A race", event_date=date(2024, 6, 1), event_type=EventType.EVENT_A)],
    )
    assert resolve_goal_date(season) == date(2024, 9, 1)


def test_resolve_goal_earliest_event_a():
    season = SeasonPlan(
        year=2024,
        events=[
            Event(name="Second A", event_date=date(2024, 8, 1), event_type=EventType.EVENT_A),
            Event(name="First A", event_date=date(2024, 5, 1), event_type=EventType.EVENT_A),
        ],
    )
    assert resolve_goal_date(season) == date(2024, 5, 1)


def test_resolve_goal_without_inputs():
    with pytest.raises(UnplannableSeason):
        resolve_goal_date(SeasonPlan(year=2024))
