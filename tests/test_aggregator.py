"""
Tests for session scoring.

Covers:
- Per-block breakdown and additivity of duration and TSS
- Session IF, average power and kcal with a full profile
- Heart-rate-only profiles (no power, duration-based energy)
- Rounded persisted record
- Refusal of sessions with an invalid block
- Rescoring after an edit
"""

import json
from pathlib import Path

import pytest

from trainload.aggregator import SessionAggregator
from trainload.errors import InvalidBlock
from trainload.plan_schemas import BlockType, Session, WorkoutBlock
from trainload.schemas import PhysiologicalProfile
from trainload.workout import remove_block, update_block

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def aggregator():
    return SessionAggregator()


@pytest.fixture
def session():
    """15' Z2 warm-up, 4x3' Z5 with 2' rest, 10' Z1 cool-down."""
    with open(FIXTURES / "session_intervals.json") as f:
        return Session(**json.load(f))


@pytest.fixture
def full_profile():
    with open(FIXTURES / "profile_full.json") as f:
        return PhysiologicalProfile(**json.load(f))


@pytest.fixture
def hr_only_profile():
    with open(FIXTURES / "profile_hr_only.json") as f:
        return PhysiologicalProfile(**json.load(f))


def test_block_breakdown(aggregator, session):
    rows = aggregator.block_breakdown(session)

    assert [duration for _, duration, _ in rows] == [15, 18, 10]
    assert rows[0][2] == pytest.approx(12.25)
    assert rows[1][2] == pytest.approx(33.075)
    assert rows[2][2] == pytest.approx(5.0417, abs=0.001)


def test_score_is_sum_of_blocks(aggregator, session, full_profile):
    """Session TSS and duration are sums, never averages."""
    rows = aggregator.block_breakdown(session)
    result = aggregator.score(session, full_profile)

    assert result.total_duration_minutes == sum(d for _, d, _ in rows) == 43
    assert result.tss == pytest.approx(sum(t for _, _, t in rows))
    assert result.tss == pytest.approx(50.367, abs=0.001)


def test_score_with_ftp(aggregator, session, full_profile):
    result = aggregator.score(session, full_profile)

    assert result.intensity_factor == pytest.approx(0.8383, abs=0.0005)
    assert result.average_power_watts == pytest.approx(8725 / 43)
    assert result.kcal == pytest.approx(500.48, abs=0.01)


def test_score_without_ftp(aggregator, session, hr_only_profile):
    """No FTP: no power estimate, energy from duration and weight."""
    result = aggregator.score(session, hr_only_profile)

    assert result.average_power_watts is None
    assert result.kcal == pytest.approx(43 * 10 * 80 / 70)
    assert result.tss == pytest.approx(50.367, abs=0.001)


def test_score_record(aggregator, session, full_profile):
    record = aggregator.score(session, full_profile).as_record()

    assert record == {
        "total_duration_minutes": 43,
        "tss": 50,
        "intensity_factor": 0.84,
        "average_power_watts": 203,
        "kcal": 500,
    }


def test_empty_session_scores_zero(aggregator, full_profile):
    result = aggregator.score(Session(title="Empty"), full_profile)

    assert result.total_duration_minutes == 0
    assert result.tss == 0
    assert result.intensity_factor == 0
    assert result.kcal == 0


def test_invalid_block_refuses_whole_session(aggregator, session, full_profile):
    """An intervals block without its interval fields names its index."""
    broken = update_block(session, 1, num_intervals=None)

    with pytest.raises(InvalidBlock, match="Block 1") as exc_info:
        aggregator.score(broken, full_profile)
    assert exc_info.value.block_index == 1


def test_interval_block_missing_rest_refused(aggregator, full_profile):
    session = Session(
        blocks=(
            WorkoutBlock(
                block_type=BlockType.INTERVALS,
                zone="Z4",
                num_intervals=3,
                interval_duration_seconds=480,
            ),
        )
    )
    with pytest.raises(InvalidBlock, match="rest_between_intervals_seconds"):
        aggregator.score(session, full_profile)


def test_zero_interval_count_refused(aggregator, full_profile):
    session = Session(
        blocks=(
            WorkoutBlock(
                block_type=BlockType.VO2MAX,
                zone="Z5",
                num_intervals=0,
                interval_duration_seconds=60,
                rest_between_intervals_seconds=60,
            ),
        )
    )
    with pytest.raises(InvalidBlock, match="at least 1"):
        aggregator.score(session, full_profile)


def test_rescore_after_edit(aggregator, session, full_profile):
    """Scores are recomputed from the blocks, never cached."""
    before = aggregator.score(session, full_profile)
    after = aggregator.score(remove_block(session, 1), full_profile)

    assert after.total_duration_minutes == 25
    assert after.tss == pytest.approx(before.tss - 33.075)
    assert aggregator.score(session, full_profile) == before
