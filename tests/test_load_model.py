"""
Tests for the load model formulas.

Covers:
- Canonical intensity factor table
- TSS linearity in duration and quadratic scaling in intensity
- Duration-weighted average power
- Energy estimates from power and from duration
- Session-level intensity factor
"""

import math

import pytest

from trainload.errors import InvalidProfile
from trainload.load_model import LoadModel
from trainload.plan_schemas import BlockType, WorkoutBlock
from trainload.schemas import EngineConfig, TrainingZone


@pytest.fixture
def model():
    return LoadModel()


def _block(zone, minutes, block_type=BlockType.ENDURANCE):
    return WorkoutBlock(block_type=block_type, zone=zone, total_duration_minutes=minutes)


def test_canonical_intensity_factors(model):
    expected = {"Z1": 0.55, "Z2": 0.70, "Z3": 0.85, "Z4": 0.95, "Z5": 1.05, "Z6": 1.20, "Z7": 1.50}
    for zone, factor in expected.items():
        assert model.intensity_factor(zone) == factor


def test_intensity_factor_lowercase(model):
    assert model.intensity_factor("z3") == 0.85


def test_intensity_factor_unknown_zone(model):
    with pytest.raises(ValueError):
        model.intensity_factor("Z8")


def test_tss_threshold_20_minutes(model):
    """20 minutes at IF 0.95 is about 30.08 TSS."""
    assert model.tss(20, TrainingZone.Z4) == pytest.approx(30.083, abs=0.001)


def test_tss_one_hour_at_threshold_power():
    """An hour at IF 1.0 is 100 TSS by definition."""
    factors = dict(EngineConfig().intensity_factors)
    factors[TrainingZone.Z4] = 1.0
    model = LoadModel(EngineConfig(intensity_factors=factors))
    assert model.tss(60, "Z4") == pytest.approx(100.0)


@pytest.mark.parametrize("zone", list(TrainingZone))
@pytest.mark.parametrize("minutes", [1, 17.5, 45, 240])
def test_tss_linear_in_duration(model, zone, minutes):
    assert model.tss(2 * minutes, zone) == pytest.approx(2 * model.tss(minutes, zone))


def test_tss_quadratic_in_intensity(model):
    ratio = model.tss(60, "Z2") / model.tss(60, "Z5")
    assert ratio == pytest.approx((0.70 / 1.05) ** 2)


def test_tss_zero_duration(model):
    assert model.tss(0, "Z5") == 0


def test_tss_negative_duration_rejected(model):
    with pytest.raises(ValueError, match="negative"):
        model.tss(-5, "Z2")


def test_average_power_duration_weighted(model):
    """30 min Z2 + 20 min Z4 at FTP 250 averages 200 W."""
    blocks = [_block("Z2", 30), _block("Z4", 20, BlockType.THRESHOLD)]
    assert model.estimate_average_power_watts(blocks, 250) == pytest.approx(200.0)


def test_average_power_uses_interval_duration(model):
    """Interval blocks weigh by their effective duration (18 min here)."""
    intervals = WorkoutBlock(
        block_type=BlockType.INTERVALS,
        zone="Z5",
        num_intervals=4,
        interval_duration_seconds=180,
        rest_between_intervals_seconds=120,
    )
    blocks = [_block("Z1", 18), intervals]
    expected = (0.55 * 250 + 1.05 * 250) / 2
    assert model.estimate_average_power_watts(blocks, 250) == pytest.approx(expected)


def test_average_power_zero_duration(model):
    assert model.estimate_average_power_watts([_block("Z3", 0)], 250) == 0


def test_average_power_requires_ftp(model):
    with pytest.raises(InvalidProfile):
        model.estimate_average_power_watts([_block("Z2", 30)], None)
    with pytest.raises(InvalidProfile):
        model.estimate_average_power_watts([_block("Z2", 30)], 0)


def test_estimate_kcal(model):
    """200 W for an hour is 720 kJ of work, about 688 kcal at 25% efficiency."""
    assert model.estimate_kcal(200, 60) == pytest.approx(720 / 0.25 / 4.184)


def test_estimate_kcal_custom_efficiency(model):
    assert model.estimate_kcal(200, 60, efficiency=0.2) > model.estimate_kcal(200, 60)


def test_estimate_kcal_invalid_efficiency(model):
    with pytest.raises(ValueError, match="Efficiency"):
        model.estimate_kcal(200, 60, efficiency=0)


def test_estimate_kcal_from_duration(model):
    assert model.estimate_kcal_from_duration(60) == pytest.approx(600.0)
    assert model.estimate_kcal_from_duration(60, 80) == pytest.approx(60 * 10 * 80 / 70)


def test_session_intensity_factor_single_zone(model):
    """A single-zone session has that zone's IF."""
    tss = model.tss(75, "Z3")
    assert model.session_intensity_factor(tss, 75) == pytest.approx(0.85)


def test_session_intensity_factor_zero_duration(model):
    assert model.session_intensity_factor(0, 0) == 0


def test_session_intensity_factor_is_not_average(model):
    """Mixed sessions sit above the time-weighted mean IF because TSS is quadratic."""
    tss = model.tss(30, "Z1") + model.tss(30, "Z5")
    mean_if = (0.55 + 1.05) / 2
    assert model.session_intensity_factor(tss, 60) > mean_if
    assert model.session_intensity_factor(tss, 60) == pytest.approx(
        math.sqrt((0.55 ** 2 + 1.05 ** 2) / 2)
    )
