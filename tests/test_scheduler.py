"""
Tests for weekly schedule assignment.

Covers:
- Session dates, durations and TSS for a base week
- Rest template days and athlete rest days
- Minimum session duration
- Target ranges from power and heart-rate zone tables
- Race and recovery week sessions
- Custom templates and scheduling a subset of mesocycles
"""

import json
from datetime import date, timedelta
from pathlib import Path

import pytest

from trainload.load_model import LoadModel
from trainload.plan_schemas import DayTemplate
from trainload.planner import MesocyclePlanner
from trainload.rounding import round_int
from trainload.scheduler import PHASE_TEMPLATES, WeeklyScheduleAssigner
from trainload.schemas import (
    PhysiologicalProfile,
    SeasonPlan,
    TrainingPhase,
    TrainingZone,
    Weekday,
    WeekType,
    ZoneKind,
)

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def calendar():
    """28-week season at 9 h/week average."""
    with open(FIXTURES / "season_26_weeks.json") as f:
        season = SeasonPlan(**json.load(f))
    return MesocyclePlanner(season).plan()


@pytest.fixture
def full_profile():
    with open(FIXTURES / "profile_full.json") as f:
        return PhysiologicalProfile(**json.load(f))


@pytest.fixture
def assigner():
    return WeeklyScheduleAssigner()


def _week_sessions(sessions, start):
    return [s for s in sessions if start <= s.session_date <= start + timedelta(days=6)]


def test_base_week_durations(assigner, calendar):
    """Base daily volume 9/7 h scaled by template factor and load factor 1.2."""
    sessions = assigner.assign_week(calendar.mesocycles[0], calendar.mesocycles[0].weeks[0])

    assert [s.session_date for s in sessions] == [
        date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3),
        date(2024, 1, 5), date(2024, 1, 6), date(2024, 1, 7),
    ]
    assert [s.duration_minutes for s in sessions] == [74, 46, 93, 65, 139, 37]


def test_session_fields(assigner, calendar):
    monday = assigner.assign_week(calendar.mesocycles[0], calendar.mesocycles[0].weeks[0])[0]

    assert monday.title == "Base - Endurance Z2"
    assert monday.description == "Endurance Z2 (Base 1 - Week 1)"
    assert monday.zone == TrainingZone.Z2
    assert monday.effort_type == "endurance"
    assert monday.tss == 60
    assert monday.phase == TrainingPhase.BASE
    assert monday.week_type == WeekType.LOAD
    assert monday.load_factor == 1.2
    assert monday.sport == "cycling"


def test_session_tss_matches_load_model(assigner, calendar):
    model = LoadModel()
    for s in assigner.assign(calendar):
        assert s.tss == round_int(model.tss(s.duration_minutes, s.zone))


def test_sessions_on_template_offsets(assigner, calendar):
    for meso in calendar.mesocycles:
        offsets = {d.day_offset for d in PHASE_TEMPLATES[meso.phase] if d.duration_factor > 0}
        for week in meso.weeks:
            for s in assigner.assign_week(meso, week):
                assert (s.session_date - week.start_date).days in offsets


def test_template_rest_days_empty(assigner, calendar):
    """Thursday is a rest day in the base template."""
    sessions = assigner.assign(calendar.mesocycles[:4])
    assert all(s.session_date.weekday() != 3 for s in sessions)


def test_athlete_rest_days(assigner, calendar):
    sessions = assigner.assign(calendar, rest_days=[Weekday.MONDAY, Weekday.SATURDAY])

    assert sessions
    assert all(s.session_date.weekday() not in (0, 5) for s in sessions)
    assert len(_week_sessions(sessions, date(2024, 1, 1))) == 4


def test_minimum_session_duration(assigner, calendar):
    sessions = assigner.assign(calendar)
    assert all(s.duration_minutes >= 15 for s in sessions)


def test_short_sessions_dropped():
    """At 1.5 h/week only the longer template days survive."""
    season = SeasonPlan(
        year=2024,
        season_start=date(2024, 1, 1),
        main_goal_date=date(2024, 7, 1),
        weekly_hours_min=1,
        weekly_hours_max=2,
    )
    calendar = MesocyclePlanner(season).plan()
    sessions = WeeklyScheduleAssigner().assign_week(
        calendar.mesocycles[0], calendar.mesocycles[0].weeks[0]
    )

    assert [s.session_date.weekday() for s in sessions] == [2, 5]
    assert all(s.duration_minutes >= 15 for s in sessions)


def test_power_targets(assigner, calendar, full_profile):
    sessions = assigner.assign(calendar.mesocycles[:1], profile=full_profile)
    monday = sessions[0]

    assert monday.zone_kind == ZoneKind.POWER
    assert (monday.target_min, monday.target_max) == (138, 188)


def test_hr_targets_missing_zone(assigner, calendar, full_profile):
    """Heart-rate tables stop at Z5, so Z6 sessions carry no target."""
    sessions = assigner.assign(calendar, profile=full_profile, zone_kind=ZoneKind.HR)

    z6 = [s for s in sessions if s.zone == TrainingZone.Z6]
    z2 = [s for s in sessions if s.zone == TrainingZone.Z2]
    assert z6 and all(s.target_min is None and s.target_max is None for s in z6)
    assert all(s.target_min == 138 and s.target_max == 151 for s in z2)


def test_no_targets_without_inputs(assigner, calendar):
    hr_only = PhysiologicalProfile(hr_max=190, hr_threshold=170, hr_rest=50)
    sessions = assigner.assign(calendar.mesocycles[:1], profile=hr_only)

    assert all(s.target_min is None for s in sessions)
    assert all(s.target_min is None for s in assigner.assign(calendar.mesocycles[:1]))


def test_race_week_sessions(assigner, calendar):
    race = next(m for m in calendar.mesocycles if m.phase == TrainingPhase.RACE)
    sessions = assigner.assign_week(race, race.weeks[0])

    assert [s.duration_minutes for s in sessions] == [39, 31, 31, 77, 23]
    assert all(s.week_type == WeekType.RACE for s in sessions)
    assert sessions[3].title == "Race - Race"


def test_recovery_week_sessions(assigner, calendar):
    recovery = calendar.mesocycles[-1]
    sessions = assigner.assign_week(recovery, recovery.weeks[0])

    assert recovery.phase == TrainingPhase.RECOVERY
    assert [s.duration_minutes for s in sessions] == [19, 23, 23, 19]
    assert all(s.load_factor == 0.6 for s in sessions)


def test_assign_calendar_covers_every_week(assigner, calendar):
    sessions = assigner.assign(calendar, sport="running")

    assert {s.sport for s in sessions} == {"running"}
    for _, week in calendar.iter_weeks():
        assert _week_sessions(sessions, week.start_date)
    assert sessions == sorted(sessions, key=lambda s: s.session_date)


def test_custom_template_falls_back_to_base(calendar):
    templates = {
        TrainingPhase.BASE: [
            DayTemplate(
                day_offset=6,
                effort_type="long",
                zone=TrainingZone.Z2,
                duration_factor=2.0,
                description="Long run",
            )
        ]
    }
    assigner = WeeklyScheduleAssigner(templates=templates)
    peak = next(m for m in calendar.mesocycles if m.phase == TrainingPhase.PEAK)

    sessions = assigner.assign_week(peak, peak.weeks[0])
    assert len(sessions) == 1
    assert sessions[0].session_date.weekday() == 6
    assert sessions[0].title == "Peak - Long run"


def test_custom_template_without_base(calendar):
    """Covered phases schedule; uncovered ones fail with a clear error."""
    templates = {
        TrainingPhase.BUILD: [
            DayTemplate(
                day_offset=2,
                effort_type="threshold",
                zone=TrainingZone.Z4,
                duration_factor=1.5,
                description="Threshold intervals",
            )
        ]
    }
    assigner = WeeklyScheduleAssigner(templates=templates)
    build = next(m for m in calendar.mesocycles if m.phase == TrainingPhase.BUILD)

    sessions = assigner.assign_week(build, build.weeks[0])
    assert [s.session_date.weekday() for s in sessions] == [2]

    with pytest.raises(ValueError, match="no base template"):
        assigner.assign(calendar)
