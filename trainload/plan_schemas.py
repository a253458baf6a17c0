"""
Data schemas for engine outputs and structured workouts.

This module contains Pydantic models for zone tables, structured sessions and
their scores, and the phased season calendar (mesocycles, week targets and
scheduled sessions).
"""

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from trainload.rounding import round_half_up, round_int
from trainload.schemas import PhaseFocus, TrainingPhase, TrainingZone, WeekType, ZoneKind


# ============================================================================
# Zone Tables
# ============================================================================

class SubstrateEstimate(BaseModel):
    """Estimated substrate oxidation and energy cost while riding in a zone."""

    fat_pct: int = Field(..., ge=0, le=100, description="Share of energy from fat (%)")
    cho_pct: int = Field(..., ge=0, le=100, description="Share of energy from carbohydrate (%)")
    pro_pct: int = Field(..., ge=0, le=100, description="Share of energy from protein (%)")
    fat_g_h: int = Field(..., ge=0, description="Fat oxidised (g/h)")
    cho_g_h: int = Field(..., ge=0, description="Carbohydrate oxidised (g/h)")
    pro_g_h: int = Field(..., ge=0, description="Protein oxidised (g/h)")
    kcal_h: int = Field(..., ge=0, description="Energy expenditure (kcal/h)")


class ZoneBand(BaseModel):
    """One zone: a named numeric range in watts or bpm."""

    zone: TrainingZone = Field(..., description="Zone identifier")
    name: str = Field(..., min_length=1, description="Display name")
    min: float = Field(..., ge=0, description="Lower bound (watts or bpm)")
    max: Optional[float] = Field(
        None, description="Upper bound (watts or bpm); None means unbounded"
    )
    substrates: Optional[SubstrateEstimate] = Field(
        None, description="Substrate estimate (heart-rate zones only)"
    )

    @model_validator(mode='after')
    def validate_bounds(self):
        """A zone never has negative width."""
        if self.max is not None and self.max < self.min:
            raise ValueError(
                f"Zone {self.zone.value} upper bound {self.max} is below lower bound {self.min}"
            )
        return self

    def contains(self, value: float) -> bool:
        """Whether a value falls inside this zone (upper bound inclusive)."""
        if value < self.min:
            return False
        return self.max is None or value <= self.max


ZONE_COUNTS: Dict[ZoneKind, int] = {ZoneKind.POWER: 7, ZoneKind.HR: 5}


class ZoneTable(BaseModel):
    """
    Ordered zone table for one signal.

    Power tables have exactly Z1-Z7, heart-rate tables exactly Z1-Z5, in
    order, contiguous and increasing. Only the top zone may be unbounded.
    """

    kind: ZoneKind = Field(..., description="Signal the bounds are expressed in")
    zones: List[ZoneBand] = Field(..., min_length=1, description="Zones, easiest first")

    @model_validator(mode='after')
    def validate_zones(self):
        """Ensure the zone set matches the kind and is contiguous."""
        expected = list(TrainingZone)[: ZONE_COUNTS[self.kind]]
        actual = [band.zone for band in self.zones]
        if actual != expected:
            raise ValueError(
                f"{self.kind.value} zone table must contain "
                f"{', '.join(z.value for z in expected)} in order, got "
                f"{', '.join(z.value for z in actual)}"
            )

        for lower, upper in zip(self.zones, self.zones[1:]):
            if lower.max is None:
                raise ValueError(f"Only the top zone may be unbounded, {lower.zone.value} is")
            if lower.max > upper.min:
                raise ValueError(
                    f"Zones overlap: {lower.zone.value} max {lower.max} > "
                    f"{upper.zone.value} min {upper.min}"
                )
        return self

    def __getitem__(self, key: Union[str, TrainingZone]) -> ZoneBand:
        band = self.get(key)
        if band is None:
            raise KeyError(f"Zone {key!r} is not part of this {self.kind.value} table")
        return band

    def get(self, key: Union[str, TrainingZone]) -> Optional[ZoneBand]:
        """Look up a zone by id (case-insensitive); None if absent."""
        try:
            zone = TrainingZone(key)
        except ValueError:
            return None
        for band in self.zones:
            if band.zone == zone:
                return band
        return None

    @property
    def zone_ids(self) -> List[TrainingZone]:
        """Zone identifiers in order."""
        return [band.zone for band in self.zones]


# ============================================================================
# Structured Workouts
# ============================================================================

class BlockType(str, Enum):
    """Kinds of workout block."""

    WARMUP = "warmup"
    ENDURANCE = "endurance"
    TEMPO = "tempo"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    INTERVALS = "intervals"
    COOLDOWN = "cooldown"


class WorkoutBlock(BaseModel):
    """
    One ordered segment of a session.

    Simple blocks use total_duration_minutes. Interval blocks set
    num_intervals together with interval_duration_seconds and
    rest_between_intervals_seconds; their duration is derived from those
    fields. Consistency of the interval fields is checked when the block is
    used (see trainload.validator.validate_block), not at construction, so a
    half-edited block can still be represented.
    """

    model_config = ConfigDict(frozen=True)

    block_type: BlockType = Field(..., description="Kind of block")
    zone: TrainingZone = Field(..., description="Target zone for the block")
    total_duration_minutes: float = Field(
        0.0, ge=0, description="Block duration for simple blocks (0 = marker/no-op)"
    )
    interval_duration_seconds: Optional[float] = Field(
        None, ge=0, description="Duration of one work interval"
    )
    num_intervals: Optional[int] = Field(
        None, description="Number of work intervals"
    )
    rest_between_intervals_seconds: Optional[float] = Field(
        None, ge=0, description="Rest between consecutive work intervals"
    )
    secondary_zone: Optional[TrainingZone] = Field(
        None, description="Zone for the rest between intervals"
    )

    @field_validator("zone", "secondary_zone", mode="before")
    @classmethod
    def normalize_zone(cls, v):
        """Accept lower-case zone ids at the boundary."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def has_intervals(self) -> bool:
        """True when the block is an interval block."""
        return self.num_intervals is not None


class Session(BaseModel):
    """
    A single training session: ordered blocks plus metadata.

    Sessions are immutable values. Edits go through the functions in
    trainload.workout, which return new sessions. Metrics are never stored
    here; they are recomputed from the blocks by the aggregator.
    """

    model_config = ConfigDict(frozen=True)

    sport: str = Field("cycling", min_length=1, description="Sport discipline")
    session_date: Optional[date] = Field(None, description="Planned date")
    title: str = Field("", description="Session title")
    notes: Optional[str] = Field(None, description="Coach notes")
    blocks: Tuple[WorkoutBlock, ...] = Field(
        default_factory=tuple, description="Ordered workout blocks"
    )

    @property
    def workout_type(self) -> str:
        """'intervals' if any block has intervals, else the first block's type."""
        if any(block.has_intervals for block in self.blocks):
            return BlockType.INTERVALS.value
        if self.blocks:
            return self.blocks[0].block_type.value
        return BlockType.ENDURANCE.value

    @property
    def primary_zone(self) -> TrainingZone:
        """Zone of the first block that is not warm-up or cool-down."""
        for block in self.blocks:
            if block.block_type not in (BlockType.WARMUP, BlockType.COOLDOWN):
                return block.zone
        return TrainingZone.Z2


class SessionScore(BaseModel):
    """Computed load metrics for one session (unrounded)."""

    total_duration_minutes: float = Field(..., ge=0, description="Sum of effective block durations")
    tss: float = Field(..., ge=0, description="Training Stress Score, summed per block")
    intensity_factor: float = Field(..., ge=0, description="Session-level intensity factor")
    average_power_watts: Optional[float] = Field(
        None, ge=0, description="Duration-weighted target power (None without FTP)"
    )
    kcal: float = Field(..., ge=0, description="Estimated energy expenditure")

    def as_record(self) -> Dict[str, Optional[float]]:
        """
        Persisted form of the score: whole numbers, IF to two decimals.

        Returns:
            Dictionary of plain numbers suitable for storage
        """
        return {
            "total_duration_minutes": round_int(self.total_duration_minutes),
            "tss": round_int(self.tss),
            "intensity_factor": round_half_up(self.intensity_factor, 2),
            "average_power_watts": (
                round_int(self.average_power_watts)
                if self.average_power_watts is not None
                else None
            ),
            "kcal": round_int(self.kcal),
        }


# ============================================================================
# Season Calendar
# ============================================================================

class WeekTarget(BaseModel):
    """Planned load for one calendar week."""

    model_config = ConfigDict(frozen=True)

    week_number: int = Field(..., ge=1, le=4, description="Position inside the mesocycle (1-based)")
    start_date: date = Field(..., description="Monday the week starts on")
    week_type: WeekType = Field(..., description="Role of the week")
    load_factor: float = Field(..., ge=0, description="Load relative to average weekly volume")
    planned_hours: float = Field(..., ge=0, description="Planned training hours")
    planned_tss: float = Field(..., ge=0, description="Planned weekly TSS")

    @field_validator("start_date")
    @classmethod
    def validate_monday(cls, v: date) -> date:
        """Weeks start on Monday."""
        if v.weekday() != 0:
            raise ValueError(f"Week start date must be a Monday, got {v.strftime('%A')} {v}")
        return v

    @property
    def end_date(self) -> date:
        """Sunday the week ends on."""
        return self.start_date + timedelta(days=6)


class Mesocycle(BaseModel):
    """A 3-4 week block inside one phase."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1, description="Position of the mesocycle in the season (1-based)")
    name: str = Field(..., min_length=1, description="Display name, e.g. 'Base 2'")
    phase: TrainingPhase = Field(..., description="Phase the mesocycle belongs to")
    focus: PhaseFocus = Field(..., description="Primary physiological focus")
    start_date: date = Field(..., description="First day (Monday)")
    end_date: date = Field(..., description="Last day (Sunday)")
    weekly_hours_target: float = Field(..., gt=0, description="Average weekly hours at load factor 1.0")
    intensity_distribution: Dict[str, int] = Field(
        default_factory=dict, description="Target share of time per zone (%)"
    )
    weeks: Tuple[WeekTarget, ...] = Field(..., min_length=1, max_length=4, description="Week targets")

    @field_validator("weeks")
    @classmethod
    def validate_week_numbering(cls, v: Tuple[WeekTarget, ...]) -> Tuple[WeekTarget, ...]:
        """Validate week numbering is sequential starting from 1."""
        for i, week in enumerate(v, start=1):
            if week.week_number != i:
                raise ValueError(
                    f"Week numbering must be sequential. Expected week {i}, got week {week.week_number}"
                )
        return v

    @model_validator(mode='after')
    def validate_span(self):
        """Start and end dates cover exactly the weeks."""
        expected_end = self.start_date + timedelta(days=7 * len(self.weeks) - 1)
        if self.end_date != expected_end:
            raise ValueError(
                f"Mesocycle {self.name} spans {self.start_date}..{self.end_date} "
                f"but has {len(self.weeks)} weeks (expected end {expected_end})"
            )
        return self

    @property
    def length_weeks(self) -> int:
        """Number of weeks in the mesocycle."""
        return len(self.weeks)

    @property
    def planned_hours(self) -> float:
        """Total planned hours across the mesocycle."""
        return sum(week.planned_hours for week in self.weeks)

    @property
    def planned_tss(self) -> float:
        """Total planned TSS across the mesocycle."""
        return sum(week.planned_tss for week in self.weeks)


class PlanDecision(BaseModel):
    """
    Documents a specific decision made during season planning.

    Used for the reasoning trace to explain why the calendar looks the way it does.
    """

    decision_point: str = Field(
        ..., min_length=5, description="The decision that was made"
    )
    input_factors: List[str] = Field(
        ..., min_length=1, description="Factors that influenced this decision"
    )
    reasoning: str = Field(
        ..., min_length=20, description="Explanation of why this decision was made"
    )
    outcome: str = Field(
        ..., min_length=10, description="The resulting choice or action taken"
    )


class SeasonCalendar(BaseModel):
    """
    Complete phased season: mesocycles with their week targets.

    Built once by the planner; individual weeks can then be overridden with
    with_week_override(), which returns a new calendar and leaves every other
    week untouched.
    """

    model_config = ConfigDict(frozen=True)

    season_start: date = Field(..., description="Monday the season starts on")
    season_end: date = Field(..., description="Goal date plus recovery buffer")
    goal_date: date = Field(..., description="Resolved main goal date")
    total_weeks: int = Field(..., ge=1, description="Usable weeks in the season window")
    mesocycle_length_weeks: int = Field(..., ge=3, le=4, description="Nominal mesocycle length")
    mesocycles: Tuple[Mesocycle, ...] = Field(..., min_length=1, description="Mesocycles in order")
    plan_decisions: Tuple[PlanDecision, ...] = Field(
        default_factory=tuple,
        description="Key decisions made during planning (for reasoning trace)",
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow, description="Timestamp when the calendar was built"
    )

    @field_validator("mesocycles")
    @classmethod
    def validate_mesocycle_order(cls, v: Tuple[Mesocycle, ...]) -> Tuple[Mesocycle, ...]:
        """Mesocycles are numbered in order and do not overlap."""
        for i, meso in enumerate(v, start=1):
            if meso.index != i:
                raise ValueError(
                    f"Mesocycle numbering must be sequential. Expected {i}, got {meso.index}"
                )
        for previous, current in zip(v, v[1:]):
            if current.start_date <= previous.end_date:
                raise ValueError(
                    f"Mesocycle {current.name} starts {current.start_date} before "
                    f"{previous.name} ends {previous.end_date}"
                )
        return v

    @property
    def planned_weeks(self) -> int:
        """Number of weeks actually emitted."""
        return sum(meso.length_weeks for meso in self.mesocycles)

    @property
    def total_planned_hours(self) -> float:
        """Planned hours over the whole season."""
        return sum(meso.planned_hours for meso in self.mesocycles)

    @property
    def total_planned_tss(self) -> float:
        """Planned TSS over the whole season."""
        return sum(meso.planned_tss for meso in self.mesocycles)

    def iter_weeks(self) -> Iterator[Tuple[Mesocycle, WeekTarget]]:
        """Yield (mesocycle, week) pairs in calendar order."""
        for meso in self.mesocycles:
            for week in meso.weeks:
                yield meso, week

    def get_phase_breakdown(self) -> Dict[str, int]:
        """
        Get the number of weeks in each phase.

        Returns:
            Dictionary mapping phase names to week counts.
        """
        phase_counts: Dict[str, int] = {}
        for meso in self.mesocycles:
            phase_name = meso.phase.value
            phase_counts[phase_name] = phase_counts.get(phase_name, 0) + meso.length_weeks
        return phase_counts

    def with_week_override(
        self, mesocycle_index: int, week_number: int, **updates
    ) -> "SeasonCalendar":
        """
        Return a copy of the calendar with one week's fields replaced.

        Args:
            mesocycle_index: 1-based mesocycle index
            week_number: 1-based week position inside that mesocycle
            **updates: WeekTarget fields to override (e.g. planned_hours=9.5)

        Returns:
            New SeasonCalendar; this calendar is not modified

        Raises:
            KeyError: If the mesocycle or week does not exist
            ValueError: If an update names an unknown field or an invalid value
        """
        unknown = set(updates) - set(WeekTarget.model_fields)
        if unknown:
            raise ValueError(f"Unknown week fields: {', '.join(sorted(unknown))}")
        if "week_number" in updates or "start_date" in updates:
            raise ValueError("week_number and start_date are fixed by the calendar")

        mesocycles: List[Mesocycle] = []
        found = False
        for meso in self.mesocycles:
            if meso.index != mesocycle_index:
                mesocycles.append(meso.model_copy(deep=True))
                continue
            weeks: List[WeekTarget] = []
            for week in meso.weeks:
                if week.week_number == week_number:
                    week = WeekTarget.model_validate({**week.model_dump(), **updates})
                    found = True
                weeks.append(week)
            mesocycles.append(meso.model_copy(update={"weeks": tuple(weeks)}, deep=True))

        if not found:
            raise KeyError(
                f"No week {week_number} in mesocycle {mesocycle_index}"
            )
        return self.model_copy(update={"mesocycles": tuple(mesocycles)}, deep=True)


# ============================================================================
# Weekly Schedule
# ============================================================================

class DayTemplate(BaseModel):
    """One day of a phase's weekly template."""

    day_offset: int = Field(..., ge=0, le=6, description="Days after the week's Monday")
    effort_type: str = Field(..., min_length=1, description="Kind of effort (endurance, rest, ...)")
    zone: Optional[TrainingZone] = Field(None, description="Target zone; None for rest days")
    duration_factor: float = Field(
        ..., ge=0, description="Multiple of the average daily volume (0 = rest)"
    )
    description: str = Field(..., min_length=1, description="Human-readable label")

    @model_validator(mode='after')
    def validate_rest(self):
        """Training days need a zone."""
        if self.duration_factor > 0 and self.zone is None:
            raise ValueError(f"Day {self.day_offset} ({self.effort_type}) trains but has no zone")
        return self


class ScheduledSession(BaseModel):
    """A concrete dated session emitted from a week target."""

    session_date: date = Field(..., description="Date of the session")
    sport: str = Field(..., min_length=1, description="Sport discipline")
    effort_type: str = Field(..., description="Kind of effort from the template")
    zone: TrainingZone = Field(..., description="Target zone")
    duration_minutes: int = Field(..., gt=0, description="Planned duration")
    title: str = Field(..., min_length=1, description="Session title")
    description: str = Field(..., description="Session description")
    tss: int = Field(..., ge=0, description="Planned TSS")
    phase: TrainingPhase = Field(..., description="Phase of the parent mesocycle")
    mesocycle_name: str = Field(..., description="Name of the parent mesocycle")
    week_number: int = Field(..., ge=1, description="Week position inside the mesocycle")
    week_type: WeekType = Field(..., description="Role of the parent week")
    load_factor: float = Field(..., ge=0, description="Load factor of the parent week")
    zone_kind: ZoneKind = Field(ZoneKind.POWER, description="Signal the target range uses")
    target_min: Optional[float] = Field(None, description="Lower bound of the target range")
    target_max: Optional[float] = Field(None, description="Upper bound of the target range")
