"""
Pydantic models for engine inputs and configuration.

This module defines the core input structures for:
- Physiological Profiles: the few numbers zones and load estimates are derived from
- Season Plans: goal dates, events and volume targets for mesocycle planning
- Engine Configuration: every tunable coefficient, with one canonical default set
"""

import json
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# ============================================================================
# Enumerations
# ============================================================================

class TrainingZone(str, Enum):
    """Shared zone vocabulary for workout blocks and the load model (Z1 easiest)."""
    Z1 = "Z1"  # Active recovery
    Z2 = "Z2"  # Endurance
    Z3 = "Z3"  # Tempo
    Z4 = "Z4"  # Threshold
    Z5 = "Z5"  # VO2max
    Z6 = "Z6"  # Anaerobic
    Z7 = "Z7"  # Neuromuscular

    @classmethod
    def _missing_(cls, value):
        # Accept "z4" as well as "Z4"; anything else is still rejected.
        if isinstance(value, str):
            upper = value.strip().upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None


class ZoneKind(str, Enum):
    """Which physiological signal a zone table is expressed in."""
    POWER = "power"
    HR = "hr"


class HRZoneModel(str, Enum):
    """Reference heart rate the HR zone breakpoints are fractions of."""
    THRESHOLD = "threshold"  # % of LTHR
    MAX_HR = "max_hr"  # % of HRmax


class EventType(str, Enum):
    """Season event categories."""
    EVENT_A = "event_a"  # Main goal
    EVENT_B = "event_b"  # Important
    EVENT_C = "event_c"  # Training race
    TRAINING_CAMP = "training_camp"
    PERFORMANCE_TEST = "performance_test"


class TrainingPhase(str, Enum):
    """Season-level training phases."""
    BASE = "base"
    BUILD = "build"
    PEAK = "peak"
    RACE = "race"
    RECOVERY = "recovery"
    TRANSITION = "transition"


class PhaseFocus(str, Enum):
    """Primary physiological focus of a mesocycle."""
    ENDURANCE = "endurance"
    THRESHOLD = "threshold"
    VO2MAX = "vo2max"
    ANAEROBIC = "anaerobic"
    SPRINT = "sprint"
    MIXED = "mixed"


class WeekType(str, Enum):
    """Role of a week inside its mesocycle."""
    LOAD = "load"
    LOAD_HIGH = "load_high"
    RECOVERY = "recovery"
    TEST = "test"
    RACE = "race"
    TAPER = "taper"


class Weekday(str, Enum):
    """Days of the week."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def weekday_number(self) -> int:
        """Monday-based number matching date.weekday()."""
        return list(Weekday).index(self)


# ============================================================================
# Physiological Profile
# ============================================================================

class PhysiologicalProfile(BaseModel):
    """
    Athlete's physiological inputs.

    Supplied fresh on every computation call; the engine keeps no athlete
    identity or state. Any field may be missing, in which case the
    computations that need it are not produced.
    """

    ftp_watts: Optional[float] = Field(
        default=None,
        gt=0,
        description="Functional Threshold Power in watts"
    )

    hr_max: Optional[int] = Field(
        default=None,
        gt=0,
        description="Maximum heart rate (bpm)"
    )

    hr_threshold: Optional[int] = Field(
        default=None,
        gt=0,
        description="Lactate threshold heart rate, LTHR (bpm)"
    )

    hr_rest: Optional[int] = Field(
        default=None,
        gt=0,
        description="Resting heart rate (bpm)"
    )

    weight_kg: Optional[float] = Field(
        default=None,
        gt=0,
        description="Body weight in kg (defaults to 70 for energy estimates)"
    )

    @property
    def has_hr_inputs(self) -> bool:
        """True when all three heart-rate anchors are present."""
        return None not in (self.hr_max, self.hr_threshold, self.hr_rest)

    def effective_weight_kg(self, default: float = 70.0) -> float:
        """Body weight for energy estimates, falling back to the default."""
        return self.weight_kg if self.weight_kg is not None else default


# ============================================================================
# Season Plan Components
# ============================================================================

class Event(BaseModel):
    """A dated event in the athlete's season."""

    name: str = Field(
        ...,
        min_length=1,
        description="Event name"
    )

    event_date: date = Field(
        ...,
        description="Date of the event"
    )

    event_type: EventType = Field(
        default=EventType.EVENT_C,
        description="Event category (event_a is the main goal)"
    )

    priority: int = Field(
        default=3,
        ge=1,
        le=3,
        description="Priority, 1 = highest"
    )

    description: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )


class LoadProgression(BaseModel):
    """Per-week load multipliers inside a mesocycle, by position."""

    week1: float = Field(..., gt=0, description="Load factor for week 1")
    week2: float = Field(..., gt=0, description="Load factor for week 2")
    week3: float = Field(..., gt=0, description="Load factor for week 3")
    week4: Optional[float] = Field(
        default=None,
        gt=0,
        description="Load factor for week 4 (4-week mesocycles only)"
    )

    @classmethod
    def default_for(cls, mesocycle_length: int) -> "LoadProgression":
        """Default progression: build, build higher, then unload."""
        if mesocycle_length == 4:
            return cls(week1=1.0, week2=1.1, week3=1.15, week4=0.8)
        return cls(week1=1.0, week2=1.1, week3=0.85)

    def factor_for(self, position: int) -> float:
        """
        Load factor for a 1-based position inside the mesocycle.

        Args:
            position: Week position (1-4)

        Returns:
            Load factor; week 4 falls back to 0.8 when not configured

        Raises:
            ValueError: If position is outside 1-4
        """
        if position == 1:
            return self.week1
        if position == 2:
            return self.week2
        if position == 3:
            return self.week3
        if position == 4:
            return self.week4 if self.week4 is not None else 0.8
        raise ValueError(f"Mesocycle week position must be 1-4, got {position}")


class PhaseMultipliers(BaseModel):
    """Load multipliers applied on top of the progression, per phase."""

    base: float = Field(default=1.2, gt=0, description="Base phase multiplier")
    build: float = Field(default=1.0, gt=0, description="Build phase multiplier")
    peak: float = Field(default=0.8, gt=0, description="Peak phase multiplier")

    def for_phase(self, phase: TrainingPhase) -> float:
        """Multiplier for a phase; phases without one use 1.0."""
        return {
            TrainingPhase.BASE: self.base,
            TrainingPhase.BUILD: self.build,
            TrainingPhase.PEAK: self.peak,
        }.get(phase, 1.0)


class SeasonPlan(BaseModel):
    """
    Season-level planning inputs.

    Either main_goal_date or at least one event is needed for the planner to
    resolve a goal date.
    """

    year: int = Field(
        ...,
        ge=1900,
        le=2200,
        description="Season year"
    )

    season_start: Optional[date] = Field(
        default=None,
        description="Earliest planning date (defaults to 1 January of year)"
    )

    main_goal_date: Optional[date] = Field(
        default=None,
        description="Date of the main goal; overrides event-based resolution"
    )

    events: List[Event] = Field(
        default_factory=list,
        description="Season events"
    )

    mesocycle_length_weeks: Literal[3, 4] = Field(
        default=3,
        description="Nominal mesocycle length"
    )

    load_progression: Optional[LoadProgression] = Field(
        default=None,
        description="Per-position load factors (defaults by mesocycle length)"
    )

    phase_multipliers: PhaseMultipliers = Field(
        default_factory=PhaseMultipliers,
        description="Per-phase load multipliers"
    )

    weekly_hours_min: float = Field(
        default=6.0,
        gt=0,
        description="Lower bound of the target weekly hours range"
    )

    weekly_hours_max: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound of the target weekly hours range"
    )

    weekly_tss_capacity: float = Field(
        default=500.0,
        gt=0,
        description="Weekly TSS the athlete can absorb at load factor 1.0"
    )

    @model_validator(mode='after')
    def validate_hours_range(self):
        """Ensure the weekly hours range is ordered."""
        if self.weekly_hours_min > self.weekly_hours_max:
            raise ValueError(
                f"weekly_hours_min ({self.weekly_hours_min}) cannot exceed "
                f"weekly_hours_max ({self.weekly_hours_max})"
            )
        return self

    @property
    def avg_weekly_hours(self) -> float:
        """Midpoint of the weekly hours range."""
        return (self.weekly_hours_min + self.weekly_hours_max) / 2

    def effective_load_progression(self) -> LoadProgression:
        """Configured progression or the default for the mesocycle length."""
        if self.load_progression is not None:
            return self.load_progression
        return LoadProgression.default_for(self.mesocycle_length_weeks)

    def effective_season_start(self) -> date:
        """Configured season start or 1 January of the season year."""
        return self.season_start or date(self.year, 1, 1)


# ============================================================================
# Engine Configuration
# ============================================================================

DEFAULT_INTENSITY_FACTORS: Dict[TrainingZone, float] = {
    TrainingZone.Z1: 0.55,
    TrainingZone.Z2: 0.70,
    TrainingZone.Z3: 0.85,
    TrainingZone.Z4: 0.95,
    TrainingZone.Z5: 1.05,
    TrainingZone.Z6: 1.20,
    TrainingZone.Z7: 1.50,
}

# Fractions of FTP between Z1|Z2 ... Z6|Z7.
DEFAULT_POWER_ZONE_BREAKPOINTS: List[float] = [0.55, 0.75, 0.90, 1.05, 1.20, 1.50]

# Fractions of the reference HR between Z1|Z2, Z2|Z3, Z3|Z4, Z4|Z5.
# The max_hr set is the threshold set scaled by a threshold of 0.9 x HRmax.
DEFAULT_HR_ZONE_BREAKPOINTS: Dict[HRZoneModel, List[float]] = {
    HRZoneModel.THRESHOLD: [0.81, 0.89, 0.95, 1.05],
    HRZoneModel.MAX_HR: [0.73, 0.80, 0.855, 0.945],
}

DEFAULT_PHASE_SHARES: Dict[TrainingPhase, float] = {
    TrainingPhase.BASE: 0.35,
    TrainingPhase.BUILD: 0.35,
    TrainingPhase.PEAK: 0.15,
    TrainingPhase.RACE: 0.10,
    TrainingPhase.RECOVERY: 0.05,
    TrainingPhase.TRANSITION: 0.0,
}


def _check_breakpoints(values: List[float], count: int, label: str) -> List[float]:
    if len(values) != count:
        raise ValueError(f"Expected {count} {label} zone breakpoints, got {len(values)}")
    if values[0] <= 0:
        raise ValueError(f"{label} zone breakpoints must be positive, got {values[0]}")
    for lower, upper in zip(values, values[1:]):
        if upper <= lower:
            raise ValueError(
                f"{label} zone breakpoints must be strictly increasing, got {lower} then {upper}"
            )
    return values


class EngineConfig(BaseModel):
    """
    Tunable coefficients for zones, load and planning.

    The defaults are the single canonical set used by both the season planner
    and the single-session scorer. Several of them (phase average intensities
    in particular) are heuristics rather than measured constants, which is
    why they live here instead of in the formulas.
    """

    intensity_factors: Dict[TrainingZone, float] = Field(
        default_factory=lambda: dict(DEFAULT_INTENSITY_FACTORS),
        description="Intensity factor per zone"
    )

    power_zone_breakpoints: List[float] = Field(
        default_factory=lambda: list(DEFAULT_POWER_ZONE_BREAKPOINTS),
        description="Boundaries between the 7 power zones as fractions of FTP"
    )

    hr_zone_model: HRZoneModel = Field(
        default=HRZoneModel.THRESHOLD,
        description="Whether HR breakpoints are fractions of threshold HR or of HR max"
    )

    hr_zone_breakpoints: Optional[List[float]] = Field(
        default=None,
        description="Boundaries between the 5 HR zones (None = default set for the model)"
    )

    phase_shares: Dict[TrainingPhase, float] = Field(
        default_factory=lambda: dict(DEFAULT_PHASE_SHARES),
        description="Share of season weeks allocated to each phase"
    )

    phase_avg_intensity: Dict[TrainingPhase, float] = Field(
        default_factory=lambda: {TrainingPhase.BASE: 0.65, TrainingPhase.BUILD: 0.75},
        description="Average intensity used for planned TSS, per phase"
    )

    default_avg_intensity: float = Field(
        default=0.80,
        gt=0,
        description="Average intensity for phases not listed in phase_avg_intensity"
    )

    recovery_phase_load_factor: float = Field(
        default=0.6,
        gt=0,
        description="Fixed load factor for every week of the recovery phase"
    )

    lead_in_weeks: int = Field(
        default=12,
        ge=0,
        description="Weeks before the first event the season may start"
    )

    recovery_buffer_days: int = Field(
        default=14,
        ge=0,
        description="Days after the goal date included in the season"
    )

    min_session_minutes: int = Field(
        default=15,
        ge=0,
        description="Scheduled sessions shorter than this are dropped"
    )

    mechanical_efficiency: float = Field(
        default=0.25,
        gt=0,
        le=1.0,
        description="Gross mechanical efficiency for kcal estimates"
    )

    default_weight_kg: float = Field(
        default=70.0,
        gt=0,
        description="Body weight used when the profile has none"
    )

    tss_capacity_per_ftp_watt: float = Field(
        default=1.5,
        gt=0,
        description="Weekly TSS capacity estimate per watt of FTP"
    )

    @field_validator("intensity_factors")
    @classmethod
    def validate_intensity_factors(cls, v: Dict[TrainingZone, float]) -> Dict[TrainingZone, float]:
        """Every zone needs a positive intensity factor."""
        missing = [zone.value for zone in TrainingZone if zone not in v]
        if missing:
            raise ValueError(f"Missing intensity factors for zones: {', '.join(missing)}")
        for zone, factor in v.items():
            if factor <= 0:
                raise ValueError(f"Intensity factor for {zone.value} must be positive, got {factor}")
        return v

    @field_validator("phase_shares")
    @classmethod
    def validate_phase_shares(cls, v: Dict[TrainingPhase, float]) -> Dict[TrainingPhase, float]:
        """Ensure phase shares are non-negative and sum to 1.0 (100%)."""
        if any(share < 0 for share in v.values()):
            raise ValueError("Phase shares cannot be negative")
        total = sum(v.values())
        if not (0.99 <= total <= 1.01):
            raise ValueError(f"Phase shares must sum to 1.0 (100%), got {total:.3f}")
        return v

    @field_validator("power_zone_breakpoints")
    @classmethod
    def validate_power_zone_breakpoints(cls, v: List[float]) -> List[float]:
        """Six positive, strictly increasing FTP fractions."""
        return _check_breakpoints(v, 6, "power")

    @field_validator("hr_zone_breakpoints")
    @classmethod
    def validate_hr_zone_breakpoints(cls, v: Optional[List[float]]) -> Optional[List[float]]:
        """Four positive, strictly increasing HR fractions."""
        if v is None:
            return v
        return _check_breakpoints(v, 4, "HR")

    def hr_breakpoints(self) -> List[float]:
        """HR zone breakpoints in use: the configured set or the model's default."""
        if self.hr_zone_breakpoints is not None:
            return list(self.hr_zone_breakpoints)
        return list(DEFAULT_HR_ZONE_BREAKPOINTS[self.hr_zone_model])

    def avg_intensity_for(self, phase: TrainingPhase) -> float:
        """Average intensity used to turn planned hours into planned TSS."""
        return self.phase_avg_intensity.get(phase, self.default_avg_intensity)

    @classmethod
    def from_file(cls, config_path: Path) -> "EngineConfig":
        """
        Load engine configuration from a JSON file.

        Args:
            config_path: Path to the JSON configuration card

        Returns:
            EngineConfig instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the JSON is not a valid configuration
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Engine config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        try:
            return cls(**data)
        except Exception as e:
            raise ValueError(f"Invalid engine config file: {e}")
