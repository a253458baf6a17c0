"""
Season planner: phases, mesocycles and weekly load targets.

This module partitions a season into phased mesocycles based on:
- The resolved main goal date and a Monday-aligned season window
- Fixed phase shares (base/build/peak/race/recovery)
- A per-position load progression and per-phase multipliers
- The athlete's weekly hours range and weekly TSS capacity
"""

import math
from datetime import date, timedelta
from typing import Dict, Iterator, List, Optional, Tuple

from loguru import logger

from trainload.errors import UnplannableSeason
from trainload.plan_schemas import Mesocycle, PlanDecision, SeasonCalendar, WeekTarget
from trainload.rounding import round_half_up, round_int
from trainload.schemas import (
    EngineConfig,
    PhaseFocus,
    SeasonPlan,
    TrainingPhase,
    WeekType,
)
from trainload.validator import resolve_goal_date


PHASE_ORDER: List[TrainingPhase] = [
    TrainingPhase.BASE,
    TrainingPhase.BUILD,
    TrainingPhase.PEAK,
    TrainingPhase.RACE,
    TrainingPhase.RECOVERY,
    TrainingPhase.TRANSITION,
]

PHASE_FOCUS: Dict[TrainingPhase, PhaseFocus] = {
    TrainingPhase.BASE: PhaseFocus.ENDURANCE,
    TrainingPhase.BUILD: PhaseFocus.THRESHOLD,
    TrainingPhase.PEAK: PhaseFocus.VO2MAX,
    TrainingPhase.RACE: PhaseFocus.MIXED,
    TrainingPhase.RECOVERY: PhaseFocus.ENDURANCE,
    TrainingPhase.TRANSITION: PhaseFocus.ENDURANCE,
}

# Target share of training time per zone (%), per phase.
DEFAULT_INTENSITY_DISTRIBUTION: Dict[TrainingPhase, Dict[str, int]] = {
    TrainingPhase.BASE: {"z1": 25, "z2": 55, "z3": 15, "z4": 5, "z5": 0, "z6": 0, "z7": 0},
    TrainingPhase.BUILD: {"z1": 15, "z2": 45, "z3": 20, "z4": 15, "z5": 5, "z6": 0, "z7": 0},
    TrainingPhase.PEAK: {"z1": 10, "z2": 35, "z3": 20, "z4": 20, "z5": 10, "z6": 5, "z7": 0},
    TrainingPhase.RACE: {"z1": 20, "z2": 40, "z3": 15, "z4": 15, "z5": 5, "z6": 3, "z7": 2},
    TrainingPhase.RECOVERY: {"z1": 40, "z2": 50, "z3": 10, "z4": 0, "z5": 0, "z6": 0, "z7": 0},
    TrainingPhase.TRANSITION: {"z1": 50, "z2": 40, "z3": 10, "z4": 0, "z5": 0, "z6": 0, "z7": 0},
}

THREE_WEEK_TYPES = [WeekType.LOAD, WeekType.LOAD_HIGH, WeekType.RECOVERY]
FOUR_WEEK_TYPES = [WeekType.LOAD, WeekType.LOAD_HIGH, WeekType.LOAD_HIGH, WeekType.RECOVERY]


def monday_on_or_before(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_type_for(position: int, length_weeks: int) -> WeekType:
    """
    Week role by position inside a mesocycle.

    A 3-week mesocycle is load, load_high, recovery. Every other length uses
    the 4-week pattern load, load_high, load_high, recovery cut to length.
    """
    pattern = THREE_WEEK_TYPES if length_weeks == 3 else FOUR_WEEK_TYPES
    return pattern[position - 1]


class MesocyclePlanner:
    """
    Builds a phased season calendar from a SeasonPlan.

    The planner:
    1. Resolves the main goal date (refuses the season if there is none)
    2. Determines the Monday-aligned season window and its usable weeks
    3. Allocates weeks to phases by fixed shares
    4. Carves each phase into mesocycles of the nominal length
    5. Assigns week types, load factors and hours/TSS targets
    6. Documents all decisions for the reasoning trace
    """

    def __init__(self, season: SeasonPlan, config: Optional[EngineConfig] = None):
        """
        Initialize the planner.

        Args:
            season: Season inputs
            config: Engine configuration (defaults if omitted)

        Raises:
            UnplannableSeason: If no goal date can be resolved
        """
        self.season = season
        self.config = config or EngineConfig()
        self.goal_date = resolve_goal_date(season)
        self.plan_decisions: List[PlanDecision] = []

    def season_window(self) -> Tuple[date, date, int]:
        """
        Compute the season window.

        Starts on the Monday on or before the earlier of the season start and
        lead-in weeks before the first event; ends the recovery buffer after
        the goal date.

        Returns:
            (season_start, season_end, total_weeks)

        Raises:
            UnplannableSeason: If the window contains no weeks
        """
        events = sorted(self.season.events, key=lambda e: e.event_date)
        first_event = events[0].event_date if events else self.goal_date
        lead_in_start = first_event - timedelta(weeks=self.config.lead_in_weeks)

        start = monday_on_or_before(min(self.season.effective_season_start(), lead_in_start))
        end = self.goal_date + timedelta(days=self.config.recovery_buffer_days)
        total_weeks = math.ceil((end - start).days / 7)

        if total_weeks < 1:
            raise UnplannableSeason(
                f"Season window {start}..{end} contains no training weeks"
            )
        return start, end, total_weeks

    def allocate_phases(self, total_weeks: int) -> Dict[TrainingPhase, int]:
        """
        Allocate weeks to phases by configured share.

        Args:
            total_weeks: Usable weeks in the season window

        Returns:
            Ordered mapping of phase to week count; phases with 0 weeks are omitted

        Raises:
            UnplannableSeason: If no phase receives a week
        """
        allocation: Dict[TrainingPhase, int] = {}
        for phase in PHASE_ORDER:
            weeks = round_int(total_weeks * self.config.phase_shares.get(phase, 0.0))
            if weeks > 0:
                allocation[phase] = weeks

        if not allocation:
            raise UnplannableSeason(
                f"A {total_weeks}-week season is too short to allocate any phase"
            )
        return allocation

    def _build_weeks(
        self, phase: TrainingPhase, start: date, length_weeks: int
    ) -> List[WeekTarget]:
        progression = self.season.effective_load_progression()
        multiplier = self.season.phase_multipliers.for_phase(phase)
        avg_intensity = self.config.avg_intensity_for(phase)
        base_hours = self.season.avg_weekly_hours

        weeks = []
        for position in range(1, length_weeks + 1):
            load_factor = progression.factor_for(position) * multiplier
            week_type = week_type_for(position, length_weeks)

            if phase == TrainingPhase.RACE:
                week_type = WeekType.RACE
            elif phase == TrainingPhase.RECOVERY:
                week_type = WeekType.RECOVERY
                load_factor = self.config.recovery_phase_load_factor

            planned_hours = round_half_up(base_hours * load_factor, 1)
            planned_tss = min(
                round_int(planned_hours * 100 * avg_intensity),
                self.season.weekly_tss_capacity * load_factor,
            )

            weeks.append(
                WeekTarget(
                    week_number=position,
                    start_date=start + timedelta(weeks=position - 1),
                    week_type=week_type,
                    load_factor=round_half_up(load_factor, 2),
                    planned_hours=planned_hours,
                    planned_tss=planned_tss,
                )
            )
        return weeks

    def iter_mesocycles(self) -> Iterator[Mesocycle]:
        """
        Lazily yield mesocycles in calendar order.

        The generator is finite and not restartable; build a new planner
        (or call again) for a fresh sequence.

        Yields:
            Mesocycle objects, each starting the Monday after the previous ends
        """
        start, _, total_weeks = self.season_window()
        allocation = self.allocate_phases(total_weeks)
        nominal = self.season.mesocycle_length_weeks

        current = start
        index = 1
        for phase, phase_weeks in allocation.items():
            remaining = phase_weeks
            sub_index = 1
            while remaining > 0:
                length = min(nominal, remaining)
                mesocycle = Mesocycle(
                    index=index,
                    name=f"{phase.value.capitalize()} {sub_index}",
                    phase=phase,
                    focus=PHASE_FOCUS[phase],
                    start_date=current,
                    end_date=current + timedelta(days=length * 7 - 1),
                    weekly_hours_target=self.season.avg_weekly_hours,
                    intensity_distribution=dict(DEFAULT_INTENSITY_DISTRIBUTION[phase]),
                    weeks=self._build_weeks(phase, current, length),
                )
                logger.debug(
                    f"Mesocycle {mesocycle.name}: {mesocycle.start_date}..{mesocycle.end_date} "
                    f"({length} weeks)"
                )
                yield mesocycle

                current += timedelta(weeks=length)
                remaining -= length
                index += 1
                sub_index += 1

    def plan(self) -> SeasonCalendar:
        """
        Build the complete season calendar.

        Returns:
            SeasonCalendar with mesocycles and the decisions that shaped them
        """
        self.plan_decisions = []
        start, end, total_weeks = self.season_window()
        allocation = self.allocate_phases(total_weeks)

        self._record_window_decision(start, end, total_weeks)
        self._record_phase_decision(total_weeks, allocation)

        mesocycles = list(self.iter_mesocycles())
        self._record_structure_decision(mesocycles)

        calendar = SeasonCalendar(
            season_start=start,
            season_end=end,
            goal_date=self.goal_date,
            total_weeks=total_weeks,
            mesocycle_length_weeks=self.season.mesocycle_length_weeks,
            mesocycles=mesocycles,
            plan_decisions=self.plan_decisions,
        )

        logger.info(
            f"Planned season {start}..{end}: {len(mesocycles)} mesocycles, "
            f"{calendar.planned_weeks} weeks, {calendar.total_planned_hours:.1f} h, "
            f"TSS {calendar.total_planned_tss:.0f}"
        )
        return calendar

    def _record_window_decision(self, start: date, end: date, total_weeks: int) -> None:
        if total_weeks < self.season.mesocycle_length_weeks:
            logger.warning(
                f"Season window of {total_weeks} weeks is shorter than one "
                f"{self.season.mesocycle_length_weeks}-week mesocycle"
            )

        self.plan_decisions.append(
            PlanDecision(
                decision_point="Season Window",
                input_factors=[
                    f"season_start={self.season.effective_season_start()}",
                    f"goal_date={self.goal_date}",
                    f"events={len(self.season.events)}",
                    f"lead_in_weeks={self.config.lead_in_weeks}",
                ],
                reasoning=(
                    f"Season starts on the Monday on or before the earlier of the season start "
                    f"and {self.config.lead_in_weeks} weeks before the first event, and ends "
                    f"{self.config.recovery_buffer_days} days after the goal date to leave room "
                    f"for recovery."
                ),
                outcome=f"{start} to {end}, {total_weeks} usable weeks",
            )
        )

    def _record_phase_decision(
        self, total_weeks: int, allocation: Dict[TrainingPhase, int]
    ) -> None:
        allocated = sum(allocation.values())
        shares = ", ".join(
            f"{phase.value} {share:.0%}"
            for phase, share in self.config.phase_shares.items()
            if share > 0
        )
        self.plan_decisions.append(
            PlanDecision(
                decision_point="Training Phase Distribution",
                input_factors=[f"total_weeks={total_weeks}", f"phase_shares: {shares}"],
                reasoning=(
                    f"Allocated {total_weeks} weeks across phases by fixed share, rounding each "
                    f"phase independently. Phases with no weeks are skipped."
                    + (
                        f" Rounding leaves {allocated} allocated weeks."
                        if allocated != total_weeks
                        else ""
                    )
                ),
                outcome=f"{allocated} weeks: "
                + ", ".join(f"{weeks}wk {phase.value}" for phase, weeks in allocation.items()),
            )
        )

    def _record_structure_decision(self, mesocycles: List[Mesocycle]) -> None:
        nominal = self.season.mesocycle_length_weeks
        short = [m.name for m in mesocycles if m.length_weeks < nominal]
        progression = self.season.effective_load_progression()
        self.plan_decisions.append(
            PlanDecision(
                decision_point="Mesocycle Structure",
                input_factors=[
                    f"mesocycle_length_weeks={nominal}",
                    f"load_progression={progression.model_dump(exclude_none=True)}",
                    f"phase_multipliers={self.season.phase_multipliers.model_dump()}",
                ],
                reasoning=(
                    f"Each phase is carved into {nominal}-week mesocycles with the last one "
                    f"taking the remainder. Race weeks are marked race and recovery-phase weeks "
                    f"run at a fixed load factor of {self.config.recovery_phase_load_factor}."
                ),
                outcome=(
                    f"{len(mesocycles)} mesocycles"
                    + (f", shortened: {', '.join(short)}" if short else "")
                ),
            )
        )
