"""
Weekly schedule assignment.

Turns planned weeks into dated sessions using a fixed day template per phase.
Durations scale with the mesocycle's weekly hours and the week's load factor;
TSS comes from scoring each session like any other single-block session.
"""

from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union

from loguru import logger

from trainload.aggregator import SessionAggregator
from trainload.plan_schemas import (
    BlockType,
    DayTemplate,
    Mesocycle,
    ScheduledSession,
    SeasonCalendar,
    Session,
    WeekTarget,
    WorkoutBlock,
    ZoneTable,
)
from trainload.rounding import round_int
from trainload.schemas import (
    EngineConfig,
    PhysiologicalProfile,
    TrainingPhase,
    TrainingZone,
    Weekday,
    ZoneKind,
)
from trainload.zones import ZoneCalculator


def _day(offset: int, effort: str, zone: Optional[str], factor: float, description: str) -> DayTemplate:
    return DayTemplate(
        day_offset=offset,
        effort_type=effort,
        zone=TrainingZone(zone) if zone else None,
        duration_factor=factor,
        description=description,
    )


PHASE_TEMPLATES: Dict[TrainingPhase, List[DayTemplate]] = {
    TrainingPhase.BASE: [
        _day(0, "endurance", "Z2", 0.8, "Endurance Z2"),
        _day(1, "recovery", "Z1", 0.5, "Active recovery"),
        _day(2, "endurance", "Z2", 1.0, "Steady endurance Z2"),
        _day(3, "rest", None, 0, "Rest"),
        _day(4, "tempo", "Z3", 0.7, "Tempo Z3"),
        _day(5, "long", "Z2", 1.5, "Long ride Z2"),
        _day(6, "recovery", "Z1", 0.4, "Recovery"),
    ],
    TrainingPhase.BUILD: [
        _day(0, "threshold", "Z4", 0.8, "Threshold Z4"),
        _day(1, "recovery", "Z1", 0.5, "Recovery"),
        _day(2, "intervals", "Z5", 0.7, "VO2max intervals"),
        _day(3, "rest", None, 0, "Rest"),
        _day(4, "tempo", "Z3", 0.8, "Tempo Z3"),
        _day(5, "long", "Z2", 1.3, "Long ride with progression"),
        _day(6, "recovery", "Z1", 0.4, "Recovery"),
    ],
    TrainingPhase.PEAK: [
        _day(0, "vo2max", "Z5", 0.7, "VO2max intervals"),
        _day(1, "recovery", "Z1", 0.5, "Recovery"),
        _day(2, "threshold", "Z4", 0.8, "Threshold"),
        _day(3, "rest", None, 0, "Rest"),
        _day(4, "anaerobic", "Z6", 0.6, "Anaerobic"),
        _day(5, "endurance", "Z2", 1.0, "Endurance"),
        _day(6, "recovery", "Z1", 0.4, "Recovery"),
    ],
    TrainingPhase.RACE: [
        _day(0, "openers", "Z4", 0.5, "Pre-race openers"),
        _day(1, "recovery", "Z1", 0.4, "Easy recovery"),
        _day(2, "rest", None, 0, "Rest"),
        _day(3, "activation", "Z3", 0.4, "Activation"),
        _day(4, "rest", None, 0, "Pre-race rest"),
        _day(5, "race", "Z4", 1.0, "Race"),
        _day(6, "recovery", "Z1", 0.3, "Post-race recovery"),
    ],
    TrainingPhase.RECOVERY: [
        _day(0, "recovery", "Z1", 0.4, "Recovery"),
        _day(1, "rest", None, 0, "Rest"),
        _day(2, "recovery", "Z1", 0.5, "Active recovery"),
        _day(3, "rest", None, 0, "Rest"),
        _day(4, "endurance", "Z2", 0.5, "Easy endurance"),
        _day(5, "recovery", "Z1", 0.4, "Recovery"),
        _day(6, "rest", None, 0, "Rest"),
    ],
    TrainingPhase.TRANSITION: [
        _day(0, "cross_training", "Z1", 0.5, "Cross training"),
        _day(1, "rest", None, 0, "Rest"),
        _day(2, "recovery", "Z1", 0.4, "Light activity"),
        _day(3, "rest", None, 0, "Rest"),
        _day(4, "cross_training", "Z1", 0.5, "Cross training"),
        _day(5, "rest", None, 0, "Rest"),
        _day(6, "rest", None, 0, "Rest"),
    ],
}

ZONE_BLOCK_TYPES: Dict[TrainingZone, BlockType] = {
    TrainingZone.Z1: BlockType.ENDURANCE,
    TrainingZone.Z2: BlockType.ENDURANCE,
    TrainingZone.Z3: BlockType.TEMPO,
    TrainingZone.Z4: BlockType.THRESHOLD,
    TrainingZone.Z5: BlockType.VO2MAX,
    TrainingZone.Z6: BlockType.VO2MAX,
    TrainingZone.Z7: BlockType.VO2MAX,
}


class WeeklyScheduleAssigner:
    """Maps planned weeks onto calendar days using per-phase day templates."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        templates: Optional[Dict[TrainingPhase, List[DayTemplate]]] = None,
    ):
        """
        Initialize the assigner.

        Args:
            config: Engine configuration (defaults if omitted)
            templates: Day templates per phase (PHASE_TEMPLATES if omitted)
        """
        self.config = config or EngineConfig()
        self.templates = templates or PHASE_TEMPLATES
        self.aggregator = SessionAggregator(self.config)

    def template_for(self, phase: TrainingPhase) -> List[DayTemplate]:
        """
        Day template for a phase; phases without one use the base template.

        Raises:
            ValueError: If neither the phase nor the base phase has a template
        """
        if phase in self.templates:
            return self.templates[phase]
        if TrainingPhase.BASE in self.templates:
            return self.templates[TrainingPhase.BASE]
        raise ValueError(
            f"No day template for phase {phase.value} and no base template to fall back on"
        )

    def assign(
        self,
        plan: Union[SeasonCalendar, Iterable[Mesocycle]],
        sport: str = "cycling",
        profile: Optional[PhysiologicalProfile] = None,
        zone_kind: ZoneKind = ZoneKind.POWER,
        rest_days: Sequence[Weekday] = (),
    ) -> List[ScheduledSession]:
        """
        Emit dated sessions for every planned week.

        Args:
            plan: Season calendar or mesocycles to schedule
            sport: Sport recorded on each session
            profile: Physiological inputs; when given, sessions carry the
                target range of their zone
            zone_kind: Which zone table the target range comes from
            rest_days: Weekdays on which nothing is scheduled

        Returns:
            Sessions in calendar order
        """
        mesocycles = plan.mesocycles if isinstance(plan, SeasonCalendar) else list(plan)
        zone_table = self._zone_table(profile, zone_kind)
        blocked = {day.weekday_number for day in rest_days}

        sessions: List[ScheduledSession] = []
        for meso in mesocycles:
            for week in meso.weeks:
                sessions.extend(
                    self.assign_week(meso, week, sport, zone_table, zone_kind, blocked)
                )

        logger.info(
            f"Scheduled {len(sessions)} {sport} sessions across {len(mesocycles)} mesocycles"
        )
        return sessions

    def assign_week(
        self,
        meso: Mesocycle,
        week: WeekTarget,
        sport: str = "cycling",
        zone_table: Optional[ZoneTable] = None,
        zone_kind: ZoneKind = ZoneKind.POWER,
        blocked_weekdays: Iterable[int] = (),
    ) -> List[ScheduledSession]:
        """
        Emit the sessions for one week of a mesocycle.

        Days with duration factor 0, blocked weekdays and sessions shorter
        than the configured minimum are skipped.
        """
        blocked = set(blocked_weekdays)
        base_daily_minutes = meso.weekly_hours_target / 7 * 60
        label = meso.phase.value.capitalize()

        sessions = []
        for day in self.template_for(meso.phase):
            if day.duration_factor == 0:
                continue

            session_date = week.start_date + timedelta(days=day.day_offset)
            if session_date.weekday() in blocked:
                continue

            duration = round_int(base_daily_minutes * day.duration_factor * week.load_factor)
            if duration < self.config.min_session_minutes or duration <= 0:
                continue

            band = zone_table.get(day.zone) if zone_table is not None else None
            sessions.append(
                ScheduledSession(
                    session_date=session_date,
                    sport=sport,
                    effort_type=day.effort_type,
                    zone=day.zone,
                    duration_minutes=duration,
                    title=f"{label} - {day.description}",
                    description=f"{day.description} ({meso.name} - Week {week.week_number})",
                    tss=self._session_tss(day, duration),
                    phase=meso.phase,
                    mesocycle_name=meso.name,
                    week_number=week.week_number,
                    week_type=week.week_type,
                    load_factor=week.load_factor,
                    zone_kind=zone_kind,
                    target_min=band.min if band is not None else None,
                    target_max=band.max if band is not None else None,
                )
            )
        return sessions

    def _session_tss(self, day: DayTemplate, duration_minutes: int) -> int:
        session = Session(
            title=day.description,
            blocks=(
                WorkoutBlock(
                    block_type=ZONE_BLOCK_TYPES[day.zone],
                    zone=day.zone,
                    total_duration_minutes=duration_minutes,
                ),
            ),
        )
        # FTP is irrelevant to TSS; an empty profile keeps scoring power-free.
        score = self.aggregator.score(session, PhysiologicalProfile())
        return round_int(score.tss)

    def _zone_table(
        self, profile: Optional[PhysiologicalProfile], zone_kind: ZoneKind
    ) -> Optional[ZoneTable]:
        if profile is None:
            return None
        table = ZoneCalculator(profile, self.config).zones_for(zone_kind)
        if table is None:
            logger.warning(
                f"Profile has no {zone_kind.value} inputs; sessions will carry no target range"
            )
        return table
