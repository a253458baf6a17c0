"""
Command-line interface for the training load engine.

Provides commands for:
- Zone tables from a physiological profile
- Scoring a structured session
- Planning a phased season
- Scheduling dated sessions from a season plan
"""

import json
from pathlib import Path
from typing import List, Optional, Type, TypeVar

import typer
from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trainload.aggregator import SessionAggregator
from trainload.config import get_settings, load_engine_config
from trainload.errors import EngineError
from trainload.export import CalendarExporter
from trainload.logger import setup_logger
from trainload.plan_schemas import ScheduledSession, SeasonCalendar, Session, ZoneTable
from trainload.planner import MesocyclePlanner
from trainload.scheduler import WeeklyScheduleAssigner
from trainload.schemas import HRZoneModel, PhysiologicalProfile, SeasonPlan, Weekday, ZoneKind
from trainload.zones import ZoneCalculator

# Initialize Typer app and Rich console
app = typer.Typer(
    help="Training load engine - zones, session load and season periodization"
)
console = Console()

ModelT = TypeVar("ModelT", bound=BaseModel)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Override the configured log level",
    ),
):
    """Configure logging before any command runs."""
    setup_logger(level=log_level)


# ===== DISPLAY HELPER FUNCTIONS =====


def _load_model(path: Path, model: Type[ModelT], label: str) -> ModelT:
    """
    Load a JSON file into a Pydantic model, exiting on failure.

    Args:
        path: JSON file
        model: Model class to validate against
        label: What the file holds, for messages
    """
    try:
        with open(path) as f:
            loaded = model(**json.load(f))
    except Exception as e:
        console.print(f"[red]✗ Failed to load {label}: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"✓ Loaded {label}: [green]{path.name}[/green]")
    return loaded


def _display_zone_table(table: ZoneTable):
    """
    Display one zone table, with substrate columns for heart-rate zones.

    Args:
        table: ZoneTable to render
    """
    unit = "W" if table.kind == ZoneKind.POWER else "bpm"
    title = "Power Zones" if table.kind == ZoneKind.POWER else "Heart-Rate Zones"

    rich_table = Table(title=title, box=box.ROUNDED)
    rich_table.add_column("Zone", style="cyan")
    rich_table.add_column("Name")
    rich_table.add_column(f"Min ({unit})", justify="right")
    rich_table.add_column(f"Max ({unit})", justify="right")
    if table.kind == ZoneKind.HR:
        rich_table.add_column("kcal/h", justify="right", style="yellow")
        rich_table.add_column("Fat g/h", justify="right")
        rich_table.add_column("CHO g/h", justify="right")

    for band in table.zones:
        row = [
            band.zone.value,
            band.name,
            f"{band.min:.0f}",
            f"{band.max:.0f}" if band.max is not None else "∞",
        ]
        if band.substrates is not None:
            row += [
                str(band.substrates.kcal_h),
                str(band.substrates.fat_g_h),
                str(band.substrates.cho_g_h),
            ]
        rich_table.add_row(*row)

    console.print(rich_table)


def _display_calendar_summary(calendar: SeasonCalendar):
    """
    Display season calendar summary with phases and mesocycles.

    Args:
        calendar: SeasonCalendar from the planner
    """
    console.print(
        f"\n✓ Planned [green]{calendar.planned_weeks}-week season[/green] "
        f"({calendar.season_start} to {calendar.season_end})"
    )
    console.print(f"  Goal: {calendar.goal_date}")
    console.print(f"  Hours: {calendar.total_planned_hours:.1f}")
    console.print(f"  TSS: {calendar.total_planned_tss:.0f}")

    console.print("\n[bold]Phase Distribution:[/bold]")
    for phase, weeks in calendar.get_phase_breakdown().items():
        console.print(f"  {phase}: {weeks} weeks")

    table = Table(title="Mesocycles", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Dates")
    table.add_column("Weeks (type x load)")
    table.add_column("Hours", justify="right")
    table.add_column("TSS", justify="right", style="yellow")

    for meso in calendar.mesocycles:
        weeks = ", ".join(f"{w.week_type.value} x{w.load_factor:.2f}" for w in meso.weeks)
        table.add_row(
            str(meso.index),
            meso.name,
            f"{meso.start_date} → {meso.end_date}",
            weeks,
            f"{meso.planned_hours:.1f}",
            f"{meso.planned_tss:.0f}",
        )

    console.print()
    console.print(table)


def _display_schedule(sessions: List[ScheduledSession], limit: int):
    """
    Display the first scheduled sessions.

    Args:
        sessions: Sessions in calendar order
        limit: Maximum number of rows
    """
    table = Table(title=f"Schedule ({len(sessions)} sessions)", box=box.ROUNDED)
    table.add_column("Date")
    table.add_column("Session", style="cyan")
    table.add_column("Zone", justify="center")
    table.add_column("Min", justify="right")
    table.add_column("TSS", justify="right", style="yellow")
    table.add_column("Target", justify="right")

    for session in sessions[:limit]:
        if session.target_min is not None:
            upper = f"{session.target_max:.0f}" if session.target_max is not None else "∞"
            target = f"{session.target_min:.0f}-{upper}"
        else:
            target = "-"
        table.add_row(
            f"{session.session_date} {session.session_date.strftime('%a')}",
            session.title,
            session.zone.value,
            str(session.duration_minutes),
            str(session.tss),
            target,
        )

    console.print(table)
    if len(sessions) > limit:
        console.print(f"[dim]... {len(sessions) - limit} more sessions[/dim]")


# ===== CLI COMMANDS =====


@app.command()
def zones(
    profile: Path = typer.Option(
        ...,
        "--profile",
        "-p",
        help="Path to physiological profile JSON file",
        exists=True,
    ),
    hr_model: Optional[HRZoneModel] = typer.Option(
        None,
        "--hr-model",
        help="Reference HR for the HR zones: threshold or max_hr",
    ),
):
    """
    Show power and heart-rate zones for a profile.
    """
    athlete = _load_model(profile, PhysiologicalProfile, "profile")
    config = load_engine_config()
    if hr_model is not None:
        config = config.model_copy(update={"hr_zone_model": hr_model})
    calculator = ZoneCalculator(athlete, config)

    try:
        tables = calculator.all_zones()
    except EngineError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)

    if not tables:
        console.print("[yellow]Profile has neither FTP nor a complete set of HR anchors[/yellow]")
        raise typer.Exit(1)

    console.print()
    for table in tables.values():
        _display_zone_table(table)

    capacity = calculator.estimate_weekly_tss_capacity()
    if capacity is not None:
        console.print(f"\nEstimated weekly TSS capacity: [yellow]{capacity}[/yellow]")


@app.command()
def score(
    session: Path = typer.Option(
        ...,
        "--session",
        "-s",
        help="Path to structured session JSON file",
        exists=True,
    ),
    profile: Path = typer.Option(
        ...,
        "--profile",
        "-p",
        help="Path to physiological profile JSON file",
        exists=True,
    ),
):
    """
    Score a structured session: duration, TSS, IF, average power and kcal.
    """
    workout = _load_model(session, Session, "session")
    athlete = _load_model(profile, PhysiologicalProfile, "profile")
    aggregator = SessionAggregator(load_engine_config())

    try:
        rows = aggregator.block_breakdown(workout)
        result = aggregator.score(workout, athlete)
    except EngineError as e:
        console.print(f"[red]✗ Cannot score session: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=workout.title or "Session", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Block", style="cyan")
    table.add_column("Zone", justify="center")
    table.add_column("Min", justify="right")
    table.add_column("TSS", justify="right", style="yellow")

    for i, (block, duration, tss) in enumerate(rows, 1):
        label = block.block_type.value
        if block.has_intervals:
            label += f" {block.num_intervals}x{block.interval_duration_seconds:.0f}s"
        table.add_row(str(i), label, block.zone.value, f"{duration:.0f}", f"{tss:.1f}")

    console.print()
    console.print(table)

    record = result.as_record()
    power = (
        f"{record['average_power_watts']} W"
        if record["average_power_watts"] is not None
        else "n/a (no FTP)"
    )
    console.print(
        Panel(
            f"Duration: {record['total_duration_minutes']} min\n"
            f"TSS: {record['tss']}\n"
            f"IF: {record['intensity_factor']:.2f}\n"
            f"Average power: {power}\n"
            f"Energy: {record['kcal']} kcal",
            title=f"Score ({workout.workout_type}, primary {workout.primary_zone.value})",
            border_style="green",
        )
    )


@app.command()
def plan(
    season: Path = typer.Option(
        ...,
        "--season",
        "-s",
        help="Path to season plan JSON file",
        exists=True,
    ),
    save_plan: bool = typer.Option(
        True,
        "--save/--no-save",
        help="Save the season calendar to file",
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format (json or markdown)",
    ),
):
    """
    Plan a phased season of mesocycles with weekly targets.
    """
    console.print("\n[bold cyan]Season Planner[/bold cyan]\n")
    season_plan = _load_model(season, SeasonPlan, "season")

    try:
        planner = MesocyclePlanner(season_plan, load_engine_config())
        calendar = planner.plan()
    except EngineError as e:
        console.print(f"[red]✗ Cannot plan season: {e}[/red]")
        raise typer.Exit(1)

    _display_calendar_summary(calendar)

    if save_plan:
        try:
            path = CalendarExporter(calendar).save(get_settings().output_dir, output_format)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)
        console.print(f"\n✓ Season saved: [cyan]{path}[/cyan]")

    console.print()


@app.command()
def schedule(
    season: Path = typer.Option(
        ...,
        "--season",
        "-s",
        help="Path to season plan JSON file",
        exists=True,
    ),
    profile: Optional[Path] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Physiological profile JSON file (adds target ranges)",
        exists=True,
    ),
    sport: str = typer.Option(
        "cycling",
        "--sport",
        help="Sport recorded on each session",
    ),
    zone_kind: ZoneKind = typer.Option(
        ZoneKind.POWER,
        "--zone-kind",
        help="Zone table used for target ranges",
    ),
    rest_day: List[Weekday] = typer.Option(
        [],
        "--rest-day",
        help="Weekday kept free of sessions (repeatable)",
    ),
    limit: int = typer.Option(
        21,
        "--limit",
        help="Number of sessions to display",
    ),
):
    """
    Plan a season and lay out dated sessions for every week.
    """
    season_plan = _load_model(season, SeasonPlan, "season")
    athlete = _load_model(profile, PhysiologicalProfile, "profile") if profile else None
    config = load_engine_config()

    try:
        calendar = MesocyclePlanner(season_plan, config).plan()
        sessions = WeeklyScheduleAssigner(config).assign(
            calendar,
            sport=sport,
            profile=athlete,
            zone_kind=zone_kind,
            rest_days=rest_day,
        )
    except EngineError as e:
        console.print(f"[red]✗ Cannot schedule season: {e}[/red]")
        raise typer.Exit(1)

    console.print()
    _display_schedule(sessions, limit)

    total_minutes = sum(s.duration_minutes for s in sessions)
    console.print(
        f"\nTotal: [green]{total_minutes / 60:.1f} h[/green], "
        f"TSS [yellow]{sum(s.tss for s in sessions)}[/yellow]"
    )


if __name__ == "__main__":
    app()
