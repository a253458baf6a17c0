#!/usr/bin/env python3
"""
Quick start script to demonstrate the training load engine.

This script shows the complete workflow:
1. Load a physiological profile and compute zones
2. Score a structured interval session
3. Edit the session and rescore it
4. Plan a phased season
5. Schedule the first weeks of sessions
"""

import json
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trainload.aggregator import SessionAggregator
from trainload.export import CalendarExporter
from trainload.plan_schemas import BlockType, Session, WorkoutBlock
from trainload.planner import MesocyclePlanner
from trainload.scheduler import WeeklyScheduleAssigner
from trainload.schemas import PhysiologicalProfile, SeasonPlan, Weekday, TrainingZone
from trainload.workout import add_block, session_duration
from trainload.zones import ZoneCalculator

console = Console()


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


def main():
    """Run the complete demonstration workflow."""
    console.print("\n[bold magenta]🚴 Training Load Engine[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Zones =====
    print_header("Step 1: Profile and Zones")

    with open(Path("tests/fixtures/profile_full.json")) as f:
        profile = PhysiologicalProfile(**json.load(f))

    console.print(f"✓ FTP {profile.ftp_watts:.0f} W, HR max {profile.hr_max}, "
                  f"threshold {profile.hr_threshold}, rest {profile.hr_rest}")

    calculator = ZoneCalculator(profile)
    power = calculator.power_zones(required=True)

    table = Table(title="Power Zones", box=box.ROUNDED)
    table.add_column("Zone", style="cyan")
    table.add_column("Name")
    table.add_column("Watts", justify="right", style="yellow")
    for band in power.zones:
        upper = f"{band.max:.0f}" if band.max is not None else "∞"
        table.add_row(band.zone.value, band.name, f"{band.min:.0f}-{upper}")
    console.print(table)

    hr = calculator.hr_zones(required=True)
    for band in hr.zones:
        console.print(f"  HR {band.zone.value} {band.name}: {band.min:.0f}-{band.max:.0f} bpm, "
                      f"{band.substrates.kcal_h} kcal/h, {band.substrates.cho_g_h} g CHO/h")

    # ===== STEP 2: Score a Session =====
    print_header("Step 2: Score a Session")

    with open(Path("tests/fixtures/session_intervals.json")) as f:
        session = Session(**json.load(f))

    aggregator = SessionAggregator()
    record = aggregator.score(session, profile).as_record()
    console.print(f"✓ '{session.title}': {record['total_duration_minutes']} min, "
                  f"TSS {record['tss']}, IF {record['intensity_factor']}, "
                  f"{record['average_power_watts']} W, {record['kcal']} kcal")

    # ===== STEP 3: Edit and Rescore =====
    print_header("Step 3: Edit and Rescore")

    longer = add_block(
        session,
        WorkoutBlock(block_type=BlockType.ENDURANCE, zone=TrainingZone.Z2, total_duration_minutes=30),
        position=2,
    )
    rescored = aggregator.score(longer, profile).as_record()
    console.print(f"  Original session still {session_duration(session):.0f} min")
    console.print(f"✓ Edited session: {rescored['total_duration_minutes']} min, TSS {rescored['tss']}")

    # ===== STEP 4: Plan a Season =====
    print_header("Step 4: Plan a Season")

    with open(Path("tests/fixtures/season_events.json")) as f:
        season = SeasonPlan(**json.load(f))

    calendar = MesocyclePlanner(season).plan()
    console.print(f"✓ {calendar.season_start} to {calendar.season_end}, goal {calendar.goal_date}")
    for phase, weeks in calendar.get_phase_breakdown().items():
        console.print(f"  {phase}: {weeks} weeks")

    for decision in calendar.plan_decisions:
        console.print(f"  [dim]{decision.decision_point}: {decision.outcome}[/dim]")

    path = CalendarExporter(calendar).save(Path("season_plans"), format="markdown")
    console.print(f"\n✓ Season report saved to: [cyan]{path}[/cyan]")

    # ===== STEP 5: Schedule =====
    print_header("Step 5: Schedule First Mesocycle")

    sessions = WeeklyScheduleAssigner().assign(
        calendar.mesocycles[:1],
        profile=profile,
        rest_days=[Weekday.FRIDAY],
    )
    for s in sessions[:7]:
        console.print(f"  {s.session_date} {s.session_date.strftime('%a')}: {s.title} "
                      f"{s.duration_minutes} min, TSS {s.tss}, "
                      f"{s.target_min:.0f}-{s.target_max:.0f} W")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The engine:\n"
        "  1. Derived power and heart-rate zones\n"
        "  2. Scored and rescored a structured session\n"
        "  3. Planned a phased season with weekly targets\n"
        "  4. Laid out dated sessions for the first mesocycle\n\n"
        "Planning decisions are in the season report.",
        title="[bold green]Success[/bold green]",
        border_style="green"
    )
    console.print(panel)

    console.print("\n[bold cyan]Next Steps:[/bold cyan]")
    console.print("  • Run CLI: trainload plan --season <season.json>")
    console.print("  • Start the API: uvicorn trainload.api.main:app")
    console.print("  • Run tests: python3 -m pytest\n")


if __name__ == "__main__":
    try:
        main()
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/red]")
        console.print("\n[dim]Run from the repository root after: pip install -e .[/dim]")
        raise
