"""
Season calendar export.

Calendars are exported to JSON (lossless, reloadable) and Markdown (for
human review of the phases, weekly targets and the decisions behind them).
"""

import json
from pathlib import Path

from trainload.plan_schemas import SeasonCalendar


class CalendarExporter:
    """
    Exports a season calendar and its planning decisions.

    The Markdown report shows:
    - The season window and phase breakdown
    - Every mesocycle with its weekly targets
    - The decisions the planner recorded while building it
    """

    def __init__(self, calendar: SeasonCalendar):
        """
        Initialize the exporter.

        Args:
            calendar: Calendar to export
        """
        self.calendar = calendar

    def to_json(self) -> dict:
        """
        Export calendar to JSON-serializable dictionary.

        Returns:
            Dictionary representation of the calendar
        """
        return self.calendar.model_dump(mode="json")

    def to_markdown(self) -> str:
        """
        Export calendar to human-readable Markdown format.

        Returns:
            Markdown-formatted season report
        """
        cal = self.calendar
        lines = []

        lines.append("# Season Plan")
        lines.append("")
        lines.append(f"**Created:** {cal.created_at.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"**Season:** {cal.season_start} to {cal.season_end}")
        lines.append(f"**Goal Date:** {cal.goal_date}")
        lines.append(f"**Weeks:** {cal.planned_weeks} planned of {cal.total_weeks} usable")
        lines.append(f"**Total Hours:** {cal.total_planned_hours:.1f}")
        lines.append(f"**Total TSS:** {cal.total_planned_tss:.0f}")
        lines.append("")
        lines.append("---")
        lines.append("")

        lines.append("## Phase Breakdown")
        lines.append("")
        lines.append("| Phase | Weeks |")
        lines.append("|-------|-------|")
        for phase, weeks in cal.get_phase_breakdown().items():
            lines.append(f"| {phase.title()} | {weeks} |")
        lines.append("")
        lines.append("---")
        lines.append("")

        lines.append("## Mesocycles")
        lines.append("")
        for meso in cal.mesocycles:
            lines.append(f"### {meso.index}. {meso.name}")
            lines.append("")
            lines.append(
                f"- **Dates:** {meso.start_date} to {meso.end_date} ({meso.length_weeks} weeks)"
            )
            lines.append(f"- **Focus:** {meso.focus.value}")
            lines.append(f"- **Weekly Hours Target:** {meso.weekly_hours_target:.1f}")
            if meso.intensity_distribution:
                distribution = ", ".join(
                    f"{zone.upper()} {pct}%"
                    for zone, pct in meso.intensity_distribution.items()
                    if pct
                )
                lines.append(f"- **Intensity Distribution:** {distribution}")
            lines.append("")
            lines.append("| Week | Start | Type | Load | Hours | TSS |")
            lines.append("|------|-------|------|------|-------|-----|")
            for week in meso.weeks:
                lines.append(
                    f"| {week.week_number} | {week.start_date} | {week.week_type.value} | "
                    f"{week.load_factor:.2f} | {week.planned_hours:.1f} | {week.planned_tss:.0f} |"
                )
            lines.append("")

        lines.append("---")
        lines.append("")

        if cal.plan_decisions:
            lines.append("## Planning Decisions")
            lines.append("")

            for i, decision in enumerate(cal.plan_decisions, 1):
                lines.append(f"### Decision {i}: {decision.decision_point}")
                lines.append("")
                lines.append(f"**Input Factors:** {', '.join(decision.input_factors)}")
                lines.append("")
                lines.append(f"**Reasoning:** {decision.reasoning}")
                lines.append("")
                lines.append(f"**Outcome:** {decision.outcome}")
                lines.append("")

            lines.append("---")
            lines.append("")

        lines.append("*Weekly targets can be overridden individually without replanning the season.*")

        return "\n".join(lines)

    def save(self, output_dir: Path, format: str = "json") -> Path:
        """
        Save calendar to file in specified format.

        Args:
            output_dir: Directory to save the file in
            format: Output format ("json" or "markdown")

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        if format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {format}. Use 'json' or 'markdown'")

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp_str = self.calendar.created_at.strftime("%Y%m%d_%H%M%S")
        stem = f"season_{self.calendar.goal_date.isoformat()}_{timestamp_str}"

        if format == "json":
            filepath = output_dir / f"{stem}.json"
            with open(filepath, "w") as f:
                json.dump(self.to_json(), f, indent=2)
        else:
            filepath = output_dir / f"{stem}.md"
            with open(filepath, "w") as f:
                f.write(self.to_markdown())

        return filepath


def load_calendar_from_file(filepath: Path) -> SeasonCalendar:
    """
    Load a season calendar from a JSON file.

    Args:
        filepath: Path to calendar JSON file

    Returns:
        SeasonCalendar object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is not a valid calendar
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Calendar file not found: {filepath}")

    with open(filepath, "r") as f:
        data = json.load(f)

    try:
        return SeasonCalendar(**data)
    except Exception as e:
        raise ValueError(f"Invalid calendar file: {e}")
