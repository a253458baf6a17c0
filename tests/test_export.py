"""
Tests for season calendar export.

Covers:
- JSON export and reload
- Markdown report sections
- Saving to disk in both formats
- Error handling for unsupported formats and bad files
"""

import json
from pathlib import Path

import pytest

from trainload.export import CalendarExporter, load_calendar_from_file
from trainload.planner import MesocyclePlanner
from trainload.schemas import SeasonPlan

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def calendar():
    with open(FIXTURES / "season_events.json") as f:
        season = SeasonPlan(**json.load(f))
    return MesocyclePlanner(season).plan()


@pytest.fixture
def exporter(calendar):
    return CalendarExporter(calendar)


def test_to_json(exporter, calendar):
    data = exporter.to_json()

    assert data["goal_date"] == "2024-06-09"
    assert data["season_start"] == "2024-01-01"
    assert len(data["mesocycles"]) == len(calendar.mesocycles)
    assert data["mesocycles"][0]["weeks"][0]["week_type"] == "load"
    assert len(data["plan_decisions"]) == 3
    json.dumps(data)


def test_json_reload_equals_original(exporter, calendar, tmp_path):
    path = exporter.save(tmp_path, format="json")
    assert load_calendar_from_file(path) == calendar


def test_to_markdown_sections(exporter):
    markdown = exporter.to_markdown()

    assert markdown.startswith("# Season Plan")
    assert "## Phase Breakdown" in markdown
    assert "| Base | 9 |" in markdown
    assert "## Mesocycles" in markdown
    assert "### 1. Base 1" in markdown
    assert "## Planning Decisions" in markdown
    assert "### Decision 2: Training Phase Distribution" in markdown
    assert "**Goal Date:** 2024-06-09" in markdown


def test_markdown_week_rows(exporter):
    markdown = exporter.to_markdown()
    assert "| 1 | 2024-01-01 | load | 1.20 | 12.6 | 600 |" in markdown


def test_save_markdown(exporter, tmp_path):
    path = exporter.save(tmp_path / "reports", format="markdown")

    assert path.suffix == ".md"
    assert path.name.startswith("season_2024-06-09_")
    assert path.read_text().startswith("# Season Plan")


def test_save_unsupported_format(exporter, tmp_path):
    with pytest.raises(ValueError, match="Unsupported format"):
        exporter.save(tmp_path, format="csv")


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_calendar_from_file(tmp_path / "missing.json")


def test_load_invalid_file(tmp_path):
    path = tmp_path / "calendar.json"
    path.write_text(json.dumps({"goal_date": "2024-06-09"}))

    with pytest.raises(ValueError, match="Invalid calendar file"):
        load_calendar_from_file(path)
