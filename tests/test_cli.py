"""
Tests for the Typer CLI, run against the JSON mock store.
"""

import json

import pytest
from typer.testing import CliRunner

from sitterschedule.cli.app import app

runner = CliRunner()

SITTER = "sitter-1"


@pytest.fixture
def config_path(tmp_path):
    data = {
        SITTER: {
            "availability": {"monday": [{"id": "m1", "start": "09:00", "end": "12:00"}]},
            "unavailability": {"2030-06-04": {"slots": [{"id": "u1", "start": "13:00", "end": "15:00"}]}},
            "boarding": ["2030-06-10"],
        }
    }
    (tmp_path / "mock.json").write_text(json.dumps(data), encoding="utf-8")
    path = tmp_path / "config.yaml"
    path.write_text(
        f"sitter_id: {SITTER}\nmode: grooming\nmock_data_file: mock.json\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_path, *args):
    return runner.invoke(app, [*args, "--config", str(config_path), "--mock"])


def _saved(config_path):
    return json.loads((config_path.parent / "mock.json").read_text(encoding="utf-8"))[SITTER]


def test_show(config_path):
    """Test the overview output."""
    result = _invoke(config_path, "show")

    assert result.exit_code == 0
    assert "9:00 AM - 12:00 PM" in result.output
    assert "2030-06-10" in result.output


def test_add_slot_is_saved(config_path):
    """Test that a new weekly slot is written to the store."""
    result = _invoke(config_path, "add-slot", "tuesday", "10:00", "11:00")

    assert result.exit_code == 0
    assert "Added" in result.output
    assert _saved(config_path)["availability"]["tuesday"][0]["start"] == "10:00"


def test_add_slot_uses_default_range(config_path):
    """Test the configured default range for weekly slots."""
    result = _invoke(config_path, "add-slot", "friday")

    assert result.exit_code == 0
    assert _saved(config_path)["availability"]["friday"][0]["end"] == "19:00"


def test_overlapping_slot_is_reported(config_path):
    """Test that an overlap ends the command with an error."""
    result = _invoke(config_path, "add-slot", "monday", "11:00", "13:00")

    assert result.exit_code == 1
    assert "overlaps with an existing slot" in result.output
    assert len(_saved(config_path)["availability"]["monday"]) == 1


def test_update_and_remove_slot(config_path):
    """Test editing and removing a weekly slot."""
    assert _invoke(config_path, "update-slot", "monday", "m1", "--end", "13:30").exit_code == 0
    assert _saved(config_path)["availability"]["monday"][0]["end"] == "13:30"

    result = _invoke(config_path, "remove-slot", "monday", "m1")

    assert result.exit_code == 0
    assert _saved(config_path)["availability"]["monday"] == []


def test_toggle_unavailable(config_path):
    """Test marking a whole date unavailable."""
    result = _invoke(config_path, "toggle-unavailable", "2030-06-05")

    assert result.exit_code == 0
    assert "marked unavailable" in result.output
    assert _saved(config_path)["unavailability"]["2030-06-05"] == {"full_day": True}


def test_unavailable_slots(config_path):
    """Test adding and removing unavailable ranges."""
    assert _invoke(config_path, "add-unavailable-slot", "2030-06-04", "09:00", "10:00").exit_code == 0
    assert len(_saved(config_path)["unavailability"]["2030-06-04"]["slots"]) == 2

    assert _invoke(config_path, "remove-unavailable-slot", "2030-06-04", "u1").exit_code == 0
    slots = _saved(config_path)["unavailability"]["2030-06-04"]["slots"]
    assert [slot["start"] for slot in slots] == ["09:00"]


def test_unavailable_slot_uses_default_range(config_path):
    """Test the configured default range for unavailable ranges."""
    result = _invoke(config_path, "add-unavailable-slot", "2030-06-06")

    assert result.exit_code == 0
    slot = _saved(config_path)["unavailability"]["2030-06-06"]["slots"][0]
    assert (slot["start"], slot["end"]) == ("09:00", "19:00")


def test_boarding_on_unavailable_date_fails(config_path):
    """Test that boarding on an unavailable date is refused."""
    result = _invoke(config_path, "toggle-boarding", "2030-06-04")

    assert result.exit_code == 1
    assert "marked as unavailable" in result.output
    assert _saved(config_path)["boarding"] == ["2030-06-10"]


def test_toggle_boarding(config_path):
    """Test selecting a boarding date."""
    result = _invoke(config_path, "toggle-boarding", "2030-06-12")

    assert result.exit_code == 0
    assert _saved(config_path)["boarding"] == ["2030-06-10", "2030-06-12"]


def test_bookable(config_path):
    """Test listing bookable times."""
    # 2030-06-03 is a Monday without unavailability
    result = _invoke(config_path, "bookable", "2030-06-03")

    assert result.exit_code == 0
    assert "9:00 AM - 12:00 PM" in result.output


def test_marks(config_path):
    """Test boarding calendar markings as JSON."""
    result = _invoke(config_path, "marks", "--kind", "boarding")

    assert result.exit_code == 0
    assert json.loads(result.output)["2030-06-10"]["selectedColor"] == "#62C6B9"


def test_unavailability_marks_highlight_date(config_path):
    """Test highlighting a date in the unavailability markings."""
    result = _invoke(config_path, "marks", "--date", "2030-06-07")

    assert result.exit_code == 0
    marks = json.loads(result.output)
    assert marks["2030-06-07"] == {"selected": True, "selectedColor": "#007AFF"}
    assert marks["2030-06-04"]["selectedColor"] == "#f44336"


def test_weekly_marks_need_range(config_path):
    """Test that weekly markings require a date range."""
    assert _invoke(config_path, "marks", "--kind", "weekly").exit_code == 1


def test_missing_config(tmp_path):
    """Test the error for a missing config file."""
    result = _invoke(tmp_path / "nope.yaml", "show")

    assert result.exit_code == 1
    assert "Config file not found" in result.output
