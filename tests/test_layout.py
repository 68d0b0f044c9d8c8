from datetime import date, timedelta

import pytest

from conftest import TODAY
from habit_tracker.config import CELL_SIZE_PRESETS, AppSettings
from habit_tracker.layout import cells_frame, compute_layout, date_window, grid_geometry_for, truncate
from habit_tracker.models import Habit, LogEntry

MEDIUM = CELL_SIZE_PRESETS["medium"]


def habit(habit_id, name=None, color="#22c55e"):
    return Habit(id=habit_id, name=name or habit_id, color=color, created_at="2024-01-01")


def test_window_for_365_days():
    dates, today_index = date_window(TODAY, 365)
    assert len(dates) == 365
    assert today_index == 292
    assert dates[292] == "2024-01-07"
    parsed = [date.fromisoformat(d) for d in dates]
    assert all(b - a == timedelta(days=1) for a, b in zip(parsed, parsed[1:]))


@pytest.mark.parametrize("days, past", [(1, 0), (10, 8), (30, 24)])
def test_window_split(days, past):
    dates, today_index = date_window(TODAY, days)
    assert len(dates) == days
    assert today_index == past
    assert dates[today_index] == TODAY.isoformat()


def test_window_rejects_zero_days():
    with pytest.raises(ValueError):
        date_window(TODAY, 0)


def test_cell_coordinates_and_dimensions():
    layout = compute_layout([habit("a"), habit("b")], {}, TODAY, 365, MEDIUM)

    cell = next(c for c in layout.cells if c.row == 1 and c.column == 2)
    assert (cell.x, cell.y) == (40 + 140 + 2 * 19, 40 + 32 + 19)
    assert len(layout.cells) == 2 * 365
    assert layout.grid_width == 140 + 365 * 19 + 80
    assert layout.grid_height == 32 + 2 * 19 + 80
    assert layout.today_column_x == 40 + 140 + 292 * 19 + 8
    assert layout.corner_radius == 2


def test_cell_states():
    logs = {
        "a": {
            "2024-01-06": LogEntry("a", "2024-01-06", True),
            "2024-01-05": LogEntry("a", "2024-01-05", False),
            "2024-01-08": LogEntry("a", "2024-01-08", True),
        }
    }
    layout = compute_layout([habit("a", color="#ec4899")], logs, TODAY, 10, MEDIUM)
    by_day = {c.day: c for c in layout.cells}

    assert by_day["2024-01-06"].state == "filled"
    assert by_day["2024-01-06"].color == "#ec4899"
    assert by_day["2024-01-05"].state == "empty"
    assert by_day["2024-01-04"].state == "empty"
    assert by_day["2024-01-08"].state == "future"
    assert by_day["2024-01-08"].color is None
    assert [c.day for c in layout.cells if c.is_today] == ["2024-01-07"]


def test_no_habits_gives_empty_layout():
    layout = compute_layout([], {}, TODAY, 365, MEDIUM)
    assert layout.is_empty
    assert layout.cells == ()
    assert (layout.grid_width, layout.grid_height, layout.today_column_x) == (0, 0, 0)


def test_month_labels_once_per_month():
    # 2023-11-20 .. 2024-01-18
    layout = compute_layout([habit("a")], {}, TODAY, 60, MEDIUM)
    assert [m.text for m in layout.month_labels] == ["Nov", "Dec", "Jan"]
    assert [(m.year, m.month) for m in layout.month_labels] == [(2023, 11), (2023, 12), (2024, 1)]
    assert layout.month_labels[1].x == 40 + 140 + 11 * 19
    assert all(m.y == 52 for m in layout.month_labels)


def test_row_labels_truncate_long_names():
    assert truncate("Read twenty pages daily") == "Read twenty page…"
    layout = compute_layout([habit("a", "Read twenty pages daily")], {}, TODAY, 10, MEDIUM)
    label = layout.row_labels[0]
    assert label.text == "Read twenty page…"
    assert (label.x, label.y) == (40, 72 + 16 - 2)


def test_grid_geometry_skips_paused_and_archived(repo):
    read = repo.create_habit("Read")
    repo.create_habit("Nap", status="paused")
    old = repo.create_habit("Old")
    repo.archive_habit(old.id)
    repo.upsert_log(read.id, TODAY, True)

    layout = grid_geometry_for(repo, AppSettings(days_to_show=30, cell_size="large"))

    assert [r.habit_id for r in layout.row_labels] == [read.id]
    assert len(layout.dates) == 30
    assert layout.cell_size == 22
    today_cell = next(c for c in layout.cells if c.is_today)
    assert today_cell.state == "filled"


def test_cells_frame():
    layout = compute_layout([habit("a")], {}, TODAY, 10, MEDIUM)
    df = cells_frame(layout)
    assert len(df) == 10
    assert (df["x2"] - df["x"] == 16).all()
    assert df["is_today"].sum() == 1


def test_view_key_tracks_rows_and_today():
    base = compute_layout([habit("a")], {}, TODAY, 30, MEDIUM)
    same = compute_layout([habit("a")], {}, TODAY, 30, MEDIUM)
    swapped = compute_layout([habit("b")], {}, TODAY, 30, MEDIUM)
    next_day = compute_layout([habit("a")], {}, TODAY + timedelta(days=1), 30, MEDIUM)

    assert base.view_key == same.view_key
    assert swapped.view_key != base.view_key
    assert next_day.view_key != base.view_key
    assert base.view_key == (("a",), "2024-01-07", 30, 16)
