"""
Grid geometry: date columns by habit rows, in world (unscaled) pixels.

compute_layout() is pure; the viewport decides where the result lands on
screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import CELL_SIZE_PRESETS, GRID_CHROME, AppSettings, CellSizePreset, GridChrome
from .models import Habit, LogEntry

PAST_FRACTION = 0.8
LABEL_MAX_CHARS = 16


@dataclass(frozen=True)
class GridCell:
    habit_id: str
    day: str
    row: int
    column: int
    x: float
    y: float
    size: int
    state: str  # future | filled | empty
    color: Optional[str]
    is_today: bool


@dataclass(frozen=True)
class MonthLabel:
    text: str
    x: float
    y: float
    year: int
    month: int


@dataclass(frozen=True)
class RowLabel:
    habit_id: str
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class GridLayout:
    dates: Tuple[str, ...]
    today_index: int
    cells: Tuple[GridCell, ...]
    month_labels: Tuple[MonthLabel, ...]
    row_labels: Tuple[RowLabel, ...]
    grid_width: float
    grid_height: float
    today_column_x: float
    cell_size: int
    corner_radius: int

    @property
    def is_empty(self) -> bool:
        return not self.cells

    @property
    def view_key(self) -> tuple:
        """Changes whenever the rows, the today column or the cell size do."""
        today = self.dates[self.today_index] if self.dates else None
        return tuple(r.habit_id for r in self.row_labels), today, len(self.dates), self.cell_size


def date_window(today: date, days_to_show: int) -> Tuple[Tuple[str, ...], int]:
    """
    Return (dates, today_index) for a window of days_to_show days with 80%
    of them in the past.
    """
    if days_to_show < 1:
        raise ValueError("days_to_show must be at least 1")
    past = int(days_to_show * PAST_FRACTION)
    future = days_to_show - past - 1
    dates = tuple((today + timedelta(days=i)).isoformat() for i in range(-past, future + 1))
    return dates, past


def truncate(text: str, length: int = LABEL_MAX_CHARS) -> str:
    return text[:length] + "…" if len(text) > length else text


def _month_labels(dates: Sequence[str], x0: float, pitch: int, y: float) -> Tuple[MonthLabel, ...]:
    labels = []
    seen = set()
    for i, day in enumerate(dates):
        d = date.fromisoformat(day)
        month_key = (d.year, d.month)
        if month_key in seen:
            continue
        if d.day <= 7 or i == 0:
            labels.append(MonthLabel(d.strftime("%b"), x0 + i * pitch, y, d.year, d.month))
            seen.add(month_key)
    return tuple(labels)


def compute_layout(
    habits: Sequence[Habit],
    logs: Mapping[str, Mapping[str, LogEntry]],
    today: date,
    days_to_show: int = 365,
    preset: CellSizePreset = CELL_SIZE_PRESETS["medium"],
    chrome: GridChrome = GRID_CHROME,
) -> GridLayout:
    """
    Position every (habit, date) cell.

    habits should already exclude paused ones and be in display order. With
    no habits the layout is empty and every dimension is zero.
    """
    cell, gap, label_width = preset.cell_size, preset.cell_gap, preset.label_width
    corner = max(2, round(cell * 0.15))
    if not habits:
        return GridLayout((), 0, (), (), (), 0, 0, 0, cell, corner)

    dates, today_index = date_window(today, days_to_show)
    today_key = today.isoformat()
    pitch = cell + gap
    x0 = chrome.padding + label_width
    y0 = chrome.padding + chrome.header_height

    cells = []
    row_labels = []
    for i, habit in enumerate(habits):
        y = y0 + i * pitch
        habit_logs = logs.get(habit.id, {})
        row_labels.append(RowLabel(habit.id, truncate(habit.name), chrome.padding, y + cell - 2))
        for j, day in enumerate(dates):
            entry = habit_logs.get(day)
            if day > today_key:
                state, color = "future", None
            elif entry is not None and entry.completed:
                state, color = "filled", habit.color
            else:
                state, color = "empty", None
            cells.append(GridCell(habit.id, day, i, j, x0 + j * pitch, y, cell, state, color, day == today_key))

    return GridLayout(
        dates=dates,
        today_index=today_index,
        cells=tuple(cells),
        month_labels=_month_labels(dates, x0, pitch, chrome.padding + 12),
        row_labels=tuple(row_labels),
        grid_width=label_width + len(dates) * pitch + chrome.padding * 2,
        grid_height=chrome.header_height + len(habits) * pitch + chrome.padding * 2,
        today_column_x=x0 + today_index * pitch + cell / 2,
        cell_size=cell,
        corner_radius=corner,
    )


def grid_geometry_for(repository, settings: AppSettings, today: Optional[date] = None) -> GridLayout:
    """
    Layout for everything the grid view shows: non-archived, non-paused
    habits with the preset and window from the user's settings.
    """
    today = today or date.fromisoformat(repository.today)
    habits = [h for h in repository.list_active_display_habits() if h.status != "paused"]
    return compute_layout(habits, repository.logs_by_habit, today, settings.days_to_show, settings.preset)


def cells_frame(layout: GridLayout) -> pd.DataFrame:
    """
    One row per cell, with x2/y2 filled in so it can be drawn as rectangles.
    """
    columns = ["habit_id", "day", "row", "column", "x", "y", "x2", "y2", "state", "color", "is_today"]
    rows = [
        {
            "habit_id": c.habit_id,
            "day": c.day,
            "row": c.row,
            "column": c.column,
            "x": c.x,
            "y": c.y,
            "x2": c.x + c.size,
            "y2": c.y + c.size,
            "state": c.state,
            "color": c.color,
            "is_today": c.is_today,
        }
        for c in layout.cells
    ]
    return pd.DataFrame(rows, columns=columns)
