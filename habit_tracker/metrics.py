"""
Metrics and date logic: streaks, completion rates, dashboard frames.

Everything here is read-only. A habit's logs arrive as a mapping of
'YYYY-MM-DD' -> LogEntry, and an entry with completed=False counts the same
as a day with no entry at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .models import Habit, LogEntry


def daterange(start: date, end: date) -> List[date]:
    """
    Inclusive date range.
    """
    days = []
    cur = start
    while cur <= end:
        days.append(cur)
        cur += timedelta(days=1)
    return days


def month_bounds(d: date) -> Tuple[date, date]:
    start = d.replace(day=1)
    # next month start
    if start.month == 12:
        nm = start.replace(year=start.year + 1, month=1, day=1)
    else:
        nm = start.replace(month=start.month + 1, day=1)
    end = nm - timedelta(days=1)
    return start, end


def _is_done(logs: Mapping[str, LogEntry], day: date) -> bool:
    entry = logs.get(day.isoformat())
    return bool(entry and entry.completed)


def current_streak(logs: Mapping[str, LogEntry], as_of: date) -> int:
    """
    Count consecutive completed days ending at as_of.

    An incomplete as_of gives 0 no matter what came before.
    """
    streak = 0
    cur = as_of
    while _is_done(logs, cur):
        streak += 1
        cur -= timedelta(days=1)
    return streak


def longest_streak(logs: Mapping[str, LogEntry], as_of: Optional[date] = None) -> int:
    cutoff = as_of.isoformat() if as_of else None
    done_days = sorted(
        date.fromisoformat(day)
        for day, entry in logs.items()
        if entry.completed and (cutoff is None or day <= cutoff)
    )
    longest = 0
    run = 0
    prev = None
    for d in done_days:
        run = run + 1 if prev is not None and (d - prev).days == 1 else 1
        longest = max(longest, run)
        prev = d
    return longest


def month_completion_rate(logs: Mapping[str, LogEntry], as_of: date) -> int:
    """
    Completed days from the 1st through as_of, as a whole percentage of
    as_of.day. Halves round up.
    """
    elapsed = as_of.day
    done = sum(1 for d in daterange(as_of.replace(day=1), as_of) if _is_done(logs, d))
    return (200 * done + elapsed) // (2 * elapsed)


def total_completions(logs: Mapping[str, LogEntry], as_of: Optional[date] = None) -> int:
    cutoff = as_of.isoformat() if as_of else None
    return sum(1 for day, entry in logs.items() if entry.completed and (cutoff is None or day <= cutoff))


@dataclass(frozen=True)
class HabitStats:
    habit_id: str
    current_streak: int
    longest_streak: int
    total: int
    month_rate: int


def streaks_for(repository, habit_id: str, as_of: Optional[date] = None) -> HabitStats:
    as_of = as_of or date.fromisoformat(repository.today)
    logs = repository.logs_for(habit_id)
    return HabitStats(
        habit_id=habit_id,
        current_streak=current_streak(logs, as_of),
        longest_streak=longest_streak(logs, as_of),
        total=total_completions(logs, as_of),
        month_rate=month_completion_rate(logs, as_of),
    )


def stats_frame(repository, habits: Iterable[Habit], as_of: Optional[date] = None) -> pd.DataFrame:
    """
    One row per habit with the numbers shown on the stats cards.
    """
    rows = []
    for h in habits:
        s = streaks_for(repository, h.id, as_of)
        rows.append(
            {
                "habit_id": h.id,
                "name": h.name,
                "color": h.color,
                "current_streak": s.current_streak,
                "longest_streak": s.longest_streak,
                "total": s.total,
                "month_rate": s.month_rate,
            }
        )
    columns = ["habit_id", "name", "color", "current_streak", "longest_streak", "total", "month_rate"]
    return pd.DataFrame(rows, columns=columns)


def daily_progress_frame(repository, habits: List[Habit], month_start: date, month_end: date) -> pd.DataFrame:
    """
    Build a per-day frame for the month:
      - tracked (number of habits), done
      - cumulative totals and the daily completion rate
    """
    days = pd.date_range(month_start, month_end, freq="D")
    done_counts = []
    for ts in days:
        day = ts.date()
        done_counts.append(sum(1 for h in habits if _is_done(repository.logs_for(h.id), day)))

    df = pd.DataFrame(
        {
            "day": [d.date() for d in days],
            "tracked": [len(habits)] * len(days),
            "done": done_counts,
        }
    )
    df["cum_tracked"] = df["tracked"].cumsum()
    df["cum_done"] = df["done"].cumsum()
    df["completion_rate"] = df.apply(lambda r: (r["done"] / r["tracked"]) if r["tracked"] else 0.0, axis=1)
    return df
