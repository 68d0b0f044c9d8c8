"""
Record types for habits, daily logs and notes.

The database and the export file both use plain dicts; these dataclasses are
what the rest of the code passes around.
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from typing import Optional, Union

from .config import COLORS

FREQUENCIES = ("daily", "weekly")
STATUSES = ("active", "paused", "archived")

DayLike = Union[date, str]


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def new_habit_id() -> str:
    return uuid.uuid4().hex


def iso_day(value: DayLike) -> str:
    """
    Normalise a date or 'YYYY-MM-DD' string to 'YYYY-MM-DD'.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value).strip()).isoformat()


def _pick(cls, record: dict) -> dict:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in record.items() if k in names}


@dataclass
class Habit:
    id: str
    name: str
    color: str
    created_at: str
    description: Optional[str] = None
    icon: Optional[str] = None
    frequency: str = "daily"
    target_days: Optional[int] = None
    status: str = "active"
    updated_at: Optional[str] = None
    archived_at: Optional[str] = None
    sort_order: int = 0

    def validate(self) -> None:
        if not (self.name or "").strip():
            raise ValueError("Please enter a name.")
        if self.color not in COLORS:
            raise ValueError(f"Unknown color {self.color!r}.")
        if self.frequency not in FREQUENCIES:
            raise ValueError(f"Frequency must be one of {', '.join(FREQUENCIES)}.")
        if self.frequency == "weekly":
            if self.target_days is None or not 1 <= int(self.target_days) <= 7:
                raise ValueError("Weekly habits need a target of 1-7 days per week.")
        elif self.target_days is not None:
            raise ValueError("Only weekly habits take a target.")
        if self.status not in STATUSES:
            raise ValueError(f"Status must be one of {', '.join(STATUSES)}.")

    def to_record(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> "Habit":
        data = _pick(cls, record)
        if data.get("sort_order") is None:
            data["sort_order"] = 0
        return cls(**data)


@dataclass
class LogEntry:
    habit_id: str
    date: str
    completed: bool = False
    note: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_record(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> "LogEntry":
        data = _pick(cls, record)
        data["completed"] = bool(data.get("completed"))
        return cls(**data)


@dataclass
class DailyNote:
    date: str
    note: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_record(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> "DailyNote":
        return cls(**_pick(cls, record))
