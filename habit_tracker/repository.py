"""
In-memory mirror of the habit, log and note collections.

One HabitRepository is built per process and handed to whoever needs habit
data. Every mutation updates the mirror first, writes through to the store,
and puts the mirror back the way it was if the write fails. Mutations hold
the repository lock, so sessions sharing one instance see them one at a time.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import fields, replace
from datetime import date
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .config import COLORS
from .errors import FutureDateError, StoreError, UnknownHabitError
from .models import (
    STATUSES,
    DailyNote,
    DayLike,
    Habit,
    LogEntry,
    iso_day,
    new_habit_id,
    now_iso,
)

logger = logging.getLogger(__name__)

_HABIT_FIELDS = {f.name for f in fields(Habit)}


class HabitRepository:
    def __init__(
        self,
        store,
        *,
        today: Callable[[], date] = date.today,
        now: Callable[[], str] = now_iso,
        autoload: bool = True,
    ) -> None:
        self.store = store
        self._today = today
        self._now = now
        self._lock = threading.RLock()
        self._habits: Dict[str, Habit] = {}
        self._logs: Dict[str, Dict[str, LogEntry]] = {}
        self._notes: Dict[str, DailyNote] = {}
        if autoload:
            self.load()

    # --- Loading -----------------------------------------------------------

    def load(self) -> None:
        """
        Read habits (archived included), logs and notes from the store.

        Nothing in memory changes unless every read succeeds.
        """
        with self._lock:
            habit_rows = self.store.get_all("habits", include_archived=True)
            log_rows = self.store.get_all("logs")
            note_rows = self.store.get_all("notes")

            habits = {}
            for row in habit_rows:
                habit = Habit.from_record(row)
                habits[habit.id] = habit

            index: Dict[str, Dict[str, LogEntry]] = {habit_id: {} for habit_id in habits}
            orphans = set()
            for row in log_rows:
                entry = LogEntry.from_record(row)
                if entry.habit_id not in habits:
                    orphans.add(entry.habit_id)
                index.setdefault(entry.habit_id, {})[entry.date] = entry
            if orphans:
                logger.warning("Logs reference %d unknown habit id(s): %s", len(orphans), sorted(orphans))

            self._habits = habits
            self._logs = index
            self._notes = {n.date: n for n in (DailyNote.from_record(r) for r in note_rows)}
        logger.info("Loaded %d habits, %d logs, %d notes", len(habits), len(log_rows), len(note_rows))

    reload = load

    @property
    def today(self) -> str:
        return iso_day(self._today())

    def _check_not_future(self, day: str) -> None:
        today = self.today
        if day > today:
            raise FutureDateError(day, today)

    # --- Habits ------------------------------------------------------------

    def _ordered(self) -> List[Habit]:
        # sorted() is stable, so ties keep insertion order
        return sorted(self._habits.values(), key=lambda h: h.sort_order)

    def list_active_display_habits(self) -> List[Habit]:
        return [h for h in self._ordered() if h.status != "archived"]

    def list_habits_by_status(self, status: str) -> List[Habit]:
        if status not in STATUSES:
            raise ValueError(f"Status must be one of {', '.join(STATUSES)}.")
        return [h for h in self._ordered() if h.status == status]

    def get_habit(self, habit_id: str) -> Habit:
        try:
            return self._habits[habit_id]
        except KeyError:
            raise UnknownHabitError(habit_id) from None

    def _next_sort_order(self) -> int:
        return max((h.sort_order for h in self._habits.values()), default=-1) + 1

    def create_habit(
        self,
        name: str,
        color: str = COLORS[0],
        description: Optional[str] = None,
        frequency: str = "daily",
        target_days: Optional[int] = None,
        status: str = "active",
        created_at: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Habit:
        with self._lock:
            stamp = self._now()
            habit = Habit(
                id=new_habit_id(),
                name=(name or "").strip(),
                description=(description or "").strip() or None,
                color=color,
                icon=icon,
                frequency=frequency,
                target_days=int(target_days) if frequency == "weekly" and target_days is not None else None,
                status=status,
                created_at=created_at or stamp,
                updated_at=stamp,
                archived_at=stamp if status == "archived" else None,
                sort_order=self._next_sort_order(),
            )
            habit.validate()

            self._habits[habit.id] = habit
            self._logs[habit.id] = {}
            try:
                self.store.put("habits", habit.to_record())
            except StoreError:
                logger.exception("Could not save new habit %r", habit.name)
                del self._habits[habit.id]
                del self._logs[habit.id]
                raise
        logger.info("Created habit %s (%s)", habit.name, habit.id)
        return habit

    def update_habit(self, habit_id: str, **changes) -> Habit:
        """
        Apply field changes to a habit. The id cannot change.

        Moving into 'archived' stamps archived_at; moving out clears it.
        """
        with self._lock:
            current = self.get_habit(habit_id)
            if changes.get("id", habit_id) != habit_id:
                raise ValueError("Habit ids cannot be changed.")
            unknown = set(changes) - _HABIT_FIELDS
            if unknown:
                raise ValueError(f"Unknown habit fields: {', '.join(sorted(unknown))}")
            changes.pop("id", None)
            changes.pop("updated_at", None)

            stamp = self._now()
            updated = replace(current, **changes, updated_at=stamp)
            updated.name = (updated.name or "").strip()
            if "description" in changes:
                updated.description = (updated.description or "").strip() or None
            if updated.frequency != "weekly":
                updated.target_days = None
            elif updated.target_days is not None:
                updated.target_days = int(updated.target_days)
            if updated.status == "archived" and current.status != "archived":
                updated.archived_at = stamp
            elif updated.status != "archived":
                updated.archived_at = None
            updated.validate()

            self._habits[habit_id] = updated
            try:
                self.store.put("habits", updated.to_record())
            except StoreError:
                logger.exception("Could not update habit %s", habit_id)
                self._habits[habit_id] = current
                raise
        return updated

    def archive_habit(self, habit_id: str) -> Habit:
        habit = self.update_habit(habit_id, status="archived")
        logger.info("Archived habit %s", habit_id)
        return habit

    def restore_habit(self, habit_id: str) -> Habit:
        return self.update_habit(habit_id, status="active")

    def delete_habit(self, habit_id: str) -> None:
        """
        Remove a habit and every log under it.
        """
        with self._lock:
            self.get_habit(habit_id)
            previous_habits = dict(self._habits)
            previous_logs = self._logs.get(habit_id)

            del self._habits[habit_id]
            self._logs.pop(habit_id, None)
            try:
                removed = self.store.delete_habit(habit_id)
            except StoreError:
                logger.exception("Could not delete habit %s", habit_id)
                self._habits = previous_habits
                if previous_logs is not None:
                    self._logs[habit_id] = previous_logs
                raise
            left = self.store.count_logs_for_habit(habit_id)
            assert left == 0, f"{left} log(s) left behind for deleted habit {habit_id}"
        logger.info("Deleted habit %s and %d log(s)", habit_id, removed)

    # --- Logs --------------------------------------------------------------

    @property
    def logs_by_habit(self) -> Mapping[str, Mapping[str, LogEntry]]:
        return MappingProxyType(self._logs)

    def logs_for(self, habit_id: str) -> Mapping[str, LogEntry]:
        return MappingProxyType(self._logs.get(habit_id, {}))

    def log_for(self, habit_id: str, day: DayLike) -> Optional[bool]:
        """
        True/False for a stored entry, None when there is none.
        """
        entry = self._logs.get(habit_id, {}).get(iso_day(day))
        return entry.completed if entry else None

    def upsert_log(self, habit_id: str, day: DayLike, completed: Optional[bool] = None) -> LogEntry:
        """
        Write the completion state for (habit, day). None flips the current
        state.

        Raises FutureDateError for days after today, before anything is
        written.
        """
        day = iso_day(day)
        self._check_not_future(day)
        with self._lock:
            if habit_id not in self._habits:
                raise UnknownHabitError(habit_id)

            habit_logs = self._logs.setdefault(habit_id, {})
            previous = habit_logs.get(day)
            if completed is None:
                completed = not (previous.completed if previous else False)
            stamp = self._now()
            entry = LogEntry(
                habit_id=habit_id,
                date=day,
                completed=bool(completed),
                note=previous.note if previous else None,
                created_at=previous.created_at if previous else stamp,
                updated_at=stamp,
            )

            habit_logs[day] = entry
            try:
                self.store.put("logs", entry.to_record())
            except StoreError:
                logger.exception("Could not save log for %s on %s", habit_id, day)
                if previous is None:
                    del habit_logs[day]
                else:
                    habit_logs[day] = previous
                raise
        return entry

    def toggle_log(self, habit_id: str, day: DayLike) -> Optional[LogEntry]:
        """
        Flip completion for a grid cell or check-in row.

        Future days are ignored and return None.
        """
        try:
            return self.upsert_log(habit_id, day)
        except FutureDateError as exc:
            logger.debug("Ignoring toggle for future date %s", exc.day)
            return None

    def today_progress(self, day: Optional[DayLike] = None) -> Tuple[int, int]:
        """
        (done, total) over habits with status 'active' for the given day.
        """
        key = iso_day(day) if day is not None else self.today
        active = self.list_habits_by_status("active")
        done = sum(1 for h in active if self.log_for(h.id, key))
        return done, len(active)

    # --- Notes -------------------------------------------------------------

    def note_for(self, day: DayLike) -> str:
        note = self._notes.get(iso_day(day))
        return note.note if note else ""

    def save_note(self, day: DayLike, text: str) -> Optional[DailyNote]:
        """
        Store the note for a day. Blank text removes the note instead.
        """
        day = iso_day(day)
        self._check_not_future(day)
        with self._lock:
            previous = self._notes.get(day)

            if not (text or "").strip():
                if previous is None:
                    return None
                del self._notes[day]
                try:
                    self.store.delete("notes", day)
                except StoreError:
                    logger.exception("Could not delete note for %s", day)
                    self._notes[day] = previous
                    raise
                return None

            stamp = self._now()
            note = DailyNote(
                date=day,
                note=text,
                created_at=previous.created_at if previous else stamp,
                updated_at=stamp,
            )
            self._notes[day] = note
            try:
                self.store.put("notes", note.to_record())
            except StoreError:
                logger.exception("Could not save note for %s", day)
                if previous is None:
                    del self._notes[day]
                else:
                    self._notes[day] = previous
                raise
        return note

    # --- Bulk --------------------------------------------------------------

    def clear_all(self) -> None:
        """
        Drop every habit, log and note.
        """
        with self._lock:
            snapshot = (self._habits, self._logs, self._notes)
            self._habits, self._logs, self._notes = {}, {}, {}
            try:
                self.store.clear_all()
            except StoreError:
                logger.exception("Could not clear data")
                self._habits, self._logs, self._notes = snapshot
                raise
        logger.info("Cleared all habits, logs and notes")
