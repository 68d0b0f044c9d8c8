from datetime import date
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habit_tracker.db import LocalStore
from habit_tracker.errors import StoreError
from habit_tracker.repository import HabitRepository

TODAY = date(2024, 1, 7)
STAMP = "2024-01-07T12:00:00"


class FlakyStore(LocalStore):
    """LocalStore that records write attempts and fails the ones listed in .fail."""

    def __init__(self, db_path):
        super().__init__(db_path)
        self.fail = set()
        self.writes = []

    def _attempt(self, op):
        self.writes.append(op)
        if op in self.fail:
            raise StoreError(f"{op} failed (disk full)")

    def put(self, collection, record):
        self._attempt("put")
        super().put(collection, record)

    def delete(self, collection, key):
        self._attempt("delete")
        super().delete(collection, key)

    def delete_habit(self, habit_id):
        self._attempt("delete_habit")
        return super().delete_habit(habit_id)

    def clear_all(self):
        self._attempt("clear_all")
        super().clear_all()


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "habits.db")


@pytest.fixture
def store(db_path):
    return FlakyStore(db_path)


@pytest.fixture
def repo(store):
    return HabitRepository(store, today=lambda: TODAY, now=lambda: STAMP)


def make_repo(store):
    return HabitRepository(store, today=lambda: TODAY, now=lambda: STAMP)
