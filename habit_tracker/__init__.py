from .db import DB_PATH_DEFAULT, LocalStore, init_db
from .errors import (
    FutureDateError,
    HabitTrackerError,
    ImportMalformedError,
    ImportVersionError,
    StoreError,
    UnknownHabitError,
)
from .repository import HabitRepository

__all__ = [
    "DB_PATH_DEFAULT",
    "FutureDateError",
    "HabitRepository",
    "HabitTrackerError",
    "ImportMalformedError",
    "ImportVersionError",
    "LocalStore",
    "StoreError",
    "UnknownHabitError",
    "init_db",
]
