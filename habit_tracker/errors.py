"""
Error types raised by the habit tracker core.

All of them are recoverable: the UI shows a message and carries on.
"""

from __future__ import annotations


class HabitTrackerError(Exception):
    """Base class for every error raised on purpose by the core."""


class StoreError(HabitTrackerError, IOError):
    """A read or write against the local database failed."""


class FutureDateError(HabitTrackerError, ValueError):
    """Completion or a note was requested for a date after today."""

    def __init__(self, day: str, today: str) -> None:
        super().__init__(f"{day} is after today ({today})")
        self.day = day
        self.today = today


class ImportVersionError(HabitTrackerError, ValueError):
    """The export document was written by an unsupported schema version."""

    def __init__(self, version) -> None:
        super().__init__(f"Unsupported file version: {version!r}")
        self.version = version


class ImportMalformedError(HabitTrackerError, ValueError):
    """The export document could not be parsed."""


class UnknownHabitError(HabitTrackerError, KeyError):
    """A habit id was used that the repository does not know about."""

    def __str__(self) -> str:
        return f"Unknown habit id: {self.args[0]!r}" if self.args else "Unknown habit id"
