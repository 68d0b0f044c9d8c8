"""
Autosave for daily notes.

Typing produces many edits; only the last one inside the quiet window is
written.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from .config import NOTE_AUTOSAVE_SECONDS
from .errors import FutureDateError, StoreError
from .models import DayLike, iso_day

logger = logging.getLogger(__name__)


class NoteAutosave:
    def __init__(
        self,
        repository,
        delay: float = NOTE_AUTOSAVE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repository = repository
        self.delay = delay
        self._clock = clock
        self._pending: Dict[str, Tuple[str, float]] = {}

    def edit(self, day: DayLike, text: str) -> None:
        """Record the latest text for a day and restart its quiet window."""
        self._pending[iso_day(day)] = (text, self._clock() + self.delay)

    def pending(self, day: Optional[DayLike] = None) -> bool:
        if day is None:
            return bool(self._pending)
        return iso_day(day) in self._pending

    def poll(self) -> List[str]:
        """
        Write every note whose quiet window has passed. Returns the days
        written.
        """
        now = self._clock()
        due = [d for d, (_, deadline) in self._pending.items() if deadline <= now]
        return [d for d in due if self._write(d)]

    def flush(self) -> List[str]:
        """Write everything pending right away."""
        return [d for d in list(self._pending) if self._write(d)]

    def _write(self, day: str) -> bool:
        text, _ = self._pending.pop(day)
        try:
            self.repository.save_note(day, text)
        except FutureDateError:
            logger.debug("Dropping note for future date %s", day)
            return False
        except StoreError:
            # keep it queued so the next poll retries
            self._pending.setdefault(day, (text, self._clock()))
            raise
        return True
