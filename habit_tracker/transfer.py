"""
JSON export and import.

The file holds every habit (archived too), log and note:

    {"version": 1, "exported_at": ..., "habits": [...], "logs": [...], "notes": [...]}

Import merges: each record is upserted on its natural key and anything not in
the file is left alone.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import ImportMalformedError, ImportVersionError, StoreError
from .models import DailyNote, Habit, LogEntry, iso_day, now_iso

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

SECTIONS = {
    "habits": Habit,
    "logs": LogEntry,
    "notes": DailyNote,
}


@dataclass
class ImportReport:
    habits: int = 0
    logs: int = 0
    notes: int = 0
    failed: List[Tuple[str, dict, StoreError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def export_all(repository, exported_at: Optional[str] = None) -> dict:
    store = repository.store
    return {
        "version": EXPORT_VERSION,
        "exported_at": exported_at or now_iso(),
        "habits": store.get_all("habits", include_archived=True),
        "logs": store.get_all("logs"),
        "notes": store.get_all("notes"),
    }


def dumps(document: dict) -> str:
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_filename(day: str) -> str:
    return f"habits-export-{day}.json"


def _checked_values(name: str, i: int, item: dict) -> dict:
    """
    Reject values the app cannot read back later: dates that are not ISO
    days, and completion flags that are not booleans (0 and 1 pass).
    """
    item = dict(item)
    if name in ("logs", "notes") and "date" in item:
        value = item["date"]
        try:
            item["date"] = iso_day(value) if isinstance(value, str) else None
        except ValueError:
            item["date"] = None
        if item["date"] is None:
            raise ImportMalformedError(f"{name}[{i}] has an invalid date: {value!r}")
    if name == "logs" and "completed" in item:
        value = item["completed"]
        if not (isinstance(value, bool) or (isinstance(value, int) and value in (0, 1))):
            raise ImportMalformedError(f"{name}[{i}] has an invalid completed flag: {value!r}")
        item["completed"] = bool(value)
    return item


def parse_document(document: Union[str, bytes, dict]) -> dict:
    """
    Decode and check an export document.

    Returns a dict whose sections hold normalised records. Raises
    ImportMalformedError or ImportVersionError; nothing is written here.
    """
    if isinstance(document, (bytes, bytearray)):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ImportMalformedError(f"File is not UTF-8 text: {exc}") from exc
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as exc:
            raise ImportMalformedError(f"File is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise ImportMalformedError("Export file must contain a JSON object.")

    version = document.get("version")
    if isinstance(version, bool) or version != EXPORT_VERSION:
        raise ImportVersionError(version)

    parsed = {"version": version, "exported_at": document.get("exported_at")}
    for name, model in SECTIONS.items():
        items = document.get(name) or []
        if not isinstance(items, list):
            raise ImportMalformedError(f"'{name}' must be a list.")
        normalised = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise ImportMalformedError(f"{name}[{i}] is not an object.")
            try:
                normalised.append(model.from_record(_checked_values(name, i, item)).to_record())
            except TypeError as exc:
                raise ImportMalformedError(f"{name}[{i}] is missing fields: {exc}") from exc
        parsed[name] = normalised
    return parsed


def import_all(repository, document: Union[str, bytes, dict]) -> ImportReport:
    data = parse_document(document)
    store = repository.store

    report = ImportReport()
    for name in SECTIONS:
        records = data[name]
        failures = store.put_many(name, records)
        setattr(report, name, len(records) - len(failures))
        report.failed.extend((name, record, exc) for record, exc in failures)

    repository.reload()
    logger.info(
        "Imported %d habits, %d logs, %d notes (%d failed)",
        report.habits,
        report.logs,
        report.notes,
        len(report.failed),
    )
    return report
