"""
SQLite layer for the habit tracker.

Four independent collections live on disk: habits, logs, notes and settings.
Each one is keyed by its natural key, and every write is an upsert on that
key, so a record can never be duplicated.
"""

from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .errors import StoreError

logger = logging.getLogger(__name__)

DB_PATH_DEFAULT = os.environ.get("HABIT_TRACKER_DB", os.path.join("data", "habits.db"))


@dataclass(frozen=True)
class Collection:
    table: str
    key: Tuple[str, ...]
    columns: Tuple[str, ...]
    order_by: str

    @property
    def value_columns(self) -> Tuple[str, ...]:
        return tuple(c for c in self.columns if c not in self.key)


COLLECTIONS = {
    "habits": Collection(
        table="habits",
        key=("id",),
        columns=(
            "id",
            "name",
            "description",
            "color",
            "icon",
            "frequency",
            "target_days",
            "status",
            "created_at",
            "updated_at",
            "archived_at",
            "sort_order",
        ),
        # rowid keeps insertion order because upserts never replace the row
        order_by="sort_order ASC, rowid ASC",
    ),
    "logs": Collection(
        table="logs",
        key=("habit_id", "date"),
        columns=("habit_id", "date", "completed", "note", "created_at", "updated_at"),
        order_by="habit_id ASC, date ASC",
    ),
    "notes": Collection(
        table="notes",
        key=("date",),
        columns=("date", "note", "created_at", "updated_at"),
        order_by="date ASC",
    ),
    "settings": Collection(
        table="settings",
        key=("key",),
        columns=("key", "value"),
        order_by="key ASC",
    ),
}


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


@contextmanager
def connect(db_path: str = DB_PATH_DEFAULT):
    """
    Open a connection that commits on success and rolls back on any error.

    sqlite3 errors leave this function as StoreError.
    """
    try:
        _ensure_parent_dir(db_path)
        conn = sqlite3.connect(db_path)
    except (OSError, sqlite3.Error) as exc:
        raise StoreError(f"Could not open {db_path}: {exc}") from exc
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise StoreError(str(exc)) from exc
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_path: str = DB_PATH_DEFAULT) -> None:
    """
    Create tables if they don't exist yet.
    """
    with connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS habits (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT,
                color TEXT NOT NULL,
                icon TEXT,
                frequency TEXT NOT NULL DEFAULT 'daily',   -- daily | weekly
                target_days INTEGER,                       -- weekly only
                status TEXT NOT NULL DEFAULT 'active',     -- active | paused | archived
                created_at TEXT NOT NULL,
                updated_at TEXT,
                archived_at TEXT,
                sort_order INTEGER NOT NULL DEFAULT 0
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS logs (
                habit_id TEXT NOT NULL,
                date TEXT NOT NULL,                 -- YYYY-MM-DD
                completed INTEGER NOT NULL DEFAULT 0,
                note TEXT,
                created_at TEXT,
                updated_at TEXT,
                PRIMARY KEY (habit_id, date)
            )
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS ix_logs_date ON logs(date)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS notes (
                date TEXT PRIMARY KEY,
                note TEXT NOT NULL,
                created_at TEXT,
                updated_at TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
            """
        )


def _collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown collection {name!r}") from None


def _key_params(coll: Collection, key) -> tuple:
    params = tuple(key) if isinstance(key, (tuple, list)) else (key,)
    if len(params) != len(coll.key):
        raise ValueError(f"{coll.table} is keyed by {coll.key}, got {key!r}")
    return params


def _to_params(coll: Collection, record: dict) -> tuple:
    values = []
    for col in coll.columns:
        value = record.get(col)
        if col == "completed":
            value = 1 if value else 0
        values.append(value)
    return tuple(values)


def _to_record(coll: Collection, row: sqlite3.Row) -> dict:
    record = dict(row)
    if "completed" in record:
        record["completed"] = bool(record["completed"])
    return record


def _where_key(coll: Collection) -> str:
    return " AND ".join(f"{k} = ?" for k in coll.key)


class LocalStore:
    """
    Key-based CRUD over the four collections.

    Every call opens its own short connection; a call either fully applies or
    raises StoreError and leaves the file untouched.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or DB_PATH_DEFAULT
        init_db(self.db_path)

    def _put(self, conn: sqlite3.Connection, coll: Collection, record: dict) -> None:
        cols = ", ".join(coll.columns)
        marks = ", ".join("?" for _ in coll.columns)
        updates = ", ".join(f"{c}=excluded.{c}" for c in coll.value_columns)
        conn.execute(
            f"""
            INSERT INTO {coll.table} ({cols}) VALUES ({marks})
            ON CONFLICT({', '.join(coll.key)}) DO UPDATE SET {updates}
            """,
            _to_params(coll, record),
        )

    def put(self, collection: str, record: dict) -> None:
        """
        Insert the record, or replace the one stored under the same key.
        """
        coll = _collection(collection)
        with connect(self.db_path) as conn:
            self._put(conn, coll, record)

    def put_many(self, collection: str, records: Iterable[dict]) -> List[Tuple[dict, StoreError]]:
        """
        Upsert each record in its own transaction.

        Returns the records that failed together with their error; the others
        are applied regardless.
        """
        coll = _collection(collection)
        failures = []
        for record in records:
            try:
                with connect(self.db_path) as conn:
                    self._put(conn, coll, record)
            except StoreError as exc:
                logger.warning("Could not write %s record %r: %s", coll.table, record, exc)
                failures.append((record, exc))
        return failures

    def get(self, collection: str, key) -> Optional[dict]:
        coll = _collection(collection)
        with connect(self.db_path) as conn:
            row = conn.execute(
                f"SELECT {', '.join(coll.columns)} FROM {coll.table} WHERE {_where_key(coll)}",
                _key_params(coll, key),
            ).fetchone()
        return _to_record(coll, row) if row else None

    def get_all(self, collection: str, include_archived: bool = False) -> List[dict]:
        """
        Return every record of a collection.

        Habits come back ordered by sort_order, ties in insertion order, and
        without archived ones unless include_archived is set.
        """
        coll = _collection(collection)
        where = ""
        if collection == "habits" and not include_archived:
            where = "WHERE status != 'archived'"
        with connect(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT {', '.join(coll.columns)} FROM {coll.table} {where} ORDER BY {coll.order_by}"
            ).fetchall()
        return [_to_record(coll, r) for r in rows]

    def delete(self, collection: str, key) -> None:
        coll = _collection(collection)
        with connect(self.db_path) as conn:
            conn.execute(f"DELETE FROM {coll.table} WHERE {_where_key(coll)}", _key_params(coll, key))

    def delete_logs_for_habit(self, habit_id: str) -> int:
        with connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM logs WHERE habit_id = ?", (habit_id,))
        return cur.rowcount

    def count_logs_for_habit(self, habit_id: str) -> int:
        with connect(self.db_path) as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM logs WHERE habit_id = ?", (habit_id,)).fetchone()
        return count

    def delete_habit(self, habit_id: str) -> int:
        """
        Remove a habit and all of its logs in one transaction.

        Logs go first: if that fails the habit row is still there.
        Returns the number of logs removed.
        """
        with connect(self.db_path) as conn:
            cur = conn.execute("DELETE FROM logs WHERE habit_id = ?", (habit_id,))
            removed = cur.rowcount
            conn.execute("DELETE FROM habits WHERE id = ?", (habit_id,))
        return removed

    def clear_all(self) -> None:
        """
        Drop every habit, log and note. Settings are kept.
        """
        with connect(self.db_path) as conn:
            for table in ("logs", "habits", "notes"):
                conn.execute(f"DELETE FROM {table}")
