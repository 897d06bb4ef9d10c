"""SQLite storage helpers shared by every provider."""

from __future__ import annotations

import abc
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_OFFSET_RE = re.compile(r"\s*([+-])(\d{2}):?(\d{2})$")


class ProviderNotFoundError(LookupError):
    """Raised when no provider is registered under the requested name."""


class InputPathError(ValueError):
    """Raised when an input path is a file where a directory is needed, or the reverse."""


@dataclass(frozen=True)
class ImportFn:
    """A named unit of import work bound to its input path."""

    name: str
    fn: Callable[[str], Any]
    input_path: str

    def call(self):
        return self.fn(self.input_path)


class Provider(abc.ABC):
    """A data source that owns a set of prefixed tables."""

    name: str = ""
    table_prefix: str = ""
    import_description: str | None = None

    def __init__(self, conn):
        self.conn = conn

    @abc.abstractmethod
    def migrate(self):
        """Create the provider's tables if they do not exist."""

    @abc.abstractmethod
    def import_fns(self, input_path):
        """Return the ImportFn list that loads data found at input_path."""


def open_database(path):
    """Open (creating if needed) the SQLite database at path."""
    db_path = Path(path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path.touch(exist_ok=True)
    return sqlite3.connect(str(db_path))


def get_tables(conn):
    """Return names of all user tables in the database."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
    )
    return [name for (name,) in rows]


def parse_datetime(value):
    """Parse an ISO-8601 string or a Unix timestamp (seconds or milliseconds).

    Naive values are taken as UTC. Empty values give None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, bool):
        raise ValueError(f"cannot parse datetime from {value!r}")
    elif isinstance(value, int) or (
        isinstance(value, str) and value.strip().lstrip("-").isdigit()
    ):
        number = int(value)
        if abs(number) >= 10**11:
            return _EPOCH + timedelta(milliseconds=number)
        return _EPOCH + timedelta(seconds=number)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        text = _OFFSET_RE.sub(lambda m: f"{m[1]}{m[2]}:{m[3]}", text)
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"cannot parse datetime from {value!r}") from exc
    else:
        raise ValueError(f"cannot parse datetime from {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _adapt(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def _insert(conn, table: str, row: Mapping[str, Any], verb: str = "INSERT"):
    columns = ", ".join(_quote(c) for c in row)
    marks = ", ".join("?" for _ in row)
    return conn.execute(
        f"{verb} INTO {_quote(table)} ({columns}) VALUES ({marks})",
        [_adapt(v) for v in row.values()],
    )


def first_or_create(conn, table, conditions, values=None):
    """Return the id of the first row matching conditions, inserting one if absent."""
    if conditions:
        where = " AND ".join(f"{_quote(k)} IS ?" for k in conditions)
    else:
        where = "1"
    row = conn.execute(
        f"SELECT id FROM {_quote(table)} WHERE {where} ORDER BY id LIMIT 1",
        [_adapt(v) for v in conditions.values()],
    ).fetchone()
    if row is not None:
        return row[0]
    return _insert(conn, table, {**conditions, **(values or {})}).lastrowid


def insert_ignore(conn, table, rows: Iterable[Mapping[str, Any]]):
    """Insert rows, skipping those that violate a constraint; return how many went in."""
    inserted = 0
    for row in rows:
        inserted += _insert(conn, table, row, "INSERT OR IGNORE").rowcount
    return inserted


def create_imports_table(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS imports (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            provider TEXT
        )"""
    )


def record_import(conn, provider_name):
    """Record that a provider's import finished; return the new row id."""
    return _insert(conn, "imports", {"provider": provider_name}).lastrowid