"""Chrome browsing history: URLs, segments and visits."""

from __future__ import annotations

import shutil
import sqlite3
import tempfile
from contextlib import closing
from enum import Enum
from pathlib import Path
from typing import Iterator

from bionic.db import first_or_create, parse_datetime

ROW_SELECT_LIMIT = 100

_URL_SELECTION = (
    "id, url, title, visit_count, typed_count, "
    "datetime((last_visit_time/1000000)-11644473600, 'unixepoch') as last_visit, hidden"
)
_SEGMENT_SELECTION = "id, name, url_id"
_VISIT_SELECTION = (
    "id, url as url_id, datetime((visit_time/1000000)-11644473600, 'unixepoch') as time, "
    "from_visit as visit_id, transition, segment_id, visit_duration, "
    "incremented_omnibox_typed_score, publicly_routable"
)


class TransitionType(str, Enum):
    LINK = "LINK"
    TYPED = "TYPED"
    AUTO_BOOKMARK = "AUTO_BOOKMARK"
    AUTO_SUBFRAME = "AUTO_SUBFRAME"
    MANUAL_SUBFRAME = "MANUAL_SUBFRAME"
    GENERATED = "GENERATED"
    AUTO_TOPLEVEL = "AUTO_TOPLEVEL"
    FORM_SUBMIT = "FORM_SUBMIT"
    RELOAD = "RELOAD"
    KEYWORD = "KEYWORD"
    KEYWORD_GENERATED = "KEYWORD_GENERATED"


class TransitionQualifierType(str, Enum):
    FORWARD_BACK = "FORWARD_BACK"
    FROM_ADDRESS_BAR = "FROM_ADDRESS_BAR"
    HOME_PAGE = "HOME_PAGE"
    CHAIN_START = "CHAIN_START"
    CHAIN_END = "CHAIN_END"
    CLIENT_REDIRECT = "CLIENT_REDIRECT"
    SERVER_REDIRECT = "SERVER_REDIRECT"


_CORE_TYPES = dict(enumerate(TransitionType))

_QUALIFIERS = {
    0x01000000: TransitionQualifierType.FORWARD_BACK,
    0x02000000: TransitionQualifierType.FROM_ADDRESS_BAR,
    0x04000000: TransitionQualifierType.HOME_PAGE,
    0x10000000: TransitionQualifierType.CHAIN_START,
    0x20000000: TransitionQualifierType.CHAIN_END,
    0x40000000: TransitionQualifierType.CLIENT_REDIRECT,
    0x80000000: TransitionQualifierType.SERVER_REDIRECT,
}


def transition_info(transition):
    """Split a raw transition value into (type, qualifier, is_redirect).

    Type and qualifier are None when the value matches no known one.
    """
    return (
        _CORE_TYPES.get(transition & 0xFF),
        _QUALIFIERS.get(transition & 0xFFFFFF00),
        transition & 0xC0000000 != 0,
    )


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS chrome_urls (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            url TEXT UNIQUE,
            title TEXT,
            visit_count INTEGER,
            typed_count INTEGER,
            last_visit TEXT,
            hidden INTEGER
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS chrome_segments (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            name TEXT,
            url_id INTEGER REFERENCES chrome_urls (id),
            UNIQUE (name, url_id)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS chrome_visits (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            url_id INTEGER REFERENCES chrome_urls (id),
            time TEXT,
            visit_id INTEGER,
            transition_type TEXT,
            transition_qualifier_type TEXT,
            is_redirect INTEGER,
            segment_id INTEGER REFERENCES chrome_segments (id),
            visit_duration INTEGER,
            incremented_omnibox_typed_score INTEGER,
            publicly_routable INTEGER
        )"""
    )


def _select_rows(source, table: str, selection: str) -> Iterator[sqlite3.Row]:
    last_id = None
    while True:
        if last_id is None:
            rows = source.execute(
                f"SELECT {selection} FROM {table} ORDER BY id LIMIT ?", (ROW_SELECT_LIMIT,)
            ).fetchall()
        else:
            rows = source.execute(
                f"SELECT {selection} FROM {table} WHERE id > ? ORDER BY id LIMIT ?",
                (last_id, ROW_SELECT_LIMIT),
            ).fetchall()
        yield from rows
        if len(rows) < ROW_SELECT_LIMIT:
            return
        last_id = rows[-1]["id"]


def _import_urls(conn, source) -> None:
    for row in _select_rows(source, "urls", _URL_SELECTION):
        first_or_create(
            conn,
            "chrome_urls",
            {"id": row["id"], "url": row["url"]},
            {
                "title": row["title"],
                "visit_count": row["visit_count"],
                "typed_count": row["typed_count"],
                "last_visit": parse_datetime(row["last_visit"]),
                "hidden": bool(row["hidden"]),
            },
        )


def _import_segments(conn, source) -> None:
    for row in _select_rows(source, "segments", _SEGMENT_SELECTION):
        first_or_create(
            conn,
            "chrome_segments",
            {"id": row["id"], "url_id": row["url_id"]},
            {"name": row["name"]},
        )


def _import_visits(conn, source) -> None:
    for row in _select_rows(source, "visits", _VISIT_SELECTION):
        transition_type, qualifier, is_redirect = transition_info(row["transition"] or 0)
        first_or_create(
            conn,
            "chrome_visits",
            {"id": row["id"], "url_id": row["url_id"]},
            {
                "time": parse_datetime(row["time"]),
                "visit_id": row["visit_id"],
                "transition_type": transition_type,
                "transition_qualifier_type": qualifier,
                "is_redirect": is_redirect,
                "segment_id": row["segment_id"],
                "visit_duration": row["visit_duration"],
                "incremented_omnibox_typed_score": bool(row["incremented_omnibox_typed_score"]),
                "publicly_routable": bool(row["publicly_routable"]),
            },
        )


def import_history(conn, input_path):
    """Import a Chrome History database; a '?query' suffix on the path is ignored."""
    source_path = str(input_path).partition("?")[0]
    with tempfile.TemporaryDirectory(prefix="bionic-chrome-copy.") as tmp:
        copy = Path(tmp) / "History.sqlite"
        shutil.copyfile(source_path, copy)
        with closing(sqlite3.connect(str(copy))) as source:
            source.row_factory = sqlite3.Row
            _import_urls(conn, source)
            _import_segments(conn, source)
            _import_visits(conn, source)