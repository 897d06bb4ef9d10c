"""Google Takeout "My Activity" records."""

from __future__ import annotations

import json
import os
import posixpath
import zipfile
from pathlib import Path

from bionic.db import first_or_create, parse_datetime

TARGET_FILENAME = "MyActivity.json"


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            header TEXT,
            title TEXT,
            title_url TEXT,
            type TEXT,
            time TEXT,
            UNIQUE (header, title, time)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_products (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            name TEXT UNIQUE
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_products_assoc (
            action_id INTEGER NOT NULL REFERENCES google_activity (id),
            product_id INTEGER NOT NULL REFERENCES google_activity_products (id),
            PRIMARY KEY (action_id, product_id)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_location_infos (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            action_id INTEGER REFERENCES google_activity (id),
            name TEXT,
            url TEXT,
            source TEXT,
            source_url TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_subtitles (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            action_id INTEGER REFERENCES google_activity (id),
            name TEXT,
            url TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_details (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            action_id INTEGER REFERENCES google_activity (id),
            name TEXT
        )"""
    )


def _save_action(conn, action: dict, directory: str) -> bool:
    product_ids = [
        first_or_create(conn, "google_activity_products", {"name": name})
        for name in action.get("products") or []
    ]

    time = parse_datetime(action.get("time"))
    cursor = conn.execute(
        "INSERT OR IGNORE INTO google_activity (header, title, title_url, type, time) "
        "VALUES (?, ?, ?, ?, ?)",
        (
            action.get("header", ""),
            action.get("title", ""),
            action.get("titleUrl", ""),
            directory,
            time.isoformat() if time else None,
        ),
    )
    if cursor.rowcount != 1:
        return False
    action_id = cursor.lastrowid

    conn.executemany(
        "INSERT OR IGNORE INTO google_activity_products_assoc (action_id, product_id) VALUES (?, ?)",
        [(action_id, product_id) for product_id in product_ids],
    )
    conn.executemany(
        "INSERT INTO google_activity_location_infos (action_id, name, url, source, source_url) "
        "VALUES (?, ?, ?, ?, ?)",
        [
            (action_id, i.get("name", ""), i.get("url", ""), i.get("source", ""), i.get("sourceUrl", ""))
            for i in action.get("locationInfos") or []
        ],
    )
    conn.executemany(
        "INSERT INTO google_activity_subtitles (action_id, name, url) VALUES (?, ?, ?)",
        [(action_id, s.get("name", ""), s.get("url", "")) for s in action.get("subtitles") or []],
    )
    conn.executemany(
        "INSERT INTO google_activity_details (action_id, name) VALUES (?, ?)",
        [(action_id, d.get("name", "")) for d in action.get("details") or []],
    )
    return True


def process_actions(conn, stream, directory):
    """Load a MyActivity.json stream; directory names the activity type.

    Returns the number of actions that were new.
    """
    actions = json.load(stream)
    if not isinstance(actions, list):
        raise ValueError("activity file should hold a list of actions")
    return sum(_save_action(conn, action, directory) for action in actions)


def import_activity_from_archive(conn, input_path):
    with zipfile.ZipFile(input_path) as archive:
        for info in archive.infolist():
            if info.is_dir() or posixpath.basename(info.filename) != TARGET_FILENAME:
                continue
            directory = posixpath.basename(posixpath.dirname(info.filename))
            with archive.open(info) as stream:
                process_actions(conn, stream, directory)


def import_activity_from_directory(conn, input_path):
    """Load every MyActivity.json below input_path; a missing directory is skipped."""
    if not Path(input_path).is_dir():
        return
    for dirpath, dirnames, filenames in os.walk(input_path):
        dirnames.sort()
        if TARGET_FILENAME not in filenames:
            continue
        with open(os.path.join(dirpath, TARGET_FILENAME), "rb") as stream:
            process_actions(conn, stream, os.path.basename(dirpath))