"""Google Takeout raw location history ("Location History.json")."""

from __future__ import annotations

import json
import posixpath
import zipfile
from enum import Enum
from pathlib import Path

from bionic.db import insert_ignore, parse_datetime

LOCATION_HISTORY_FILE = "Location History.json"


class LocationActivityType(str, Enum):
    EXITING_VEHICLE = "EXITING_VEHICLE"
    IN_RAIL_VEHICLE = "IN_RAIL_VEHICLE"
    IN_ROAD_VEHICLE = "IN_ROAD_VEHICLE"
    IN_VEHICLE = "IN_VEHICLE"
    ON_BICYCLE = "ON_BICYCLE"
    ON_FOOT = "ON_FOOT"
    RUNNING = "RUNNING"
    STILL = "STILL"
    TILTING = "TILTING"
    UNKNOWN = "UNKNOWN"
    WALKING = "WALKING"


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_location_history (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            accuracy INTEGER,
            altitude INTEGER,
            heading INTEGER,
            latitude_e7 INTEGER,
            longitude_e7 INTEGER,
            time TEXT,
            velocity INTEGER,
            vertical_accuracy INTEGER,
            UNIQUE (latitude_e7, longitude_e7, time)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_location_activity (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            location_history_item_id INTEGER REFERENCES google_location_history (id),
            time TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_location_activity_type_candidates (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            location_activity_id INTEGER REFERENCES google_location_activity (id),
            confidence INTEGER,
            type TEXT
        )"""
    )


def _iso(value):
    return value.isoformat() if value is not None else None


def _save_item(conn, item: dict) -> bool:
    cursor = conn.execute(
        """INSERT OR IGNORE INTO google_location_history
        (accuracy, altitude, heading, latitude_e7, longitude_e7, time, velocity, vertical_accuracy)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            item.get("accuracy", 0),
            item.get("altitude", 0),
            item.get("heading", 0),
            item.get("latitudeE7", 0),
            item.get("longitudeE7", 0),
            _iso(parse_datetime(item.get("timestampMs"))),
            item.get("velocity", 0),
            item.get("verticalAccuracy", 0),
        ),
    )
    if cursor.rowcount != 1:
        return False
    item_id = cursor.lastrowid

    for activity in item.get("activity") or []:
        activity_id = conn.execute(
            "INSERT INTO google_location_activity (location_history_item_id, time) VALUES (?, ?)",
            (item_id, _iso(parse_datetime(activity.get("timestampMs")))),
        ).lastrowid
        insert_ignore(
            conn,
            "google_location_activity_type_candidates",
            [
                {
                    "location_activity_id": activity_id,
                    "confidence": candidate.get("confidence", 0),
                    "type": candidate.get("type", ""),
                }
                for candidate in activity.get("activity") or []
            ],
        )
    return True


def process_location_history(conn, stream):
    """Load a location history document; return how many locations were new."""
    data = json.load(stream)
    if not isinstance(data, dict):
        raise ValueError("location history file should hold an object")
    return sum(_save_item(conn, item) for item in data.get("locations") or [])


def import_location_history_from_archive(conn, input_path):
    total = 0
    with zipfile.ZipFile(input_path) as archive:
        for info in archive.infolist():
            if info.is_dir() or posixpath.basename(info.filename) != LOCATION_HISTORY_FILE:
                continue
            with archive.open(info) as stream:
                total += process_location_history(conn, stream)
    return total


def import_location_history_from_file(conn, input_path):
    """Load the file at input_path; a missing file is skipped."""
    path = Path(input_path)
    if not path.exists():
        return 0
    with path.open("rb") as stream:
        return process_location_history(conn, stream)