"""Apple Health <Record> entries with their metadata and heart-beat lists."""

from __future__ import annotations

from bionic.db import first_or_create, parse_datetime
from bionic.health import device as devices


def create_tables(conn):
    devices.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_entries (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            type TEXT,
            source_name TEXT,
            source_version TEXT,
            unit TEXT,
            creation_date TEXT,
            start_date TEXT,
            end_date TEXT,
            value TEXT,
            device_id INTEGER REFERENCES health_devices (id),
            UNIQUE (type, creation_date)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_entry_metadata (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            entry_id INTEGER REFERENCES health_entries (id),
            key TEXT,
            value TEXT,
            UNIQUE (entry_id, key)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_beats_per_minutes (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            entry_id INTEGER REFERENCES health_entries (id),
            bpm INTEGER,
            time TEXT,
            UNIQUE (entry_id, time)
        )"""
    )


def parse_record(conn, element):
    """Store a <Record> element and its children; return the entry id."""
    attrs = element.attrib

    device_id = None
    if "device" in attrs:
        device_id = devices.save_device(conn, devices.parse_device(attrs["device"]))

    entry_id = first_or_create(
        conn,
        "health_entries",
        {
            "type": attrs.get("type", ""),
            "creation_date": parse_datetime(attrs.get("creationDate")),
        },
        {
            "source_name": attrs.get("sourceName", ""),
            "source_version": attrs.get("sourceVersion", ""),
            "unit": attrs.get("unit", ""),
            "start_date": parse_datetime(attrs.get("startDate")),
            "end_date": parse_datetime(attrs.get("endDate")),
            "value": attrs.get("value", ""),
            "device_id": device_id,
        },
    )

    for meta in element.findall("MetadataEntry"):
        first_or_create(
            conn,
            "health_entry_metadata",
            {"entry_id": entry_id, "key": meta.get("key", "")},
            {"value": meta.get("value", "")},
        )

    for beat in element.findall("HeartRateVariabilityMetadataList/InstantaneousBeatsPerMinute"):
        first_or_create(
            conn,
            "health_beats_per_minutes",
            {"entry_id": entry_id, "time": beat.get("time", "")},
            {"bpm": int(beat.get("bpm") or 0)},
        )

    return entry_id