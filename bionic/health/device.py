"""Devices referenced by Apple Health records."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from bionic.db import first_or_create

_FIELDS = frozenset({"name", "manufacturer", "model", "hardware", "software"})


@dataclass(frozen=True)
class Device:
    name: str = ""
    manufacturer: str = ""
    model: str = ""
    hardware: str = ""
    software: str = ""


def parse_device(text):
    """Parse a device attribute such as '<<HKDevice: 0x0>, name:Watch, model:Watch>'.

    Text that does not fit the form gives an empty Device.
    """
    if len(text) < 3:
        return Device()

    parts = text[1:-1].split(", ")
    if len(parts) < 2:
        return Device()

    values = {}
    for attr in parts[1:]:
        pieces = attr.split(":")
        if len(pieces) != 2:
            continue
        key, value = pieces
        if key in _FIELDS:
            values[key] = value
    return Device(**values)


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_devices (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            name TEXT,
            manufacturer TEXT,
            model TEXT,
            hardware TEXT,
            software TEXT
        )"""
    )


def save_device(conn, device):
    """Return the id of the stored device, inserting it if new."""
    return first_or_create(conn, "health_devices", asdict(device))