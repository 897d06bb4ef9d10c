"""Apple Health <Workout> elements with metadata, events and routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from bionic.db import first_or_create, parse_datetime
from bionic.health import device as devices


@dataclass
class WorkoutRoute:
    """A workout's route; GPX data is filled in once its file is read."""

    id: int
    workout_id: int
    source_name: str = ""
    source_version: str = ""
    creation_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    file_path: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    time: datetime | None = None
    track_name: str = ""


@dataclass
class Workout:
    id: int
    activity_type: str = ""
    duration: float = 0.0
    duration_unit: str = ""
    total_distance: float = 0.0
    total_distance_unit: str = ""
    total_energy_burned: float = 0.0
    total_energy_burned_unit: str = ""
    source_name: str = ""
    source_version: str = ""
    creation_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    device_id: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    route: WorkoutRoute | None = None


def create_tables(conn):
    devices.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_workouts (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_type TEXT,
            duration REAL,
            duration_unit TEXT,
            total_distance REAL,
            total_distance_unit TEXT,
            total_energy_burned REAL,
            total_energy_burned_unit TEXT,
            source_name TEXT,
            source_version TEXT,
            creation_date TEXT UNIQUE,
            start_date TEXT,
            end_date TEXT,
            device_id INTEGER REFERENCES health_devices (id)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_workout_metadata (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            workout_id INTEGER REFERENCES health_workouts (id),
            key TEXT,
            value TEXT,
            UNIQUE (workout_id, key)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_workout_events (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            workout_id INTEGER REFERENCES health_workouts (id),
            type TEXT,
            date TEXT,
            duration REAL,
            duration_unit TEXT,
            UNIQUE (workout_id, type, date)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_workout_routes (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            workout_id INTEGER REFERENCES health_workouts (id),
            source_name TEXT,
            source_version TEXT,
            creation_date TEXT,
            start_date TEXT,
            end_date TEXT,
            file_path TEXT,
            time TEXT,
            track_name TEXT,
            UNIQUE (workout_id, creation_date)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_workout_route_metadata (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            workout_route_id INTEGER REFERENCES health_workout_routes (id),
            key TEXT,
            value TEXT,
            UNIQUE (workout_route_id, key)
        )"""
    )


def _float(value) -> float:
    return float(value) if value else 0.0


def _metadata(element) -> dict[str, str]:
    return {m.get("key", ""): m.get("value", "") for m in element.findall("MetadataEntry")}


def _save_route(conn, element, workout_id: int) -> WorkoutRoute:
    attrs = element.attrib
    reference = element.find("FileReference")
    route = WorkoutRoute(
        id=0,
        workout_id=workout_id,
        source_name=attrs.get("sourceName", ""),
        source_version=attrs.get("sourceVersion", ""),
        creation_date=parse_datetime(attrs.get("creationDate")),
        start_date=parse_datetime(attrs.get("startDate")),
        end_date=parse_datetime(attrs.get("endDate")),
        file_path=reference.get("path", "") if reference is not None else "",
        metadata=_metadata(element),
    )
    route.id = first_or_create(
        conn,
        "health_workout_routes",
        {"workout_id": workout_id, "creation_date": route.creation_date},
        {
            "source_name": route.source_name,
            "source_version": route.source_version,
            "start_date": route.start_date,
            "end_date": route.end_date,
            "file_path": route.file_path,
        },
    )
    for key, value in route.metadata.items():
        first_or_create(
            conn,
            "health_workout_route_metadata",
            {"workout_route_id": route.id, "key": key},
            {"value": value},
        )
    return route


def parse_workout(conn, element):
    """Store a <Workout> element and its children; return the Workout."""
    attrs = element.attrib

    device_id = None
    if "device" in attrs:
        device_id = devices.save_device(conn, devices.parse_device(attrs["device"]))

    workout = Workout(
        id=0,
        activity_type=attrs.get("workoutActivityType", ""),
        duration=_float(attrs.get("duration")),
        duration_unit=attrs.get("durationUnit", ""),
        total_distance=_float(attrs.get("totalDistance")),
        total_distance_unit=attrs.get("totalDistanceUnit", ""),
        total_energy_burned=_float(attrs.get("totalEnergyBurned")),
        total_energy_burned_unit=attrs.get("totalEnergyBurnedUnit", ""),
        source_name=attrs.get("sourceName", ""),
        source_version=attrs.get("sourceVersion", ""),
        creation_date=parse_datetime(attrs.get("creationDate")),
        start_date=parse_datetime(attrs.get("startDate")),
        end_date=parse_datetime(attrs.get("endDate")),
        device_id=device_id,
        metadata=_metadata(element),
    )
    workout.id = first_or_create(
        conn,
        "health_workouts",
        {"creation_date": workout.creation_date},
        {
            "activity_type": workout.activity_type,
            "duration": workout.duration,
            "duration_unit": workout.duration_unit,
            "total_distance": workout.total_distance,
            "total_distance_unit": workout.total_distance_unit,
            "total_energy_burned": workout.total_energy_burned,
            "total_energy_burned_unit": workout.total_energy_burned_unit,
            "source_name": workout.source_name,
            "source_version": workout.source_version,
            "start_date": workout.start_date,
            "end_date": workout.end_date,
            "device_id": device_id,
        },
    )

    for key, value in workout.metadata.items():
        first_or_create(
            conn,
            "health_workout_metadata",
            {"workout_id": workout.id, "key": key},
            {"value": value},
        )

    for event in element.findall("WorkoutEvent"):
        first_or_create(
            conn,
            "health_workout_events",
            {
                "workout_id": workout.id,
                "type": event.get("type", ""),
                "date": parse_datetime(event.get("date")),
            },
            {
                "duration": _float(event.get("duration")),
                "duration_unit": event.get("durationUnit", ""),
            },
        )

    route_element = element.find("WorkoutRoute")
    if route_element is not None:
        workout.route = _save_route(conn, route_element, workout.id)

    return workout