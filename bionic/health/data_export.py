"""Apple Health export.xml: the export itself, the owner record and all elements in it."""

from __future__ import annotations

import posixpath
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from bionic.db import first_or_create, parse_datetime
from bionic.health import activity_summaries, entries, workout_route, workouts
from bionic.health.workouts import Workout

EXPORT_FILENAME = "export.xml"
ROUTES_DIRECTORY = "workout-routes"

_CONSUMED = frozenset({"Me", "Record", "Workout", "ActivitySummary"})


@dataclass
class DataExport:
    id: int = 0
    locale: str = ""
    export_date: datetime | None = None
    workouts: list[Workout] = field(default_factory=list)


def create_tables(conn):
    entries.create_tables(conn)
    workout_route.create_tables(conn)
    activity_summaries.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_data_exports (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            locale TEXT,
            export_date TEXT UNIQUE
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_me_records (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            data_export_id INTEGER UNIQUE REFERENCES health_data_exports (id),
            date_of_birth TEXT,
            biological_sex TEXT,
            blood_type TEXT,
            fitzpatrick_skin_type TEXT,
            cardio_fitness_medications_use TEXT
        )"""
    )


def _save_export(conn, export: DataExport) -> None:
    export.id = first_or_create(
        conn,
        "health_data_exports",
        {"export_date": export.export_date},
        {"locale": export.locale},
    )


def _save_me(conn, export: DataExport, element: ET.Element) -> None:
    if not export.id:
        _save_export(conn, export)
    prefix = "HKCharacteristicTypeIdentifier"
    first_or_create(
        conn,
        "health_me_records",
        {"data_export_id": export.id},
        {
            "date_of_birth": parse_datetime(element.get(prefix + "DateOfBirth")),
            "biological_sex": element.get(prefix + "BiologicalSex", ""),
            "blood_type": element.get(prefix + "BloodType", ""),
            "fitzpatrick_skin_type": element.get(prefix + "FitzpatrickSkinType", ""),
            "cardio_fitness_medications_use": element.get(prefix + "CardioFitnessMedicationsUse", ""),
        },
    )


def _handle(conn, export: DataExport, element: ET.Element) -> None:
    if element.tag == "Me":
        _save_me(conn, export, element)
    elif element.tag == "Record":
        entries.parse_record(conn, element)
    elif element.tag == "Workout":
        export.workouts.append(workouts.parse_workout(conn, element))
    elif element.tag == "ActivitySummary":
        activity_summaries.parse_activity_summary(conn, element)


def import_data_export(conn, stream):
    """Stream an export.xml document into the database and return its DataExport."""
    export = DataExport()
    depth = 0

    for event, element in ET.iterparse(stream, events=("start", "end")):
        if event == "start":
            if depth:
                depth += 1
            elif element.tag in _CONSUMED:
                depth = 1
            elif element.tag == "HealthData":
                export.locale = element.get("locale", "")
            elif element.tag == "ExportDate":
                export.export_date = parse_datetime(element.get("value"))
                _save_export(conn, export)
            continue

        if depth:
            depth -= 1
            if depth == 0:
                _handle(conn, export, element)
                element.clear()

    if not export.id:
        _save_export(conn, export)
    return export


def import_from_archive(conn, input_path):
    """Import export.xml and the workout route files from a zip archive."""
    export = None
    route_files = {}

    with zipfile.ZipFile(input_path) as archive:
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = info.filename
            base = posixpath.basename(name)
            if base == EXPORT_FILENAME:
                with archive.open(info) as stream:
                    export = import_data_export(conn, stream)
            elif posixpath.basename(posixpath.dirname(name)) == ROUTES_DIRECTORY:
                route_files[base] = archive.read(info)

    if export is None:
        raise ValueError("no export.xml file found")

    workout_route.import_workout_routes(conn, export.workouts, route_files)
    return export


def import_from_directory(conn, input_path):
    """Import an unpacked export.xml and the route files it references."""
    with open(input_path, "rb") as stream:
        export = import_data_export(conn, stream)

    base_dir = Path(input_path).parent
    route_files = {}
    for workout in export.workouts:
        route = workout.route
        if route is None:
            continue
        route_path = base_dir / route.file_path.lstrip("/")
        route_files[posixpath.basename(route.file_path)] = route_path.read_bytes()

    workout_route.import_workout_routes(conn, export.workouts, route_files)
    return export