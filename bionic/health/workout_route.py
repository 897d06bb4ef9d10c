"""GPX track data attached to Apple Health workout routes."""

from __future__ import annotations

import posixpath
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime

from bionic.db import first_or_create, parse_datetime
from bionic.health import workouts as workout_models

TRACK_POINTS_TABLE = "health_workout_route_track_points"


@dataclass(frozen=True)
class TrackPoint:
    lon: float = 0.0
    lat: float = 0.0
    ele: float = 0.0
    time: datetime | None = None
    speed: float = 0.0
    course: float = 0.0
    h_acc: float = 0.0
    v_acc: float = 0.0


@dataclass
class GpxRoute:
    time: datetime | None = None
    track_name: str = ""
    track_points: list[TrackPoint] = field(default_factory=list)


def _strip_namespaces(root: ET.Element) -> None:
    for element in root.iter():
        element.tag = element.tag.rsplit("}", 1)[-1]


def _text(element: ET.Element, path: str) -> str:
    found = element.find(path)
    if found is None:
        return ""
    return (found.text or "").strip()


def _float(value) -> float:
    return float(value) if value else 0.0


def _track_point(element: ET.Element) -> TrackPoint:
    return TrackPoint(
        lon=_float(element.get("lon")),
        lat=_float(element.get("lat")),
        ele=_float(_text(element, "ele")),
        time=parse_datetime(_text(element, "time")),
        speed=_float(_text(element, "extensions/speed")),
        course=_float(_text(element, "extensions/course")),
        h_acc=_float(_text(element, "extensions/hAcc")),
        v_acc=_float(_text(element, "extensions/vAcc")),
    )


def parse_gpx(data):
    """Parse a GPX document (bytes or str) into a GpxRoute."""
    root = ET.fromstring(data)
    _strip_namespaces(root)
    if root.tag != "gpx":
        raise ValueError(f"expected element type <gpx> but have <{root.tag}>")
    return GpxRoute(
        time=parse_datetime(_text(root, "metadata/time")),
        track_name=_text(root, "trk/name"),
        track_points=[_track_point(p) for p in root.findall("trk/trkseg/trkpt")],
    )


def create_tables(conn):
    workout_models.create_tables(conn)
    conn.execute(
        f"""CREATE TABLE IF NOT EXISTS {TRACK_POINTS_TABLE} (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            workout_route_id INTEGER REFERENCES health_workout_routes (id),
            lon REAL,
            lat REAL,
            ele REAL,
            time TEXT,
            speed REAL,
            course REAL,
            h_acc REAL,
            v_acc REAL,
            UNIQUE (workout_route_id, time)
        )"""
    )


def _save_route(conn, route, gpx: GpxRoute) -> None:
    route.time = gpx.time
    route.track_name = gpx.track_name

    for point in gpx.track_points:
        first_or_create(
            conn,
            TRACK_POINTS_TABLE,
            {"workout_route_id": route.id, "time": point.time},
            {
                "lon": point.lon,
                "lat": point.lat,
                "ele": point.ele,
                "speed": point.speed,
                "course": point.course,
                "h_acc": point.h_acc,
                "v_acc": point.v_acc,
            },
        )

    updates = {}
    if gpx.time is not None:
        updates["time"] = gpx.time.isoformat()
    if gpx.track_name:
        updates["track_name"] = gpx.track_name
    if updates:
        assignments = ", ".join(f"{column} = ?" for column in updates)
        conn.execute(
            f"UPDATE health_workout_routes SET {assignments} WHERE id = ?",
            [*updates.values(), route.id],
        )


def import_workout_routes(conn, workouts, files):
    """Attach GPX data to workout routes.

    files maps a route file's base name to its bytes. Every file is parsed
    before anything is written.
    """
    parsed = []
    for workout in workouts:
        route = workout.route
        if route is None:
            continue
        data = files.get(posixpath.basename(route.file_path))
        if data is None:
            continue
        parsed.append((route, parse_gpx(data)))

    for route, gpx in parsed:
        _save_route(conn, route, gpx)