"""Google Takeout semantic location history: activity segments and place visits."""

from __future__ import annotations

import json
import os
import posixpath
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from bionic.db import parse_datetime

SEMANTIC_DIRECTORY_NAME = "Semantic Location History"


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_segments (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_type TEXT,
            confidence TEXT,
            distance INTEGER,
            duration_end_timestamp_ms TEXT,
            duration_start_timestamp_ms TEXT,
            end_location_latitude_e7 INTEGER,
            end_location_longitude_e7 INTEGER,
            parking_event_location_accuracy_metres INTEGER,
            parking_event_location_latitude_e7 INTEGER,
            parking_event_location_longitude_e7 INTEGER,
            parking_event_timestamp_ms TEXT,
            start_location_latitude_e7 INTEGER,
            start_location_longitude_e7 INTEGER,
            transit_path_hex_rgb_color TEXT,
            transit_path_name TEXT,
            UNIQUE (duration_end_timestamp_ms, duration_start_timestamp_ms)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_type_candidates (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_segment_id INTEGER REFERENCES google_activity_segments (id),
            activity_type TEXT,
            probability REAL
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_activity_path_points (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_segment_id INTEGER REFERENCES google_activity_segments (id),
            accuracy_meters INTEGER,
            lat_e7 INTEGER,
            lng_e7 INTEGER,
            time TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_transit_stops (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_segment_id INTEGER REFERENCES google_activity_segments (id),
            latitude_e7 INTEGER,
            longitude_e7 INTEGER,
            name TEXT,
            place_id TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_waypoints (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            activity_segment_id INTEGER REFERENCES google_activity_segments (id),
            lat_e7 INTEGER,
            lng_e7 INTEGER
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_place_visits (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            center_lat_e7 INTEGER,
            center_lng_e7 INTEGER,
            duration_end_timestamp_ms TEXT,
            duration_start_timestamp_ms TEXT,
            edit_confirmation_status TEXT,
            location_address TEXT,
            location_latitude_e7 INTEGER,
            location_location_confidence REAL,
            location_longitude_e7 INTEGER,
            location_name TEXT,
            location_place_id TEXT,
            location_source_info_device_tag INTEGER,
            place_confidence TEXT,
            visit_confidence INTEGER,
            place_visit_id INTEGER REFERENCES google_place_visits (id),
            UNIQUE (center_lat_e7, center_lng_e7, duration_end_timestamp_ms,
                    duration_start_timestamp_ms, location_place_id)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_place_path_points (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            place_visit_id INTEGER REFERENCES google_place_visits (id),
            accuracy_meters INTEGER,
            lat_e7 INTEGER,
            lng_e7 INTEGER,
            time TEXT
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS google_candidate_locations (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            place_visit_id INTEGER REFERENCES google_place_visits (id),
            latitude_e7 INTEGER,
            location_confidence REAL,
            longitude_e7 INTEGER,
            place_id TEXT
        )"""
    )


def _value(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def _find_id(conn, table: str, conditions: Mapping[str, Any]):
    where = " AND ".join(f"{column} IS ?" for column in conditions)
    row = conn.execute(
        f"SELECT id FROM {table} WHERE {where} ORDER BY id LIMIT 1",
        [_value(v) for v in conditions.values()],
    ).fetchone()
    return row[0] if row else None


def _insert(conn, table: str, row: Mapping[str, Any], ignore: bool = False):
    verb = "INSERT OR IGNORE" if ignore else "INSERT"
    columns = ", ".join(row)
    marks = ", ".join("?" for _ in row)
    cursor = conn.execute(
        f"{verb} INTO {table} ({columns}) VALUES ({marks})",
        [_value(v) for v in row.values()],
    )
    return cursor.lastrowid if cursor.rowcount == 1 else None


def _obj(data: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    for key in keys:
        data = data.get(key) or {}
    return data


def _path_point(point: Mapping[str, Any]) -> dict:
    return {
        "accuracy_meters": point.get("accuracyMeters", 0),
        "lat_e7": point.get("latE7", 0),
        "lng_e7": point.get("lngE7", 0),
        "time": parse_datetime(point.get("timestampMs")),
    }


def _save_activity_segment(conn, segment: Mapping[str, Any]) -> bool:
    duration = _obj(segment, "duration")
    start = _obj(segment, "startLocation")
    conditions = {
        "start_location_latitude_e7": start.get("latitudeE7", 0),
        "start_location_longitude_e7": start.get("longitudeE7", 0),
        "duration_start_timestamp_ms": parse_datetime(duration.get("startTimestampMs")),
    }
    if _find_id(conn, "google_activity_segments", conditions) is not None:
        return False

    end = _obj(segment, "endLocation")
    parking = _obj(segment, "parkingEvent")
    parking_location = _obj(parking, "location")
    transit = _obj(segment, "transitPath")
    segment_id = _insert(
        conn,
        "google_activity_segments",
        {
            **conditions,
            "activity_type": segment.get("activityType", ""),
            "confidence": segment.get("confidence", ""),
            "distance": segment.get("distance", 0),
            "duration_end_timestamp_ms": parse_datetime(duration.get("endTimestampMs")),
            "end_location_latitude_e7": end.get("latitudeE7", 0),
            "end_location_longitude_e7": end.get("longitudeE7", 0),
            "parking_event_location_accuracy_metres": parking_location.get("accuracyMetres", 0),
            "parking_event_location_latitude_e7": parking_location.get("latitudeE7", 0),
            "parking_event_location_longitude_e7": parking_location.get("longitudeE7", 0),
            "parking_event_timestamp_ms": parse_datetime(parking.get("timestampMs")),
            "transit_path_hex_rgb_color": transit.get("hexRgbColor", ""),
            "transit_path_name": transit.get("name", ""),
        },
        ignore=True,
    )
    if segment_id is None:
        return False

    for activity in segment.get("activities") or []:
        _insert(
            conn,
            "google_activity_type_candidates",
            {
                "activity_segment_id": segment_id,
                "activity_type": activity.get("activityType", ""),
                "probability": activity.get("probability", 0.0),
            },
        )
    for point in _obj(segment, "simplifiedRawPath").get("points") or []:
        _insert(conn, "google_activity_path_points", {"activity_segment_id": segment_id, **_path_point(point)})
    for stop in transit.get("transitStops") or []:
        _insert(
            conn,
            "google_transit_stops",
            {
                "activity_segment_id": segment_id,
                "latitude_e7": stop.get("latitudeE7", 0),
                "longitude_e7": stop.get("longitudeE7", 0),
                "name": stop.get("name", ""),
                "place_id": stop.get("placeId", ""),
            },
        )
    for waypoint in _obj(segment, "waypointPath").get("waypoints") or []:
        _insert(
            conn,
            "google_waypoints",
            {
                "activity_segment_id": segment_id,
                "lat_e7": waypoint.get("latE7", 0),
                "lng_e7": waypoint.get("lngE7", 0),
            },
        )
    return True


def _save_place_visit(conn, visit: Mapping[str, Any], parent_id=None) -> bool:
    duration = _obj(visit, "duration")
    location = _obj(visit, "location")
    conditions = {
        "center_lat_e7": visit.get("centerLatE7", 0),
        "center_lng_e7": visit.get("centerLngE7", 0),
        "duration_end_timestamp_ms": parse_datetime(duration.get("endTimestampMs")),
        "duration_start_timestamp_ms": parse_datetime(duration.get("startTimestampMs")),
        "location_place_id": location.get("placeId", ""),
    }
    if _find_id(conn, "google_place_visits", conditions) is not None:
        return False

    visit_id = _insert(
        conn,
        "google_place_visits",
        {
            **conditions,
            "edit_confirmation_status": visit.get("editConfirmationStatus", ""),
            "location_address": location.get("address", ""),
            "location_latitude_e7": location.get("latitudeE7", 0),
            "location_location_confidence": location.get("locationConfidence", 0.0),
            "location_longitude_e7": location.get("longitudeE7", 0),
            "location_name": location.get("name", ""),
            "location_source_info_device_tag": _obj(location, "sourceInfo").get("deviceTag", 0),
            "place_confidence": visit.get("placeConfidence", ""),
            "visit_confidence": visit.get("visitConfidence", 0),
            "place_visit_id": parent_id,
        },
        ignore=True,
    )
    if visit_id is None:
        return False

    for point in _obj(visit, "simplifiedRawPath").get("points") or []:
        _insert(conn, "google_place_path_points", {"place_visit_id": visit_id, **_path_point(point)})
    for candidate in visit.get("otherCandidateLocations") or []:
        _insert(
            conn,
            "google_candidate_locations",
            {
                "place_visit_id": visit_id,
                "latitude_e7": candidate.get("latitudeE7", 0),
                "location_confidence": candidate.get("locationConfidence", 0.0),
                "longitude_e7": candidate.get("longitudeE7", 0),
                "place_id": candidate.get("placeId", ""),
            },
        )
    for child in visit.get("childVisits") or []:
        _save_place_visit(conn, child, visit_id)
    return True


def process_semantic_location(conn, stream):
    """Load one monthly semantic history file; return how many timeline objects were new."""
    data = json.load(stream)
    if not isinstance(data, dict):
        raise ValueError("semantic location file should hold an object")

    added = 0
    for timeline_object in data.get("timelineObjects") or []:
        segment = timeline_object.get("activitySegment")
        if segment is not None:
            added += _save_activity_segment(conn, segment)
        visit = timeline_object.get("placeVisit")
        if visit is not None:
            added += _save_place_visit(conn, visit)
    return added


def import_semantic_location_history_from_archive(conn, input_path):
    total = 0
    with zipfile.ZipFile(input_path) as archive:
        for info in archive.infolist():
            name = info.filename
            if info.is_dir():
                continue
            # files sit two levels down: Semantic Location History/2020/*.json
            data_type_directory = posixpath.basename(posixpath.dirname(posixpath.dirname(name)))
            if data_type_directory != SEMANTIC_DIRECTORY_NAME:
                continue
            if posixpath.splitext(name)[1] != ".json":
                continue
            with archive.open(info) as stream:
                total += process_semantic_location(conn, stream)
    return total


def import_semantic_location_history_from_directory(conn, input_path):
    """Load every .json file below input_path; a missing directory is skipped."""
    if not Path(input_path).is_dir():
        return 0
    total = 0
    for dirpath, dirnames, filenames in os.walk(input_path):
        dirnames.sort()
        for filename in sorted(filenames):
            if os.path.splitext(filename)[1] != ".json":
                continue
            with open(os.path.join(dirpath, filename), "rb") as stream:
                total += process_semantic_location(conn, stream)
    return total