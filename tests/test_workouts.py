import sqlite3
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from bionic.db import parse_datetime
from bionic.health.workouts import create_tables, parse_workout

TZ0300 = timezone(timedelta(hours=3))

WORKOUT = """<Workout workoutActivityType="HKWorkoutActivityTypeWalking" duration="16.49007770021757"
 durationUnit="min" totalDistance="1.154875562449862" totalDistanceUnit="km"
 totalEnergyBurned="52.07101376026529" totalEnergyBurnedUnit="kcal"
 sourceName="Alexey’s Apple Watch" sourceVersion="5.1.2"
 device="&lt;&lt;HKDevice: 0x0&gt;, name:Apple Watch, manufacturer:Apple, model:Watch, hardware:Watch3,4, software:5.1.2&gt;"
 creationDate="2019-01-19 16:57:15 +0300" startDate="2019-01-19 16:56:13 +0300" endDate="2019-01-19 16:57:15 +0300">
 <MetadataEntry key="HKMetadataKeySyncVersion" value="2"/>
 <WorkoutEvent type="HKWorkoutEventTypeSegment" date="2019-01-22 20:20:16 +0300" duration="14.84274098277092" durationUnit="min"/>
 <WorkoutRoute sourceName="Alexey’s Apple Watch" sourceVersion="12.1.2"
  creationDate="2019-01-19 16:57:15 +0300" startDate="2019-01-19 16:56:13 +0300" endDate="2019-01-19 16:57:15 +0300">
  <MetadataEntry key="HKMetadataKeySyncVersion" value="2"/>
  <FileReference path="/workout-routes/route_2019-01-22_8.32pm.gpx"/>
 </WorkoutRoute>
</Workout>"""


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_tables(connection)
    yield connection
    connection.close()


def _count(conn, table):
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def test_parse_workout_fields(conn):
    workout = parse_workout(conn, ET.fromstring(WORKOUT))
    assert workout.activity_type == "HKWorkoutActivityTypeWalking"
    assert workout.duration == 16.49007770021757
    assert workout.duration_unit == "min"
    assert workout.total_distance == 1.154875562449862
    assert workout.total_distance_unit == "km"
    assert workout.total_energy_burned == 52.07101376026529
    assert workout.total_energy_burned_unit == "kcal"
    assert workout.source_name == "Alexey’s Apple Watch"
    assert workout.source_version == "5.1.2"
    assert workout.creation_date == datetime(2019, 1, 19, 16, 57, 15, tzinfo=TZ0300)
    assert workout.start_date == datetime(2019, 1, 19, 16, 56, 13, tzinfo=TZ0300)
    assert workout.metadata == {"HKMetadataKeySyncVersion": "2"}


def test_parse_workout_stores_children(conn):
    workout = parse_workout(conn, ET.fromstring(WORKOUT))

    device = conn.execute(
        "SELECT name, manufacturer, model, hardware, software FROM health_devices WHERE id = ?",
        (workout.device_id,),
    ).fetchone()
    assert device == ("Apple Watch", "Apple", "Watch", "Watch3,4", "5.1.2")

    meta = conn.execute(
        "SELECT key, value FROM health_workout_metadata WHERE workout_id = ?", (workout.id,)
    ).fetchall()
    assert meta == [("HKMetadataKeySyncVersion", "2")]

    event = conn.execute(
        "SELECT type, date, duration, duration_unit FROM health_workout_events WHERE workout_id = ?",
        (workout.id,),
    ).fetchone()
    assert event[0] == "HKWorkoutEventTypeSegment"
    assert parse_datetime(event[1]) == datetime(2019, 1, 22, 20, 20, 16, tzinfo=TZ0300)
    assert event[2] == 14.84274098277092
    assert event[3] == "min"


def test_parse_workout_route(conn):
    workout = parse_workout(conn, ET.fromstring(WORKOUT))
    route = workout.route
    assert route.workout_id == workout.id
    assert route.source_version == "12.1.2"
    assert route.file_path == "/workout-routes/route_2019-01-22_8.32pm.gpx"
    assert route.creation_date == datetime(2019, 1, 19, 16, 57, 15, tzinfo=TZ0300)
    assert route.metadata == {"HKMetadataKeySyncVersion": "2"}

    stored = conn.execute(
        "SELECT workout_id, file_path FROM health_workout_routes WHERE id = ?", (route.id,)
    ).fetchone()
    assert stored == (workout.id, route.file_path)
    route_meta = conn.execute(
        "SELECT key, value FROM health_workout_route_metadata WHERE workout_route_id = ?", (route.id,)
    ).fetchall()
    assert route_meta == [("HKMetadataKeySyncVersion", "2")]


def test_parse_workout_twice_is_idempotent(conn):
    first = parse_workout(conn, ET.fromstring(WORKOUT))
    second = parse_workout(conn, ET.fromstring(WORKOUT))
    assert first.id == second.id
    assert first.route.id == second.route.id
    for table in (
        "health_workouts",
        "health_devices",
        "health_workout_metadata",
        "health_workout_events",
        "health_workout_routes",
        "health_workout_route_metadata",
    ):
        assert _count(conn, table) == 1


def test_workout_without_route_or_device(conn):
    element = ET.fromstring('<Workout workoutActivityType="HKWorkoutActivityTypeRunning" '
                            'creationDate="2020-01-01 10:00:00 +0000"/>')
    workout = parse_workout(conn, element)
    assert workout.route is None
    assert workout.device_id is None
    assert _count(conn, "health_workout_routes") == 0
    assert _count(conn, "health_devices") == 0