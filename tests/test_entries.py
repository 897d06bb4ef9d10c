import sqlite3
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone

import pytest

from bionic.db import parse_datetime
from bionic.health.entries import create_tables, parse_record

TZ = timezone(timedelta(hours=3))

RECORD = """<Record type="HKQuantityTypeIdentifierHeartRateVariabilitySDNN"
 sourceName="Test Apple Watch" sourceVersion="5.1.2"
 device="&lt;&lt;HKDevice: 0x000000000&gt;, name:Apple Watch, manufacturer:Apple, model:Watch, hardware:Watch3,4, software:5.1.2&gt;"
 unit="ms" creationDate="2019-01-19 16:57:15 +0300" startDate="2019-01-19 16:56:13 +0300"
 endDate="2019-01-19 16:57:15 +0300" value="35.7133">
  <MetadataEntry key="HKMetadataKeySyncVersion" value="2"/>
  <HeartRateVariabilityMetadataList>
    <InstantaneousBeatsPerMinute bpm="70" time="4:56:15,46 PM"/>
  </HeartRateVariabilityMetadataList>
</Record>"""


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_tables(connection)
    yield connection
    connection.close()


def test_parse_record_stores_entry(conn):
    entry_id = parse_record(conn, ET.fromstring(RECORD))

    row = conn.execute(
        """SELECT type, source_name, source_version, unit, creation_date, start_date,
        end_date, value FROM health_entries WHERE id = ?""",
        (entry_id,),
    ).fetchone()
    assert row[0] == "HKQuantityTypeIdentifierHeartRateVariabilitySDNN"
    assert row[1] == "Test Apple Watch"
    assert row[2] == "5.1.2"
    assert row[3] == "ms"
    assert parse_datetime(row[4]) == datetime(2019, 1, 19, 16, 57, 15, tzinfo=TZ)
    assert parse_datetime(row[5]) == datetime(2019, 1, 19, 16, 56, 13, tzinfo=TZ)
    assert parse_datetime(row[6]) == datetime(2019, 1, 19, 16, 57, 15, tzinfo=TZ)
    assert row[7] == "35.7133"


def test_parse_record_links_device(conn):
    entry_id = parse_record(conn, ET.fromstring(RECORD))
    device = conn.execute(
        """SELECT d.name, d.manufacturer, d.model, d.hardware, d.software
        FROM health_entries e JOIN health_devices d ON d.id = e.device_id WHERE e.id = ?""",
        (entry_id,),
    ).fetchone()
    assert device == ("Apple Watch", "Apple", "Watch", "Watch3,4", "5.1.2")


def test_parse_record_children(conn):
    entry_id = parse_record(conn, ET.fromstring(RECORD))
    metadata = conn.execute(
        "SELECT key, value FROM health_entry_metadata WHERE entry_id = ?", (entry_id,)
    ).fetchall()
    assert metadata == [("HKMetadataKeySyncVersion", "2")]
    beats = conn.execute(
        "SELECT bpm, time FROM health_beats_per_minutes WHERE entry_id = ?", (entry_id,)
    ).fetchall()
    assert beats == [(70, "4:56:15,46 PM")]


def test_parse_record_twice_is_idempotent(conn):
    first = parse_record(conn, ET.fromstring(RECORD))
    second = parse_record(conn, ET.fromstring(RECORD))
    assert first == second
    for table in (
        "health_entries",
        "health_entry_metadata",
        "health_beats_per_minutes",
        "health_devices",
    ):
        assert conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0] == 1


def test_record_without_device(conn):
    element = ET.fromstring(
        '<Record type="HKQuantityTypeIdentifierHeartRateVariabilitySDNN" '
        'creationDate="2019-01-19 16:57:15 +0300" value="35.7133"/>'
    )
    entry_id = parse_record(conn, element)
    row = conn.execute(
        "SELECT device_id, value FROM health_entries WHERE id = ?", (entry_id,)
    ).fetchone()
    assert row == (None, "35.7133")
    assert conn.execute("SELECT COUNT(*) FROM health_devices").fetchone()[0] == 0