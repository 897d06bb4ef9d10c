import sqlite3

import pytest

from bionic.health.device import Device, create_tables, parse_device, save_device

DEVICE_TEXT = (
    "<<HKDevice: 0x000000000>, name:Apple Watch, manufacturer:Apple, model:Watch, "
    "hardware:Watch3,4, software:5.1.2>"
)


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_tables(connection)
    yield connection
    connection.close()


def test_parse_device():
    device = parse_device(DEVICE_TEXT)
    assert device == Device(
        name="Apple Watch",
        manufacturer="Apple",
        model="Watch",
        hardware="Watch3,4",
        software="5.1.2",
    )


def test_parse_short_text_gives_empty_device():
    assert parse_device("<>") == Device()


def test_parse_without_attributes_gives_empty_device():
    assert parse_device("<<HKDevice: 0x000000000>>") == Device()


def test_parse_skips_malformed_and_unknown_attributes():
    device = parse_device("<<HKDevice>, name:Apple Watch, colour:red, model:a:b>")
    assert device == Device(name="Apple Watch")


def test_save_device_is_idempotent(conn):
    device = parse_device(DEVICE_TEXT)
    first = save_device(conn, device)
    second = save_device(conn, device)
    assert first == second
    row = conn.execute(
        "SELECT name, manufacturer, model, hardware, software FROM health_devices"
    ).fetchall()
    assert row == [("Apple Watch", "Apple", "Watch", "Watch3,4", "5.1.2")]


def test_different_devices_get_different_ids(conn):
    a = save_device(conn, Device(name="Apple Watch"))
    b = save_device(conn, Device(name="Apple Watch", software="5.1.2"))
    assert a != b
    assert conn.execute("SELECT COUNT(*) FROM health_devices").fetchone()[0] == 2