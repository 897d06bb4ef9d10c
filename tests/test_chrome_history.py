import sqlite3
from contextlib import closing
from datetime import datetime, timezone

import pytest

from bionic.chrome.history import (
    TransitionQualifierType,
    TransitionType,
    create_tables,
    import_history,
    transition_info,
)
from bionic.db import parse_datetime

_WINDOWS_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


def _chrome_time(dt):
    return int((dt - _WINDOWS_EPOCH).total_seconds()) * 1_000_000


def _make_history(path, urls, segments, visits):
    with closing(sqlite3.connect(str(path))) as db:
        db.execute(
            "CREATE TABLE urls (id INTEGER PRIMARY KEY, url TEXT, title TEXT, visit_count INTEGER, "
            "typed_count INTEGER, last_visit_time INTEGER, hidden INTEGER)"
        )
        db.execute("CREATE TABLE segments (id INTEGER PRIMARY KEY, name TEXT, url_id INTEGER)")
        db.execute(
            "CREATE TABLE visits (id INTEGER PRIMARY KEY, url INTEGER, visit_time INTEGER, "
            "from_visit INTEGER, transition INTEGER, segment_id INTEGER, visit_duration INTEGER, "
            "incremented_omnibox_typed_score INTEGER, publicly_routable INTEGER)"
        )
        db.executemany("INSERT INTO urls VALUES (?, ?, ?, ?, ?, ?, ?)", urls)
        db.executemany("INSERT INTO segments VALUES (?, ?, ?)", segments)
        db.executemany("INSERT INTO visits VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)", visits)
        db.commit()


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    create_tables(connection)
    yield connection
    connection.close()


@pytest.fixture
def history_file(tmp_path):
    path = tmp_path / "db.sqlite"
    last_visit = datetime(2021, 4, 25, 17, 51, 12, tzinfo=timezone.utc)
    visit_time = datetime(2021, 1, 26, 6, 19, 44, tzinfo=timezone.utc)
    _make_history(
        path,
        [(1, "https://mercury.com/", "Mercury | Banking built for startups", 46, 42,
          _chrome_time(last_visit), 0)],
        [(1, "http://mercury.com/", 1)],
        [(1, 1, _chrome_time(visit_time), 0, 0x30000001, 1, 0, 1, 1)],
    )
    return path


def test_import_db(conn, history_file):
    import_history(conn, str(history_file) + "?_loc=UTC")

    visits = conn.execute(
        "SELECT v.time, v.visit_id, v.transition_type, v.transition_qualifier_type, v.is_redirect, "
        "v.visit_duration, v.incremented_omnibox_typed_score, v.publicly_routable, "
        "u.url, u.title, u.visit_count, u.typed_count, u.last_visit, u.hidden, "
        "s.name, su.url "
        "FROM chrome_visits v JOIN chrome_urls u ON u.id = v.url_id "
        "JOIN chrome_segments s ON s.id = v.segment_id JOIN chrome_urls su ON su.id = s.url_id"
    ).fetchall()
    assert len(visits) == 1
    (time, visit_id, ttype, tqual, redirect, duration, omnibox, routable,
     url, title, visit_count, typed_count, last_visit, hidden, seg_name, seg_url) = visits[0]

    assert parse_datetime(time) == datetime(2021, 1, 26, 6, 19, 44, tzinfo=timezone.utc)
    assert visit_id == 0
    assert ttype == "TYPED"
    assert tqual is None
    assert redirect == 0
    assert duration == 0
    assert omnibox == 1
    assert routable == 1
    assert url == "https://mercury.com/"
    assert title == "Mercury | Banking built for startups"
    assert visit_count == 46
    assert typed_count == 42
    assert parse_datetime(last_visit) == datetime(2021, 4, 25, 17, 51, 12, tzinfo=timezone.utc)
    assert hidden == 0
    assert seg_name == "http://mercury.com/"
    assert seg_url == "https://mercury.com/"


def test_import_twice_is_idempotent(conn, history_file):
    import_history(conn, str(history_file))
    import_history(conn, str(history_file))
    counts = [
        conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        for table in ("chrome_urls", "chrome_segments", "chrome_visits")
    ]
    assert counts == [1, 1, 1]


def test_import_reads_all_batches(conn, tmp_path):
    path = tmp_path / "History"
    urls = [(i, f"https://site{i}.example.com/", f"Site {i}", 1, 0, 0, 0) for i in range(1, 251)]
    segments = [(i, f"site{i}", i) for i in range(1, 251)]
    visits = [(i, i, 0, 0, 0, i, 0, 0, 0) for i in range(1, 251)]
    _make_history(path, urls, segments, visits)

    import_history(conn, str(path))

    assert conn.execute("SELECT COUNT(*) FROM chrome_urls").fetchone()[0] == 250
    assert conn.execute("SELECT COUNT(*) FROM chrome_segments").fetchone()[0] == 250
    assert conn.execute("SELECT COUNT(*) FROM chrome_visits").fetchone()[0] == 250
    assert conn.execute("SELECT MAX(id) FROM chrome_visits").fetchone()[0] == 250


def test_import_missing_file_raises(conn, tmp_path):
    with pytest.raises(FileNotFoundError):
        import_history(conn, str(tmp_path / "missing.sqlite"))


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, (TransitionType.LINK, None, False)),
        (1, (TransitionType.TYPED, None, False)),
        (0x01000000 | 8, (TransitionType.RELOAD, TransitionQualifierType.FORWARD_BACK, False)),
        (0x02000000 | 10, (TransitionType.KEYWORD_GENERATED, TransitionQualifierType.FROM_ADDRESS_BAR, False)),
        (0x40000000 | 7, (TransitionType.FORM_SUBMIT, TransitionQualifierType.CLIENT_REDIRECT, True)),
        (0x80000000, (TransitionType.LINK, TransitionQualifierType.SERVER_REDIRECT, True)),
        (0x30000001, (TransitionType.TYPED, None, False)),
        (0xFF, (None, None, False)),
    ],
)
def test_transition_info(value, expected):
    assert transition_info(value) == expected