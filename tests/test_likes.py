import json
import sqlite3
from datetime import datetime, timezone

import pytest

from bionic.instagram.likes import create_tables, import_likes


def _write(tmp_path, data):
    path = tmp_path / "likes.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc).isoformat()


def test_import_likes(tmp_path):
    path = _write(tmp_path, {
        "media_likes": [
            ["2021-01-07T11:41:24+00:00", "shekhirin"],
            ["2021-01-06T17:25:56+00:00", "sevazhidkov"],
        ],
        "comment_likes": [
            ["2020-12-23T14:53:56+00:00", "shekhirin"],
            ["2020-12-22T02:34:13+00:00", "lexfridman"],
        ],
    })
    conn = sqlite3.connect(":memory:")
    create_tables(conn)
    import_likes(conn, path)
    rows = conn.execute(
        "SELECT l.target, u.username, l.timestamp, l.user_id FROM instagram_likes l "
        "JOIN instagram_users u ON u.id = l.user_id ORDER BY l.id"
    ).fetchall()
    assert [r[:3] for r in rows] == [
        ("media", "shekhirin", _utc(2021, 1, 7, 11, 41, 24)),
        ("media", "sevazhidkov", _utc(2021, 1, 6, 17, 25, 56)),
        ("comment", "shekhirin", _utc(2020, 12, 23, 14, 53, 56)),
        ("comment", "lexfridman", _utc(2020, 12, 22, 2, 34, 13)),
    ]
    assert rows[0][3] == rows[2][3]


def test_bad_like_format(tmp_path):
    path = _write(tmp_path, {"media_likes": [["2021-01-07T11:41:24+00:00"]]})
    conn = sqlite3.connect(":memory:")
    create_tables(conn)
    with pytest.raises(ValueError, match="incorrect like format"):
        import_likes(conn, path)