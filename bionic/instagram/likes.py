"""Instagram media and comment likes."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from bionic.db import insert_ignore, parse_datetime
from bionic.instagram import mentions


class LikeTarget(str, Enum):
    MEDIA = "media"
    COMMENT = "comment"


def create_tables(conn):
    mentions.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_likes (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            target TEXT,
            user_id INTEGER REFERENCES instagram_users (id),
            timestamp TEXT,
            UNIQUE (target, user_id, timestamp)
        )"""
    )


def _parse_like(item):
    if not isinstance(item, list) or len(item) != 2:
        raise ValueError("incorrect like format")
    return parse_datetime(item[0]), item[1]


def import_likes(conn, input_path):
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    groups = [
        (LikeTarget.MEDIA, [_parse_like(i) for i in data.get("media_likes") or []]),
        (LikeTarget.COMMENT, [_parse_like(i) for i in data.get("comment_likes") or []]),
    ]
    resolved = [
        [
            {"target": target, "user_id": mentions.get_or_create_user(conn, username), "timestamp": ts}
            for ts, username in likes
        ]
        for target, likes in groups
    ]
    for rows in resolved:
        insert_ignore(conn, "instagram_likes", rows)