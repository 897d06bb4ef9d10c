"""Instagram comments with their user and hashtag mentions."""

from __future__ import annotations

import json
from pathlib import Path

from bionic.db import first_or_create, parse_datetime
from bionic.instagram import mentions

_TARGET_MEDIA = "media"


def create_tables(conn):
    mentions.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_comments (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            target TEXT,
            user_id INTEGER REFERENCES instagram_users (id),
            text TEXT,
            timestamp TEXT,
            UNIQUE (target, user_id, text, timestamp)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_comment_user_mentions (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            comment_id INTEGER REFERENCES instagram_comments (id),
            user_id INTEGER REFERENCES instagram_users (id),
            from_idx INTEGER,
            to_idx INTEGER,
            UNIQUE (comment_id, user_id, from_idx, to_idx)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_comment_hashtag_mentions (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            comment_id INTEGER REFERENCES instagram_comments (id),
            hashtag_id INTEGER REFERENCES instagram_hashtags (id),
            from_idx INTEGER,
            to_idx INTEGER,
            UNIQUE (comment_id, hashtag_id, from_idx, to_idx)
        )"""
    )


def _parse_comment(item):
    if not isinstance(item, list) or len(item) != 3:
        raise ValueError("incorrect comment format")
    return parse_datetime(item[0]), item[1], item[2]


def import_comments(conn, input_path):
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    comments = [_parse_comment(i) for i in data.get("media_comments") or []]

    for timestamp, text, username in comments:
        user_id = mentions.get_or_create_user(conn, username)
        comment_id = first_or_create(
            conn,
            "instagram_comments",
            {"target": _TARGET_MEDIA, "user_id": user_id, "text": text, "timestamp": timestamp},
        )
        for mention in mentions.extract_user_mentions(text):
            first_or_create(
                conn,
                "instagram_comment_user_mentions",
                {
                    "comment_id": comment_id,
                    "user_id": mentions.get_or_create_user(conn, mention.username),
                    "from_idx": mention.from_idx,
                    "to_idx": mention.to_idx,
                },
            )
        for mention in mentions.extract_hashtag_mentions(text):
            first_or_create(
                conn,
                "instagram_comment_hashtag_mentions",
                {
                    "comment_id": comment_id,
                    "hashtag_id": mentions.get_or_create_hashtag(conn, mention.hashtag),
                    "from_idx": mention.from_idx,
                    "to_idx": mention.to_idx,
                },
            )