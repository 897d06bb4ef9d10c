"""Instagram story interactions (polls, quizzes and the like)."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from bionic.db import insert_ignore, parse_datetime
from bionic.instagram import mentions


class StoriesActivityType(str, Enum):
    POLL = "poll"
    EMOJI_SLIDER = "emoji_slider"
    QUESTION = "question"
    COUNTDOWN = "countdown"
    QUIZ = "quiz"


_SECTIONS = (
    ("polls", StoriesActivityType.POLL),
    ("emoji_sliders", StoriesActivityType.EMOJI_SLIDER),
    ("questions", StoriesActivityType.QUESTION),
    ("countdowns", StoriesActivityType.COUNTDOWN),
    ("quizzes", StoriesActivityType.QUIZ),
)


def create_tables(conn):
    mentions.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_stories_activities (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            type TEXT,
            user_id INTEGER REFERENCES instagram_users (id),
            timestamp TEXT,
            UNIQUE (type, user_id, timestamp)
        )"""
    )


def _parse_item(item):
    if not isinstance(item, list) or len(item) != 2:
        raise ValueError("incorrect stories activities format")
    return parse_datetime(item[0]), item[1]


def import_stories_activities(conn, input_path):
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    parsed = [(kind, [_parse_item(i) for i in data.get(key) or []]) for key, kind in _SECTIONS]
    for kind, items in parsed:
        rows = [
            {"type": kind, "user_id": mentions.get_or_create_user(conn, username), "timestamp": ts}
            for ts, username in items
        ]
        insert_ignore(conn, "instagram_stories_activities", rows)