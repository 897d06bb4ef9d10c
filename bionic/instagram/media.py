"""Instagram stories, videos, photos and profile photos."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from bionic.db import first_or_create, parse_datetime
from bionic.instagram import mentions


class MediaType(str, Enum):
    STORY = "story"
    VIDEO = "video"
    PHOTO = "photo"


_SECTIONS = (
    ("stories", MediaType.STORY),
    ("videos", MediaType.VIDEO),
    ("photos", MediaType.PHOTO),
)


def create_tables(conn):
    mentions.create_tables(conn)
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_media (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            type TEXT,
            caption TEXT,
            taken_at TEXT,
            location TEXT,
            path TEXT,
            UNIQUE (type, taken_at)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_media_user_mentions (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            media_id INTEGER REFERENCES instagram_media (id),
            user_id INTEGER REFERENCES instagram_users (id),
            from_idx INTEGER,
            to_idx INTEGER,
            UNIQUE (media_id, user_id, from_idx, to_idx)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_media_hashtag_mentions (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            media_id INTEGER REFERENCES instagram_media (id),
            hashtag_id INTEGER REFERENCES instagram_hashtags (id),
            from_idx INTEGER,
            to_idx INTEGER,
            UNIQUE (media_id, hashtag_id, from_idx, to_idx)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_profile_photos (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            taken_at TEXT UNIQUE,
            is_active_profile INTEGER,
            path TEXT
        )"""
    )


def _parse_media_item(item: dict) -> dict:
    return {
        "caption": item.get("caption") or None,
        "taken_at": parse_datetime(item.get("taken_at")),
        "location": item.get("location"),
        "path": item.get("path", ""),
    }


def _save_profile_photo(conn, photo: dict) -> None:
    taken_at = parse_datetime(photo.get("taken_at"))
    conn.execute(
        """INSERT INTO instagram_profile_photos (taken_at, is_active_profile, path)
        VALUES (?, ?, ?)
        ON CONFLICT (taken_at) DO UPDATE SET is_active_profile = excluded.is_active_profile""",
        (
            taken_at.isoformat() if taken_at else None,
            int(bool(photo.get("is_active_profile", False))),
            photo.get("path", ""),
        ),
    )


def _save_media_item(conn, item: dict, kind: MediaType) -> int:
    media_id = first_or_create(
        conn,
        "instagram_media",
        {"type": kind, "taken_at": item["taken_at"]},
        {"caption": item["caption"], "location": item["location"], "path": item["path"]},
    )
    caption = item["caption"]
    if caption is None:
        return media_id

    for mention in mentions.extract_user_mentions(caption):
        first_or_create(
            conn,
            "instagram_media_user_mentions",
            {
                "media_id": media_id,
                "user_id": mentions.get_or_create_user(conn, mention.username),
                "from_idx": mention.from_idx,
                "to_idx": mention.to_idx,
            },
        )
    for mention in mentions.extract_hashtag_mentions(caption):
        first_or_create(
            conn,
            "instagram_media_hashtag_mentions",
            {
                "media_id": media_id,
                "hashtag_id": mentions.get_or_create_hashtag(conn, mention.hashtag),
                "from_idx": mention.from_idx,
                "to_idx": mention.to_idx,
            },
        )
    return media_id


def import_media(conn, input_path):
    """Load media.json: profile photos first, then stories, videos and photos."""
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    profile = data.get("profile") or []
    sections = [
        (kind, [_parse_media_item(i) for i in data.get(key) or []]) for key, kind in _SECTIONS
    ]

    for photo in profile:
        _save_profile_photo(conn, photo)

    for kind, items in sections:
        for item in items:
            _save_media_item(conn, item, kind)