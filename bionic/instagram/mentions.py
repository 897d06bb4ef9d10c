"""User and hashtag mentions in Instagram text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from bionic.db import first_or_create

_USER_RE = re.compile(r"(?:^|[^\w])(@([\w_.]+))", re.ASCII)
_HASHTAG_RE = re.compile(
    "#([^{" + re.escape("\\\"$%&'()*+,-./:;<=>?[\\]^`{|}~#@ ") + "\\n}]+)"
)


@dataclass(frozen=True)
class UserMention:
    username: str
    from_idx: int
    to_idx: int


@dataclass(frozen=True)
class HashtagMention:
    hashtag: str
    from_idx: int
    to_idx: int


def _byte_offset(text: str, index: int) -> int:
    return len(text[:index].encode("utf-8"))


def extract_user_mentions(text):
    """Return @mentions; indices are byte offsets of the '@name' span."""
    return [
        UserMention(m.group(2), _byte_offset(text, m.start(1)), _byte_offset(text, m.end(1)))
        for m in _USER_RE.finditer(text)
    ]


def extract_hashtag_mentions(text):
    """Return #hashtags; indices are byte offsets of the '#tag' span."""
    return [
        HashtagMention(m.group(1), _byte_offset(text, m.start()), _byte_offset(text, m.end()))
        for m in _HASHTAG_RE.finditer(text)
    ]


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_users (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            username TEXT UNIQUE
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_hashtags (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            text TEXT UNIQUE
        )"""
    )


def get_or_create_user(conn, username):
    return first_or_create(conn, "instagram_users", {"username": username})


def get_or_create_hashtag(conn, text):
    return first_or_create(conn, "instagram_hashtags", {"text": text})