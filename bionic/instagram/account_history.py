"""Instagram login/logout history and registration info."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from bionic.db import insert_ignore, parse_datetime


class AccountHistoryAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_account_history (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            action TEXT,
            cookie_name TEXT,
            ip_address TEXT,
            language_code TEXT,
            timestamp TEXT,
            user_agent TEXT,
            device_id TEXT,
            UNIQUE (action, ip_address, timestamp)
        )"""
    )
    conn.execute(
        """CREATE TABLE IF NOT EXISTS instagram_registration_info (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            registration_username TEXT UNIQUE,
            ip_address TEXT,
            registration_time TEXT,
            registration_email TEXT,
            registration_phone_number TEXT,
            device_name TEXT
        )"""
    )


def _history_row(item: dict, action: AccountHistoryAction) -> dict:
    return {
        "action": action,
        "cookie_name": item.get("cookie_name", ""),
        "ip_address": item.get("ip_address", ""),
        "language_code": item.get("language_code", ""),
        "timestamp": parse_datetime(item.get("timestamp")),
        "user_agent": item.get("user_agent", ""),
        "device_id": item.get("device_id") or None,
    }


def import_account_history(conn, input_path):
    data = json.loads(Path(input_path).read_text(encoding="utf-8"))
    info = data.get("registration_info") or {}
    login = [_history_row(i, AccountHistoryAction.LOGIN) for i in data.get("login_history") or []]
    logout = [_history_row(i, AccountHistoryAction.LOGOUT) for i in data.get("logout_history") or []]

    insert_ignore(
        conn,
        "instagram_registration_info",
        [
            {
                "registration_username": info.get("registration_username", ""),
                "ip_address": info.get("ip_address", ""),
                "registration_time": parse_datetime(info.get("registration_time")),
                "registration_email": info.get("registration_email", ""),
                "registration_phone_number": info.get("registration_phone_number") or None,
                "device_name": info.get("device_name") or None,
            }
        ],
    )
    insert_ignore(conn, "instagram_account_history", login)
    insert_ignore(conn, "instagram_account_history", logout)