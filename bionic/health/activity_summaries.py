"""Apple Health daily <ActivitySummary> rings."""

from __future__ import annotations

from bionic.db import first_or_create, parse_datetime


def create_tables(conn):
    conn.execute(
        """CREATE TABLE IF NOT EXISTS health_activity_summaries (
            id INTEGER PRIMARY KEY,
            created_at TEXT DEFAULT CURRENT_TIMESTAMP,
            date TEXT UNIQUE,
            active_energy_burned REAL,
            active_energy_burned_goal INTEGER,
            active_energy_burned_unit TEXT,
            apple_move_time INTEGER,
            apple_move_time_goal INTEGER,
            apple_exercise_time INTEGER,
            apple_exercise_time_goal INTEGER,
            apple_stand_hours INTEGER,
            apple_stand_hours_goal INTEGER
        )"""
    )


def _int(value) -> int:
    return int(value) if value else 0


def _float(value) -> float:
    return float(value) if value else 0.0


def parse_activity_summary(conn, element):
    """Store an <ActivitySummary> element unless its date is known; return the row id."""
    attrs = element.attrib
    return first_or_create(
        conn,
        "health_activity_summaries",
        {"date": parse_datetime(attrs.get("dateComponents"))},
        {
            "active_energy_burned": _float(attrs.get("activeEnergyBurned")),
            "active_energy_burned_goal": _int(attrs.get("activeEnergyBurnedGoal")),
            "active_energy_burned_unit": attrs.get("activeEnergyBurnedUnit", ""),
            "apple_move_time": _int(attrs.get("appleMoveTime")),
            "apple_move_time_goal": _int(attrs.get("appleMoveTimeGoal")),
            "apple_exercise_time": _int(attrs.get("appleExerciseTime")),
            "apple_exercise_time_goal": _int(attrs.get("appleExerciseTimeGoal")),
            "apple_stand_hours": _int(attrs.get("appleStandHours")),
            "apple_stand_hours_goal": _int(attrs.get("appleStandHoursGoal")),
        },
    )