from __future__ import annotations

import re

from app.core.exceptions import FormatError

DAY_VALUES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def to_minutes(value: str) -> int:
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise FormatError(
            "Invalid time format. Use HH:MM format (e.g., 08:30)",
            details={"value": value},
        )
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # Half-open intervals: 09:00-10:00 and 10:00-11:00 do not overlap.
    return start_a < end_b and start_b < end_a


def windows_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return overlaps(to_minutes(start_a), to_minutes(end_a), to_minutes(start_b), to_minutes(end_b))


def duration_hours(start: str, end: str) -> float:
    return (to_minutes(end) - to_minutes(start)) / 60


def format_window(day: str, start: str, end: str) -> str:
    return f"{day} {start}-{end}"
