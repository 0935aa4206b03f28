"""Helpers for the 12-hour ``"H:MM AM"`` event times and event date display."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from dateutil import parser as date_parser

from ..config import DEFAULT_EVENT_TIME
from ..errors import ValidationError

_TIME_RE = re.compile(r"(\d+):(\d+)\s*(AM|PM)", re.IGNORECASE)
_PERIODS = ("AM", "PM")


def split_time(value: Optional[str]) -> tuple[str, str, str]:
    """Return ``(hour, minute, period)`` of *value*, defaulting missing parts.

    An empty or unparseable value behaves like ``"12:00 PM"``.
    """

    match = _TIME_RE.search(value or "") or _TIME_RE.search(DEFAULT_EVENT_TIME)
    hour, minute, period = match.groups()
    return str(int(hour)), minute.zfill(2), period.upper()


def _join(hour: str, minute: str, period: str) -> str:
    return f"{hour}:{minute} {period}"


def _to_int(value: int | str, label: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be a whole number, got {value!r}") from exc


def set_hour(value: Optional[str], hour: int | str) -> str:
    number = _to_int(hour, "Hour")
    if not 1 <= number <= 12:
        raise ValidationError(f"Hour must be between 1 and 12, got {hour!r}")
    _, minute, period = split_time(value)
    return _join(str(number), minute, period)


def set_minute(value: Optional[str], minute: int | str) -> str:
    number = _to_int(minute, "Minute")
    if not 0 <= number <= 59:
        raise ValidationError(f"Minute must be between 0 and 59, got {minute!r}")
    hour, _, period = split_time(value)
    return _join(hour, f"{number:02d}", period)


def set_period(value: Optional[str], period: str) -> str:
    normalised = period.strip().upper()
    if normalised not in _PERIODS:
        raise ValidationError(f"Period must be AM or PM, got {period!r}")
    hour, minute, _ = split_time(value)
    return _join(hour, minute, normalised)


def normalise_time(value: str) -> str:
    """Return *value* as canonical ``"H:MM AM"`` text."""

    match = _TIME_RE.search(value or "")
    if match is None:
        raise ValidationError(f"Event time must look like '9:30 AM', got {value!r}")
    hour, minute, period = match.groups()
    if not 1 <= int(hour) <= 12 or not 0 <= int(minute) <= 59:
        raise ValidationError(f"Event time out of range: {value!r}")
    return _join(str(int(hour)), minute.zfill(2), period.upper())


def enable_time(value: Optional[str]) -> str:
    """Return the time shown when "specific time" is switched on."""

    return value if value else DEFAULT_EVENT_TIME


def parse_event_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date_parser.isoparse(value).date()
    except (ValueError, OverflowError) as exc:
        raise ValidationError(f"Invalid event date: {value!r}") from exc


def format_event_date(value: Optional[str]) -> str:
    """Format an ISO date like ``"Mar 5, 2026"``; missing dates read ``"TBA"``."""

    parsed = parse_event_date(value)
    if parsed is None:
        return "TBA"
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


__all__ = [
    "enable_time",
    "format_event_date",
    "normalise_time",
    "parse_event_date",
    "set_hour",
    "set_minute",
    "set_period",
    "split_time",
]
