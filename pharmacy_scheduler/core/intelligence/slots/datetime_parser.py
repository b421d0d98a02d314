"""
Natural-language date/time extraction.

Recognizes exactly two relative forms:

    "tomorrow"          -> now + 1 day, 2:00 PM unless a clock time is given
    "next <weekday>"    -> next future occurrence, 10:00 AM unless a clock time is given

Anything else returns None so the conversation re-prompts instead of guessing.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from pharmacy_scheduler.config import settings

logger = logging.getLogger(__name__)

WEEKDAYS = [
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
]

TOMORROW_DEFAULT_HOUR = 14
NEXT_WEEKDAY_DEFAULT_HOUR = 10

_TOMORROW_RE = re.compile(r"\btomorrow\b", re.IGNORECASE)
_NEXT_WEEKDAY_RE = re.compile(
    r"\bnext\s+(" + "|".join(WEEKDAYS) + r")\b",
    re.IGNORECASE,
)
# "2pm", "2 pm", "2:30pm", "11:00 a.m."
_TWELVE_HOUR_RE = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\b\.?",
    re.IGNORECASE,
)
# "14:00", "9:30"
_TWENTY_FOUR_HOUR_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b")


def business_tz() -> ZoneInfo:
    """The single fixed business time zone."""
    return ZoneInfo(settings.business_timezone)


def business_now() -> datetime:
    """Current time in the business time zone."""
    return datetime.now(business_tz())


def to_business_tz(value: datetime) -> datetime:
    """Interpret naive datetimes as business time, convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=business_tz())
    return value.astimezone(business_tz())


def parse_clock_time(text: str) -> Optional[tuple[int, int]]:
    """Find a clock time in text.

    Args:
        text: Utterance to scan

    Returns:
        (hour, minute) on a 24-hour clock, or None
    """
    match = _TWELVE_HOUR_RE.search(text)
    if match:
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if not 1 <= hour <= 12 or minute > 59:
            return None
        meridiem = match.group(3).lower()
        if meridiem == "a" and hour == 12:
            hour = 0
        elif meridiem == "p" and hour != 12:
            hour += 12
        return hour, minute

    match = _TWENTY_FOUR_HOUR_RE.search(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour <= 23 and minute <= 59:
            return hour, minute

    return None


def parse(utterance: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a relative date/time expression into a concrete instant.

    Args:
        utterance: Patient's message
        now: Reference time (defaults to business_now())

    Returns:
        Timezone-aware datetime in the business time zone, or None
    """
    if not utterance:
        return None

    now = to_business_tz(now) if now else business_now()
    clock = parse_clock_time(utterance)

    if _TOMORROW_RE.search(utterance):
        target = now + timedelta(days=1)
        hour, minute = clock or (TOMORROW_DEFAULT_HOUR, 0)
        return target.replace(hour=hour, minute=minute, second=0, microsecond=0)

    match = _NEXT_WEEKDAY_RE.search(utterance)
    if match:
        target_index = WEEKDAYS.index(match.group(1).lower())
        days_ahead = target_index - now.weekday()
        if days_ahead <= 0:
            days_ahead += 7
        target = now + timedelta(days=days_ahead)
        hour, minute = clock or (NEXT_WEEKDAY_DEFAULT_HOUR, 0)
        return target.replace(hour=hour, minute=minute, second=0, microsecond=0)

    return None


def parse_iso(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 parameter from a function-call channel.

    Args:
        value: ISO date or datetime string ("2025-01-15", "2025-01-15T14:00:00Z")

    Returns:
        Timezone-aware datetime in the business time zone, or None if invalid
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug(f"Unparsable ISO datetime: {value!r}")
        return None

    return to_business_tz(parsed)
