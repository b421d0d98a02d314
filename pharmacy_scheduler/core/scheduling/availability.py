"""
Availability Engine.

Overlays business hours with the calendar's busy intervals:

    slots_for(day)        -> DayAvailability (one slot per business hour)
    find_next(preferred)  -> first available TimeSlot within the horizon
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from pharmacy_scheduler.config import settings
from pharmacy_scheduler.core.intelligence.slots.datetime_parser import (
    business_now,
    business_tz,
    to_business_tz,
)
from pharmacy_scheduler.core.scheduling.calendar_client import (
    BusyInterval,
    CalendarCollaborator,
    get_calendar_client,
)
from pharmacy_scheduler.core.scheduling.types import (
    AvailabilityMode,
    DayAvailability,
    TimeSlot,
)

logger = logging.getLogger(__name__)

SLOT_LENGTH = timedelta(hours=1)

# Static pattern served when the calendar is down: 10-11 AM and 2-3 PM busy
FALLBACK_BUSY_HOURS = (10, 14)


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


class AvailabilityEngine:
    """Computes bookable slots from business hours and calendar busy intervals."""

    def __init__(
        self,
        calendar: Optional[CalendarCollaborator] = None,
        clock: Callable[[], datetime] = business_now,
        start_hour: Optional[int] = None,
        end_hour: Optional[int] = None,
        horizon_days: Optional[int] = None,
    ):
        """Initialize engine.

        Args:
            calendar: Calendar collaborator (defaults to singleton)
            clock: Returns "now" in the business time zone
            start_hour: First slot hour (defaults to settings)
            end_hour: Close of business (defaults to settings)
            horizon_days: find_next search horizon (defaults to settings)
        """
        self._calendar = calendar
        self._clock = clock
        self.start_hour = settings.business_hours_start if start_hour is None else start_hour
        self.end_hour = settings.business_hours_end if end_hour is None else end_hour
        self.horizon_days = settings.booking_horizon_days if horizon_days is None else horizon_days

    def _get_calendar(self) -> CalendarCollaborator:
        """Get calendar collaborator."""
        if self._calendar is None:
            self._calendar = get_calendar_client()
        return self._calendar

    def now(self) -> datetime:
        """Current time in the business time zone."""
        return to_business_tz(self._clock())

    def _business_slots(self, day: date) -> list[tuple[datetime, datetime]]:
        tz = business_tz()
        bounds = []
        for hour in range(self.start_hour, self.end_hour):
            start = datetime.combine(day, time(hour=hour), tzinfo=tz)
            bounds.append((start, start + SLOT_LENGTH))
        return bounds

    def _fallback_busy(self, day: date) -> list[BusyInterval]:
        tz = business_tz()
        return [
            BusyInterval(
                start=datetime.combine(day, time(hour=hour), tzinfo=tz),
                end=datetime.combine(day, time(hour=hour), tzinfo=tz) + SLOT_LENGTH,
            )
            for hour in FALLBACK_BUSY_HOURS
        ]

    async def slots_for(self, day: date, now: Optional[datetime] = None) -> DayAvailability:
        """
        Bookable slots for one day.

        Weekends return an empty live result without touching the calendar.
        Slots that already started are left out. If the calendar fails the
        result is tagged degraded and built from a static busy pattern.

        Args:
            day: Calendar day
            now: Reference time (defaults to the engine clock)

        Returns:
            DayAvailability
        """
        if is_weekend(day):
            logger.debug(f"{day} is a weekend, no slots")
            return DayAvailability(day=day)

        now = to_business_tz(now) if now else self.now()

        mode = AvailabilityMode.LIVE
        reason = None
        try:
            busy = await self._get_calendar().list_busy_intervals(day)
        except Exception as e:
            logger.warning(f"Calendar lookup failed for {day}, serving fallback availability: {e}")
            busy = self._fallback_busy(day)
            mode = AvailabilityMode.DEGRADED
            reason = str(e) or e.__class__.__name__

        slots = []
        for start, end in self._business_slots(day):
            if start < now:
                continue
            available = not any(interval.overlaps(start, end) for interval in busy)
            slots.append(TimeSlot(start=start, end=end, available=available))

        return DayAvailability(day=day, slots=slots, mode=mode, reason=reason)

    async def find_next(
        self,
        preferred: datetime,
        now: Optional[datetime] = None,
    ) -> Optional[TimeSlot]:
        """
        First available slot on or after the preferred day.

        Scans day by day, skipping weekends, up to the horizon.

        Args:
            preferred: Preferred instant
            now: Reference time (defaults to the engine clock)

        Returns:
            TimeSlot or None if the horizon is exhausted
        """
        now = to_business_tz(now) if now else self.now()
        first_day = max(to_business_tz(preferred).date(), now.date())

        for offset in range(self.horizon_days):
            day = first_day + timedelta(days=offset)
            if is_weekend(day):
                continue

            availability = await self.slots_for(day, now=now)
            for slot in availability.slots:
                if slot.available and slot.start >= now:
                    return slot

        logger.info(f"No availability within {self.horizon_days} days of {first_day}")
        return None


# Singleton
_engine: Optional[AvailabilityEngine] = None


def get_availability_engine() -> AvailabilityEngine:
    """Get singleton AvailabilityEngine."""
    global _engine
    if _engine is None:
        _engine = AvailabilityEngine()
    return _engine
