"""
Calendar collaborators.

The calendar service runs separately and exposes a REST API for:
- Listing busy intervals for a day
- Creating, moving and deleting events

InMemoryCalendar implements the same contract in-process for development
and demos (used when no calendar URL is configured).
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional, Union
from uuid import uuid4

import httpx

from pharmacy_scheduler.config import get_settings
from pharmacy_scheduler.core.intelligence.slots.datetime_parser import business_tz, to_business_tz

logger = logging.getLogger(__name__)


class CalendarClientError(Exception):
    """Raised when the calendar service cannot answer a read."""
    pass


@dataclass
class BusyInterval:
    """A booked stretch of the calendar."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if [start, end) overlaps this interval."""
        return start < self.end and end > self.start

    @classmethod
    def from_dict(cls, data: dict) -> "BusyInterval":
        """Create from API response dict."""
        return cls(
            start=to_business_tz(datetime.fromisoformat(data["start"])),
            end=to_business_tz(datetime.fromisoformat(data["end"])),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass
class EventResult:
    """Result of a calendar write."""

    success: bool
    event_id: Optional[str] = None
    error: Optional[str] = None


class CalendarAgentClient:
    """
    HTTP client for the calendar service.

    Calendar service exposes:
    - GET /api/busy?date=YYYY-MM-DD - Busy intervals for a day
    - POST /api/events - Create event
    - PATCH /api/events/{id} - Move event
    - DELETE /api/events/{id} - Delete event
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize client.

        Args:
            base_url: Calendar service base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
        """
        settings = get_settings()
        self.base_url = base_url or settings.calendar_agent_url
        self.timeout = timeout or settings.calendar_timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # === Availability ===

    async def list_busy_intervals(self, day: date) -> list[BusyInterval]:
        """List busy intervals for a day.

        Args:
            day: Calendar day (business time zone)

        Returns:
            Busy intervals

        Raises:
            CalendarClientError: On transport errors or malformed responses
        """
        client = await self._get_client()

        try:
            response = await client.get("/api/busy", params={"date": day.isoformat()})
            response.raise_for_status()

            data = response.json()
            items = data if isinstance(data, list) else data.get("busy", data.get("items", []))
            return [BusyInterval.from_dict(item) for item in items]

        except httpx.HTTPError as e:
            logger.error(f"Failed to list busy intervals for {day}: {e}")
            raise CalendarClientError(f"Calendar unavailable: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed busy interval response for {day}: {e}")
            raise CalendarClientError(f"Malformed calendar response: {e}") from e

    # === Events ===

    async def create_event(
        self,
        start: datetime,
        end: datetime,
        subject: str,
        attendee_email: str,
    ) -> EventResult:
        """Create a calendar event.

        Args:
            start: Event start
            end: Event end
            subject: Event title
            attendee_email: Patient email to invite

        Returns:
            EventResult with the new event id
        """
        client = await self._get_client()

        payload = {
            "start": start.isoformat(),
            "end": end.isoformat(),
            "subject": subject,
            "attendees": [{"email": attendee_email}],
            "time_zone": str(business_tz()),
        }

        try:
            response = await client.post("/api/events", json=payload)

            if response.status_code in (200, 201):
                data = response.json()
                return EventResult(
                    success=True,
                    event_id=data.get("event_id", data.get("id")),
                )

            logger.warning(f"Calendar rejected event: HTTP {response.status_code}")
            return EventResult(
                success=False,
                error=f"Calendar returned HTTP {response.status_code}",
            )

        except httpx.HTTPError as e:
            logger.error(f"Failed to create event: {e}")
            return EventResult(success=False, error="Unable to connect to calendar")

    async def update_event(
        self,
        event_id: str,
        new_start: datetime,
        new_end: datetime,
    ) -> EventResult:
        """Move an existing event.

        Args:
            event_id: Event to move
            new_start: New start
            new_end: New end

        Returns:
            EventResult
        """
        client = await self._get_client()

        try:
            response = await client.patch(
                f"/api/events/{event_id}",
                json={"start": new_start.isoformat(), "end": new_end.isoformat()},
            )

            if response.status_code in (200, 204):
                return EventResult(success=True, event_id=event_id)

            return EventResult(
                success=False,
                event_id=event_id,
                error=f"Calendar returned HTTP {response.status_code}",
            )

        except httpx.HTTPError as e:
            logger.error(f"Failed to update event {event_id}: {e}")
            return EventResult(success=False, event_id=event_id, error="Unable to connect to calendar")

    async def delete_event(self, event_id: str) -> EventResult:
        """Delete an event.

        Args:
            event_id: Event to delete

        Returns:
            EventResult
        """
        client = await self._get_client()

        try:
            response = await client.delete(f"/api/events/{event_id}")

            # Already gone counts as deleted
            if response.status_code in (200, 204, 404):
                return EventResult(success=True, event_id=event_id)

            return EventResult(
                success=False,
                event_id=event_id,
                error=f"Calendar returned HTTP {response.status_code}",
            )

        except httpx.HTTPError as e:
            logger.error(f"Failed to delete event {event_id}: {e}")
            return EventResult(success=False, event_id=event_id, error="Unable to connect to calendar")


class InMemoryCalendar:
    """In-process calendar with the same contract as CalendarAgentClient."""

    def __init__(self):
        self._events: dict[str, tuple[BusyInterval, str, str]] = {}

    async def list_busy_intervals(self, day: date) -> list[BusyInterval]:
        """List busy intervals overlapping the day."""
        day_start = datetime.combine(day, time.min, tzinfo=business_tz())
        day_end = day_start + timedelta(days=1)
        busy = [
            interval
            for interval, _, _ in self._events.values()
            if interval.overlaps(day_start, day_end)
        ]
        return sorted(busy, key=lambda interval: interval.start)

    async def create_event(
        self,
        start: datetime,
        end: datetime,
        subject: str,
        attendee_email: str,
    ) -> EventResult:
        """Record an event."""
        event_id = uuid4().hex
        self._events[event_id] = (BusyInterval(start=start, end=end), subject, attendee_email)
        logger.info(f"Calendar event created: {event_id} ({subject})")
        return EventResult(success=True, event_id=event_id)

    async def update_event(
        self,
        event_id: str,
        new_start: datetime,
        new_end: datetime,
    ) -> EventResult:
        """Move an event."""
        if event_id not in self._events:
            return EventResult(success=False, event_id=event_id, error="Event not found")
        _, subject, attendee = self._events[event_id]
        self._events[event_id] = (BusyInterval(start=new_start, end=new_end), subject, attendee)
        return EventResult(success=True, event_id=event_id)

    async def delete_event(self, event_id: str) -> EventResult:
        """Remove an event."""
        self._events.pop(event_id, None)
        return EventResult(success=True, event_id=event_id)

    async def close(self) -> None:
        """Nothing to release."""


CalendarCollaborator = Union[CalendarAgentClient, InMemoryCalendar]


# Singleton
_client: Optional[CalendarCollaborator] = None


def get_calendar_client() -> CalendarCollaborator:
    """Get singleton calendar collaborator."""
    global _client
    if _client is None:
        if get_settings().calendar_agent_url:
            _client = CalendarAgentClient()
        else:
            logger.info("No calendar URL configured, using in-memory calendar")
            _client = InMemoryCalendar()
    return _client
