"""Scheduling domain types."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind
from pharmacy_scheduler.models.database import AppointmentStatus


@dataclass
class TimeSlot:
    """Bookable interval [start, end). Generated from busy intervals, never stored."""

    start: datetime
    end: datetime
    available: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "available": self.available,
        }


class AvailabilityMode(str, Enum):
    """Where a day's availability came from."""

    LIVE = "live"            # Calendar answered
    DEGRADED = "degraded"    # Calendar failed, static pattern used


@dataclass
class DayAvailability:
    """Bookable slots for one day, tagged live or degraded."""

    day: date
    slots: list[TimeSlot] = field(default_factory=list)
    mode: AvailabilityMode = AvailabilityMode.LIVE
    reason: Optional[str] = None

    @property
    def is_degraded(self) -> bool:
        """Check if the calendar could not be reached."""
        return self.mode == AvailabilityMode.DEGRADED

    @property
    def available_slots(self) -> list[TimeSlot]:
        """Only the slots that can be booked."""
        return [slot for slot in self.slots if slot.available]

    def slot_at_hour(self, hour: int) -> Optional[TimeSlot]:
        """The available slot starting at the given hour, if any."""
        for slot in self.slots:
            if slot.start.hour == hour and slot.available:
                return slot
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        result = {
            "date": self.day.isoformat(),
            "mode": self.mode.value,
            "slots": [slot.to_dict() for slot in self.slots],
        }
        if self.reason:
            result["reason"] = self.reason
        return result


@dataclass
class Appointment:
    """Durable appointment record, owned by the appointment repository."""

    patient_name: str
    phone: str
    email: str
    appointment_kind: AppointmentKind
    preferred_datetime: datetime
    confirmed_datetime: Optional[datetime] = None
    status: AppointmentStatus = AppointmentStatus.PENDING
    agent_notes: str = ""
    calendar_event_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def scheduled_for(self) -> datetime:
        """Confirmed time, falling back to the requested one."""
        return self.confirmed_datetime or self.preferred_datetime

    def with_note(self, note: str) -> str:
        """Notes with `note` appended; existing notes are never replaced."""
        if not self.agent_notes:
            return note
        return f"{self.agent_notes} | {note}"

    def copy(self, **changes: Any) -> "Appointment":
        """Return a copy with fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "patient_name": self.patient_name,
            "phone": self.phone,
            "email": self.email,
            "appointment_kind": self.appointment_kind.value,
            "preferred_datetime": self.preferred_datetime.isoformat(),
            "confirmed_datetime": self.confirmed_datetime.isoformat() if self.confirmed_datetime else None,
            "status": self.status.value,
            "agent_notes": self.agent_notes,
            "calendar_event_id": self.calendar_event_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Outcome(str, Enum):
    """What an orchestrator operation ended up doing."""

    GREETED = "greeted"
    PROMPTED = "prompted"
    INFO_CAPTURED = "info_captured"
    MISSING_INFO = "missing_info"
    INVALID_INPUT = "invalid_input"
    BOOKED = "booked"
    ALREADY_BOOKED = "already_booked"
    ALTERNATIVE_OFFERED = "alternative_offered"
    NO_AVAILABILITY = "no_availability"
    CALENDAR_FAILURE = "calendar_failure"
    AVAILABILITY = "availability"
    CLOSED = "closed"
    FOUND = "found"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    ALREADY_CANCELLED = "already_cancelled"
    RESCHEDULED = "rescheduled"
    UNKNOWN_FUNCTION = "unknown_function"
    INFORMATION = "information"
    ERROR = "error"


@dataclass
class OperationResult:
    """Channel-neutral result of a core operation."""

    success: bool
    message: str
    outcome: Outcome
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "message": self.message,
            "outcome": self.outcome.value,
            "data": self.data,
        }
