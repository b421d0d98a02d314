"""Shared fixtures."""

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind, SlotSet
from pharmacy_scheduler.core.scheduling.availability import AvailabilityEngine
from pharmacy_scheduler.core.scheduling.calendar_client import InMemoryCalendar
from pharmacy_scheduler.core.scheduling.orchestrator import BookingOrchestrator
from pharmacy_scheduler.core.scheduling.repository import InMemoryAppointmentRepository
from pharmacy_scheduler.core.scheduling.response import ResponseGenerator

TZ = ZoneInfo("America/New_York")

# Wednesday, January 15th 2025, before opening
NOW = datetime(2025, 1, 15, 8, 0, tzinfo=TZ)


def at(day: int, hour: int, minute: int = 0) -> datetime:
    """Business-time instant in January 2025."""
    return datetime(2025, 1, day, hour, minute, tzinfo=TZ)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def calendar():
    return InMemoryCalendar()


@pytest.fixture
def repository():
    return InMemoryAppointmentRepository()


@pytest.fixture
def responses():
    return ResponseGenerator(pharmacy_name="MedMe Pharmacy", pharmacy_phone="(555) 123-4567")


@pytest.fixture
def availability(calendar, clock):
    return AvailabilityEngine(
        calendar=calendar,
        clock=clock,
        start_hour=9,
        end_hour=17,
        horizon_days=14,
    )


@pytest.fixture
def orchestrator(availability, calendar, repository, responses, clock):
    return BookingOrchestrator(
        availability=availability,
        calendar=calendar,
        repository=repository,
        responses=responses,
        clock=clock,
    )


@pytest.fixture
def complete_slots():
    """Complete request for Thursday 2 PM."""
    return SlotSet(
        patient_name="Jane Doe",
        phone="555-123-4567",
        email="jane@example.com",
        appointment_kind=AppointmentKind.FLU_SHOT,
        preferred_datetime=at(16, 14),
    )
