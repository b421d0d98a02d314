"""Tests for Response Generator."""

from datetime import date

import pytest

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind, SlotSet
from pharmacy_scheduler.core.scheduling.response import (
    ResponseGenerator,
    format_day,
    format_instant,
    format_time,
    join_items,
    ordinal,
)
from pharmacy_scheduler.core.scheduling.types import Appointment, AppointmentStatus, TimeSlot
from tests.conftest import at


class TestFormatting:
    """Test date and list formatting helpers."""

    @pytest.mark.parametrize(
        "day,expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"),
         (13, "13th"), (21, "21st"), (22, "22nd"), (31, "31st")],
    )
    def test_ordinal(self, day, expected):
        assert ordinal(day) == expected

    def test_format_time(self):
        assert format_time(at(16, 14)) == "2:00 PM"
        assert format_time(at(16, 9, 30)) == "9:30 AM"
        assert format_time(at(16, 12)) == "12:00 PM"
        assert format_time(at(16, 0)) == "12:00 AM"

    def test_format_day(self):
        assert format_day(date(2025, 1, 15)) == "Wednesday, January 15th"

    def test_format_instant(self):
        assert format_instant(at(16, 14)) == "Thursday, January 16th at 2:00 PM"

    def test_join_items(self):
        assert join_items([]) == ""
        assert join_items(["a"]) == "a"
        assert join_items(["a", "b"]) == "a and b"
        assert join_items(["a", "b", "c"]) == "a, b and c"


class TestResponseGenerator:
    """Test ResponseGenerator templates."""

    @pytest.fixture
    def generator(self, responses):
        return responses

    @pytest.fixture
    def appointment(self):
        return Appointment(
            id="7",
            patient_name="Jane Doe",
            phone="555-123-4567",
            email="jane@example.com",
            appointment_kind=AppointmentKind.FLU_SHOT,
            preferred_datetime=at(16, 14),
            confirmed_datetime=at(16, 14),
            status=AppointmentStatus.CONFIRMED,
        )

    def test_greeting(self, generator):
        response = generator.greeting()
        assert "Hello" in response
        assert "MedMe Pharmacy" in response
        assert "How can I help you today?" in response

    def test_greeting_acknowledges_captured_details(self, generator):
        response = generator.greeting(SlotSet(appointment_kind=AppointmentKind.FLU_SHOT))

        assert "a flu shot" in response
        assert "full name" in response

    def test_service_prompt_names_kind(self, generator):
        response = generator.service_prompt(AppointmentKind.CONSULTATION, ["full name", "phone number"])

        assert "consultation appointment" in response
        assert "full name and phone number" in response

    def test_service_prompt_without_kind_lists_services(self, generator):
        response = generator.service_prompt(None, ["appointment type"])
        assert "medication reviews" in response

    def test_acknowledge(self, generator):
        response = generator.acknowledge(
            SlotSet(patient_name="Jane Doe"),
            ["phone number", "email address"],
        )

        assert "your name as Jane Doe" in response
        assert "phone number and email address" in response

    def test_missing_prompt_lists_only_missing(self, generator, complete_slots):
        complete_slots.email = None
        response = generator.missing_prompt(complete_slots)

        assert response == "To book, I still need your email address."

    def test_help_text_mentions_hours(self, generator):
        response = generator.help_text()
        assert "Monday through Friday, 9:00 AM to 5:00 PM" in response

    def test_availability(self, generator):
        slots = [TimeSlot(start=at(16, 9), end=at(16, 10)), TimeSlot(start=at(16, 15), end=at(16, 16))]

        response = generator.availability(date(2025, 1, 16), slots)

        assert "Thursday, January 16th" in response
        assert "9:00 AM and 3:00 PM" in response

    def test_booked(self, generator, appointment):
        response = generator.booked(appointment)

        assert "flu shot" in response
        assert "Thursday, January 16th at 2:00 PM" in response
        assert "confirmation number is 7" in response
        assert "jane@example.com" in response

    def test_alternative_offered(self, generator):
        response = generator.alternative_offered(
            TimeSlot(start=at(16, 15), end=at(16, 16)),
            action="reschedule to",
        )

        assert "not available" in response
        assert "Thursday, January 16th at 3:00 PM" in response
        assert "reschedule to that instead" in response

    @pytest.mark.parametrize(
        "template",
        ["no_availability", "calendar_failure", "booking_failure", "cancel_failure",
         "reschedule_failure", "system_error"],
    )
    def test_failures_offer_phone(self, generator, template):
        assert "(555) 123-4567" in getattr(generator, template)()

    def test_not_found_by_name_asks_for_phone(self, generator):
        response = generator.not_found_by_name("Jane Doe")

        assert "Jane Doe" in response
        assert "provide your phone number" in response

    def test_not_found_by_name_with_phone(self, generator):
        response = generator.not_found_by_name("Jane Doe", "555-123-4567")
        assert "with phone number 555-123-4567" in response

    def test_cancelled(self, generator, appointment):
        response = generator.cancelled(appointment)
        assert "cancelled your flu shot appointment" in response

    def test_rescheduled(self, generator, appointment):
        moved = appointment.copy(confirmed_datetime=at(17, 10))
        response = generator.rescheduled(moved)
        assert "Friday, January 17th at 10:00 AM" in response

    def test_weekend_closed(self, generator):
        assert "closed on weekends" in generator.weekend_closed()

    def test_defaults_from_settings(self):
        generator = ResponseGenerator()
        assert generator.pharmacy_name
        assert generator.pharmacy_phone
