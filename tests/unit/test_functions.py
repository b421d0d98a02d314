"""Tests for the voice function-call dispatcher."""

import pytest
from unittest.mock import AsyncMock

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind
from pharmacy_scheduler.core.scheduling.functions import (
    FunctionCallDispatcher,
    normalize_parameters,
    parse_kind,
    to_snake_case,
)
from pharmacy_scheduler.core.scheduling.types import AppointmentStatus, Outcome
from tests.conftest import at

BOOK_PARAMS = {
    "patientName": "Jane Doe",
    "phone": "555-123-4567",
    "email": "jane@example.com",
    "appointmentType": "flu_shot",
    "preferredDateTime": "2025-01-16T14:00:00",
}


@pytest.fixture
def dispatcher(orchestrator):
    return FunctionCallDispatcher(orchestrator=orchestrator)


class TestNormalization:
    """Test name and parameter normalization."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("checkAvailability", "check_availability"),
            ("bookAppointment", "book_appointment"),
            ("book_appointment", "book_appointment"),
            ("cancel-appointment", "cancel_appointment"),
            (" RescheduleAppointment ", "reschedule_appointment"),
        ],
    )
    def test_to_snake_case(self, name, expected):
        assert to_snake_case(name) == expected

    def test_normalize_parameters(self):
        params = normalize_parameters(
            {
                "patientName": "Jane Doe",
                "preferredDateTime": "2025-01-16T14:00:00",
                "appointmentType": "flu shot",
                "phoneNumber": "555-123-4567",
                "email": "  ",
            }
        )

        assert params == {
            "patient_name": "Jane Doe",
            "preferred_datetime": "2025-01-16T14:00:00",
            "appointment_kind": "flu shot",
            "phone": "555-123-4567",
        }

    def test_name_alias(self):
        assert normalize_parameters({"name": "Jane"}) == {"patient_name": "Jane"}

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("flu_shot", AppointmentKind.FLU_SHOT),
            ("Flu Shot", AppointmentKind.FLU_SHOT),
            ("medication-review", AppointmentKind.MEDICATION_REVIEW),
            ("a quick consultation", AppointmentKind.CONSULTATION),
            ("haircut", None),
            (42, None),
        ],
    )
    def test_parse_kind(self, value, expected):
        assert parse_kind(value) == expected


class TestFunctionCallDispatcher:
    """Test dispatching to orchestrator operations."""

    @pytest.mark.asyncio
    async def test_unknown_function(self, dispatcher):
        result = await dispatcher.dispatch("orderPizza", {})

        assert result.outcome == Outcome.UNKNOWN_FUNCTION
        assert result.data["function"] == "orderPizza"
        assert "book_appointment" in result.data["supported"]

    @pytest.mark.asyncio
    async def test_missing_function_name(self, dispatcher):
        result = await dispatcher.dispatch(None, {})
        assert result.outcome == Outcome.UNKNOWN_FUNCTION

    @pytest.mark.asyncio
    async def test_non_object_parameters(self, dispatcher):
        result = await dispatcher.dispatch("bookAppointment", ["Jane"])
        assert result.outcome == Outcome.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_book_camel_case(self, dispatcher, repository):
        result = await dispatcher.dispatch("bookAppointment", BOOK_PARAMS, channel="vapi")

        assert result.outcome == Outcome.BOOKED
        stored = await repository.find_by_id(result.data["appointment_id"])
        assert stored.confirmed_datetime == at(16, 14)
        assert stored.agent_notes.startswith("Booked via vapi.")

    @pytest.mark.asyncio
    async def test_book_snake_case(self, dispatcher):
        params = {
            "patient_name": "Jane Doe",
            "phone": "555-123-4567",
            "email": "jane@example.com",
            "appointment_type": "consultation",
            "preferred_date_time": "2025-01-16T10:00:00",
        }

        result = await dispatcher.dispatch("book_appointment", params, channel="retell")

        assert result.outcome == Outcome.BOOKED
        assert result.data["appointment"]["appointment_kind"] == "consultation"

    @pytest.mark.asyncio
    async def test_book_missing_fields(self, dispatcher):
        result = await dispatcher.dispatch("bookAppointment", {"patientName": "Jane Doe"})

        assert result.outcome == Outcome.MISSING_INFO
        assert "email address" in result.data["missing"]

    @pytest.mark.asyncio
    async def test_book_invalid_datetime(self, dispatcher):
        params = dict(BOOK_PARAMS, preferredDateTime="next tuesday-ish")

        result = await dispatcher.dispatch("bookAppointment", params)

        assert result.outcome == Outcome.INVALID_INPUT
        assert "date format" in result.message

    @pytest.mark.asyncio
    async def test_book_invalid_kind(self, dispatcher):
        params = dict(BOOK_PARAMS, appointmentType="haircut")

        result = await dispatcher.dispatch("bookAppointment", params)

        assert result.outcome == Outcome.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_check_availability(self, dispatcher):
        result = await dispatcher.dispatch("checkAvailability", {"date": "2025-01-16"})

        assert result.outcome == Outcome.AVAILABILITY
        assert result.data["date"] == "2025-01-16"

    @pytest.mark.asyncio
    async def test_check_availability_bad_date(self, dispatcher):
        result = await dispatcher.dispatch("checkAvailability", {"date": "someday"})
        assert result.outcome == Outcome.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_find_cancel_reschedule(self, dispatcher, repository):
        booked = await dispatcher.dispatch("bookAppointment", BOOK_PARAMS)
        appointment_id = booked.data["appointment_id"]

        found = await dispatcher.dispatch("findAppointment", {"patientName": "jane doe"})
        assert found.data["appointment_id"] == appointment_id

        moved = await dispatcher.dispatch(
            "rescheduleAppointment",
            {"appointmentId": appointment_id, "newDateTime": "2025-01-17T11:00:00"},
        )
        assert moved.outcome == Outcome.RESCHEDULED

        cancelled = await dispatcher.dispatch("cancelAppointment", {"appointmentId": appointment_id})
        assert cancelled.outcome == Outcome.CANCELLED
        assert (await repository.find_by_id(appointment_id)).status == AppointmentStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_numeric_appointment_id(self, dispatcher):
        booked = await dispatcher.dispatch("bookAppointment", BOOK_PARAMS)

        result = await dispatcher.dispatch(
            "cancel_appointment", {"appointment_id": int(booked.data["appointment_id"])}
        )

        assert result.outcome == Outcome.CANCELLED

    @pytest.mark.asyncio
    async def test_reschedule_invalid_datetime(self, dispatcher):
        result = await dispatcher.dispatch(
            "rescheduleAppointment", {"appointmentId": "1", "newDateTime": "soon"}
        )
        assert result.outcome == Outcome.INVALID_INPUT

    @pytest.mark.asyncio
    async def test_reschedule_needs_identifier(self, dispatcher):
        result = await dispatcher.dispatch(
            "rescheduleAppointment", {"newDateTime": "2025-01-17T11:00:00"}
        )
        assert result.outcome == Outcome.MISSING_INFO

    @pytest.mark.asyncio
    async def test_channel_passed_through(self, orchestrator):
        orchestrator.cancel = AsyncMock()
        dispatcher = FunctionCallDispatcher(orchestrator=orchestrator)

        await dispatcher.dispatch("cancel_appointment", {"appointment_id": "3"}, channel="retell")

        assert orchestrator.cancel.call_args.kwargs["channel"] == "retell"
        assert orchestrator.cancel.call_args.kwargs["appointment_id"] == "3"
