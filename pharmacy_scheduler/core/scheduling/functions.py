"""
Function-call dispatcher for voice platforms.

Voice agents call named functions with JSON parameters. Names and
parameter keys arrive in snake_case (Retell) or camelCase (Vapi); both
are normalized before dispatch:

    checkAvailability        -> check_availability
    preferredDateTime        -> preferred_datetime
"""

import logging
import re
from typing import Any, Awaitable, Callable, Optional

from pharmacy_scheduler.core.intelligence.slots.datetime_parser import parse_iso
from pharmacy_scheduler.core.intelligence.slots.extractor import find_kind
from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind, SlotSet
from pharmacy_scheduler.core.scheduling.orchestrator import (
    BookingOrchestrator,
    get_booking_orchestrator,
)
from pharmacy_scheduler.core.scheduling.types import OperationResult, Outcome

logger = logging.getLogger(__name__)


_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Snake-cased keys that still differ from the names used here
PARAMETER_ALIASES = {
    "preferred_date_time": "preferred_datetime",
    "new_date_time": "new_datetime",
    "appointment_type": "appointment_kind",
    "name": "patient_name",
    "phone_number": "phone",
    "email_address": "email",
    "day": "date",
}


def to_snake_case(name: str) -> str:
    """checkAvailability -> check_availability; snake_case passes through."""
    return _CAMEL_BOUNDARY_RE.sub("_", name.strip()).replace("-", "_").lower()


def normalize_parameters(parameters: dict[str, Any]) -> dict[str, Any]:
    """Snake-case every key and apply aliases. Blank strings are dropped."""
    normalized = {}
    for key, value in parameters.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        snake = to_snake_case(str(key))
        normalized[PARAMETER_ALIASES.get(snake, snake)] = value
    return normalized


def parse_kind(value: Any) -> Optional[AppointmentKind]:
    """Accept "flu_shot", "Flu Shot", "flu-shot" or any text naming a kind."""
    if isinstance(value, AppointmentKind):
        return value
    if not isinstance(value, str):
        return None
    key = re.sub(r"[\s-]+", "_", value.strip().lower())
    try:
        return AppointmentKind(key)
    except ValueError:
        return find_kind(value)


Handler = Callable[[dict[str, Any], str], Awaitable[OperationResult]]


class FunctionCallDispatcher:
    """Maps voice-platform function calls onto orchestrator operations."""

    def __init__(self, orchestrator: Optional[BookingOrchestrator] = None):
        """Initialize dispatcher.

        Args:
            orchestrator: Booking orchestrator (defaults to singleton)
        """
        self._orchestrator = orchestrator
        self._handlers: dict[str, Handler] = {
            "check_availability": self._check_availability,
            "book_appointment": self._book_appointment,
            "find_appointment": self._find_appointment,
            "cancel_appointment": self._cancel_appointment,
            "reschedule_appointment": self._reschedule_appointment,
        }

    @property
    def orchestrator(self) -> BookingOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = get_booking_orchestrator()
        return self._orchestrator

    @property
    def supported_functions(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(
        self,
        name: Optional[str],
        parameters: Optional[dict[str, Any]] = None,
        channel: str = "voice",
    ) -> OperationResult:
        """
        Run a named function.

        Args:
            name: Function name in snake_case or camelCase
            parameters: Raw parameters from the platform
            channel: Channel name recorded in appointment notes

        Returns:
            OperationResult
        """
        function = to_snake_case(name or "")
        handler = self._handlers.get(function)
        if handler is None:
            logger.warning(f"Unknown function requested via {channel}: {name!r}")
            return OperationResult(
                success=False,
                message=self.orchestrator.responses.unknown_function(),
                outcome=Outcome.UNKNOWN_FUNCTION,
                data={"function": name, "supported": self.supported_functions},
            )

        if parameters is not None and not isinstance(parameters, dict):
            return self._invalid("details")

        params = normalize_parameters(parameters or {})
        logger.info(f"Executing {function} via {channel} with {sorted(params)}")
        return await handler(params, channel)

    def _invalid(self, what: str) -> OperationResult:
        return OperationResult(
            success=False,
            message=self.orchestrator.responses.invalid_input(what),
            outcome=Outcome.INVALID_INPUT,
            data={"invalid": what},
        )

    def _invalid_datetime(self) -> OperationResult:
        return OperationResult(
            success=False,
            message=self.orchestrator.responses.invalid_datetime(),
            outcome=Outcome.INVALID_INPUT,
            data={"invalid": "date and time"},
        )

    async def _check_availability(self, params: dict[str, Any], channel: str) -> OperationResult:
        day = parse_iso(params.get("date"))
        if day is None:
            return self._invalid("date")
        return await self.orchestrator.check_availability(day.date())

    async def _book_appointment(self, params: dict[str, Any], channel: str) -> OperationResult:
        preferred = None
        if "preferred_datetime" in params:
            preferred = parse_iso(params["preferred_datetime"])
            if preferred is None:
                return self._invalid_datetime()

        kind = None
        if "appointment_kind" in params:
            kind = parse_kind(params["appointment_kind"])
            if kind is None:
                return self._invalid("appointment type")

        slots = SlotSet(
            patient_name=params.get("patient_name"),
            phone=params.get("phone"),
            email=params.get("email"),
            appointment_kind=kind,
            preferred_datetime=preferred,
        )
        return await self.orchestrator.book(slots, channel=channel)

    async def _find_appointment(self, params: dict[str, Any], channel: str) -> OperationResult:
        return await self.orchestrator.find_appointment(
            params.get("patient_name"),
            phone=params.get("phone"),
            email=params.get("email"),
        )

    async def _cancel_appointment(self, params: dict[str, Any], channel: str) -> OperationResult:
        appointment_id = params.get("appointment_id")
        return await self.orchestrator.cancel(
            appointment_id=str(appointment_id) if appointment_id is not None else None,
            name=params.get("patient_name"),
            phone=params.get("phone"),
            email=params.get("email"),
            channel=channel,
        )

    async def _reschedule_appointment(self, params: dict[str, Any], channel: str) -> OperationResult:
        new_datetime = parse_iso(params.get("new_datetime"))
        if new_datetime is None and (params.get("appointment_id") or params.get("patient_name")):
            return self._invalid_datetime()

        appointment_id = params.get("appointment_id")
        return await self.orchestrator.reschedule(
            appointment_id=str(appointment_id) if appointment_id is not None else None,
            name=params.get("patient_name"),
            phone=params.get("phone"),
            email=params.get("email"),
            new_datetime=new_datetime,
            channel=channel,
        )


# Singleton
_dispatcher: Optional[FunctionCallDispatcher] = None


def get_function_dispatcher() -> FunctionCallDispatcher:
    """Get singleton FunctionCallDispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = FunctionCallDispatcher()
    return _dispatcher
