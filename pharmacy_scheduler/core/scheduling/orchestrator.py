"""
Booking Orchestrator.

Turns a classified patient turn (or a voice-platform function call) into
availability checks, calendar writes and appointment records:

    handle_turn         conversation path, branches on intent
    check_availability  read-only day report
    book                reserve slot, then persist appointment
    find_appointment    look up by patient
    cancel              remove calendar event, then mark cancelled
    reschedule          move calendar event, then update appointment

Any collaborator exception is caught here and turned into an apology that
carries the pharmacy phone number.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from pharmacy_scheduler.core.intelligence.intent.types import Intent
from pharmacy_scheduler.core.intelligence.session.models import ConversationSession
from pharmacy_scheduler.core.intelligence.slots.datetime_parser import (
    business_now,
    business_tz,
    to_business_tz,
)
from pharmacy_scheduler.core.intelligence.slots.extractor import (
    SlotExtractor,
    describe_missing,
    get_slot_extractor,
)
from pharmacy_scheduler.core.intelligence.slots.types import SlotSet
from pharmacy_scheduler.core.scheduling.availability import (
    AvailabilityEngine,
    get_availability_engine,
    is_weekend,
)
from pharmacy_scheduler.core.scheduling.calendar_client import (
    CalendarCollaborator,
    get_calendar_client,
)
from pharmacy_scheduler.core.scheduling.repository import (
    AppointmentRepository,
    get_appointment_repository,
)
from pharmacy_scheduler.core.scheduling.response import (
    ResponseGenerator,
    format_instant,
    get_response_generator,
)
from pharmacy_scheduler.core.scheduling.types import (
    Appointment,
    AppointmentStatus,
    OperationResult,
    Outcome,
    TimeSlot,
)

logger = logging.getLogger(__name__)


# "confirmation number 12", "appointment #3", "reference A-17"
APPOINTMENT_REF_RE = re.compile(
    r"\b(?:confirmation|appointment|reference|booking)"
    r"(?:\s+(?:number|no\.?|id))?(?:\s+is)?\s*#?\s*([A-Za-z0-9-]*\d[A-Za-z0-9-]*)\b",
    re.IGNORECASE,
)
CANCEL_RE = re.compile(r"\bcancel", re.IGNORECASE)
MODIFY_RE = re.compile(r"\b(?:cancel|reschedul)", re.IGNORECASE)

BOOKING_INTENTS = {
    Intent.BOOKING,
    Intent.FLU_SHOT,
    Intent.CONSULTATION,
    Intent.MEDICATION_REVIEW,
}
INFO_INTENTS = {Intent.PROVIDING_INFO, Intent.DATETIME_INFO}


def find_appointment_reference(utterance: str) -> Optional[str]:
    """Appointment id quoted in the utterance, if any."""
    match = APPOINTMENT_REF_RE.search(utterance or "")
    return match.group(1) if match else None


def booking_key(slots: SlotSet) -> str:
    """Identity of a booking request: preferred instant plus kind."""
    preferred = to_business_tz(slots.preferred_datetime)
    return f"{preferred.isoformat()}|{slots.appointment_kind.value}"


class BookingOrchestrator:
    """
    Shared booking core used by every channel.

    Example:
        orchestrator = BookingOrchestrator()
        result = await orchestrator.handle_turn(session, "book a flu shot", Intent.BOOKING)
        print(result.message)
    """

    def __init__(
        self,
        availability: Optional[AvailabilityEngine] = None,
        calendar: Optional[CalendarCollaborator] = None,
        repository: Optional[AppointmentRepository] = None,
        responses: Optional[ResponseGenerator] = None,
        extractor: Optional[SlotExtractor] = None,
        clock: Callable[[], datetime] = business_now,
    ):
        """Initialize orchestrator.

        Args:
            availability: Availability engine (defaults to singleton)
            calendar: Calendar collaborator for writes (defaults to singleton)
            repository: Appointment repository (defaults to singleton)
            responses: Response templates (defaults to singleton)
            extractor: Slot extractor (defaults to singleton)
            clock: Returns "now"; injected for tests
        """
        self._availability = availability
        self._calendar = calendar
        self._repository = repository
        self._responses = responses or get_response_generator()
        self._extractor = extractor or get_slot_extractor()
        self._clock = clock

    @property
    def availability(self) -> AvailabilityEngine:
        if self._availability is None:
            self._availability = get_availability_engine()
        return self._availability

    @property
    def calendar(self) -> CalendarCollaborator:
        if self._calendar is None:
            self._calendar = get_calendar_client()
        return self._calendar

    @property
    def repository(self) -> AppointmentRepository:
        if self._repository is None:
            self._repository = get_appointment_repository()
        return self._repository

    @property
    def responses(self) -> ResponseGenerator:
        return self._responses

    def now(self) -> datetime:
        """Current time in the business time zone."""
        return to_business_tz(self._clock())

    def _apology(self) -> OperationResult:
        return OperationResult(
            success=False,
            message=self._responses.system_error(),
            outcome=Outcome.ERROR,
        )

    # === Conversation path ===

    async def handle_turn(
        self,
        session: ConversationSession,
        utterance: str,
        intent: Intent,
        channel: str = "chat",
    ) -> OperationResult:
        """
        Handle one patient turn.

        The extracted slot patch is merged into the session on every turn,
        then the intent picks the branch.

        Args:
            session: Session being updated (caller holds its lock)
            utterance: Patient's message
            intent: Classified intent
            channel: Channel name recorded in appointment notes

        Returns:
            OperationResult for the reply
        """
        now = self.now()
        patch = self._extractor.extract(utterance, session, now)
        changed = session.slots.merge(patch)
        if "preferred_datetime" in changed:
            session.clear_offer()
        if changed:
            logger.debug(f"Session {session.session_id} slots updated: {changed}")

        try:
            return await self._route(session, utterance, intent, channel, now, patch)
        except Exception:
            logger.exception(f"Turn failed for session {session.session_id} (intent {intent.value})")
            return self._apology()

    async def _route(
        self,
        session: ConversationSession,
        utterance: str,
        intent: Intent,
        channel: str,
        now: datetime,
        patch: SlotSet,
    ) -> OperationResult:
        slots = session.slots

        if intent == Intent.GREETING:
            if slots.is_complete and patch.has_any():
                result = await self._attempt_booking(session, channel, now)
                result.message = f"{self._responses.welcome_line()} {result.message}"
                return result
            session.current_step = "collecting_info" if slots.has_any() else "greeting"
            return OperationResult(
                success=True,
                message=self._responses.greeting(slots),
                outcome=Outcome.GREETED,
                data={"missing": describe_missing(slots)},
            )

        if intent in BOOKING_INTENTS:
            # "cancel my appointment" matches the booking keywords
            if MODIFY_RE.search(utterance):
                return await self._handle_modify(session, utterance, patch, channel, now)
            # "book it" right after an offer accepts the offer
            if intent == Intent.BOOKING and session.pending_offer and patch.preferred_datetime is None:
                return await self._handle_confirmation(session, channel, now)
            if slots.is_complete:
                return await self._attempt_booking(session, channel, now)
            session.current_step = "collecting_info"
            missing = describe_missing(slots)
            return OperationResult(
                success=False,
                message=self._responses.service_prompt(slots.appointment_kind, missing),
                outcome=Outcome.MISSING_INFO,
                data={"missing": missing},
            )

        if intent in INFO_INTENTS:
            if slots.is_complete:
                return await self._attempt_booking(session, channel, now)
            session.current_step = "collecting_info"
            missing = describe_missing(slots)
            return OperationResult(
                success=True,
                message=self._responses.acknowledge(slots, missing),
                outcome=Outcome.INFO_CAPTURED,
                data={"missing": missing},
            )

        if intent == Intent.CONFIRMATION:
            return await self._handle_confirmation(session, channel, now)

        if intent == Intent.CHECK_AVAILABILITY:
            target = patch.preferred_datetime or slots.preferred_datetime
            if target is None:
                return OperationResult(
                    success=True,
                    message=self._responses.ask_for_day(),
                    outcome=Outcome.PROMPTED,
                )
            result = await self.check_availability(to_business_tz(target).date(), now=now)
            self._remember_offer(session, result)
            return result

        if intent == Intent.MODIFY_APPOINTMENT:
            return await self._handle_modify(session, utterance, patch, channel, now)

        return OperationResult(
            success=True,
            message=self._responses.help_text(),
            outcome=Outcome.INFORMATION,
        )

    async def _handle_confirmation(
        self,
        session: ConversationSession,
        channel: str,
        now: datetime,
    ) -> OperationResult:
        if session.pending_offer and session.pending_reschedule_id:
            appointment_id = session.pending_reschedule_id
            new_datetime = session.pending_offer
            session.clear_offer()
            result = await self.reschedule(
                appointment_id=appointment_id,
                new_datetime=new_datetime,
                channel=channel,
                now=now,
            )
            self._remember_offer(session, result, reschedule_id=appointment_id)
            return result

        if session.pending_offer:
            session.slots.preferred_datetime = session.pending_offer
            session.clear_offer()

        if session.slots.is_complete:
            return await self._attempt_booking(session, channel, now)

        missing = describe_missing(session.slots)
        return OperationResult(
            success=False,
            message=self._responses.missing_prompt(session.slots),
            outcome=Outcome.MISSING_INFO,
            data={"missing": missing},
        )

    async def _attempt_booking(
        self,
        session: ConversationSession,
        channel: str,
        now: datetime,
    ) -> OperationResult:
        """Book the session's complete SlotSet once."""
        key = booking_key(session.slots)
        if session.last_booking_key == key:
            return OperationResult(
                success=True,
                message=self._responses.already_booked(session.last_appointment_id),
                outcome=Outcome.ALREADY_BOOKED,
                data={"appointment_id": session.last_appointment_id},
            )

        result = await self.book(session.slots, channel=channel, now=now)

        if result.outcome == Outcome.BOOKED:
            session.last_booking_key = key
            session.last_appointment_id = result.data["appointment_id"]
            session.clear_offer()
            session.current_step = "booked"
        else:
            self._remember_offer(session, result)

        return result

    def _remember_offer(
        self,
        session: ConversationSession,
        result: OperationResult,
        reschedule_id: Optional[str] = None,
    ) -> None:
        """Keep an offered alternative so a later "yes" can accept it."""
        if result.outcome not in (Outcome.ALTERNATIVE_OFFERED, Outcome.CLOSED):
            return
        alternative = result.data.get("alternative")
        if not alternative:
            return
        session.pending_offer = datetime.fromisoformat(alternative["start"])
        session.pending_reschedule_id = reschedule_id or result.data.get("reschedule_id")
        session.current_step = "awaiting_confirmation"

    async def _handle_modify(
        self,
        session: ConversationSession,
        utterance: str,
        patch: SlotSet,
        channel: str,
        now: datetime,
    ) -> OperationResult:
        reference = find_appointment_reference(utterance)
        appointment_id = reference or session.last_appointment_id
        slots = session.slots

        if CANCEL_RE.search(utterance):
            result = await self.cancel(
                appointment_id=appointment_id,
                name=slots.patient_name,
                phone=slots.phone,
                email=slots.email,
                channel=channel,
                now=now,
            )
            if result.outcome == Outcome.CANCELLED:
                session.clear_offer()
                session.current_step = "cancelled"
                if result.data.get("appointment_id") == session.last_appointment_id:
                    session.last_booking_key = None
            return result

        if patch.preferred_datetime is None:
            return OperationResult(
                success=False,
                message=self._responses.reschedule_prompt(),
                outcome=Outcome.MISSING_INFO,
                data={"missing": ["preferred date and time"]},
            )

        result = await self.reschedule(
            appointment_id=appointment_id,
            name=slots.patient_name,
            phone=slots.phone,
            email=slots.email,
            new_datetime=patch.preferred_datetime,
            channel=channel,
            now=now,
        )
        if result.outcome == Outcome.RESCHEDULED:
            session.current_step = "rescheduled"
        self._remember_offer(session, result)
        return result

    # === Operations ===

    async def check_availability(self, day: date, now: Optional[datetime] = None) -> OperationResult:
        """
        Report open times on a day, or the next opening if it is full.

        Args:
            day: Day to check
            now: Reference time (defaults to the clock)

        Returns:
            OperationResult with the slots and availability mode in data
        """
        try:
            return await self._check_availability(day, now or self.now())
        except Exception:
            logger.exception(f"Availability check failed for {day}")
            return self._apology()

    async def _check_availability(self, day: date, now: datetime) -> OperationResult:
        if is_weekend(day):
            data = {"date": day.isoformat()}
            monday = day + timedelta(days=7 - day.weekday())
            alternative = await self.availability.find_next(
                datetime.combine(monday, time(hour=self.availability.start_hour), tzinfo=business_tz()),
                now=now,
            )
            if alternative is not None:
                data["alternative"] = alternative.to_dict()
            return OperationResult(
                success=False,
                message=self._responses.weekend_closed(alternative),
                outcome=Outcome.CLOSED,
                data=data,
            )

        availability = await self.availability.slots_for(day, now=now)
        open_slots = availability.available_slots
        data = {
            "date": day.isoformat(),
            "mode": availability.mode.value,
            "slots": [slot.to_dict() for slot in open_slots],
        }
        if availability.is_degraded:
            data["reason"] = availability.reason

        if open_slots:
            return OperationResult(
                success=True,
                message=self._responses.availability(day, open_slots),
                outcome=Outcome.AVAILABILITY,
                data=data,
            )

        start_of_day = datetime.combine(
            day, time(hour=self.availability.start_hour), tzinfo=business_tz()
        )
        alternative = await self.availability.find_next(start_of_day, now=now)
        if alternative is None:
            return OperationResult(
                success=False,
                message=self._responses.no_availability(),
                outcome=Outcome.NO_AVAILABILITY,
                data=data,
            )

        data["alternative"] = alternative.to_dict()
        return OperationResult(
            success=False,
            message=self._responses.no_openings_with_alternative(day, alternative),
            outcome=Outcome.ALTERNATIVE_OFFERED,
            data=data,
        )

    async def book(
        self,
        slots: SlotSet,
        channel: str = "chat",
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """
        Book a complete request.

        The calendar event is created first; the appointment is only stored
        once the calendar accepted it. If storing fails the event is deleted
        again.

        Args:
            slots: Complete SlotSet
            channel: Channel name recorded in the notes
            now: Reference time (defaults to the clock)

        Returns:
            OperationResult (booked, alternative_offered, no_availability,
            calendar_failure, missing_info or error)
        """
        try:
            return await self._book(slots, channel, now or self.now())
        except Exception:
            logger.exception("Booking failed")
            return self._apology()

    async def _book(self, slots: SlotSet, channel: str, now: datetime) -> OperationResult:
        if not slots.is_complete:
            missing = describe_missing(slots)
            return OperationResult(
                success=False,
                message=self._responses.missing_prompt(slots),
                outcome=Outcome.MISSING_INFO,
                data={"missing": missing},
            )

        preferred = to_business_tz(slots.preferred_datetime)
        slot = await self._slot_at(preferred, now)
        if slot is None:
            return await self._offer_alternative(preferred, now, action="book")

        event = await self.calendar.create_event(
            start=slot.start,
            end=slot.end,
            subject=f"{slots.appointment_kind.label.title()} - {slots.patient_name}",
            attendee_email=slots.email,
        )
        if not event.success:
            logger.warning(f"Calendar rejected booking at {slot.start}: {event.error}")
            return OperationResult(
                success=False,
                message=self._responses.calendar_failure(),
                outcome=Outcome.CALENDAR_FAILURE,
                data={"error": event.error},
            )

        appointment = Appointment(
            patient_name=slots.patient_name,
            phone=slots.phone,
            email=slots.email,
            appointment_kind=slots.appointment_kind,
            preferred_datetime=preferred,
            confirmed_datetime=slot.start,
            status=AppointmentStatus.CONFIRMED,
            agent_notes=f"Booked via {channel}. Calendar event: {event.event_id}",
            calendar_event_id=event.event_id,
        )

        try:
            stored = await self.repository.create(appointment)
        except Exception:
            logger.exception(f"Failed to store appointment, removing calendar event {event.event_id}")
            await self._compensate(event.event_id)
            return OperationResult(
                success=False,
                message=self._responses.booking_failure(),
                outcome=Outcome.ERROR,
            )

        logger.info(f"Booked appointment {stored.id} at {slot.start} via {channel}")
        return OperationResult(
            success=True,
            message=self._responses.booked(stored),
            outcome=Outcome.BOOKED,
            data={"appointment_id": stored.id, "appointment": stored.to_dict()},
        )

    async def _compensate(self, event_id: Optional[str]) -> None:
        """Best-effort removal of an orphaned calendar event."""
        if not event_id:
            return
        try:
            result = await self.calendar.delete_event(event_id)
        except Exception:
            logger.exception(f"Compensating delete failed for event {event_id}")
            return
        if not result.success:
            logger.error(f"Compensating delete failed for event {event_id}: {result.error}")

    async def _slot_at(self, preferred: datetime, now: datetime) -> Optional[TimeSlot]:
        """Available slot starting at the preferred hour on the preferred day."""
        day = await self.availability.slots_for(preferred.date(), now=now)
        return day.slot_at_hour(preferred.hour)

    async def _offer_alternative(
        self,
        preferred: datetime,
        now: datetime,
        action: str,
        reschedule_id: Optional[str] = None,
    ) -> OperationResult:
        alternative = await self.availability.find_next(preferred, now=now)
        if alternative is None:
            message = (
                self._responses.reschedule_no_availability()
                if reschedule_id
                else self._responses.no_availability()
            )
            return OperationResult(
                success=False,
                message=message,
                outcome=Outcome.NO_AVAILABILITY,
            )

        data = {"alternative": alternative.to_dict()}
        if reschedule_id:
            data["reschedule_id"] = reschedule_id
        return OperationResult(
            success=False,
            message=self._responses.alternative_offered(alternative, action=action),
            outcome=Outcome.ALTERNATIVE_OFFERED,
            data=data,
        )

    async def _locate(
        self,
        appointment_id: Optional[str],
        name: Optional[str],
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Appointment]:
        """Resolve an appointment by id first, then by patient details."""
        if appointment_id:
            appointment = await self.repository.find_by_id(str(appointment_id))
            if appointment is not None:
                return appointment
        if name:
            return await self.repository.find_by_patient(name, phone=phone, email=email)
        return None

    async def find_appointment(
        self,
        name: Optional[str],
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> OperationResult:
        """Look up a patient's appointment."""
        try:
            if not name:
                return OperationResult(
                    success=False,
                    message=self._responses.need_identifier("find"),
                    outcome=Outcome.MISSING_INFO,
                    data={"missing": ["full name"]},
                )

            appointment = await self.repository.find_by_patient(name, phone=phone, email=email)
            if appointment is None:
                return OperationResult(
                    success=False,
                    message=self._responses.not_found_by_name(name, phone),
                    outcome=Outcome.NOT_FOUND,
                )

            return OperationResult(
                success=True,
                message=self._responses.found(appointment),
                outcome=Outcome.FOUND,
                data={"appointment_id": appointment.id, "appointment": appointment.to_dict()},
            )
        except Exception:
            logger.exception("Appointment lookup failed")
            return self._apology()

    async def cancel(
        self,
        appointment_id: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        channel: str = "chat",
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """
        Cancel an appointment by id or patient name.

        Cancelling twice is a no-op that still reports success.
        """
        try:
            return await self._cancel(appointment_id, name, phone, email, channel, now or self.now())
        except Exception:
            logger.exception("Cancellation failed")
            return OperationResult(
                success=False,
                message=self._responses.cancel_failure(),
                outcome=Outcome.ERROR,
            )

    async def _cancel(
        self,
        appointment_id: Optional[str],
        name: Optional[str],
        phone: Optional[str],
        email: Optional[str],
        channel: str,
        now: datetime,
    ) -> OperationResult:
        if not appointment_id and not name:
            return OperationResult(
                success=False,
                message=self._responses.need_identifier("cancel"),
                outcome=Outcome.MISSING_INFO,
                data={"missing": ["confirmation number or full name"]},
            )

        appointment = await self._locate(appointment_id, name, phone, email)
        if appointment is None:
            return OperationResult(
                success=False,
                message=self._responses.not_located(),
                outcome=Outcome.NOT_FOUND,
            )

        if appointment.status == AppointmentStatus.CANCELLED:
            return OperationResult(
                success=True,
                message=self._responses.already_cancelled(appointment),
                outcome=Outcome.ALREADY_CANCELLED,
                data={"appointment_id": appointment.id},
            )

        if appointment.calendar_event_id:
            result = await self.calendar.delete_event(appointment.calendar_event_id)
            if not result.success:
                logger.warning(
                    f"Calendar refused to delete event {appointment.calendar_event_id}: {result.error}"
                )
                return OperationResult(
                    success=False,
                    message=self._responses.cancel_failure(),
                    outcome=Outcome.CALENDAR_FAILURE,
                    data={"appointment_id": appointment.id},
                )

        note = f"Cancelled via {channel} on {now:%Y-%m-%d %H:%M}"
        updated = await self.repository.update(
            appointment.id,
            status=AppointmentStatus.CANCELLED,
            agent_notes=appointment.with_note(note),
        )

        logger.info(f"Cancelled appointment {updated.id} via {channel}")
        return OperationResult(
            success=True,
            message=self._responses.cancelled(updated),
            outcome=Outcome.CANCELLED,
            data={"appointment_id": updated.id, "appointment": updated.to_dict()},
        )

    async def reschedule(
        self,
        appointment_id: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        new_datetime: Optional[datetime] = None,
        channel: str = "chat",
        now: Optional[datetime] = None,
    ) -> OperationResult:
        """
        Move an appointment to a new instant.

        If the requested hour is taken the next opening is offered and
        nothing changes.
        """
        try:
            return await self._reschedule(
                appointment_id, name, phone, email, new_datetime, channel, now or self.now()
            )
        except Exception:
            logger.exception("Reschedule failed")
            return OperationResult(
                success=False,
                message=self._responses.reschedule_failure(),
                outcome=Outcome.ERROR,
            )

    async def _reschedule(
        self,
        appointment_id: Optional[str],
        name: Optional[str],
        phone: Optional[str],
        email: Optional[str],
        new_datetime: Optional[datetime],
        channel: str,
        now: datetime,
    ) -> OperationResult:
        if not appointment_id and not name:
            return OperationResult(
                success=False,
                message=self._responses.need_identifier("reschedule"),
                outcome=Outcome.MISSING_INFO,
                data={"missing": ["confirmation number or full name"]},
            )

        if new_datetime is None:
            return OperationResult(
                success=False,
                message=self._responses.invalid_datetime(),
                outcome=Outcome.INVALID_INPUT,
            )

        appointment = await self._locate(appointment_id, name, phone, email)
        if appointment is None:
            return OperationResult(
                success=False,
                message=self._responses.not_located(),
                outcome=Outcome.NOT_FOUND,
            )

        if appointment.status == AppointmentStatus.CANCELLED:
            return OperationResult(
                success=False,
                message=self._responses.already_cancelled(appointment),
                outcome=Outcome.ALREADY_CANCELLED,
                data={"appointment_id": appointment.id},
            )

        requested = to_business_tz(new_datetime)
        slot = await self._slot_at(requested, now)
        if slot is None:
            return await self._offer_alternative(
                requested, now, action="reschedule to", reschedule_id=appointment.id
            )

        if appointment.calendar_event_id:
            result = await self.calendar.update_event(
                appointment.calendar_event_id, slot.start, slot.end
            )
            if not result.success:
                logger.warning(
                    f"Calendar refused to move event {appointment.calendar_event_id}: {result.error}"
                )
                return OperationResult(
                    success=False,
                    message=self._responses.reschedule_failure(),
                    outcome=Outcome.CALENDAR_FAILURE,
                    data={"appointment_id": appointment.id},
                )

        note = (
            f"Rescheduled via {channel} from {format_instant(appointment.scheduled_for)} "
            f"to {format_instant(slot.start)} on {now:%Y-%m-%d %H:%M}"
        )
        updated = await self.repository.update(
            appointment.id,
            confirmed_datetime=slot.start,
            status=AppointmentStatus.RESCHEDULED,
            agent_notes=appointment.with_note(note),
        )

        logger.info(f"Rescheduled appointment {updated.id} to {slot.start} via {channel}")
        return OperationResult(
            success=True,
            message=self._responses.rescheduled(updated),
            outcome=Outcome.RESCHEDULED,
            data={"appointment_id": updated.id, "appointment": updated.to_dict()},
        )


# Singleton
_orchestrator: Optional[BookingOrchestrator] = None


def get_booking_orchestrator() -> BookingOrchestrator:
    """Get singleton BookingOrchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = BookingOrchestrator()
    return _orchestrator
