"""
Response templates for the pharmacy assistant.

Every reply is deterministic text built from templates, so the same
result always produces the same message on every channel.
"""

import logging
from datetime import date, datetime
from typing import Optional

from pharmacy_scheduler.config import settings
from pharmacy_scheduler.core.intelligence.slots.extractor import describe_missing
from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind, SlotSet
from pharmacy_scheduler.core.scheduling.types import Appointment, TimeSlot

logger = logging.getLogger(__name__)


def ordinal(day: int) -> str:
    """1 -> 1st, 2 -> 2nd, 11 -> 11th."""
    if 10 <= day % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_time(value: datetime) -> str:
    """2:00 PM"""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def format_day(value: date) -> str:
    """Monday, January 15th"""
    return f"{value.strftime('%A')}, {value.strftime('%B')} {ordinal(value.day)}"


def format_instant(value: datetime) -> str:
    """Monday, January 15th at 2:00 PM"""
    return f"{format_day(value)} at {format_time(value)}"


def join_items(items: list[str]) -> str:
    """a, b and c"""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


SERVICES_TEXT = "flu shots, consultations, medication reviews and vaccinations"


class ResponseGenerator:
    """Template-based response generator."""

    def __init__(
        self,
        pharmacy_name: Optional[str] = None,
        pharmacy_phone: Optional[str] = None,
    ):
        """Initialize generator.

        Args:
            pharmacy_name: Name used in greetings (defaults to settings)
            pharmacy_phone: Fallback contact number (defaults to settings)
        """
        self.pharmacy_name = pharmacy_name or settings.pharmacy_name
        self.pharmacy_phone = pharmacy_phone or settings.pharmacy_phone

    @property
    def hours_text(self) -> str:
        start = format_time(datetime(2000, 1, 1, settings.business_hours_start))
        end = format_time(datetime(2000, 1, 1, settings.business_hours_end))
        return f"Monday through Friday, {start} to {end}"

    def _call_us(self) -> str:
        return f"call our pharmacy directly at {self.pharmacy_phone}"

    # === Conversation ===

    def welcome_line(self) -> str:
        return f"Hello! Welcome to {self.pharmacy_name}."

    def greeting(self, slots: Optional[SlotSet] = None) -> str:
        """Welcome text, acknowledging anything already captured."""
        text = (
            f"{self.welcome_line()} I can help you book, check, "
            f"cancel or reschedule appointments for {SERVICES_TEXT}."
        )
        if slots is not None and slots.has_any():
            captured = self.describe_captured(slots)
            text += f" I've noted {captured}."
            if slots.is_complete:
                return text
            return f"{text} {self.missing_prompt(slots)}"
        return f"{text} How can I help you today?"

    def service_prompt(self, kind: Optional[AppointmentKind], missing: list[str]) -> str:
        """Prompt for a booking request that is not complete yet."""
        if kind is not None:
            intro = f"I'd be happy to help you book a {kind.label} appointment."
        else:
            intro = (
                f"I'd be happy to help you book an appointment. We offer {SERVICES_TEXT}."
            )
        return f"{intro} To get started I'll need your {join_items(missing)}."

    def acknowledge(self, slots: SlotSet, missing: list[str]) -> str:
        """Confirm captured details and ask for the rest."""
        captured = self.describe_captured(slots)
        prefix = f"Thanks! I have {captured}." if captured else "Thanks!"
        if not missing:
            return prefix
        return f"{prefix} I still need your {join_items(missing)}."

    def missing_prompt(self, slots: SlotSet) -> str:
        """Ask for exactly the missing fields."""
        missing = describe_missing(slots)
        return f"To book, I still need your {join_items(missing)}."

    def describe_captured(self, slots: SlotSet) -> str:
        """Human-readable list of filled fields."""
        parts = []
        if slots.patient_name:
            parts.append(f"your name as {slots.patient_name}")
        if slots.phone:
            parts.append(f"your phone number {slots.phone}")
        if slots.email:
            parts.append(f"your email {slots.email}")
        if slots.appointment_kind:
            parts.append(f"a {slots.appointment_kind.label}")
        if slots.preferred_datetime:
            parts.append(f"a preferred time of {format_instant(slots.preferred_datetime)}")
        return join_items(parts)

    def help_text(self) -> str:
        """Capability description for general inquiries."""
        return (
            f"I'm here to help with appointment scheduling at {self.pharmacy_name}. "
            f"I can book {SERVICES_TEXT}, check availability, and cancel or reschedule "
            f"an existing appointment. We're open {self.hours_text}. "
            f"For example: \"Book a flu shot tomorrow at 2 PM, my name is Jane Doe, "
            f"555-123-4567, jane@example.com\". What can I help you with?"
        )

    def empty_message(self) -> str:
        """Reply to a blank message."""
        return "I didn't catch that. Could you tell me how I can help with your appointment?"

    # === Availability ===

    def availability(self, day: date, slots: list[TimeSlot]) -> str:
        """List open times on a day."""
        times = join_items([format_time(slot.start) for slot in slots])
        return (
            f"Great! I have several available slots on {format_day(day)}: {times}. "
            f"Which time works best for you?"
        )

    def no_openings_with_alternative(self, day: date, alternative: TimeSlot) -> str:
        return (
            f"I'm sorry, but we don't have any openings on {format_day(day)}. "
            f"However, I do have availability on {format_instant(alternative.start)}. "
            f"Would that work for you?"
        )

    def weekend_closed(self, alternative: Optional[TimeSlot] = None) -> str:
        text = f"I'm sorry, but we're closed on weekends. Our pharmacy is open {self.hours_text}."
        if alternative is not None:
            return (
                f"{text} Our next opening is {format_instant(alternative.start)}. "
                f"Would that work for you?"
            )
        return f"{text} Would you like to check availability for a weekday instead?"

    def ask_for_day(self) -> str:
        return (
            f"I can check our availability for you! Which day are you interested in? "
            f"You can say \"tomorrow\" or \"next Tuesday\". We're open {self.hours_text}."
        )

    # === Booking ===

    def booked(self, appointment: Appointment) -> str:
        """Booking confirmation."""
        return (
            f"Perfect! I've successfully booked your {appointment.appointment_kind.label} "
            f"appointment for {format_instant(appointment.scheduled_for)}. Your appointment "
            f"confirmation number is {appointment.id}. You'll receive a calendar invitation "
            f"at {appointment.email}. Is there anything else I can help you with today?"
        )

    def already_booked(self, appointment_id: Optional[str]) -> str:
        reference = f" (confirmation number {appointment_id})" if appointment_id else ""
        return (
            f"That appointment is already booked{reference}. "
            f"Is there anything else I can help you with?"
        )

    def alternative_offered(self, alternative: TimeSlot, action: str = "book") -> str:
        """Requested hour taken; offer the next opening."""
        return (
            f"I'm sorry, but that time slot is not available. The next available "
            f"appointment is {format_instant(alternative.start)}. Would you like me to "
            f"{action} that instead?"
        )

    def no_availability(self) -> str:
        return (
            f"I'm sorry, but our schedule is quite full for the next two weeks. "
            f"Please {self._call_us()} and our staff will help find another option."
        )

    def calendar_failure(self) -> str:
        return (
            f"I encountered an issue while booking your appointment in our calendar. "
            f"Please try again or {self._call_us()}."
        )

    def booking_failure(self) -> str:
        return (
            f"I apologize, but I encountered an issue while booking your appointment. "
            f"Please try again or {self._call_us()}."
        )

    def invalid_datetime(self) -> str:
        return (
            "I apologize, but there seems to be an issue with the date format. "
            "Could you please tell me your preferred date and time again?"
        )

    # === Lookup / cancel / reschedule ===

    def found(self, appointment: Appointment) -> str:
        return (
            f"I found your appointment! You have a {appointment.appointment_kind.label} "
            f"scheduled for {format_instant(appointment.scheduled_for)}. Your appointment "
            f"confirmation number is {appointment.id}. The status is "
            f"{appointment.status.value}. Would you like to make any changes to this "
            f"appointment?"
        )

    def not_found_by_name(self, name: str, phone: Optional[str] = None) -> str:
        phone_part = f" with phone number {phone}" if phone else ""
        ask_phone = "" if phone else " and provide your phone number"
        return (
            f"I couldn't find any appointments under the name {name}{phone_part}. "
            f"Could you please double-check the spelling of your name{ask_phone}? "
            f"Or you can {self._call_us()}."
        )

    def not_located(self) -> str:
        return (
            f"I couldn't locate that appointment. Please double-check your confirmation "
            f"number or name, or {self._call_us()} for assistance."
        )

    def need_identifier(self, action: str) -> str:
        return (
            f"To {action} your appointment, I'll need either your appointment "
            f"confirmation number or your full name. Could you please provide one of those?"
        )

    def cancelled(self, appointment: Appointment) -> str:
        return (
            f"I've successfully cancelled your {appointment.appointment_kind.label} "
            f"appointment that was scheduled for {format_instant(appointment.scheduled_for)}. "
            f"If you need to schedule a new appointment, I'm happy to help you find an "
            f"available time. Is there anything else I can assist you with?"
        )

    def already_cancelled(self, appointment: Appointment) -> str:
        return (
            f"Your {appointment.appointment_kind.label} appointment (confirmation number "
            f"{appointment.id}) is already cancelled. Would you like to book a new one?"
        )

    def cancel_failure(self) -> str:
        return (
            f"I apologize, but I encountered an issue while cancelling your appointment. "
            f"Please {self._call_us()} for immediate assistance."
        )

    def reschedule_prompt(self) -> str:
        return (
            "I can help you reschedule your appointment! What new date and time "
            "would you prefer?"
        )

    def rescheduled(self, appointment: Appointment) -> str:
        return (
            f"Perfect! I've successfully rescheduled your "
            f"{appointment.appointment_kind.label} appointment to "
            f"{format_instant(appointment.scheduled_for)}. You'll receive an updated "
            f"calendar invitation. Is there anything else I can help you with today?"
        )

    def reschedule_no_availability(self) -> str:
        return (
            "I apologize, but we don't have any available slots in the next two weeks. "
            "Would you prefer to keep your current appointment, or shall I connect you "
            "with our staff to discuss other options?"
        )

    def reschedule_failure(self) -> str:
        return (
            f"I apologize, but I encountered an issue while rescheduling your "
            f"appointment. Please {self._call_us()} for immediate assistance."
        )

    # === Errors ===

    def unknown_function(self) -> str:
        return (
            "I apologize, but I don't recognize that function. How can I help you "
            "with appointment scheduling? I can check availability, book, find, "
            "cancel or reschedule appointments."
        )

    def invalid_input(self, what: str) -> str:
        return f"I'm sorry, I couldn't understand the {what}. Could you please say it again?"

    def system_error(self) -> str:
        return (
            f"I apologize, but I encountered a technical issue. Please try again or "
            f"{self._call_us()} for assistance."
        )


# Singleton
_generator: Optional[ResponseGenerator] = None


def get_response_generator() -> ResponseGenerator:
    """Get singleton ResponseGenerator."""
    global _generator
    if _generator is None:
        _generator = ResponseGenerator()
    return _generator
