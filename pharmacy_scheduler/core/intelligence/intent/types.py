"""Intent types for conversation classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Pattern

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind


class Intent(str, Enum):
    """Patient intent categories."""

    GREETING = "greeting"
    BOOKING = "booking"

    # Service-specific
    FLU_SHOT = "flu_shot"
    CONSULTATION = "consultation"
    MEDICATION_REVIEW = "medication_review"

    # Conversation flow
    PROVIDING_INFO = "providing_info"
    DATETIME_INFO = "datetime_info"
    CHECK_AVAILABILITY = "check_availability"
    MODIFY_APPOINTMENT = "modify_appointment"
    CONFIRMATION = "confirmation"

    # Fallback
    GENERAL_INQUIRY = "general_inquiry"

    @property
    def appointment_kind(self) -> Optional[AppointmentKind]:
        """The service a service-specific intent names."""
        return _SERVICE_KINDS.get(self)

    @property
    def is_service_specific(self) -> bool:
        """Check if intent names a specific service."""
        return self in _SERVICE_KINDS


_SERVICE_KINDS = {
    Intent.FLU_SHOT: AppointmentKind.FLU_SHOT,
    Intent.CONSULTATION: AppointmentKind.CONSULTATION,
    Intent.MEDICATION_REVIEW: AppointmentKind.MEDICATION_REVIEW,
}


@dataclass(frozen=True)
class IntentRule:
    """One row of the classification table: first matching row wins."""

    name: str
    intent: Intent
    pattern: Optional[Pattern[str]] = None
    # Also matches when the session has no earlier patient turn
    first_turn: bool = False

    def matches(self, utterance: str, is_first_turn: bool = False) -> bool:
        """Check if this rule fires for the utterance."""
        if self.first_turn and is_first_turn:
            return True
        return bool(self.pattern and self.pattern.search(utterance))
