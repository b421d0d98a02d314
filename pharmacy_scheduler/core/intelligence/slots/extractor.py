"""
Pattern-based slot extraction.

Extracts: patient name, phone, email, appointment kind, preferred date/time.
Each field is extracted independently; the result is a SlotSet patch that
the caller merges into the session's SlotSet.
"""

import logging
import re
from datetime import datetime
from typing import Optional

from pharmacy_scheduler.core.intelligence.session.models import ConversationSession, TurnRole
from . import datetime_parser
from .types import AppointmentKind, FIELD_LABELS, SlotSet

logger = logging.getLogger(__name__)


EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# 10 digits, separators optional: 5551234567, 555-123-4567, (555) 123.4567
PHONE_RE = re.compile(r"(?<!\d)\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")

NAME_RE = re.compile(
    r"\b(?:my\s+name\s+is|name\s+is|i\s+am|i'm|i’m)\s+"
    r"([A-Za-z][A-Za-z'\-]*(?:\s+[A-Za-z][A-Za-z'\-]*){0,3}?)"
    r"(?=\s*(?:,|\.|;|!|\?|$)|\s+(?:and|phone|email|my|at|on|for|i|i'd|tomorrow|next)\b|\s+\d)",
    re.IGNORECASE,
)

# "I'm looking for...", "I am available..." are not names
NOT_NAMES = {
    "a", "an", "the", "not", "just", "here", "calling", "looking", "trying",
    "wondering", "interested", "available", "free", "busy", "good", "fine",
    "going", "hoping", "checking", "sorry", "sure", "ready", "new", "still",
    "also", "able", "unable", "planning", "wanting", "needing", "booking",
    "on", "at", "in", "from", "with", "done", "okay", "ok",
}

# Checked in order; "flu vaccine" is a flu shot, not a generic vaccination
KIND_PATTERNS: tuple[tuple[AppointmentKind, re.Pattern], ...] = (
    (AppointmentKind.FLU_SHOT, re.compile(r"\bflu\b", re.IGNORECASE)),
    (AppointmentKind.MEDICATION_REVIEW, re.compile(r"\b(?:medication|med)\s+reviews?\b", re.IGNORECASE)),
    (AppointmentKind.CONSULTATION, re.compile(r"\bconsult(?:ation)?s?\b", re.IGNORECASE)),
    (AppointmentKind.VACCINATION, re.compile(r"\b(?:vaccinations?|vaccines?|immuni[sz]ations?)\b", re.IGNORECASE)),
)

# How far back to look for an appointment kind mentioned earlier
KIND_CONTEXT_TURNS = 5


def find_email(text: str) -> Optional[str]:
    """Return the first email address in text."""
    match = EMAIL_RE.search(text)
    return match.group(0) if match else None


def find_phone(text: str) -> Optional[str]:
    """Return the first 10-digit phone number in text, as written."""
    match = PHONE_RE.search(text)
    return match.group(0).strip() if match else None


def find_name(text: str) -> Optional[str]:
    """Return the name following a self-identification phrase."""
    for match in NAME_RE.finditer(text):
        name = " ".join(match.group(1).split())
        if name.split()[0].lower() in NOT_NAMES:
            continue
        return name
    return None


def find_kind(text: str) -> Optional[AppointmentKind]:
    """Return the appointment kind named in text."""
    for kind, pattern in KIND_PATTERNS:
        if pattern.search(text):
            return kind
    return None


def describe_missing(slots: SlotSet) -> list[str]:
    """Human-readable labels for every unset field.

    Example:
        >>> describe_missing(SlotSet(patient_name="Jane"))
        ['phone number', 'email address', 'appointment type', 'preferred date and time']
    """
    return [FIELD_LABELS[name] for name in slots.missing_fields()]


class SlotExtractor:
    """Regex-based slot extraction with context back-fill for the appointment kind."""

    def __init__(self, context_turns: int = KIND_CONTEXT_TURNS):
        """Initialize extractor.

        Args:
            context_turns: Transcript turns scanned for an earlier appointment kind
        """
        self._context_turns = context_turns

    def extract(
        self,
        utterance: str,
        session: Optional[ConversationSession] = None,
        now: Optional[datetime] = None,
    ) -> SlotSet:
        """
        Extract slots from a patient message.

        Args:
            utterance: Patient's message
            session: Session for transcript context (optional)
            now: Reference time for relative dates

        Returns:
            SlotSet patch holding only what was found
        """
        text = (utterance or "").strip()
        if not text:
            return SlotSet()

        patch = SlotSet(
            patient_name=find_name(text),
            phone=find_phone(text),
            email=find_email(text),
            appointment_kind=find_kind(text),
            preferred_datetime=datetime_parser.parse(text, now),
        )

        if (
            patch.appointment_kind is None
            and session is not None
            and session.slots.appointment_kind is None
        ):
            patch.appointment_kind = self._kind_from_context(session)

        logger.debug(f"Extracted slots: {list(patch.to_dict())}")
        return patch

    def _kind_from_context(self, session: ConversationSession) -> Optional[AppointmentKind]:
        """Scan recent patient turns, most recent first, for a kind keyword."""
        for turn in session.recent_turns(self._context_turns, role=TurnRole.PATIENT):
            kind = find_kind(turn.text)
            if kind:
                logger.debug(f"Appointment kind back-filled from context: {kind.value}")
                return kind
        return None


# Singleton
_extractor: Optional[SlotExtractor] = None


def get_slot_extractor() -> SlotExtractor:
    """Get singleton SlotExtractor."""
    global _extractor
    if _extractor is None:
        _extractor = SlotExtractor()
    return _extractor


def extract_slots(
    utterance: str,
    session: Optional[ConversationSession] = None,
    now: Optional[datetime] = None,
) -> SlotSet:
    """Convenience function to extract slots."""
    return get_slot_extractor().extract(utterance, session, now)
