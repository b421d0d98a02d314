"""
Rule-based intent classification.

The classifier is an ordered table of (name, pattern, intent) rows evaluated
top to bottom; the first matching row wins. Order is the priority chain:
greeting, booking, service-specific, providing info, date/time info,
availability, modify, confirmation, then general inquiry.
"""

import logging
import re
from typing import Optional

from pharmacy_scheduler.core.intelligence.session.models import ConversationSession
from pharmacy_scheduler.core.intelligence.slots.extractor import EMAIL_RE, PHONE_RE
from pharmacy_scheduler.core.intelligence.slots.datetime_parser import WEEKDAYS
from .types import Intent, IntentRule

logger = logging.getLogger(__name__)


def _words(*words: str) -> re.Pattern:
    """Case-insensitive whole-word alternation."""
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", re.IGNORECASE)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        name="greeting",
        intent=Intent.GREETING,
        pattern=_words(
            "hello", "hi", "hey", "hiya",
            r"good\s+morning", r"good\s+afternoon", r"good\s+evening",
        ),
        first_turn=True,
    ),
    IntentRule(
        name="booking",
        intent=Intent.BOOKING,
        pattern=_words("book", "booking", "appointments?", "schedule", "scheduling"),
    ),
    IntentRule(
        name="flu_shot",
        intent=Intent.FLU_SHOT,
        pattern=_words("flu", "vaccinations?", "vaccines?"),
    ),
    IntentRule(
        name="consultation",
        intent=Intent.CONSULTATION,
        pattern=_words("consultations?"),
    ),
    IntentRule(
        name="medication_review",
        intent=Intent.MEDICATION_REVIEW,
        pattern=_words(r"medication\s+reviews?", r"med\s+reviews?"),
    ),
    IntentRule(
        name="email",
        intent=Intent.PROVIDING_INFO,
        pattern=EMAIL_RE,
    ),
    IntentRule(
        name="phone",
        intent=Intent.PROVIDING_INFO,
        pattern=PHONE_RE,
    ),
    IntentRule(
        name="self_identification",
        intent=Intent.PROVIDING_INFO,
        pattern=_words(r"my\s+name\s+is", r"i\s+am", r"i'm", r"i’m"),
    ),
    IntentRule(
        name="datetime",
        intent=Intent.DATETIME_INFO,
        pattern=re.compile(
            r"\b(?:" + "|".join(WEEKDAYS) + r"|tomorrow|today)\b"
            r"|\b\d{1,2}\s*[ap]\.?m\b|\b[ap]\.m\.|\b\d{1,2}:\d{2}\b",
            re.IGNORECASE,
        ),
    ),
    IntentRule(
        name="check_availability",
        intent=Intent.CHECK_AVAILABILITY,
        pattern=_words("available", "availability", "free", "open", "openings?"),
    ),
    IntentRule(
        name="modify_appointment",
        intent=Intent.MODIFY_APPOINTMENT,
        pattern=_words("cancel", "cancell?ing", "cancell?ation", "reschedule", "rescheduling"),
    ),
    IntentRule(
        name="confirmation",
        intent=Intent.CONFIRMATION,
        pattern=_words(
            "yes", "yeah", "yep", "yup", "sure", "ok", "okay", "confirm",
            "confirmed", r"book\s+it", r"sounds\s+good", r"that\s+works",
        ),
    ),
)


class IntentClassifier:
    """
    Deterministic keyword/pattern classifier.

    Pure function of the utterance text and how many patient turns the
    session already holds.
    """

    def __init__(self, rules: tuple[IntentRule, ...] = INTENT_RULES):
        """Initialize classifier.

        Args:
            rules: Ordered rule table (for testing)
        """
        self._rules = rules

    @property
    def rules(self) -> tuple[IntentRule, ...]:
        """The ordered rule table."""
        return self._rules

    def match(
        self,
        utterance: str,
        session: Optional[ConversationSession] = None,
    ) -> Optional[IntentRule]:
        """Return the first rule that fires, or None."""
        text = (utterance or "").strip()
        if not text:
            return None

        is_first_turn = session is None or session.patient_turn_count == 0
        for rule in self._rules:
            if rule.matches(text, is_first_turn=is_first_turn):
                return rule
        return None

    def classify(
        self,
        utterance: str,
        session: Optional[ConversationSession] = None,
    ) -> Intent:
        """
        Classify a patient utterance.

        Args:
            utterance: Patient's message
            session: Session the utterance belongs to, before the turn is recorded

        Returns:
            The matched Intent, GENERAL_INQUIRY when nothing matches
        """
        rule = self.match(utterance, session)
        intent = rule.intent if rule else Intent.GENERAL_INQUIRY
        logger.debug(f"Classified intent: {intent.value} (rule: {rule.name if rule else 'default'})")
        return intent


# Singleton
_classifier: Optional[IntentClassifier] = None


def get_intent_classifier() -> IntentClassifier:
    """Get singleton IntentClassifier."""
    global _classifier
    if _classifier is None:
        _classifier = IntentClassifier()
    return _classifier


def classify_intent(
    utterance: str,
    session: Optional[ConversationSession] = None,
) -> Intent:
    """Convenience function to classify intent."""
    return get_intent_classifier().classify(utterance, session)
