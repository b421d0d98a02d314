"""Tests for intent classification."""

import pytest

from pharmacy_scheduler.core.intelligence.intent.classifier import (
    INTENT_RULES,
    IntentClassifier,
    classify_intent,
)
from pharmacy_scheduler.core.intelligence.intent.types import Intent
from pharmacy_scheduler.core.intelligence.session.models import ConversationSession, TurnRole
from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind


@pytest.fixture
def classifier():
    return IntentClassifier()


@pytest.fixture
def ongoing():
    """Session that already has a patient turn."""
    session = ConversationSession()
    session.add_turn(TurnRole.PATIENT, "hello")
    session.add_turn(TurnRole.ASSISTANT, "Hello! How can I help?")
    return session


class TestGreeting:
    """Test the greeting rule."""

    def test_first_turn_is_greeting(self, classifier):
        assert classifier.classify("I want to book a flu shot", ConversationSession()) == Intent.GREETING

    def test_no_session_counts_as_first_turn(self, classifier):
        assert classifier.classify("cancel my appointment") == Intent.GREETING

    @pytest.mark.parametrize("text", ["hello", "Hi there", "hey!", "Good morning"])
    def test_greeting_tokens_later_in_conversation(self, classifier, ongoing, text):
        assert classifier.classify(text, ongoing) == Intent.GREETING

    def test_greeting_token_beats_booking(self, classifier, ongoing):
        assert classifier.classify("hi, I want to book", ongoing) == Intent.GREETING

    def test_hi_inside_word_is_not_greeting(self, classifier, ongoing):
        assert classifier.classify("this sounds good", ongoing) == Intent.CONFIRMATION


class TestRuleOrder:
    """Test each rule after the first turn."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("I want to book an appointment", Intent.BOOKING),
            ("can I schedule a flu shot", Intent.BOOKING),
            ("I need a flu shot", Intent.FLU_SHOT),
            ("do you do vaccinations", Intent.FLU_SHOT),
            ("I need a consultation", Intent.CONSULTATION),
            ("a medication review please", Intent.MEDICATION_REVIEW),
            ("jane@example.com", Intent.PROVIDING_INFO),
            ("555-123-4567", Intent.PROVIDING_INFO),
            ("My name is Jane Doe", Intent.PROVIDING_INFO),
            ("tomorrow at 2pm", Intent.DATETIME_INFO),
            ("next Tuesday", Intent.DATETIME_INFO),
            ("what's free?", Intent.CHECK_AVAILABILITY),
            ("do you have any openings", Intent.CHECK_AVAILABILITY),
            ("please cancel it", Intent.MODIFY_APPOINTMENT),
            ("I need to reschedule", Intent.MODIFY_APPOINTMENT),
            ("yes", Intent.CONFIRMATION),
            ("sounds good", Intent.CONFIRMATION),
            ("what are your hours", Intent.GENERAL_INQUIRY),
        ],
    )
    def test_classify(self, classifier, ongoing, text, expected):
        assert classifier.classify(text, ongoing) == expected

    def test_booking_beats_service(self, classifier, ongoing):
        assert classifier.classify("book a consultation", ongoing) == Intent.BOOKING

    def test_datetime_beats_availability(self, classifier, ongoing):
        assert classifier.classify("are you available tomorrow", ongoing) == Intent.DATETIME_INFO

    def test_cancel_appointment_is_booking(self, classifier, ongoing):
        # "appointment" is a booking keyword and booking is checked first
        assert classifier.classify("cancel my appointment", ongoing) == Intent.BOOKING

    def test_empty_is_general_inquiry(self, classifier, ongoing):
        assert classifier.classify("   ", ongoing) == Intent.GENERAL_INQUIRY


class TestIntentClassifier:
    """Test classifier plumbing."""

    def test_match_returns_rule(self, classifier, ongoing):
        rule = classifier.match("555-123-4567", ongoing)
        assert rule.name == "phone"

    def test_match_none(self, classifier, ongoing):
        assert classifier.match("what are your hours", ongoing) is None

    def test_rule_names_are_unique(self):
        names = [rule.name for rule in INTENT_RULES]
        assert len(names) == len(set(names))

    def test_greeting_rule_is_first(self):
        assert INTENT_RULES[0].intent == Intent.GREETING

    def test_custom_rules(self, ongoing):
        classifier = IntentClassifier(rules=INTENT_RULES[-1:])
        assert classifier.classify("book it", ongoing) == Intent.CONFIRMATION

    def test_convenience_function(self, ongoing):
        assert classify_intent("yes please", ongoing) == Intent.CONFIRMATION


class TestIntentTypes:
    """Test Intent helpers."""

    def test_service_kinds(self):
        assert Intent.FLU_SHOT.appointment_kind == AppointmentKind.FLU_SHOT
        assert Intent.MEDICATION_REVIEW.is_service_specific
        assert Intent.BOOKING.appointment_kind is None
        assert not Intent.BOOKING.is_service_specific
