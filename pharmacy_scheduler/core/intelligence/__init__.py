"""
Intelligence Layer Module

Provides intent classification, slot extraction, date/time parsing and
session management for the pharmacy scheduler.

Usage:
    from pharmacy_scheduler.core.intelligence import (
        classify_intent,
        extract_slots,
        get_session_manager,
    )

    # Classify intent
    intent = classify_intent("I'd like to book a flu shot")
    print(intent)  # Intent.BOOKING

    # Extract slots
    slots = extract_slots("my name is Jane Doe, tomorrow at 3pm")
    print(slots.patient_name)  # "Jane Doe"

    # Session management
    manager = await get_session_manager()
    async with manager.session(session_id) as session:
        session.slots.merge(slots)
"""

# Slot Extraction
from pharmacy_scheduler.core.intelligence.slots.types import (
    AppointmentKind,
    FIELD_LABELS,
    SlotSet,
)
from pharmacy_scheduler.core.intelligence.slots.extractor import (
    SlotExtractor,
    describe_missing,
    get_slot_extractor,
    extract_slots,
)

# Session Management
from pharmacy_scheduler.core.intelligence.session.models import (
    ConversationSession,
    ConversationTurn,
    TurnRole,
)
from pharmacy_scheduler.core.intelligence.session.manager import (
    SessionConflictError,
    SessionManager,
    get_session_manager,
)

# Intent Classification
from pharmacy_scheduler.core.intelligence.intent.types import Intent, IntentRule
from pharmacy_scheduler.core.intelligence.intent.classifier import (
    INTENT_RULES,
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
)

__all__ = [
    # Slots
    "AppointmentKind",
    "FIELD_LABELS",
    "SlotSet",
    "SlotExtractor",
    "describe_missing",
    "get_slot_extractor",
    "extract_slots",
    # Session
    "ConversationSession",
    "ConversationTurn",
    "TurnRole",
    "SessionConflictError",
    "SessionManager",
    "get_session_manager",
    # Intent
    "Intent",
    "IntentRule",
    "INTENT_RULES",
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
]
