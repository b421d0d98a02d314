"""Slot extraction module."""

from .types import AppointmentKind, FIELD_LABELS, SlotSet
from .extractor import (
    SlotExtractor,
    describe_missing,
    get_slot_extractor,
    extract_slots,
)

__all__ = [
    # Types
    "AppointmentKind",
    "FIELD_LABELS",
    "SlotSet",
    # Extractor
    "SlotExtractor",
    "describe_missing",
    "get_slot_extractor",
    "extract_slots",
]
