"""Intent classification module."""

from .types import Intent, IntentRule
from .classifier import (
    INTENT_RULES,
    IntentClassifier,
    get_intent_classifier,
    classify_intent,
)

__all__ = [
    # Types
    "Intent",
    "IntentRule",
    # Classifier
    "INTENT_RULES",
    "IntentClassifier",
    "get_intent_classifier",
    "classify_intent",
]
