"""
Conversation session models.

A session holds the transcript and the SlotSet accumulated across turns.
Sessions are serialized to JSON so the same shape works in memory and in Redis.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pharmacy_scheduler.core.intelligence.slots.types import SlotSet


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class TurnRole(str, Enum):
    """Who spoke a turn."""

    PATIENT = "patient"
    ASSISTANT = "assistant"


@dataclass
class ConversationTurn:
    """A single message in the transcript."""

    role: TurnRole
    text: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationTurn":
        """Create from dictionary."""
        return cls(
            role=TurnRole(data["role"]),
            text=data.get("text", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass
class ConversationSession:
    """
    Complete conversation state for one session key.

    current_step is bookkeeping only ("greeting", "collecting_info",
    "awaiting_confirmation", "booked", ...); branching is driven by intent.
    """

    # Identifiers
    session_id: str = field(default_factory=lambda: str(uuid4()))

    # Transcript and accumulated booking request
    turns: list[ConversationTurn] = field(default_factory=list)
    slots: SlotSet = field(default_factory=SlotSet)
    current_step: str = "greeting"

    # Alternative instant offered to the patient, awaiting a yes
    pending_offer: Optional[datetime] = None
    # Set when the offer is a new time for an existing appointment
    pending_reschedule_id: Optional[str] = None

    # Booking bookkeeping
    last_appointment_id: Optional[str] = None
    last_booking_key: Optional[str] = None

    # Compare-and-swap counter, bumped on every save
    version: int = 0

    # Metadata
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def clear_offer(self) -> None:
        """Forget any alternative awaiting confirmation."""
        self.pending_offer = None
        self.pending_reschedule_id = None

    def add_turn(self, role: TurnRole, text: str) -> ConversationTurn:
        """Append a turn to the transcript."""
        turn = ConversationTurn(role=role, text=text)
        self.turns.append(turn)
        self.updated_at = _utcnow()
        return turn

    @property
    def patient_turn_count(self) -> int:
        """Number of patient turns recorded so far."""
        return sum(1 for turn in self.turns if turn.role == TurnRole.PATIENT)

    def recent_turns(self, limit: int = 5, role: Optional[TurnRole] = None) -> list[ConversationTurn]:
        """Get the last `limit` turns, optionally filtered by role, most recent first."""
        recent = self.turns[-limit:]
        if role is not None:
            recent = [turn for turn in recent if turn.role == role]
        return list(reversed(recent))

    def to_json(self) -> str:
        """Convert to JSON string for storage."""
        data = {
            "session_id": self.session_id,
            "turns": [turn.to_dict() for turn in self.turns],
            "slots": self.slots.to_dict(),
            "current_step": self.current_step,
            "pending_offer": self.pending_offer.isoformat() if self.pending_offer else None,
            "pending_reschedule_id": self.pending_reschedule_id,
            "last_appointment_id": self.last_appointment_id,
            "last_booking_key": self.last_booking_key,
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
        return json.dumps(data)

    @classmethod
    def from_json(cls, json_str: str) -> "ConversationSession":
        """Create from JSON string."""
        data = json.loads(json_str)
        pending = data.get("pending_offer")
        return cls(
            session_id=data["session_id"],
            turns=[ConversationTurn.from_dict(t) for t in data.get("turns", [])],
            slots=SlotSet.from_dict(data.get("slots", {})),
            current_step=data.get("current_step", "greeting"),
            pending_offer=datetime.fromisoformat(pending) if pending else None,
            pending_reschedule_id=data.get("pending_reschedule_id"),
            last_appointment_id=data.get("last_appointment_id"),
            last_booking_key=data.get("last_booking_key"),
            version=data.get("version", 0),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return json.loads(self.to_json())
