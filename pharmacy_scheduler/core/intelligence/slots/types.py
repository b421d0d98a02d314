"""Slot types for booking request accumulation."""

from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Optional


class AppointmentKind(str, Enum):
    """Services the pharmacy books."""

    FLU_SHOT = "flu_shot"
    CONSULTATION = "consultation"
    MEDICATION_REVIEW = "medication_review"
    VACCINATION = "vaccination"

    @property
    def label(self) -> str:
        """Human-readable name ("flu shot")."""
        return self.value.replace("_", " ")


# Field name -> label used when prompting for missing information
FIELD_LABELS: dict[str, str] = {
    "patient_name": "full name",
    "phone": "phone number",
    "email": "email address",
    "appointment_kind": "appointment type",
    "preferred_datetime": "preferred date and time",
}


@dataclass
class SlotSet:
    """
    Booking request accumulated across conversation turns.

    The same type doubles as a patch: the extractor returns a SlotSet with
    only the fields found in one utterance, which is then merged into the
    session's SlotSet.
    """

    patient_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    appointment_kind: Optional[AppointmentKind] = None
    preferred_datetime: Optional[datetime] = None

    def merge(self, patch: "SlotSet") -> list[str]:
        """Merge a patch in place, last write wins per field.

        Empty values in the patch never clear an existing value.

        Returns:
            Names of the fields that changed
        """
        changed = []
        for f in fields(self):
            value = getattr(patch, f.name)
            if value is None or value == "":
                continue
            if getattr(self, f.name) != value:
                setattr(self, f.name, value)
                changed.append(f.name)
        return changed

    def has_any(self) -> bool:
        """Check if any field is populated."""
        return any(getattr(self, f.name) for f in fields(self))

    @property
    def is_complete(self) -> bool:
        """All five fields are populated."""
        return not self.missing_fields()

    def missing_fields(self) -> list[str]:
        """Names of unset fields, in prompting order."""
        return [name for name in FIELD_LABELS if not getattr(self, name)]

    def to_dict(self) -> dict:
        """Convert to dict, excluding None values."""
        result = {}
        if self.patient_name:
            result["patient_name"] = self.patient_name
        if self.phone:
            result["phone"] = self.phone
        if self.email:
            result["email"] = self.email
        if self.appointment_kind:
            result["appointment_kind"] = self.appointment_kind.value
        if self.preferred_datetime:
            result["preferred_datetime"] = self.preferred_datetime.isoformat()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "SlotSet":
        """Create from a dict produced by to_dict()."""
        kind = data.get("appointment_kind")
        preferred = data.get("preferred_datetime")
        return cls(
            patient_name=data.get("patient_name"),
            phone=data.get("phone"),
            email=data.get("email"),
            appointment_kind=AppointmentKind(kind) if kind else None,
            preferred_datetime=datetime.fromisoformat(preferred) if preferred else None,
        )
