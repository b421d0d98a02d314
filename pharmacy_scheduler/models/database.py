"""
Database Models

SQLAlchemy ORM models for the pharmacy appointment store.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text, Enum as SQLEnum, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from pharmacy_scheduler.core.intelligence.slots.types import AppointmentKind


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False
    )


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class AppointmentRecord(Base, TimestampMixin):
    """
    Appointment model.

    One row per booked pharmacy appointment. Notes are append-only;
    cancelled rows are kept with status "cancelled".
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointment_patient", "patient_name"),
        Index("idx_appointment_status", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    appointment_kind: Mapped[AppointmentKind] = mapped_column(
        SQLEnum(AppointmentKind),
        nullable=False
    )
    preferred_datetime: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False
    )
    confirmed_datetime: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    status: Mapped[AppointmentStatus] = mapped_column(
        SQLEnum(AppointmentStatus),
        default=AppointmentStatus.PENDING
    )
    agent_notes: Mapped[str] = mapped_column(Text, default="")
    calendar_event_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AppointmentRecord(id={self.id}, patient='{self.patient_name}', "
            f"kind={self.appointment_kind.value}, status={self.status.value})>"
        )
