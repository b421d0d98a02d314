"""
Appointment repository.

Durable store of appointments. Two implementations share one contract:

- InMemoryAppointmentRepository: process-local, sequential string ids
- SqlAppointmentRepository: SQLAlchemy async over the appointments table
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from pharmacy_scheduler.config import get_settings
from pharmacy_scheduler.core.scheduling.types import Appointment, AppointmentStatus
from pharmacy_scheduler.infra.database import get_db_context
from pharmacy_scheduler.models.database import AppointmentRecord

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Raised when the appointment store cannot complete an operation."""
    pass


UPDATABLE_FIELDS = {
    "confirmed_datetime",
    "status",
    "agent_notes",
    "calendar_event_id",
    "preferred_datetime",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def record_to_appointment(record: AppointmentRecord) -> Appointment:
    """Convert a table row to the domain record."""
    return Appointment(
        id=str(record.id),
        patient_name=record.patient_name,
        phone=record.phone,
        email=record.email,
        appointment_kind=record.appointment_kind,
        preferred_datetime=record.preferred_datetime,
        confirmed_datetime=record.confirmed_datetime,
        status=record.status,
        agent_notes=record.agent_notes or "",
        calendar_event_id=record.calendar_event_id,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def digits(value: Optional[str]) -> str:
    """Keep only the digits of a phone number."""
    return re.sub(r"\D", "", value or "")


def matches_patient(
    appointment: Appointment,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
) -> bool:
    """Case-insensitive name match, narrowed by phone digits and email when given."""
    if appointment.patient_name.strip().lower() != name.strip().lower():
        return False
    if phone and digits(appointment.phone) != digits(phone):
        return False
    if email and appointment.email.strip().lower() != email.strip().lower():
        return False
    return True


def pick_most_relevant(candidates: list[Appointment]) -> Optional[Appointment]:
    """Most recently created non-cancelled match, else the most recent match."""
    if not candidates:
        return None
    ordered = sorted(
        candidates,
        key=lambda a: (
            a.created_at or datetime.min.replace(tzinfo=timezone.utc),
            int(a.id) if a.id and a.id.isdigit() else 0,
        ),
        reverse=True,
    )
    for appointment in ordered:
        if appointment.status != AppointmentStatus.CANCELLED:
            return appointment
    return ordered[0]


class InMemoryAppointmentRepository:
    """Process-local appointment store."""

    def __init__(self):
        self._appointments: dict[str, Appointment] = {}
        self._next_id = 1

    async def create(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment and assign its id."""
        now = _utcnow()
        stored = appointment.copy(id=str(self._next_id), created_at=now, updated_at=now)
        self._next_id += 1
        self._appointments[stored.id] = stored
        logger.info(f"Appointment {stored.id} created for {stored.appointment_kind.value}")
        return stored.copy()

    async def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Look up an appointment by id."""
        appointment = self._appointments.get(str(appointment_id))
        return appointment.copy() if appointment else None

    async def find_by_patient(
        self,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Appointment]:
        """Find the most relevant appointment for a patient."""
        candidates = [
            a for a in self._appointments.values()
            if matches_patient(a, name, phone, email)
        ]
        found = pick_most_relevant(candidates)
        return found.copy() if found else None

    async def update(self, appointment_id: str, **changes: Any) -> Appointment:
        """Apply field changes to an existing appointment.

        Raises:
            RepositoryError: Unknown id or field
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise RepositoryError(f"Cannot update fields: {sorted(unknown)}")

        current = self._appointments.get(str(appointment_id))
        if current is None:
            raise RepositoryError(f"Appointment {appointment_id} not found")

        updated = current.copy(updated_at=_utcnow(), **changes)
        self._appointments[updated.id] = updated
        logger.info(f"Appointment {updated.id} updated: {sorted(changes)}")
        return updated.copy()

    async def list(self) -> list[Appointment]:
        """All appointments, oldest first."""
        return [a.copy() for a in self._appointments.values()]


class SqlAppointmentRepository:
    """Appointment store backed by the appointments table."""

    async def create(self, appointment: Appointment) -> Appointment:
        """Persist a new appointment and assign its id."""
        try:
            async with get_db_context() as db:
                record = AppointmentRecord(
                    patient_name=appointment.patient_name,
                    phone=appointment.phone,
                    email=appointment.email,
                    appointment_kind=appointment.appointment_kind,
                    preferred_datetime=appointment.preferred_datetime,
                    confirmed_datetime=appointment.confirmed_datetime,
                    status=appointment.status,
                    agent_notes=appointment.agent_notes,
                    calendar_event_id=appointment.calendar_event_id,
                )
                db.add(record)
                await db.flush()
                await db.refresh(record)
                stored = record_to_appointment(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to create appointment: {e}")
            raise RepositoryError("Unable to save appointment") from e

        logger.info(f"Appointment {stored.id} created for {stored.appointment_kind.value}")
        return stored

    async def find_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Look up an appointment by id."""
        try:
            key = int(appointment_id)
        except (TypeError, ValueError):
            return None

        try:
            async with get_db_context() as db:
                record = await db.get(AppointmentRecord, key)
                return record_to_appointment(record) if record else None
        except SQLAlchemyError as e:
            logger.error(f"Failed to load appointment {appointment_id}: {e}")
            raise RepositoryError("Unable to load appointment") from e

    async def find_by_patient(
        self,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Appointment]:
        """Find the most relevant appointment for a patient."""
        stmt = select(AppointmentRecord).where(
            func.lower(AppointmentRecord.patient_name) == name.strip().lower()
        )
        try:
            async with get_db_context() as db:
                result = await db.execute(stmt)
                rows = [record_to_appointment(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to search appointments: {e}")
            raise RepositoryError("Unable to search appointments") from e

        # Phone formats vary, so digits are compared in Python
        return pick_most_relevant([a for a in rows if matches_patient(a, name, phone, email)])

    async def update(self, appointment_id: str, **changes: Any) -> Appointment:
        """Apply field changes to an existing appointment.

        Raises:
            RepositoryError: Unknown id, field or database failure
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise RepositoryError(f"Cannot update fields: {sorted(unknown)}")

        try:
            async with get_db_context() as db:
                record = await db.get(AppointmentRecord, int(appointment_id))
                if record is None:
                    raise RepositoryError(f"Appointment {appointment_id} not found")
                for field_name, value in changes.items():
                    setattr(record, field_name, value)
                record.updated_at = _utcnow()
                await db.flush()
                updated = record_to_appointment(record)
        except SQLAlchemyError as e:
            logger.error(f"Failed to update appointment {appointment_id}: {e}")
            raise RepositoryError("Unable to update appointment") from e
        except ValueError as e:
            raise RepositoryError(f"Invalid appointment id: {appointment_id}") from e

        logger.info(f"Appointment {updated.id} updated: {sorted(changes)}")
        return updated

    async def list(self) -> list[Appointment]:
        """All appointments, oldest first."""
        try:
            async with get_db_context() as db:
                result = await db.execute(select(AppointmentRecord).order_by(AppointmentRecord.id))
                return [record_to_appointment(r) for r in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list appointments: {e}")
            raise RepositoryError("Unable to list appointments") from e


AppointmentRepository = Union[InMemoryAppointmentRepository, SqlAppointmentRepository]


# Singleton
_repository: Optional[AppointmentRepository] = None


def get_appointment_repository() -> AppointmentRepository:
    """Get singleton appointment repository."""
    global _repository
    if _repository is None:
        if get_settings().uses_database:
            _repository = SqlAppointmentRepository()
        else:
            _repository = InMemoryAppointmentRepository()
    return _repository
