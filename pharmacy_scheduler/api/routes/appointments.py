"""
Appointments Endpoint.

Read-only listing of stored appointments for staff dashboards.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from pharmacy_scheduler.core.scheduling.repository import RepositoryError, get_appointment_repository
from pharmacy_scheduler.models.database import AppointmentStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.get(
    "",
    response_model=dict,
    summary="List appointments",
    description="List stored appointments, optionally filtered by status.",
)
async def list_appointments(
    status_filter: Optional[AppointmentStatus] = Query(
        default=None,
        alias="status",
        description="Only return appointments with this status",
    ),
) -> dict:
    """List appointments."""
    try:
        appointments = await get_appointment_repository().list()
    except RepositoryError as e:
        logger.error(f"Failed to list appointments: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Appointment store unavailable",
        )

    if status_filter is not None:
        appointments = [a for a in appointments if a.status == status_filter]

    return {
        "appointments": [a.to_dict() for a in appointments],
        "count": len(appointments),
    }
