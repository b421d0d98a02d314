"""
Scheduling Module

Provides availability, calendar integration, the appointment repository,
the booking orchestrator and the chat turn engine.

Usage:
    from pharmacy_scheduler.core.scheduling import (
        process_message,
        get_booking_orchestrator,
    )

    # Process a chat message
    response = await process_message("Book a flu shot tomorrow at 2pm")
    print(response.message)  # Assistant reply
    print(response.session_id)  # Session ID for continuity

    # Function-call channels go straight to the orchestrator
    result = await get_booking_orchestrator().find_appointment("Jane Doe")
"""

# Types
from pharmacy_scheduler.core.scheduling.types import (
    Appointment,
    AppointmentStatus,
    AvailabilityMode,
    DayAvailability,
    OperationResult,
    Outcome,
    TimeSlot,
)

# Calendar Client
from pharmacy_scheduler.core.scheduling.calendar_client import (
    BusyInterval,
    CalendarAgentClient,
    CalendarClientError,
    EventResult,
    InMemoryCalendar,
    get_calendar_client,
)

# Availability
from pharmacy_scheduler.core.scheduling.availability import (
    AvailabilityEngine,
    get_availability_engine,
)

# Appointment Repository
from pharmacy_scheduler.core.scheduling.repository import (
    InMemoryAppointmentRepository,
    RepositoryError,
    SqlAppointmentRepository,
    get_appointment_repository,
)

# Response Generator
from pharmacy_scheduler.core.scheduling.response import (
    ResponseGenerator,
    get_response_generator,
)

# Booking Orchestrator
from pharmacy_scheduler.core.scheduling.orchestrator import (
    BookingOrchestrator,
    get_booking_orchestrator,
)

# Function calls
from pharmacy_scheduler.core.scheduling.functions import (
    FunctionCallDispatcher,
    get_function_dispatcher,
)

# Scheduling Engine
from pharmacy_scheduler.core.scheduling.engine import (
    SchedulingEngine,
    EngineResponse,
    get_scheduling_engine,
    process_message,
)

__all__ = [
    # Types
    "Appointment",
    "AppointmentStatus",
    "AvailabilityMode",
    "DayAvailability",
    "OperationResult",
    "Outcome",
    "TimeSlot",
    # Calendar Client
    "BusyInterval",
    "CalendarAgentClient",
    "CalendarClientError",
    "EventResult",
    "InMemoryCalendar",
    "get_calendar_client",
    # Availability
    "AvailabilityEngine",
    "get_availability_engine",
    # Repository
    "InMemoryAppointmentRepository",
    "RepositoryError",
    "SqlAppointmentRepository",
    "get_appointment_repository",
    # Response Generator
    "ResponseGenerator",
    "get_response_generator",
    # Orchestrator
    "BookingOrchestrator",
    "get_booking_orchestrator",
    # Function calls
    "FunctionCallDispatcher",
    "get_function_dispatcher",
    # Scheduling Engine
    "SchedulingEngine",
    "EngineResponse",
    "get_scheduling_engine",
    "process_message",
]
