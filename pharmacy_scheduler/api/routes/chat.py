"""
Chat API Endpoint.

Handles conversational text messages. Each message is one turn run by the
scheduling engine; the session_id keeps turns together.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from pharmacy_scheduler.channels import Channel, get_adapter
from pharmacy_scheduler.core.scheduling.engine import get_scheduling_engine
from pharmacy_scheduler.core.scheduling.response import get_response_generator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


class ChatRequest(BaseModel):
    """Chat message request."""

    message: str = Field(
        default="",
        max_length=2000,
        description="Patient's message",
        examples=["I'd like to book a flu shot tomorrow at 2pm"],
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Existing session ID for conversation continuity",
        examples=["550e8400-e29b-41d4-a716-446655440000"],
    )


class ChatResponse(BaseModel):
    """Chat response."""

    response: str = Field(
        ...,
        description="Assistant's reply",
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Session ID for continuing the conversation",
    )
    source: str = Field(
        default="chat",
        description="Channel that produced the reply",
    )
    intent: Optional[str] = Field(
        default=None,
        description="Classified intent of the patient's message",
    )
    outcome: str = Field(
        ...,
        description="What the turn did (booked, missing_info, ...)",
    )
    success: bool = Field(
        default=True,
        description="Whether the requested operation succeeded",
    )
    data: dict = Field(
        default_factory=dict,
        description="Structured details of the outcome",
    )
    collected_data: dict = Field(
        default_factory=dict,
        description="Booking details collected so far",
    )
    timestamp: str = Field(
        ...,
        description="Reply time (ISO 8601, UTC)",
    )


class ErrorResponse(BaseModel):
    """Error response."""

    error: str
    detail: Optional[str] = None


@router.post(
    "",
    response_model=ChatResponse,
    status_code=status.HTTP_200_OK,
    summary="Send a chat message",
    description="Send a message to the pharmacy assistant and get a reply.",
)
async def chat(request: ChatRequest) -> dict:
    """
    Process a chat message.

    Unexpected failures still answer 200 with an apology so the chat
    client always has something to show.
    """
    adapter = get_adapter(Channel.CHAT)
    turn = adapter.parse(request.model_dump())

    try:
        engine = get_scheduling_engine()
        reply = await engine.process(
            message=turn.text,
            session_id=turn.session_id,
            channel=Channel.CHAT.value,
        )
        return adapter.build(reply, turn)

    except Exception as e:
        logger.exception(f"Error processing chat message: {e}")
        return adapter.apology(get_response_generator().system_error(), turn)


@router.get(
    "/session/{session_id}",
    response_model=dict,
    summary="Get session data",
    description="Retrieve the current state of a conversation session.",
    responses={
        200: {"description": "Session data"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(session_id: str) -> dict:
    """Get session information."""
    engine = get_scheduling_engine()
    session = await engine.get_session(session_id)

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )

    return {
        "session_id": session.session_id,
        "current_step": session.current_step,
        "collected_data": session.slots.to_dict(),
        "pending_offer": session.pending_offer.isoformat() if session.pending_offer else None,
        "last_appointment_id": session.last_appointment_id,
        "message_count": len(session.turns),
        "turns": [turn.to_dict() for turn in session.turns],
        "version": session.version,
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }
