"""
Scheduling Engine - conversation turn runner.

Runs one chat turn end to end under the session's lock:
classify, orchestrate, record the transcript, save.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pharmacy_scheduler.core.intelligence import (
    ConversationSession,
    Intent,
    IntentClassifier,
    SessionConflictError,
    SessionManager,
    TurnRole,
    get_intent_classifier,
    get_session_manager,
)
from pharmacy_scheduler.core.scheduling.orchestrator import (
    BookingOrchestrator,
    get_booking_orchestrator,
)
from pharmacy_scheduler.core.scheduling.types import Outcome

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass
class EngineResponse:
    """Response from scheduling engine."""

    message: str
    session_id: str
    outcome: Outcome
    success: bool = True
    intent: Optional[Intent] = None
    current_step: Optional[str] = None
    data: dict = field(default_factory=dict)
    collected_data: Optional[dict] = None
    processing_time_ms: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        result = {
            "message": self.message,
            "session_id": self.session_id,
            "outcome": self.outcome.value,
            "success": self.success,
            "data": self.data,
        }

        if self.intent:
            result["intent"] = self.intent.value
        if self.current_step:
            result["current_step"] = self.current_step
        if self.collected_data:
            result["collected_data"] = self.collected_data
        if self.processing_time_ms is not None:
            result["processing_time_ms"] = self.processing_time_ms

        return result


class SchedulingEngine:
    """
    Runs conversation turns for the chat channel.

    Coordinates:
    - Session locking and saving
    - Intent classification
    - The booking orchestrator
    """

    def __init__(
        self,
        session_manager: Optional[SessionManager] = None,
        classifier: Optional[IntentClassifier] = None,
        orchestrator: Optional[BookingOrchestrator] = None,
    ):
        """Initialize engine with optional dependencies.

        Args:
            session_manager: Session store
            classifier: Intent classifier
            orchestrator: Booking orchestrator
        """
        self._session_manager = session_manager
        self._classifier = classifier
        self._orchestrator = orchestrator

    async def _get_session_manager(self) -> SessionManager:
        if self._session_manager is None:
            self._session_manager = await get_session_manager()
        return self._session_manager

    def _get_classifier(self) -> IntentClassifier:
        if self._classifier is None:
            self._classifier = get_intent_classifier()
        return self._classifier

    def _get_orchestrator(self) -> BookingOrchestrator:
        if self._orchestrator is None:
            self._orchestrator = get_booking_orchestrator()
        return self._orchestrator

    async def process(
        self,
        message: str,
        session_id: Optional[str] = None,
        channel: str = "chat",
    ) -> EngineResponse:
        """Process a patient message.

        Args:
            message: Patient's message
            session_id: Optional existing session ID
            channel: Channel name recorded in appointment notes

        Returns:
            EngineResponse with reply and session bookkeeping
        """
        start_time = _utcnow()
        orchestrator = self._get_orchestrator()
        text = (message or "").strip()

        # Blank input never touches the session
        if not text:
            return EngineResponse(
                message=orchestrator.responses.empty_message(),
                session_id=session_id or str(uuid4()),
                outcome=Outcome.INVALID_INPUT,
                success=False,
            )

        session_manager = await self._get_session_manager()

        try:
            async with session_manager.session(session_id) as session:
                intent = self._get_classifier().classify(text, session)
                result = await orchestrator.handle_turn(session, text, intent, channel)

                session.add_turn(TurnRole.PATIENT, text)
                session.add_turn(TurnRole.ASSISTANT, result.message)

                response = EngineResponse(
                    message=result.message,
                    session_id=session.session_id,
                    outcome=result.outcome,
                    success=result.success,
                    intent=intent,
                    current_step=session.current_step,
                    data=result.data,
                    collected_data=session.slots.to_dict(),
                )

        except SessionConflictError as e:
            logger.warning(f"Turn discarded: {e}")
            return EngineResponse(
                message=orchestrator.responses.system_error(),
                session_id=e.session_id,
                outcome=Outcome.ERROR,
                success=False,
            )

        response.processing_time_ms = (_utcnow() - start_time).total_seconds() * 1000
        logger.debug(
            f"Session {response.session_id}: intent={intent.value} "
            f"outcome={response.outcome.value} ({response.processing_time_ms:.1f}ms)"
        )
        return response

    async def get_session(self, session_id: str) -> Optional[ConversationSession]:
        """Get a snapshot of a session.

        Args:
            session_id: Session ID

        Returns:
            ConversationSession or None
        """
        session_manager = await self._get_session_manager()
        return await session_manager.get(session_id)


# Singleton
_engine: Optional[SchedulingEngine] = None


def get_scheduling_engine() -> SchedulingEngine:
    """Get singleton SchedulingEngine."""
    global _engine
    if _engine is None:
        _engine = SchedulingEngine()
    return _engine


async def process_message(
    message: str,
    session_id: Optional[str] = None,
    channel: str = "chat",
) -> EngineResponse:
    """Convenience function to process a message."""
    engine = get_scheduling_engine()
    return await engine.process(message, session_id, channel)
