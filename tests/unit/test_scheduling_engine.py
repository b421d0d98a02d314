"""Tests for Scheduling Engine."""

import pytest
from unittest.mock import AsyncMock

from pharmacy_scheduler.core.intelligence.intent.classifier import IntentClassifier
from pharmacy_scheduler.core.intelligence.intent.types import Intent
from pharmacy_scheduler.core.intelligence.session.manager import (
    SessionConflictError,
    SessionManager,
)
from pharmacy_scheduler.core.intelligence.session.models import TurnRole
from pharmacy_scheduler.core.scheduling.engine import EngineResponse, SchedulingEngine
from pharmacy_scheduler.core.scheduling.types import Outcome


class TestSchedulingEngine:
    """Test SchedulingEngine turn runner."""

    @pytest.fixture
    def session_manager(self):
        return SessionManager(use_redis=False)

    @pytest.fixture
    def engine(self, session_manager, orchestrator):
        return SchedulingEngine(
            session_manager=session_manager,
            classifier=IntentClassifier(),
            orchestrator=orchestrator,
        )

    @pytest.mark.asyncio
    async def test_first_message_greets(self, engine):
        response = await engine.process("I need a flu shot", session_id="sess-1")

        assert response.intent == Intent.GREETING
        assert response.outcome == Outcome.GREETED
        assert response.session_id == "sess-1"
        assert response.collected_data == {"appointment_kind": "flu_shot"}

    @pytest.mark.asyncio
    async def test_first_message_with_everything_books(self, engine, repository):
        response = await engine.process(
            "My name is Jane Doe, phone 555-123-4567, email jane@x.com, tomorrow at 2pm, flu shot",
            session_id="sess-1",
        )

        assert response.intent == Intent.GREETING
        assert response.outcome == Outcome.BOOKED
        assert response.collected_data["email"] == "jane@x.com"

        stored = await repository.list()
        assert len(stored) == 1
        assert stored[0].patient_name == "Jane Doe"

    @pytest.mark.asyncio
    async def test_generates_session_id(self, engine):
        response = await engine.process("hello")
        assert response.session_id

    @pytest.mark.asyncio
    async def test_transcript_recorded(self, engine):
        await engine.process("hello", session_id="sess-1")
        await engine.process("I'd like a consultation", session_id="sess-1")

        session = await engine.get_session("sess-1")

        assert [t.role for t in session.turns] == [
            TurnRole.PATIENT,
            TurnRole.ASSISTANT,
            TurnRole.PATIENT,
            TurnRole.ASSISTANT,
        ]
        assert session.turns[2].text == "I'd like a consultation"
        assert session.version == 2

    @pytest.mark.asyncio
    async def test_full_conversation_books_once(self, engine, repository):
        session_id = "sess-1"
        await engine.process("Hi there", session_id=session_id)
        await engine.process("I want to book a flu shot", session_id=session_id)
        await engine.process("My name is Jane Doe", session_id=session_id)
        await engine.process("555-123-4567", session_id=session_id)
        await engine.process("jane@example.com", session_id=session_id)

        booked = await engine.process("tomorrow at 2pm", session_id=session_id)

        assert booked.outcome == Outcome.BOOKED
        assert booked.current_step == "booked"
        assert "confirmation number is 1" in booked.message

        again = await engine.process("yes", session_id=session_id)

        assert again.outcome == Outcome.ALREADY_BOOKED
        assert len(await repository.list()) == 1

    @pytest.mark.asyncio
    async def test_kind_kept_across_turns(self, engine):
        session_id = "sess-1"
        await engine.process("hello", session_id=session_id)
        await engine.process("do you do medication review appointments", session_id=session_id)
        await engine.process("tomorrow at 2pm", session_id=session_id)

        session = await engine.get_session(session_id)

        assert session.slots.appointment_kind.value == "medication_review"

    @pytest.mark.asyncio
    async def test_empty_message_touches_nothing(self, engine, session_manager):
        response = await engine.process("   ", session_id="sess-1")

        assert response.outcome == Outcome.INVALID_INPUT
        assert not response.success
        assert await session_manager.get("sess-1") is None

    @pytest.mark.asyncio
    async def test_conflict_returns_apology(self, orchestrator):
        manager = SessionManager(use_redis=False)
        manager.save = AsyncMock(side_effect=SessionConflictError("sess-1", 0, 1))
        engine = SchedulingEngine(session_manager=manager, orchestrator=orchestrator)

        response = await engine.process("hello", session_id="sess-1")

        assert response.outcome == Outcome.ERROR
        assert "(555) 123-4567" in response.message

    @pytest.mark.asyncio
    async def test_get_session_missing(self, engine):
        assert await engine.get_session("missing") is None


class TestEngineResponse:
    """Test EngineResponse serialization."""

    def test_to_dict_minimal(self):
        response = EngineResponse(message="Hi", session_id="s", outcome=Outcome.GREETED)

        assert response.to_dict() == {
            "message": "Hi",
            "session_id": "s",
            "outcome": "greeted",
            "success": True,
            "data": {},
        }

    def test_to_dict_full(self):
        response = EngineResponse(
            message="Hi",
            session_id="s",
            outcome=Outcome.GREETED,
            intent=Intent.GREETING,
            current_step="greeting",
            collected_data={"email": "jane@example.com"},
            processing_time_ms=1.5,
        )

        data = response.to_dict()

        assert data["intent"] == "greeting"
        assert data["collected_data"] == {"email": "jane@example.com"}
        assert data["processing_time_ms"] == 1.5
