"""Tests for the HTTP API."""

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from pharmacy_scheduler.core.intelligence.intent.classifier import IntentClassifier
from pharmacy_scheduler.core.intelligence.session.manager import SessionManager
from pharmacy_scheduler.core.scheduling.engine import SchedulingEngine
from pharmacy_scheduler.core.scheduling.functions import FunctionCallDispatcher
from pharmacy_scheduler.core.scheduling.repository import RepositoryError
from pharmacy_scheduler.main import app

FULL_REQUEST = (
    "Book a flu shot tomorrow at 2pm, my name is Jane Doe, "
    "555-123-4567, jane@example.com"
)


@pytest.fixture
def engine(orchestrator):
    return SchedulingEngine(
        session_manager=SessionManager(use_redis=False),
        classifier=IntentClassifier(),
        orchestrator=orchestrator,
    )


@pytest.fixture
def client(engine, orchestrator, repository):
    """Test client wired to in-memory collaborators."""
    dispatcher = FunctionCallDispatcher(orchestrator=orchestrator)
    with patch(
        "pharmacy_scheduler.api.routes.chat.get_scheduling_engine",
        return_value=engine,
    ), patch(
        "pharmacy_scheduler.api.routes.webhooks.get_function_dispatcher",
        return_value=dispatcher,
    ), patch(
        "pharmacy_scheduler.api.routes.appointments.get_appointment_repository",
        return_value=repository,
    ):
        yield TestClient(app)


class TestChatEndpoint:
    """Test POST /chat."""

    def test_first_message(self, client):
        response = client.post("/chat", json={"message": "hello", "session_id": "sess-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["session_id"] == "sess-1"
        assert body["intent"] == "greeting"
        assert body["source"] == "chat"
        assert "MedMe Pharmacy" in body["response"]

    def test_booking_in_two_turns(self, client):
        client.post("/chat", json={"message": "hello", "session_id": "sess-1"})

        response = client.post("/chat", json={"message": FULL_REQUEST, "session_id": "sess-1"})

        body = response.json()
        assert body["outcome"] == "booked"
        assert body["data"]["appointment_id"] == "1"
        assert body["collected_data"]["patient_name"] == "Jane Doe"

    def test_empty_message(self, client):
        response = client.post("/chat", json={"message": ""})

        assert response.status_code == 200
        assert response.json()["outcome"] == "invalid_input"

    def test_message_too_long(self, client):
        response = client.post("/chat", json={"message": "a" * 2001})
        assert response.status_code == 422

    def test_engine_failure_is_apology(self, client, engine):
        engine.process = AsyncMock(side_effect=RuntimeError("boom"))

        response = client.post("/chat", json={"message": "hello", "session_id": "sess-1"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["outcome"] == "error"
        assert body["session_id"] == "sess-1"

    def test_get_session(self, client):
        client.post("/chat", json={"message": "I need a flu shot", "session_id": "sess-1"})

        response = client.get("/chat/session/sess-1")

        assert response.status_code == 200
        body = response.json()
        assert body["message_count"] == 2
        assert body["collected_data"] == {"appointment_kind": "flu_shot"}
        assert body["version"] == 1

    def test_get_session_not_found(self, client):
        response = client.get("/chat/session/missing")
        assert response.status_code == 404


class TestWebhooks:
    """Test voice platform webhooks."""

    def test_retell_book(self, client):
        response = client.post(
            "/webhooks/retell",
            json={
                "type": "function_call",
                "call_id": "call-1",
                "function_call_id": "fc-1",
                "function_name": "book_appointment",
                "parameters": {
                    "patient_name": "Jane Doe",
                    "phone": "555-123-4567",
                    "email": "jane@example.com",
                    "appointment_type": "flu_shot",
                    "preferred_datetime": "2025-01-16T14:00:00",
                },
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["function_call_id"] == "fc-1"
        assert body["source"] == "retell"
        assert body["data"]["outcome"] == "booked"
        assert "confirmation number is 1" in body["result"]

    def test_retell_event_acknowledged(self, client):
        response = client.post("/webhooks/retell", json={"type": "call_ended"})

        assert response.json() == {"received": True}

    def test_vapi_check_availability(self, client):
        response = client.post(
            "/webhooks/vapi",
            json={
                "message": {
                    "type": "function-call",
                    "functionCall": {
                        "name": "checkAvailability",
                        "parameters": {"date": "2025-01-18"},
                    },
                },
            },
        )

        body = response.json()
        assert body["source"] == "vapi"
        assert body["data"]["outcome"] == "closed"

    def test_vapi_unknown_function(self, client):
        response = client.post(
            "/webhooks/vapi",
            json={"message": {"type": "function-call", "functionCall": {"name": "orderPizza"}}},
        )

        assert response.status_code == 200
        assert response.json()["data"]["outcome"] == "unknown_function"

    def test_retell_bad_parameters_prompt_again(self, client):
        response = client.post(
            "/webhooks/retell",
            json={
                "type": "function_call",
                "function_call_id": "fc-2",
                "function_name": "book_appointment",
                "parameters": "patientName=Jane",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["source"] == "retell"
        assert body["data"]["success"] is False
        assert body["data"]["outcome"] == "invalid_input"
        assert "couldn't understand the details" in body["result"]
        assert client.get("/appointments").json()["count"] == 0

    def test_vapi_bad_function_call_prompts_again(self, client):
        response = client.post(
            "/webhooks/vapi",
            json={"message": {"type": "function-call", "functionCall": "bookAppointment"}},
        )

        assert response.status_code == 200
        assert response.json()["data"]["outcome"] == "invalid_input"

    def test_malformed_body_is_apology(self, client):
        response = client.post(
            "/webhooks/vapi",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["success"] is False
        assert "(555) 123-4567" in body["result"]


class TestAppointmentsEndpoint:
    """Test GET /appointments."""

    def test_list_and_filter(self, client):
        client.post("/chat", json={"message": "hello", "session_id": "sess-1"})
        client.post("/chat", json={"message": FULL_REQUEST, "session_id": "sess-1"})

        listed = client.get("/appointments").json()
        assert listed["count"] == 1
        assert listed["appointments"][0]["status"] == "confirmed"

        cancelled = client.get("/appointments", params={"status": "cancelled"}).json()
        assert cancelled["count"] == 0

    def test_store_unavailable(self, client, repository):
        repository.list = AsyncMock(side_effect=RepositoryError("down"))

        response = client.get("/appointments")

        assert response.status_code == 503


class TestHealth:
    """Test health probes."""

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"

    def test_ready_with_memory_backends(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        checks = response.json()["checks"]
        assert checks["database"] == "memory"
        assert checks["redis"] == "memory"

    def test_live(self, client):
        assert client.get("/health/live").json()["status"] == "alive"

    def test_root(self, client):
        body = client.get("/").json()
        assert body["status"] == "running"
