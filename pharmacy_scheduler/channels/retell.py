"""
Retell voice channel.

Inbound:
    {"type": "function_call", "call_id": ..., "function_name": "book_appointment",
     "parameters": {...}, "function_call_id": ...}

Outbound:
    {"function_call_id": ..., "result": "<text>", "source": "retell", "data": {...}}

Other event types (call_started, call_ended, ...) are acknowledged.
"""

from typing import Any, Optional

from pharmacy_scheduler.core.scheduling.types import OperationResult
from .base import Channel, ChannelAdapter, ChannelPayloadError, InboundTurn

FUNCTION_CALL_EVENT = "function_call"


class RetellAdapter(ChannelAdapter):
    """Envelopes for the Retell function-call webhook."""

    channel = Channel.RETELL

    def parse(self, body: Any) -> InboundTurn:
        body = self._require_object(body)
        event_type = body.get("type") or body.get("event")

        parameters = body.get("parameters") or body.get("args") or {}
        if not isinstance(parameters, dict):
            raise ChannelPayloadError("parameters must be an object")

        is_call = event_type == FUNCTION_CALL_EVENT
        return InboundTurn(
            channel=self.channel,
            function_name=(body.get("function_name") or "") if is_call else None,
            parameters=parameters,
            call_id=body.get("call_id"),
            function_call_id=body.get("function_call_id"),
            event_type=event_type,
        )

    def build(self, reply: OperationResult, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "function_call_id": turn.function_call_id if turn else None,
            "result": reply.message,
            "source": self.channel.value,
            "data": {"success": reply.success, "outcome": reply.outcome.value, **reply.data},
        }

    def apology(self, message: str, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "function_call_id": turn.function_call_id if turn else None,
            "result": message,
            "source": self.channel.value,
            "data": {"success": False, "outcome": "error"},
        }
