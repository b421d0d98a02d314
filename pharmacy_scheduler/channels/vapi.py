"""
Vapi voice channel.

Inbound:
    {"message": {"type": "function-call",
                 "functionCall": {"name": "bookAppointment", "parameters": {...}}},
     "call": {"id": ...}}

Outbound:
    {"result": "<text>", "source": "vapi", "data": {...}}

Other message types (conversation-update, status-update, ...) are acknowledged.
"""

from typing import Any, Optional

from pharmacy_scheduler.core.scheduling.types import OperationResult
from .base import Channel, ChannelAdapter, ChannelPayloadError, InboundTurn

FUNCTION_CALL_EVENT = "function-call"


class VapiAdapter(ChannelAdapter):
    """Envelopes for the Vapi function-call webhook."""

    channel = Channel.VAPI

    def parse(self, body: Any) -> InboundTurn:
        body = self._require_object(body)
        message = body.get("message") or {}
        if not isinstance(message, dict):
            raise ChannelPayloadError("message must be an object")

        call = body.get("call") or {}
        call_id = call.get("id") if isinstance(call, dict) else None
        event_type = message.get("type")

        if event_type != FUNCTION_CALL_EVENT:
            return InboundTurn(channel=self.channel, call_id=call_id, event_type=event_type)

        function_call = message.get("functionCall") or {}
        if not isinstance(function_call, dict):
            raise ChannelPayloadError("functionCall must be an object")

        parameters = function_call.get("parameters") or {}
        if not isinstance(parameters, dict):
            raise ChannelPayloadError("parameters must be an object")

        return InboundTurn(
            channel=self.channel,
            function_name=function_call.get("name") or "",
            parameters=parameters,
            call_id=call_id,
            event_type=event_type,
        )

    def build(self, reply: OperationResult, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "result": reply.message,
            "source": self.channel.value,
            "data": {"success": reply.success, "outcome": reply.outcome.value, **reply.data},
        }

    def apology(self, message: str, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "result": message,
            "source": self.channel.value,
            "data": {"success": False, "outcome": "error"},
        }
