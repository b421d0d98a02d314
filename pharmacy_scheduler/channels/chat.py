"""Text chat channel: {message, session_id?} in, {response, session_id, ...} out."""

from typing import Any, Optional

from pharmacy_scheduler.core.scheduling.engine import EngineResponse
from .base import Channel, ChannelAdapter, ChannelPayloadError, InboundTurn, utc_timestamp


class ChatAdapter(ChannelAdapter):
    """Envelopes for the synchronous chat endpoint."""

    channel = Channel.CHAT

    def parse(self, body: Any) -> InboundTurn:
        body = self._require_object(body)
        message = body.get("message", "")
        if message is None:
            message = ""
        if not isinstance(message, str):
            raise ChannelPayloadError("message must be a string")

        session_id = body.get("session_id") or None
        return InboundTurn(
            channel=self.channel,
            text=message,
            session_id=str(session_id) if session_id else None,
        )

    def build(self, reply: EngineResponse, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "response": reply.message,
            "session_id": reply.session_id,
            "source": self.channel.value,
            "intent": reply.intent.value if reply.intent else None,
            "outcome": reply.outcome.value,
            "success": reply.success,
            "data": reply.data,
            "collected_data": reply.collected_data or {},
            "timestamp": utc_timestamp(),
        }

    def apology(self, message: str, turn: Optional[InboundTurn] = None) -> dict:
        return {
            "response": message,
            "session_id": turn.session_id if turn else None,
            "source": self.channel.value,
            "intent": None,
            "outcome": "error",
            "success": False,
            "data": {},
            "collected_data": {},
            "timestamp": utc_timestamp(),
        }
