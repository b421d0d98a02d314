"""
Channel adapter base.

An adapter unwraps a channel's inbound envelope into an InboundTurn and
wraps the core's reply into that channel's outbound envelope.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Channel(str, Enum):
    """Inbound channels."""

    CHAT = "chat"
    RETELL = "retell"
    VAPI = "vapi"


class ChannelPayloadError(ValueError):
    """Raised when an inbound envelope cannot be understood."""
    pass


@dataclass
class InboundTurn:
    """Channel-neutral view of one inbound request."""

    channel: Channel
    text: Optional[str] = None
    session_id: Optional[str] = None
    function_name: Optional[str] = None
    parameters: dict[str, Any] = field(default_factory=dict)
    call_id: Optional[str] = None
    function_call_id: Optional[str] = None
    event_type: Optional[str] = None

    @property
    def is_function_call(self) -> bool:
        """Check if the request asks for a function to run."""
        return self.function_name is not None


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChannelAdapter(ABC):
    """Builder pair for one channel's envelopes."""

    channel: Channel

    @abstractmethod
    def parse(self, body: Any) -> InboundTurn:
        """Unwrap an inbound envelope.

        Raises:
            ChannelPayloadError: If the envelope is malformed
        """

    @abstractmethod
    def build(self, reply: Any, turn: Optional[InboundTurn] = None) -> dict:
        """Wrap a reply in the outbound envelope."""

    @abstractmethod
    def apology(self, message: str, turn: Optional[InboundTurn] = None) -> dict:
        """Envelope for a request that failed unexpectedly."""

    def acknowledge(self, turn: Optional[InboundTurn] = None) -> dict:
        """Envelope for events that need no answer."""
        return {"received": True}

    @staticmethod
    def _require_object(body: Any) -> dict:
        if not isinstance(body, dict):
            raise ChannelPayloadError("Request body must be a JSON object")
        return body
