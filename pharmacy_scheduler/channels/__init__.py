"""
Channel adapters.

Each inbound channel gets a small builder that unwraps its envelope and
wraps the shared core's reply:

    chat    -> SchedulingEngine (conversation turns)
    retell  -> FunctionCallDispatcher (snake_case functions)
    vapi    -> FunctionCallDispatcher (camelCase functions)
"""

from .base import Channel, ChannelAdapter, ChannelPayloadError, InboundTurn
from .chat import ChatAdapter
from .retell import RetellAdapter
from .vapi import VapiAdapter

_ADAPTERS: dict[Channel, ChannelAdapter] = {
    Channel.CHAT: ChatAdapter(),
    Channel.RETELL: RetellAdapter(),
    Channel.VAPI: VapiAdapter(),
}


def get_adapter(channel: Channel) -> ChannelAdapter:
    """Get the adapter for a channel."""
    return _ADAPTERS[channel]


__all__ = [
    "Channel",
    "ChannelAdapter",
    "ChannelPayloadError",
    "InboundTurn",
    "ChatAdapter",
    "RetellAdapter",
    "VapiAdapter",
    "get_adapter",
]
