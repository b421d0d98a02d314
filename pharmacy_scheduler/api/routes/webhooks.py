"""
Voice platform webhooks.

Retell and Vapi call these endpoints when their agent invokes a function.
Both always answer 200: voice agents read the result text aloud, so an
error becomes an apology rather than an HTTP failure.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Request

from pharmacy_scheduler.channels import (
    Channel,
    ChannelAdapter,
    ChannelPayloadError,
    InboundTurn,
    get_adapter,
)
from pharmacy_scheduler.core.scheduling.functions import get_function_dispatcher
from pharmacy_scheduler.core.scheduling.response import get_response_generator
from pharmacy_scheduler.core.scheduling.types import OperationResult, Outcome

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


async def handle_function_webhook(request: Request, adapter: ChannelAdapter) -> dict:
    """Parse, dispatch and wrap one webhook call."""
    turn: Optional[InboundTurn] = None
    try:
        body = await request.json()
        turn = adapter.parse(body)

        if not turn.is_function_call:
            logger.info(f"{adapter.channel.value} event acknowledged: {turn.event_type}")
            return adapter.acknowledge(turn)

        result = await get_function_dispatcher().dispatch(
            turn.function_name,
            turn.parameters,
            channel=adapter.channel.value,
        )
        logger.info(
            f"{adapter.channel.value} function {turn.function_name} "
            f"(call {turn.call_id}): {result.outcome.value}"
        )
        return adapter.build(result, turn)

    except ChannelPayloadError as e:
        logger.warning(f"{adapter.channel.value} webhook payload rejected: {e}")
        result = OperationResult(
            success=False,
            message=get_response_generator().invalid_input("details"),
            outcome=Outcome.INVALID_INPUT,
        )
        return adapter.build(result, turn)

    except Exception as e:
        logger.exception(f"{adapter.channel.value} webhook failed: {e}")
        return adapter.apology(get_response_generator().system_error(), turn)


@router.post(
    "/retell",
    summary="Retell function call",
    description="Runs a Retell agent function (snake_case names and parameters).",
)
async def retell_webhook(request: Request) -> dict:
    """Retell function-call webhook."""
    return await handle_function_webhook(request, get_adapter(Channel.RETELL))


@router.post(
    "/vapi",
    summary="Vapi function call",
    description="Runs a Vapi assistant function (camelCase names and parameters).",
)
async def vapi_webhook(request: Request) -> dict:
    """Vapi function-call webhook."""
    return await handle_function_webhook(request, get_adapter(Channel.VAPI))
