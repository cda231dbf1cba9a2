"""
LINE Webhook Receiver

FastAPI router that receives LINE callbacks and hands the events to the dispatcher.
No model calls here. Pure transport.
"""

import logging

from fastapi import APIRouter, HTTPException, Request, status

from .parse import CallbackParseError, parse_callback
from .security import SIGNATURE_HEADER, SignatureVerificationError, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(tags=["LINE Transport"])


@router.post("/callback")
async def line_callback(request: Request) -> dict[str, str]:
    """
    Receive LINE webhook events.

    Flow:
    1. Get raw body
    2. Verify X-Line-Signature (400 if missing or invalid)
    3. Parse into ordered events (500 if malformed)
    4. Dispatch events sequentially

    Expects `request.app.state.config` and `request.app.state.dispatcher`
    to be set by the application lifespan.

    Returns:
        {"status": "ok"} once every event has been handled
    """
    logger.info("/callback called...")

    config = request.app.state.config
    dispatcher = request.app.state.dispatcher

    # Step 1: Raw body, verified before any decoding
    body = await request.body()

    # Step 2: Verify signature (security boundary)
    try:
        verify_signature(
            config.channel_secret,
            body,
            request.headers.get(SIGNATURE_HEADER),
        )
    except SignatureVerificationError as e:
        logger.warning(f"Cannot parse request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature"
        )

    # Step 3: Parse
    try:
        callback = parse_callback(body)
    except CallbackParseError as e:
        logger.error(f"Cannot parse request: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Cannot parse request"
        )

    # Step 4: Dispatch (errors are handled per event inside the dispatcher)
    result = await dispatcher.dispatch(callback.events)
    logger.debug(
        "Callback handled",
        extra={
            "destination": callback.destination,
            "processed": result.processed,
            "replies_sent": result.replies_sent,
        },
    )

    return {"status": "ok"}
