"""
LINE Callback Parsing

PURE CONVERSION - NO LOGIC, NO NETWORK CALLS

Converts the raw webhook body into an ordered CallbackRequest.
- Known event/message/source kinds map to their variant
- Unknown event and message kinds map to Unsupported* (logged downstream)
- Unknown source kinds or broken structure raise CallbackParseError
"""

import json
from typing import Any

from pydantic import ValidationError

from .schemas import (
    CallbackEvent,
    CallbackRequest,
    GroupSource,
    ImageMessage,
    InboundMessage,
    MessageEvent,
    RoomSource,
    Source,
    StickerMessage,
    TextMessage,
    UnsupportedEvent,
    UnsupportedMessage,
    UserSource,
)


class CallbackParseError(Exception):
    """Webhook body could not be parsed."""
    pass


_SOURCE_TYPES = {
    "user": UserSource,
    "group": GroupSource,
    "room": RoomSource,
}

_MESSAGE_TYPES = {
    "text": TextMessage,
    "sticker": StickerMessage,
    "image": ImageMessage,
}


def parse_callback(body: bytes | str | dict) -> CallbackRequest:
    """
    Parse a LINE webhook body.

    Args:
        body: Raw request body (bytes/str) or an already-decoded dict

    Returns:
        CallbackRequest with events in arrival order

    Raises:
        CallbackParseError: Invalid JSON or invalid payload structure
    """

    if isinstance(body, dict):
        payload = body
    else:
        try:
            payload = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CallbackParseError(f"Invalid JSON payload: {e}")

    if not isinstance(payload, dict):
        raise CallbackParseError("Callback body must be a JSON object")

    raw_events = payload.get("events", [])
    if not isinstance(raw_events, list):
        raise CallbackParseError("'events' must be a list")

    events = [parse_event(raw) for raw in raw_events]

    try:
        return CallbackRequest(
            destination=payload.get("destination", ""),
            events=events,
        )
    except ValidationError as e:
        raise CallbackParseError(f"Invalid callback structure: {e}")


def parse_event(raw: Any) -> CallbackEvent:
    """Parse a single webhook event object."""

    if not isinstance(raw, dict):
        raise CallbackParseError("Event must be a JSON object")

    event_type = raw.get("type")
    if not event_type:
        raise CallbackParseError("Event missing 'type'")

    try:
        if event_type != "message":
            return UnsupportedEvent(
                type=event_type,
                timestamp=raw.get("timestamp", 0),
            )

        return MessageEvent(
            reply_token=raw.get("replyToken"),
            source=parse_source(raw.get("source")),
            message=parse_message(raw.get("message")),
            timestamp=raw.get("timestamp", 0),
            mode=raw.get("mode", "active"),
            webhook_event_id=raw.get("webhookEventId"),
        )

    except KeyError as e:
        raise CallbackParseError(f"Message event missing {e}")
    except ValidationError as e:
        raise CallbackParseError(f"Invalid event structure: {e}")


def parse_source(raw: Any) -> Source:
    """Parse the event source. Only user/group/room exist on LINE."""

    if not isinstance(raw, dict):
        raise CallbackParseError("Message event missing 'source'")

    source_type = raw.get("type")
    model = _SOURCE_TYPES.get(source_type)
    if model is None:
        raise CallbackParseError(f"Unsupported source type: {source_type}")

    return model.model_validate(raw)


def parse_message(raw: Any) -> InboundMessage:
    """Parse message content; unknown kinds become UnsupportedMessage."""

    if not isinstance(raw, dict):
        raise CallbackParseError("Message event missing 'message'")

    message_type = raw.get("type")
    if not message_type:
        raise CallbackParseError("Message missing 'type'")

    model = _MESSAGE_TYPES.get(message_type)
    if model is None:
        return UnsupportedMessage(type=message_type, id=raw.get("id"))

    return model.model_validate(raw)
