"""LINE Transport Layer - Module Exports"""

from .parse import CallbackParseError, parse_callback
from .schemas import (
    CallbackEvent,
    CallbackRequest,
    GroupSource,
    ImageMessage,
    InboundMessage,
    Mention,
    Mentionee,
    MessageEvent,
    RoomSource,
    Source,
    StickerMessage,
    TextMessage,
    UnsupportedEvent,
    UnsupportedMessage,
    UserSource,
)
from .security import SignatureVerificationError, compute_signature, verify_signature
from .sender import LineContentError, LineMessagingClient, LineSenderError
from .webhook import router

__all__ = [
    # Schemas
    "CallbackRequest",
    "CallbackEvent",
    "MessageEvent",
    "UnsupportedEvent",
    "InboundMessage",
    "TextMessage",
    "StickerMessage",
    "ImageMessage",
    "UnsupportedMessage",
    "Mention",
    "Mentionee",
    "Source",
    "UserSource",
    "GroupSource",
    "RoomSource",
    # Parsing
    "parse_callback",
    "CallbackParseError",
    # Security
    "verify_signature",
    "compute_signature",
    "SignatureVerificationError",
    # Sender
    "LineMessagingClient",
    "LineSenderError",
    "LineContentError",
    # Router
    "router",
]
