"""
LINE Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
One closed set of variants per axis: event kind, message kind, source kind.

ref: https://developers.line.biz/en/reference/messaging-api/#webhook-event-objects
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


# ============================================================================
# SOURCE KIND
# ============================================================================

class UserSource(BaseModel):
    """1-on-1 chat with a user."""
    type: Literal["user"] = "user"
    user_id: str = Field(..., alias="userId")

    class Config:
        frozen = True
        populate_by_name = True


class GroupSource(BaseModel):
    """Group chat."""
    type: Literal["group"] = "group"
    group_id: str = Field(..., alias="groupId")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        frozen = True
        populate_by_name = True


class RoomSource(BaseModel):
    """Multi-person chat (legacy room)."""
    type: Literal["room"] = "room"
    room_id: str = Field(..., alias="roomId")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        frozen = True
        populate_by_name = True


Source = Union[UserSource, GroupSource, RoomSource]


# ============================================================================
# MESSAGE KIND
# ============================================================================

class Mentionee(BaseModel):
    """A user (or @All) tagged in a text message."""
    type: str  # "user" | "all"
    index: int = 0
    length: int = 0
    user_id: Optional[str] = Field(None, alias="userId")
    is_self: bool = Field(False, alias="isSelf")

    class Config:
        frozen = True
        populate_by_name = True


class Mention(BaseModel):
    mentionees: list[Mentionee] = Field(default_factory=list)

    class Config:
        frozen = True


class TextMessage(BaseModel):
    """Text message content."""
    type: Literal["text"] = "text"
    id: str
    text: str
    mention: Optional[Mention] = None
    quote_token: Optional[str] = Field(None, alias="quoteToken")

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def mentionees(self) -> list[Mentionee]:
        return list(self.mention.mentionees) if self.mention else []


class StickerMessage(BaseModel):
    """Sticker message content."""
    type: Literal["sticker"] = "sticker"
    id: str
    package_id: str = Field("", alias="packageId")
    sticker_id: str = Field(..., alias="stickerId")
    sticker_resource_type: str = Field("", alias="stickerResourceType")

    class Config:
        frozen = True
        populate_by_name = True


class ImageMessage(BaseModel):
    """Image message content. Bytes live on the content API under `id`."""
    type: Literal["image"] = "image"
    id: str
    content_provider: Optional[dict] = Field(None, alias="contentProvider")

    class Config:
        frozen = True
        populate_by_name = True


class UnsupportedMessage(BaseModel):
    """Any message kind this bot does not handle (video, audio, location...)."""
    type: str
    id: Optional[str] = None

    class Config:
        frozen = True


InboundMessage = Union[TextMessage, StickerMessage, ImageMessage, UnsupportedMessage]


# ============================================================================
# EVENT KIND
# ============================================================================

class MessageEvent(BaseModel):
    """Webhook event carrying a message."""
    type: Literal["message"] = "message"
    reply_token: Optional[str] = Field(None, alias="replyToken")  # absent in standby mode
    source: Source
    message: InboundMessage
    timestamp: int = 0
    mode: str = "active"
    webhook_event_id: Optional[str] = Field(None, alias="webhookEventId")

    class Config:
        frozen = True
        populate_by_name = True


class UnsupportedEvent(BaseModel):
    """Any non-message webhook event (follow, join, postback...)."""
    type: str
    timestamp: int = 0

    class Config:
        frozen = True


CallbackEvent = Union[MessageEvent, UnsupportedEvent]


# ============================================================================
# CALLBACK BATCH
# ============================================================================

class CallbackRequest(BaseModel):
    """
    One webhook delivery. `events` keeps arrival order.

    An empty `events` list is what LINE sends when the webhook URL is verified
    from the console.
    """
    destination: str = ""
    events: list[CallbackEvent] = Field(default_factory=list)

    class Config:
        frozen = True
