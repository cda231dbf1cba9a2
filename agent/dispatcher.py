"""
Event Dispatcher

Decides, per webhook event, whether and how to reply.

Routing (message kind x source kind):
  text    + user   → Gemini chat → reply, then stop the batch
  text    + group  → reply greeting when the bot itself is mentioned, then stop the batch
  text    + room   → log only
  sticker + any    → reply with sticker id / resource type
  image   + any    → download → Gemini describe → reply (error text on failure)
  anything else    → log only

Events in one batch are handled sequentially, in arrival order.
Downstream failures (AI, reply, content download) are logged and never abort the batch.

Stopping the batch after a 1-on-1 reply or a group greeting is the
long-standing behavior of this bot: any later events in the same delivery
are not processed. It is kept as-is until the intended behavior is settled.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from inference import ModelBackend, ModelResponse, chat, describe_image
from transport.line.schemas import (
    CallbackEvent,
    GroupSource,
    ImageMessage,
    MessageEvent,
    RoomSource,
    StickerMessage,
    TextMessage,
    UnsupportedEvent,
    UnsupportedMessage,
    UserSource,
)
from transport.line.sender import LineContentError, LineMessagingClient, LineSenderError

logger = logging.getLogger(__name__)

GROUP_GREETING = "你好，我是 Gemini Chat Bot，請問有什麼可以幫助您的嗎？"
STICKER_REPLY_TEMPLATE = "sticker id is {sticker_id}, stickerResourceType is {resource_type}"
IMAGE_ERROR_PREFIX = "無法辨識圖片內容，請重新輸入:"


class Outcome(Enum):
    CONTINUE = "continue"
    STOP = "stop"


@dataclass
class DispatchResult:
    """Per-batch summary, used for logging and tests."""
    received: int = 0
    processed: int = 0
    replies_sent: int = 0
    reply_failures: int = 0
    skipped: int = 0
    stopped_early: bool = False


def format_sticker_reply(message: StickerMessage) -> str:
    return STICKER_REPLY_TEMPLATE.format(
        sticker_id=message.sticker_id,
        resource_type=message.sticker_resource_type,
    )


def format_image_error(error: str) -> str:
    return IMAGE_ERROR_PREFIX + error


class EventDispatcher:
    """
    Routes callback events to the model backend and the LINE reply API.

    Holds no per-request state; one instance serves every request.
    """

    def __init__(self, model_backend: ModelBackend, messaging: LineMessagingClient):
        self.model_backend = model_backend
        self.messaging = messaging

    async def dispatch(self, events: Iterable[CallbackEvent]) -> DispatchResult:
        """Handle a callback batch in order."""
        events = list(events)
        result = DispatchResult(received=len(events))

        logger.info("Handling events...", extra={"event_count": len(events)})

        for event in events:
            logger.info(f"/callback event: {event!r}")
            result.processed += 1

            outcome = await self.handle_event(event, result)
            if outcome is Outcome.STOP:
                result.stopped_early = result.processed < result.received
                break

        logger.info(
            "Batch finished",
            extra={
                "received": result.received,
                "processed": result.processed,
                "replies_sent": result.replies_sent,
                "stopped_early": result.stopped_early,
            },
        )
        return result

    async def handle_event(self, event: CallbackEvent, result: DispatchResult) -> Outcome:
        match event:
            case MessageEvent(reply_token=None):
                # Standby-mode events carry no reply token; nothing can be sent back
                logger.info(f"No reply token (mode={event.mode}), skipping event")
                result.skipped += 1
                return Outcome.CONTINUE

            case MessageEvent(message=TextMessage() as message, source=UserSource()):
                return await self._handle_user_text(event, message, result)

            case MessageEvent(message=TextMessage() as message, source=GroupSource() as source):
                return await self._handle_group_text(event, message, source, result)

            case MessageEvent(message=TextMessage(), source=RoomSource() as source):
                logger.info(f"Room ID= {source.room_id}")
                logger.info("Room ----- end")
                return Outcome.CONTINUE

            case MessageEvent(message=StickerMessage() as message):
                await self._reply(event.reply_token, format_sticker_reply(message), result)
                return Outcome.CONTINUE

            case MessageEvent(message=ImageMessage() as message):
                return await self._handle_image(event, message, result)

            case MessageEvent(message=UnsupportedMessage() as message):
                logger.info(f"Unsupported message content: {message.type}")
                return Outcome.CONTINUE

            case UnsupportedEvent():
                logger.info(f"Unsupported event: {event.type}")
                return Outcome.CONTINUE

        # Unreachable for the closed variant sets above
        logger.warning(f"Unhandled event: {event!r}")
        return Outcome.CONTINUE

    async def _handle_user_text(
        self, event: MessageEvent, message: TextMessage, result: DispatchResult
    ) -> Outcome:
        logger.info("1 on 1 message")

        response = await self._generate(chat, message.text)
        if not response.ok:
            logger.error(
                f"Got Gemini chat error: {response.error}",
                extra={"error_type": response.error_type},
            )
            result.skipped += 1
            return Outcome.CONTINUE

        await self._reply(event.reply_token, response.output or "", result)
        return Outcome.STOP

    async def _handle_group_text(
        self,
        event: MessageEvent,
        message: TextMessage,
        source: GroupSource,
        result: DispatchResult,
    ) -> Outcome:
        logger.info(f"Group ID= {source.group_id}")

        for mentionee in message.mentionees:
            logger.info(f"mention data= {mentionee!r}")
            if mentionee.type != "user":
                continue

            logger.info(f"Mentioned user ID= {mentionee.user_id} isSelf= {mentionee.is_self}")
            if mentionee.is_self:
                await self._reply(event.reply_token, GROUP_GREETING, result)
                return Outcome.STOP

        logger.info("Group ----- end")
        return Outcome.CONTINUE

    async def _handle_image(
        self, event: MessageEvent, message: ImageMessage, result: DispatchResult
    ) -> Outcome:
        try:
            data = await self.messaging.get_message_content(message.id)
        except LineContentError as e:
            logger.error(f"Got GetMessageContent err: {e}", extra={"message_id": message.id})
            result.skipped += 1
            return Outcome.CONTINUE

        response = await self._generate(describe_image, data)
        if response.ok:
            text = response.output or ""
        else:
            text = format_image_error(response.error or "")

        await self._reply(event.reply_token, text, result)
        return Outcome.CONTINUE

    async def _generate(self, call: Callable[[ModelBackend, object], ModelResponse], payload) -> ModelResponse:
        """Run a blocking model call in the default executor."""
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, call, self.model_backend, payload)
        except Exception as e:
            logger.error(f"Model backend raised: {e}", exc_info=True)
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                error=str(e),
            )

    async def _reply(self, reply_token: str, text: str, result: DispatchResult) -> bool:
        try:
            await self.messaging.reply_text(reply_token, text)
        except LineSenderError as e:
            logger.error(f"Reply failed: {e}")
            result.reply_failures += 1
            return False

        logger.info("Sent text reply.")
        result.replies_sent += 1
        return True
