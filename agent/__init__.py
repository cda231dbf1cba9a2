"""
Bot logic: decides how each inbound event is answered.
"""

from .dispatcher import (
    GROUP_GREETING,
    IMAGE_ERROR_PREFIX,
    DispatchResult,
    EventDispatcher,
    Outcome,
    format_image_error,
    format_sticker_reply,
)

__all__ = [
    "EventDispatcher",
    "DispatchResult",
    "Outcome",
    "GROUP_GREETING",
    "IMAGE_ERROR_PREFIX",
    "format_sticker_reply",
    "format_image_error",
]
