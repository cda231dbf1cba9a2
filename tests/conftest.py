"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def channel_secret():
    return "test_channel_secret"


@pytest.fixture
def make_text_event():
    """Factory for raw LINE text message events."""

    def _make(
        text="Hello bot",
        source=None,
        reply_token="reply_token_1",
        mentionees=None,
        message_id="msg_1",
    ):
        message = {"type": "text", "id": message_id, "text": text}
        if mentionees is not None:
            message["mention"] = {"mentionees": mentionees}
        return {
            "type": "message",
            "mode": "active",
            "timestamp": 1707500000000,
            "webhookEventId": f"evt_{message_id}",
            "replyToken": reply_token,
            "source": source or {"type": "user", "userId": "U_user"},
            "message": message,
        }

    return _make


@pytest.fixture
def make_sticker_event():
    def _make(sticker_id="52002734", resource_type="STATIC", reply_token="reply_token_s"):
        return {
            "type": "message",
            "timestamp": 1707500000000,
            "replyToken": reply_token,
            "source": {"type": "user", "userId": "U_user"},
            "message": {
                "type": "sticker",
                "id": "msg_sticker",
                "packageId": "11537",
                "stickerId": sticker_id,
                "stickerResourceType": resource_type,
            },
        }

    return _make


@pytest.fixture
def make_image_event():
    def _make(message_id="msg_image", reply_token="reply_token_i", source=None):
        return {
            "type": "message",
            "timestamp": 1707500000000,
            "replyToken": reply_token,
            "source": source or {"type": "group", "groupId": "C_group", "userId": "U_user"},
            "message": {
                "type": "image",
                "id": message_id,
                "contentProvider": {"type": "line"},
            },
        }

    return _make
