"""
LINE Callback Parsing Tests

Conversion of raw webhook bodies into the closed event/message/source variants.
"""

import json

import pytest
from pydantic import ValidationError

from transport.line.parse import CallbackParseError, parse_callback
from transport.line.schemas import (
    CallbackRequest,
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


class TestParseMessages:
    """Message kinds."""

    def test_parse_text_message_from_user(self, make_text_event):
        body = json.dumps({"destination": "U_bot", "events": [make_text_event("Hi")]})

        callback = parse_callback(body.encode())

        assert isinstance(callback, CallbackRequest)
        assert callback.destination == "U_bot"
        assert len(callback.events) == 1

        event = callback.events[0]
        assert isinstance(event, MessageEvent)
        assert event.reply_token == "reply_token_1"
        assert isinstance(event.source, UserSource)
        assert event.source.user_id == "U_user"
        assert isinstance(event.message, TextMessage)
        assert event.message.text == "Hi"
        assert event.message.mentionees == []

    def test_parse_group_text_with_mentions(self, make_text_event):
        raw = make_text_event(
            "@bot hello",
            source={"type": "group", "groupId": "C_group", "userId": "U_user"},
            mentionees=[
                {"index": 0, "length": 4, "type": "user", "userId": "U_bot", "isSelf": True},
                {"index": 5, "length": 4, "type": "all"},
            ],
        )

        event = parse_callback({"events": [raw]}).events[0]

        assert isinstance(event.source, GroupSource)
        assert event.source.group_id == "C_group"
        mentionees = event.message.mentionees
        assert [m.type for m in mentionees] == ["user", "all"]
        assert mentionees[0].is_self is True
        assert mentionees[0].user_id == "U_bot"
        assert mentionees[1].is_self is False

    def test_parse_room_source(self, make_text_event):
        raw = make_text_event(source={"type": "room", "roomId": "R_room"})

        event = parse_callback({"events": [raw]}).events[0]

        assert isinstance(event.source, RoomSource)
        assert event.source.room_id == "R_room"
        assert event.source.user_id is None

    def test_parse_sticker_message(self, make_sticker_event):
        event = parse_callback({"events": [make_sticker_event("123", "ANIMATION")]}).events[0]

        assert isinstance(event.message, StickerMessage)
        assert event.message.sticker_id == "123"
        assert event.message.sticker_resource_type == "ANIMATION"
        assert event.message.package_id == "11537"

    def test_parse_image_message(self, make_image_event):
        event = parse_callback({"events": [make_image_event("img_42")]}).events[0]

        assert isinstance(event.message, ImageMessage)
        assert event.message.id == "img_42"

    def test_unknown_message_type_is_unsupported(self, make_text_event):
        raw = make_text_event()
        raw["message"] = {"type": "location", "id": "loc_1", "latitude": 25.0}

        event = parse_callback({"events": [raw]}).events[0]

        assert isinstance(event, MessageEvent)
        assert isinstance(event.message, UnsupportedMessage)
        assert event.message.type == "location"

    def test_extra_fields_ignored(self, make_text_event):
        raw = make_text_event()
        raw["message"]["emojis"] = [{"index": 0, "productId": "x", "emojiId": "001"}]
        raw["deliveryContext"] = {"isRedelivery": False}

        event = parse_callback({"events": [raw]}).events[0]
        assert event.message.text == "Hello bot"


class TestParseEvents:
    """Event kinds and batch shape."""

    def test_non_message_event_is_unsupported(self):
        body = {"events": [{"type": "follow", "timestamp": 1, "replyToken": "t",
                            "source": {"type": "user", "userId": "U"}}]}

        event = parse_callback(body).events[0]

        assert isinstance(event, UnsupportedEvent)
        assert event.type == "follow"

    def test_events_keep_arrival_order(self, make_text_event, make_sticker_event):
        body = {"events": [
            make_text_event("first", message_id="m1"),
            make_sticker_event(),
            make_text_event("third", message_id="m3"),
        ]}

        events = parse_callback(body).events

        assert [type(e.message) for e in events] == [TextMessage, StickerMessage, TextMessage]
        assert events[0].message.text == "first"
        assert events[2].message.text == "third"

    def test_standby_event_without_reply_token(self, make_text_event, make_sticker_event):
        """Standby-mode events have no replyToken and must not break the batch."""
        standby = make_text_event("hi")
        standby["mode"] = "standby"
        del standby["replyToken"]

        events = parse_callback({"events": [standby, make_sticker_event()]}).events

        assert len(events) == 2
        assert events[0].reply_token is None
        assert events[0].mode == "standby"
        assert events[0].message.text == "hi"
        assert events[1].reply_token == "reply_token_s"

    def test_empty_events_for_webhook_verification(self):
        callback = parse_callback(b'{"destination": "U_bot", "events": []}')
        assert callback.events == []

    def test_parsed_events_are_immutable(self, make_text_event):
        event = parse_callback({"events": [make_text_event()]}).events[0]

        with pytest.raises(ValidationError):
            event.reply_token = "other"  # type: ignore


class TestParseErrors:
    """Malformed bodies raise CallbackParseError."""

    @pytest.mark.parametrize("body", [b"not json", b"\xff\xfe", b"[1, 2]", b'{"events": {}}'])
    def test_malformed_body(self, body):
        with pytest.raises(CallbackParseError):
            parse_callback(body)

    def test_event_without_type(self):
        with pytest.raises(CallbackParseError):
            parse_callback({"events": [{"timestamp": 1}]})

    def test_null_destination(self):
        with pytest.raises(CallbackParseError):
            parse_callback(b'{"destination": null, "events": []}')

    def test_unknown_source_type(self, make_text_event):
        raw = make_text_event(source={"type": "channel", "channelId": "X"})

        with pytest.raises(CallbackParseError, match="source type"):
            parse_callback({"events": [raw]})

    def test_text_message_without_text(self, make_text_event):
        raw = make_text_event()
        del raw["message"]["text"]

        with pytest.raises(CallbackParseError):
            parse_callback({"events": [raw]})

    def test_sticker_without_sticker_id(self, make_sticker_event):
        raw = make_sticker_event()
        del raw["message"]["stickerId"]

        with pytest.raises(CallbackParseError):
            parse_callback({"events": [raw]})
