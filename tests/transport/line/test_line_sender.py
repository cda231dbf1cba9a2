"""
LINE Messaging Client Tests

Reply and content download against a mocked HTTP transport.
"""

import json

import httpx
import pytest

from transport.line.sender import LineContentError, LineMessagingClient, LineSenderError


def _client(handler) -> LineMessagingClient:
    return LineMessagingClient(
        access_token="test_token",
        transport=httpx.MockTransport(handler),
    )


class TestReplyText:

    @pytest.mark.asyncio
    async def test_reply_posts_single_text_message(self):
        captured = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"sentMessages": [{"id": "1", "quoteToken": "q"}]})

        result = await _client(handler).reply_text("reply_token_1", "你好")

        assert result == {"sentMessages": [{"id": "1", "quoteToken": "q"}]}
        assert len(captured) == 1

        request = captured[0]
        assert request.method == "POST"
        assert str(request.url) == "https://api.line.me/v2/bot/message/reply"
        assert request.headers["Authorization"] == "Bearer test_token"
        assert json.loads(request.content) == {
            "replyToken": "reply_token_1",
            "messages": [{"type": "text", "text": "你好"}],
        }

    @pytest.mark.asyncio
    async def test_reply_error_status_raises(self):
        def handler(request):
            return httpx.Response(400, json={"message": "Invalid reply token"})

        with pytest.raises(LineSenderError, match="400"):
            await _client(handler).reply_text("expired", "hi")

    @pytest.mark.asyncio
    async def test_reply_transport_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(LineSenderError, match="HTTP request failed"):
            await _client(handler).reply_text("token", "hi")

    @pytest.mark.asyncio
    async def test_reply_with_empty_body(self):
        def handler(request):
            return httpx.Response(200, content=b"")

        assert await _client(handler).reply_text("token", "hi") == {}

    @pytest.mark.asyncio
    async def test_custom_base_url(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, json={})

        client = LineMessagingClient(
            access_token="t",
            api_base_url="http://localhost:9000/",
            transport=httpx.MockTransport(handler),
        )
        await client.reply_text("token", "hi")

        assert urls == ["http://localhost:9000/v2/bot/message/reply"]


class TestGetMessageContent:

    @pytest.mark.asyncio
    async def test_downloads_bytes_from_data_api(self):
        urls = []

        def handler(request):
            urls.append(str(request.url))
            return httpx.Response(200, content=b"\x89PNG\r\n", headers={"Content-Type": "image/png"})

        data = await _client(handler).get_message_content("img_42")

        assert data == b"\x89PNG\r\n"
        assert urls == ["https://api-data.line.me/v2/bot/message/img_42/content"]

    @pytest.mark.asyncio
    async def test_not_found_raises(self):
        def handler(request):
            return httpx.Response(404, text="Not found")

        with pytest.raises(LineContentError, match="404"):
            await _client(handler).get_message_content("gone")

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(LineContentError):
            await _client(handler).get_message_content("img")
