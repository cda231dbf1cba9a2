"""
LINE Messaging API Client

Sends replies back to LINE and downloads message content.
No formatting intelligence. No retries. No logic.
"""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.line.me"
DEFAULT_DATA_API_BASE_URL = "https://api-data.line.me"


class LineSenderError(Exception):
    """Failed to send a reply to LINE."""
    pass


class LineContentError(Exception):
    """Failed to download message content from LINE."""
    pass


class LineMessagingClient:
    """
    Thin wrapper over the two LINE endpoints this bot uses:

    - POST {api}/v2/bot/message/reply
    - GET  {data_api}/v2/bot/message/{messageId}/content
    """

    def __init__(
        self,
        access_token: str,
        api_base_url: str = DEFAULT_API_BASE_URL,
        data_api_base_url: str = DEFAULT_DATA_API_BASE_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            access_token: Channel access token (long-lived or v2.1)
            api_base_url: Messaging API host
            data_api_base_url: Content API host
            timeout: Request timeout in seconds; None keeps httpx defaults
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.access_token = access_token
        self.api_base_url = api_base_url.rstrip("/")
        self.data_api_base_url = data_api_base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs = {
            "headers": {"Authorization": f"Bearer {self.access_token}"},
            "transport": self._transport,
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return httpx.AsyncClient(**kwargs)

    async def reply_text(self, reply_token: str, text: str) -> dict:
        """
        Reply to an event with a single text message.

        The reply token is one-time; the call is made exactly once.

        Returns:
            Decoded JSON body from LINE (usually {"sentMessages": [...]})

        Raises:
            LineSenderError: If the send fails
        """

        payload = {
            "replyToken": reply_token,
            "messages": [
                {
                    "type": "text",
                    "text": text,
                }
            ],
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.api_base_url}/v2/bot/message/reply",
                    json=payload,
                )
        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                extra={"reply_token": reply_token, "error": str(e)},
            )
            raise LineSenderError(f"HTTP request failed: {e}")

        if response.status_code != 200:
            error_text = response.text
            logger.error(
                f"LINE reply API error: {response.status_code} - {error_text}",
                extra={
                    "status_code": response.status_code,
                    "error_body": error_text,
                }
            )
            raise LineSenderError(
                f"LINE reply API returned {response.status_code}: {error_text}"
            )

        logger.debug("Reply delivered", extra={"reply_token": reply_token})

        try:
            return response.json()
        except ValueError:
            return {}

    async def get_message_content(self, message_id: str) -> bytes:
        """
        Download the binary content (image, video, audio, file) of a message.

        Raises:
            LineContentError: If the download fails
        """

        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.data_api_base_url}/v2/bot/message/{message_id}/content",
                )
        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                extra={"message_id": message_id, "error": str(e)},
            )
            raise LineContentError(f"HTTP request failed: {e}")

        if response.status_code != 200:
            raise LineContentError(
                f"LINE content API returned {response.status_code}: {response.text}"
            )

        return response.content
