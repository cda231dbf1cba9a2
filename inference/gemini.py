import base64
import logging
from typing import Optional

import requests

from .base import ModelBackend
from .types import ModelRequest, ModelResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TEMPERATURE = 0.8

IMAGE_PROMPT = "Describe this image with scientific detail, reply in zh-TW:"


def _join_candidate_text(data: dict) -> str:
    """
    Concatenate every text part of every candidate.

    Non-text parts (function calls, inline data) are skipped.
    """
    pieces = []
    for candidate in data.get("candidates") or []:
        content = candidate.get("content") or {}
        for part in content.get("parts") or []:
            text = part.get("text")
            if text:
                pieces.append(text)
    return "".join(pieces)


def _error_detail(resp: requests.Response) -> str:
    """Pull Google's error.message out of an error body, falling back to raw text."""
    try:
        return resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return resp.text


class GeminiModelBackend(ModelBackend):
    """
    Google Gemini backend over the generateContent REST endpoint.

    Text mode sends the prompt as a single user turn. Image mode sends the
    raw image bytes inline (base64) followed by the prompt. There is no
    conversation history: every call is a fresh single-turn request.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        vision_model_name: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout_s: Optional[float] = None,
    ):
        """
        Initialize Gemini backend.

        Args:
            api_key:           Google AI Studio API key
            model_name:        Model used for text prompts
            vision_model_name: Model used for images (defaults to model_name)
            base_url:          API root, including the version segment
            temperature:       Sampling temperature when the request sets none
            timeout_s:         Request timeout when the request sets none
        """
        if not api_key:
            raise ValueError("Gemini API key is required")

        self.api_key = api_key
        self.model_name = model_name
        self.vision_model_name = vision_model_name or model_name
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.timeout_s = timeout_s

    def _build_payload(self, request: ModelRequest) -> dict:
        parts = []
        if request.task == "describe_image":
            parts.append({
                "inline_data": {
                    "mime_type": request.image_mime_type,
                    "data": base64.b64encode(request.image or b"").decode("ascii"),
                }
            })
        parts.append({"text": request.prompt})

        temperature = request.temperature
        if temperature is None:
            temperature = self.temperature

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": temperature},
        }

    def generate(self, request: ModelRequest) -> ModelResponse:
        """
        Generate a response using Gemini generateContent.

        Flow:
          1. Pick the text or vision model from request.task
          2. POST the single-turn payload
          3. Concatenate the text of every candidate part

        Returns:
            ModelResponse; failures are reported through status/error, never raised
        """
        model = self.vision_model_name if request.task == "describe_image" else self.model_name
        base_metadata = {"backend": "gemini", "model": model, "task": request.task}

        if request.task == "describe_image" and not request.image:
            return ModelResponse(
                status="fatal_error",
                error_type="invalid_input",
                error="no image data",
                metadata=base_metadata,
            )

        timeout = request.timeout_s if request.timeout_s is not None else self.timeout_s

        try:
            resp = requests.post(
                f"{self.base_url}/models/{model}:generateContent",
                params={"key": self.api_key},
                json=self._build_payload(request),
                timeout=timeout,
            )

            if resp.status_code != 200:
                detail = _error_detail(resp)
                logger.error(
                    f"Gemini API error: {resp.status_code} - {detail}",
                    extra={"status_code": resp.status_code, "model": model},
                )
                return ModelResponse(
                    status="fatal_error",
                    error_type="http_error",
                    error=f"googleapi: Error {resp.status_code}: {detail}",
                    metadata={**base_metadata, "status_code": resp.status_code},
                )

            data = resp.json()

        except requests.Timeout:
            return ModelResponse(
                status="recoverable_error",
                error_type="timeout",
                error="request to Gemini timed out",
                metadata=base_metadata,
            )

        except (requests.RequestException, ValueError) as e:
            return ModelResponse(
                status="fatal_error",
                error_type="backend_unavailable",
                error=str(e),
                metadata=base_metadata,
            )

        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            return ModelResponse(
                status="fatal_error",
                error_type="blocked",
                error=f"blocked: prompt: {block_reason}",
                metadata=base_metadata,
            )

        output = _join_candidate_text(data)
        if not output:
            finish_reason = next(
                (c.get("finishReason") for c in data.get("candidates") or [] if c.get("finishReason")),
                None,
            )
            return ModelResponse(
                status="fatal_error",
                error_type="empty_response",
                error=f"empty response (finishReason={finish_reason})" if finish_reason else "empty response",
                metadata=base_metadata,
            )

        return ModelResponse(
            status="success",
            output=output,
            metadata={**base_metadata, "usage": data.get("usageMetadata")},
        )


def chat(backend: ModelBackend, text: str) -> ModelResponse:
    """Text mode: generate a reply to a prompt."""
    return backend.generate(ModelRequest(task="chat", prompt=text))


_IMAGE_SIGNATURES = (
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)


def sniff_image_mime_type(data: bytes, default: str = "image/png") -> str:
    """Guess the MIME type from magic bytes; LINE content is usually JPEG."""
    for signature, mime_type in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime_type
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return default


def describe_image(backend: ModelBackend, image: bytes, mime_type: Optional[str] = None) -> ModelResponse:
    """Image mode: generate a description of raw image bytes."""
    return backend.generate(
        ModelRequest(
            task="describe_image",
            prompt=IMAGE_PROMPT,
            image=image,
            image_mime_type=mime_type or sniff_image_mime_type(image),
        )
    )
