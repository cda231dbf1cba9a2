"""
Model boundary layer for generative-AI calls.

This package provides a clean abstraction for model invocation,
allowing the dispatcher to remain agnostic of the underlying backend.

Supported backends:
- StubModelBackend: Deterministic fake model (default for CI/tests)
- GeminiModelBackend: Google Gemini generateContent API

Example usage:
    from inference import GeminiModelBackend, chat

    backend = GeminiModelBackend(api_key="...")
    response = chat(backend, "Hello, world!")
"""

from .types import ModelRequest, ModelResponse, ModelStatus, ModelTask
from .base import ModelBackend
from .stub import StubModelBackend
from .gemini import IMAGE_PROMPT, GeminiModelBackend, chat, describe_image

__all__ = [
    "ModelRequest",
    "ModelResponse",
    "ModelStatus",
    "ModelTask",
    "ModelBackend",
    "StubModelBackend",
    "GeminiModelBackend",
    "IMAGE_PROMPT",
    "chat",
    "describe_image",
]
