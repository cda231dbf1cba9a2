from dataclasses import dataclass
from typing import Optional, Dict, Any, Literal

ModelStatus = Literal["success", "recoverable_error", "fatal_error"]
ModelTask = Literal["chat", "describe_image"]


@dataclass
class ModelRequest:
    task: ModelTask            # "chat" (text prompt) or "describe_image"
    prompt: str
    image: Optional[bytes] = None
    image_mime_type: str = "image/png"
    temperature: Optional[float] = None
    timeout_s: Optional[float] = None   # None keeps the HTTP library default


@dataclass
class ModelResponse:
    status: ModelStatus
    output: Optional[str] = None
    error_type: Optional[str] = None   # timeout | http_error | blocked | empty_response | backend_unavailable
    error: Optional[str] = None        # human-readable error text
    metadata: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"
