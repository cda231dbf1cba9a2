from abc import ABC, abstractmethod
from .types import ModelRequest, ModelResponse


class ModelBackend(ABC):
    """
    Generative-AI backend used by the event dispatcher.

    Serves two tasks: "chat" (text prompt → reply) and "describe_image"
    (raw image bytes → description). Implementations report failures through
    ModelResponse.status instead of raising.
    """

    @abstractmethod
    def generate(self, request: ModelRequest) -> ModelResponse:
        """Run one single-turn request; blocking."""
        raise NotImplementedError
