from .base import ModelBackend
from .types import ModelRequest, ModelResponse


class StubModelBackend(ModelBackend):
    """
    Deterministic fake model for local runs and CI.

    Never calls the network. A prompt of "fail" produces an error response so
    the failure branches can be exercised end to end.
    """

    def generate(self, request: ModelRequest) -> ModelResponse:
        if request.prompt == "fail":
            return ModelResponse(
                status="recoverable_error",
                error_type="invalid_output",
                error="stub failure",
                metadata={"backend": "stub"},
            )

        if request.task == "describe_image":
            size = len(request.image or b"")
            return ModelResponse(
                status="success",
                output=f"This is a stubbed description of a {size}-byte image.",
                metadata={"backend": "stub"},
            )

        return ModelResponse(
            status="success",
            output=f"Stub reply: {request.prompt}",
            metadata={"backend": "stub"},
        )
