"""Error taxonomy for calls to OpenAI-compatible inference endpoints.

Each exception carries a stable ``error_code`` so the API layer can report a
failed run consistently. Only connection failures are retried; see
``services.llm.runner``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, eq=False)
class InferenceError(Exception):
    """Base class for inference endpoint errors."""

    message: str
    error_code: str

    def __str__(self) -> str:
        return self.message


class InferenceAPIError(InferenceError):
    """Non-2xx response from the endpoint. Never retried."""

    def __init__(self, status_code: int, body: str, model_name: str) -> None:
        super().__init__(
            message=f"API error {status_code} from {model_name}: {body}",
            error_code="api_error",
        )
        self.status_code = status_code
        self.body = body


class InferenceConnectionError(InferenceError):
    """No response could be obtained, even after the single retry."""

    def __init__(self, model_name: str, reason: str) -> None:
        super().__init__(
            message=f"Connection to {model_name} failed: {reason}",
            error_code="connection_error",
        )
