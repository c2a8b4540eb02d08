"""Schemas for benchmark run SSE streaming."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from schemas.benchmarks import RunResult


class RunSseEvent(BaseModel):
    """Flat SSE envelope for ``/run-benchmark``.

    Only the fields relevant to ``type`` are set; unset fields are omitted
    from the wire payload.
    """

    type: Literal["log", "token", "preview", "result", "done"]
    message: str | None = None
    model_id: str | None = None
    delta: str | None = None
    extracted_html: str | None = None
    token_count: int | None = None
    elapsed_ms: int | None = None
    result: RunResult | None = None

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def log(cls, message: str) -> RunSseEvent:
        return cls(type="log", message=message)

    @classmethod
    def token(cls, model_id: str, delta: str) -> RunSseEvent:
        return cls(type="token", model_id=model_id, delta=delta)

    @classmethod
    def preview(
        cls, model_id: str, extracted_html: str, token_count: int, elapsed_ms: int
    ) -> RunSseEvent:
        return cls(
            type="preview",
            model_id=model_id,
            extracted_html=extracted_html,
            token_count=token_count,
            elapsed_ms=elapsed_ms,
        )

    @classmethod
    def from_result(cls, result: RunResult) -> RunSseEvent:
        return cls(type="result", result=result)

    @classmethod
    def done(cls, message: str = "All models finished") -> RunSseEvent:
        return cls(type="done", message=message)

    def to_sse(self) -> str:
        """Serialize event to SSE format."""
        return f"data: {self.model_dump_json(exclude_none=True)}\n\n"
