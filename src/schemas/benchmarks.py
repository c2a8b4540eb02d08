"""Schemas for benchmarks, model configuration, run results and scores."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ConfigFileModel(BaseModel):
    """Base for models read from JSON config files written in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BenchmarkInfo(BaseModel):
    """A benchmark prompt discovered on disk."""

    id: str
    name: str
    prompt: str


class ModelConfig(_ConfigFileModel):
    """An OpenAI-compatible model endpoint.

    ``base_url`` already includes the API prefix (e.g. ``http://localhost:1234/v1``);
    requests go to ``{base_url}/chat/completions``.
    """

    id: str
    name: str
    base_url: str
    api_key: str = ""
    default_model: str
    provider: Literal["openai", "anthropic"] = "openai"
    source: str | None = None

    @property
    def sends_auth_header(self) -> bool:
        return bool(self.api_key) and self.api_key != "not-needed"


class ProviderConfig(_ConfigFileModel):
    """A server whose ``/models`` listing is auto-discovered."""

    id: str
    name: str
    base_url: str
    api_key: str = ""
    type: Literal["openai", "anthropic"] = "openai"


class ModelsConfig(_ConfigFileModel):
    """Contents of ``config/models.json``."""

    providers: list[ProviderConfig] = Field(default_factory=list)
    models: list[ModelConfig] = Field(default_factory=list)


class PublicModel(BaseModel):
    """A model as listed to clients; the API key itself is never exposed."""

    id: str
    name: str
    base_url: str
    default_model: str
    provider: str
    source: str | None = None
    has_api_key: bool

    @classmethod
    def from_config(cls, model: ModelConfig) -> PublicModel:
        return cls(
            id=model.id,
            name=model.name,
            base_url=model.base_url,
            default_model=model.default_model,
            provider=model.provider,
            source=model.source,
            has_api_key=model.sends_auth_header,
        )


class RunResult(BaseModel):
    """Outcome of one benchmark/model pairing as reported to clients."""

    benchmark_id: str
    model_id: str
    model_name: str
    raw_response: str = ""
    extracted_code: str = ""
    result_path: str = ""
    duration_ms: int = 0
    success: bool
    error: str | None = None


class RunBenchmarkRequest(BaseModel):
    """Run one benchmark against several models."""

    benchmark_id: str = Field(..., min_length=1)
    model_ids: list[str] = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class RunAllBenchmarksRequest(BaseModel):
    """Run every benchmark against one model."""

    model_id: str = Field(..., min_length=1)

    model_config = ConfigDict(extra="forbid")


class RunAllBenchmarksResponse(BaseModel):
    results: list[RunResult]


class Score(BaseModel):
    """A human score for one benchmark/model pairing."""

    benchmark_id: str
    model_id: str
    scores: dict[str, float]
    notes: str = ""
    scored_by: str = "manual"
    timestamp: int


class ScoreIn(BaseModel):
    """Payload for creating or replacing a score."""

    benchmark_id: str = Field(..., min_length=1)
    model_id: str = Field(..., min_length=1)
    scores: dict[str, float]
    notes: str | None = None
    scored_by: str | None = None

    model_config = ConfigDict(extra="forbid")


class ScoringCriterion(BaseModel):
    id: str
    name: str
    description: str = ""
    min: float = 0
    max: float = 10


class ModelManagementRequest(BaseModel):
    """Load, unload or unload every model on an LM Studio host."""

    action: Literal["load", "unload", "unload-all"]
    base_url: str = Field(..., min_length=1)
    model_id: str | None = None

    model_config = ConfigDict(extra="forbid")
