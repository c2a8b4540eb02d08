"""FastAPI dependencies providing settings-bound services.

Stores are cheap and built per request. The model registry and the shared
HTTP client live on ``app.state`` so the registry's TTL cache survives across
requests.
"""

from __future__ import annotations

import os
from typing import Annotated

import httpx
from fastapi import Depends, Request

from core.config import Settings, get_settings
from services.lmstudio import LMStudioClient
from services.model_registry import ModelRegistry
from services.result_store import ResultStore
from services.score_store import ScoreStore


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_http_client(request: Request) -> httpx.AsyncClient | None:
    """Shared client opened by the app lifespan; None lets callers own one."""
    return getattr(request.app.state, "http_client", None)


HttpClient = Annotated[httpx.AsyncClient | None, Depends(get_http_client)]


def get_model_registry(request: Request, settings: SettingsDep) -> ModelRegistry:
    registry: ModelRegistry | None = getattr(
        request.app.state, "model_registry", None
    )
    if registry is None:
        registry = ModelRegistry(
            settings.models_config_path,
            os.environ,
            ttl_seconds=settings.MODEL_CACHE_TTL_SECONDS,
            discovery_timeout=settings.MODEL_DISCOVERY_TIMEOUT_SECONDS,
        )
        request.app.state.model_registry = registry
    return registry


def get_result_store(settings: SettingsDep) -> ResultStore:
    return ResultStore(settings.RESULTS_DIR)


def get_score_store(settings: SettingsDep) -> ScoreStore:
    return ScoreStore(settings.scores_path)


def get_lmstudio_client(client: HttpClient) -> LMStudioClient:
    return LMStudioClient(client)


Registry = Annotated[ModelRegistry, Depends(get_model_registry)]
Results = Annotated[ResultStore, Depends(get_result_store)]
Scores = Annotated[ScoreStore, Depends(get_score_store)]
LMStudio = Annotated[LMStudioClient, Depends(get_lmstudio_client)]
