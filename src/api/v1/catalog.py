"""Benchmark and model catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from dependencies.services import Registry, SettingsDep
from schemas.api import ApiResponse
from schemas.benchmarks import BenchmarkInfo, PublicModel
from services.benchmarks import list_benchmarks


router = APIRouter(tags=["catalog"])


@router.get("/benchmarks", response_model=list[BenchmarkInfo])
def get_benchmarks(settings: SettingsDep) -> list[BenchmarkInfo]:
    return list_benchmarks(settings.BENCHMARKS_DIR)


@router.get("/models", response_model=list[PublicModel])
async def get_models(registry: Registry) -> list[PublicModel]:
    """Configured and discovered models; API keys are never returned."""
    return [PublicModel.from_config(m) for m in await registry.get_models()]


@router.post("/models/reload", response_model=ApiResponse[list[PublicModel]])
async def reload_models(registry: Registry) -> ApiResponse[list[PublicModel]]:
    """Drop the model cache and rediscover immediately."""
    registry.reload()
    models = [PublicModel.from_config(m) for m in await registry.get_models()]
    return ApiResponse(
        data=models, message=f"Reloaded {len(models)} model(s)"
    )
