"""LM Studio load/unload endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, status

from dependencies.services import LMStudio
from schemas.benchmarks import ModelManagementRequest


router = APIRouter(prefix="/model-management", tags=["model-management"])


@router.get("")
async def get_model_states(
    lmstudio: LMStudio, base_url: str | None = None
) -> dict[str, dict[str, Any]]:
    """Loaded state of every model the LM Studio host knows about."""
    if not base_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="base_url query param required",
        )
    try:
        return await lmstudio.get_model_states(base_url)
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.post("")
async def manage_model(
    body: ModelManagementRequest, lmstudio: LMStudio
) -> dict[str, Any]:
    try:
        if body.action == "unload-all":
            return await lmstudio.unload_all_models(body.base_url)
        if not body.model_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"model_id required for {body.action}",
            )
        if body.action == "load":
            return await lmstudio.load_model(body.base_url, body.model_id)
        return await lmstudio.unload_model(body.base_url, body.model_id)
    except ValueError as e:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
