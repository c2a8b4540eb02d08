"""LM Studio model management over its native REST API.

Model endpoints are configured with an OpenAI-compatible base URL such as
``http://localhost:1234/v1``; management calls go to the same host under
``/api/v1/models``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from urllib.parse import urlsplit

import httpx


logger = logging.getLogger(__name__)

STATES_TIMEOUT_SECONDS = 5.0


def lmstudio_host(base_url: str) -> str:
    """Origin (scheme, host and port) of ``base_url``."""
    parts = urlsplit(base_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Invalid base URL: {base_url!r}")
    return f"{parts.scheme}://{parts.netloc}"


def _error_text(response: httpx.Response) -> str:
    return response.text or f"HTTP {response.status_code}"


class LMStudioClient:
    """Thin async client; failures come back as ``success: False`` payloads."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def _request(
        self, method: str, url: str, *, json: Any = None, timeout: float | None = None
    ) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, json=json, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as client:
            return await client.request(method, url, json=json)

    async def list_models(self, base_url: str) -> list[dict[str, Any]]:
        """Raw model entries; an unreachable host yields []."""
        url = f"{lmstudio_host(base_url)}/api/v1/models"
        try:
            response = await self._request("GET", url, timeout=STATES_TIMEOUT_SECONDS)
        except httpx.HTTPError as e:
            logger.warning("LM Studio at %s unreachable: %s", url, e)
            return []
        if not response.is_success:
            return []
        try:
            models = response.json().get("models") or []
        except (ValueError, AttributeError):
            return []
        return [m for m in models if isinstance(m, dict)]

    async def get_model_states(self, base_url: str) -> dict[str, dict[str, Any]]:
        """Map each model key to its loaded state and display details."""
        states: dict[str, dict[str, Any]] = {}
        for model in await self.list_models(base_url):
            key = model.get("key")
            if not isinstance(key, str):
                continue
            instances = model.get("loaded_instances") or []
            quantization = model.get("quantization") or {}
            states[key] = {
                "loaded": bool(instances),
                "instance_id": instances[0].get("id") if instances else None,
                "display_name": model.get("display_name", key),
                "params": model.get("params_string") or "",
                "quantization": quantization.get("name", ""),
                "size_mb": round((model.get("size_bytes") or 0) / 1024 / 1024),
            }
        return states

    async def load_model(self, base_url: str, model_id: str) -> dict[str, Any]:
        url = f"{lmstudio_host(base_url)}/api/v1/models/load"
        try:
            response = await self._request("POST", url, json={"model": model_id})
        except httpx.HTTPError as e:
            logger.warning("Loading %s failed: %s", model_id, e)
            return {"success": False, "error": str(e)}
        if not response.is_success:
            return {"success": False, "error": _error_text(response)}
        try:
            load_time = response.json().get("load_time_seconds")
        except (ValueError, AttributeError):
            load_time = None
        logger.info("Loaded %s on %s", model_id, url)
        return {"success": True, "load_time": load_time}

    async def unload_model(self, base_url: str, instance_id: str) -> dict[str, Any]:
        url = f"{lmstudio_host(base_url)}/api/v1/models/unload"
        try:
            response = await self._request(
                "POST", url, json={"instance_id": instance_id}
            )
        except httpx.HTTPError as e:
            logger.warning("Unloading %s failed: %s", instance_id, e)
            return {"success": False, "error": str(e)}
        if not response.is_success:
            return {"success": False, "error": _error_text(response)}
        logger.info("Unloaded %s on %s", instance_id, url)
        return {"success": True}

    async def unload_all_models(self, base_url: str) -> dict[str, list[str]]:
        """Unload every loaded instance concurrently."""
        instance_ids = [
            instance["id"]
            for model in await self.list_models(base_url)
            for instance in model.get("loaded_instances") or []
            if isinstance(instance, dict) and "id" in instance
        ]
        outcomes = await asyncio.gather(
            *(self.unload_model(base_url, i) for i in instance_ids)
        )

        unloaded: list[str] = []
        errors: list[str] = []
        for instance_id, outcome in zip(instance_ids, outcomes):
            if outcome["success"]:
                unloaded.append(instance_id)
            else:
                errors.append(f"{instance_id}: {outcome['error']}")
        return {"unloaded": unloaded, "errors": errors}
