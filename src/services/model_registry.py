"""Model registry: manual entries plus auto-discovery from provider servers.

``config/models.json`` lists providers (OpenAI-compatible servers whose
``/models`` endpoint is queried) and manual model entries. Manual entries win
over discovered ones with the same id. The merged list is cached for a short
TTL so the UI can poll without hammering every provider.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

import httpx

from core.exceptions import ModelNotFoundError
from schemas.benchmarks import ModelConfig, ModelsConfig, ProviderConfig


logger = logging.getLogger(__name__)

ENV_KEY_PREFIX = "env:"

# Non-chat models served next to chat models (embeddings, rerankers, ...)
SKIP_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE) for p in ("embed", "rerank", "whisper", "tts", "clip")
)


def resolve_api_key(value: str, environ: Mapping[str, str]) -> str:
    """Resolve ``env:NAME`` references against ``environ``; literals pass through."""
    if value.startswith(ENV_KEY_PREFIX):
        return environ.get(value[len(ENV_KEY_PREFIX) :], "")
    return value


def model_id_to_name(model_id: str) -> str:
    """``"qwen/qwen3-coder_30b"`` -> ``"Qwen3 Coder 30b"``."""
    base = model_id.rsplit("/", 1)[-1]
    return " ".join(w[:1].upper() + w[1:] for w in re.split(r"[-_]+", base) if w)


def should_skip_model(model_id: str) -> bool:
    return any(p.search(model_id) for p in SKIP_PATTERNS)


def load_models_config(path: Path) -> ModelsConfig:
    if not path.is_file():
        logger.warning("Model config %s not found; no models configured", path)
        return ModelsConfig()
    return ModelsConfig.model_validate_json(path.read_text(encoding="utf-8"))


@dataclass(frozen=True)
class _CacheEntry:
    fetched_at: float
    models: list[ModelConfig]


class ModelRegistry:
    """Owns the model list cache.

    Args:
        config_path: Location of ``models.json``.
        environ: Mapping used to resolve ``env:`` API key references.
        ttl_seconds: How long a discovered list stays fresh.
        clock: Monotonic time source, injectable for tests.
        client: Optional shared ``httpx.AsyncClient`` for discovery.
        discovery_timeout: Per-provider timeout in seconds.
    """

    def __init__(
        self,
        config_path: Path,
        environ: Mapping[str, str],
        *,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        client: httpx.AsyncClient | None = None,
        discovery_timeout: float = 5.0,
    ) -> None:
        self.config_path = config_path
        self._environ = environ
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._client = client
        self._discovery_timeout = discovery_timeout
        self._cache: _CacheEntry | None = None

    def reload(self) -> None:
        """Drop the cache so the next lookup re-reads config and re-discovers."""
        self._cache = None

    async def get_models(self) -> list[ModelConfig]:
        now = self._clock()
        if self._cache and now - self._cache.fetched_at < self._ttl_seconds:
            return self._cache.models

        models = await self._load()
        self._cache = _CacheEntry(fetched_at=now, models=models)
        return models

    async def get_model(self, model_id: str) -> ModelConfig:
        for model in await self.get_models():
            if model.id == model_id:
                return model
        raise ModelNotFoundError(f'Model "{model_id}" not found in config')

    async def _load(self) -> list[ModelConfig]:
        config = load_models_config(self.config_path)

        discovered_lists = await asyncio.gather(
            *(self._discover(provider) for provider in config.providers)
        )
        discovered = [m for models in discovered_lists for m in models]

        manual = [
            m.model_copy(update={"api_key": resolve_api_key(m.api_key, self._environ)})
            for m in config.models
        ]
        manual_ids = {m.id for m in manual}
        merged = manual + [m for m in discovered if m.id not in manual_ids]
        merged.sort(key=lambda m: m.name.lower())
        logger.debug(
            "Loaded %d models (%d manual, %d discovered)",
            len(merged),
            len(manual),
            len(discovered),
        )
        return merged

    async def _discover(self, provider: ProviderConfig) -> list[ModelConfig]:
        """List chat models served by ``provider``; offline providers yield []."""
        url = f"{provider.base_url.rstrip('/')}/models"
        api_key = resolve_api_key(provider.api_key, self._environ)
        headers: dict[str, str] = {}
        if api_key and api_key != "not-needed":
            headers["Authorization"] = f"Bearer {api_key}"

        try:
            if self._client is not None:
                response = await self._client.get(
                    url, headers=headers, timeout=self._discovery_timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._discovery_timeout) as client:
                    response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Provider %s unreachable: %s", provider.name, e)
            return []

        if not response.is_success:
            logger.warning(
                "Provider %s model listing returned HTTP %s",
                provider.name,
                response.status_code,
            )
            return []

        try:
            entries = response.json().get("data") or []
        except (ValueError, AttributeError):
            logger.warning(
                "Provider %s returned an unreadable model list", provider.name
            )
            return []

        models: list[ModelConfig] = []
        for entry in entries:
            model_id = entry.get("id") if isinstance(entry, dict) else None
            if not isinstance(model_id, str) or should_skip_model(model_id):
                continue
            models.append(
                ModelConfig(
                    id=model_id,
                    name=model_id_to_name(model_id),
                    base_url=provider.base_url,
                    api_key=api_key,
                    default_model=model_id,
                    provider=provider.type,
                    source=provider.name,
                )
            )
        return models
