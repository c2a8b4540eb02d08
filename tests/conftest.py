"""Shared test fixtures for pytest.

ENVIRONMENT is forced to ``test`` before the app is imported so settings never
pick up a developer's ``.env.dev``. Each API test gets its own benchmarks,
config and results directories under ``tmp_path``.
"""

import json
import os
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient


os.environ["ENVIRONMENT"] = "test"

from core.config import Settings, get_settings
from dependencies.services import get_model_registry
from main import app
from services.model_registry import ModelRegistry


INFERENCE_BASE_URL = "http://inference.test/v1"

BOUNCING_BALL_PROMPT = "Make a bouncing ball animation in a single HTML file."


def write_models_config(config_dir: Path, models: list[dict] | None = None) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    if models is None:
        models = [
            {
                "id": "local/coder",
                "name": "Local Coder",
                "baseUrl": INFERENCE_BASE_URL,
                "apiKey": "not-needed",
                "defaultModel": "coder-7b",
            },
            {
                "id": "remote/big",
                "name": "Remote Big",
                "baseUrl": INFERENCE_BASE_URL,
                "apiKey": "env:REMOTE_API_KEY",
                "defaultModel": "big-70b",
            },
        ]
    (config_dir / "models.json").write_text(
        json.dumps({"providers": [], "models": models}), encoding="utf-8"
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    benchmarks_dir = tmp_path / "benchmarks"
    (benchmarks_dir / "bouncing-ball").mkdir(parents=True)
    (benchmarks_dir / "bouncing-ball" / "prompt.txt").write_text(
        BOUNCING_BALL_PROMPT, encoding="utf-8"
    )
    config_dir = tmp_path / "config"
    write_models_config(config_dir)
    (config_dir / "scoring.json").write_text(
        json.dumps(
            [
                {"id": "visual", "name": "Visual"},
                {"id": "functionality", "name": "Function"},
            ]
        ),
        encoding="utf-8",
    )
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        ENVIRONMENT="test",
        BENCHMARKS_DIR=benchmarks_dir,
        RESULTS_DIR=tmp_path / "results",
        CONFIG_DIR=config_dir,
        CONNECT_RETRY_DELAY_SECONDS=0,
        PREVIEW_INTERVAL_MS=0,
    )


@pytest.fixture
def registry(settings: Settings) -> ModelRegistry:
    return ModelRegistry(
        settings.models_config_path, {"REMOTE_API_KEY": "sk-remote-test"}
    )


@pytest.fixture
def api_app(
    settings: Settings, registry: ModelRegistry
) -> Generator[FastAPI, None, None]:
    """The real app with settings and registry bound to the temp directories."""
    original = dict(app.dependency_overrides)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_model_registry] = lambda: registry
    yield app
    app.dependency_overrides = original


@pytest.fixture
def client(api_app: FastAPI) -> TestClient:
    # No context manager: the lifespan client stays unset unless a test injects one
    return TestClient(api_app)
