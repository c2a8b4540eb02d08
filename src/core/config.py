"""Application settings, data locations and CORS configuration."""

import json
import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=(".env"), env_file_encoding="utf-8")

    # App
    APP_NAME: str = "Eval Studio"
    ENVIRONMENT: str = "development"  # development | production | test

    # CORS
    # Accept list or CSV/JSON string from env; normalized to list[str] by validators
    CORS_ORIGINS: list[str] | str = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Data locations. Relative paths resolve against the working directory.
    BENCHMARKS_DIR: Path = Path("benchmarks")
    RESULTS_DIR: Path = Path("public/results")
    CONFIG_DIR: Path = Path("config")

    # Inference calls
    REQUEST_TIMEOUT_SECONDS: float = 600.0
    CONNECT_RETRY_DELAY_SECONDS: float = 2.0
    COMPLETION_TEMPERATURE: float = 0.3
    COMPLETION_MAX_TOKENS: int = 16384

    # Model discovery
    MODEL_CACHE_TTL_SECONDS: float = 30.0
    MODEL_DISCOVERY_TIMEOUT_SECONDS: float = 5.0

    # Live progress
    PREVIEW_INTERVAL_MS: int = 500
    HEARTBEAT_INTERVAL_SECONDS: float = 30.0

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: object) -> list[str]:
        """Allow list, CSV string, or JSON array string for CORS origins."""
        if isinstance(v, list):
            return [str(i).strip() for i in v]
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return []
            if s.startswith("["):
                try:
                    parsed = json.loads(s)
                except json.JSONDecodeError as e:
                    raise ValueError(
                        "CORS_ORIGINS must be a CSV list or JSON array string"
                    ) from e
                if not isinstance(parsed, list):
                    raise ValueError("CORS_ORIGINS JSON must be a list")
                return [str(i).strip() for i in parsed]
            # CSV fallback
            return [i.strip() for i in s.split(",") if i.strip()]
        raise ValueError("Invalid CORS_ORIGINS type; expected str or list[str]")

    @field_validator("REQUEST_TIMEOUT_SECONDS", "CONNECT_RETRY_DELAY_SECONDS")
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("timeouts and delays must be non-negative")
        return v

    @property
    def models_config_path(self) -> Path:
        return self.CONFIG_DIR / "models.json"

    @property
    def scoring_config_path(self) -> Path:
        return self.CONFIG_DIR / "scoring.json"

    @property
    def scores_path(self) -> Path:
        return self.RESULTS_DIR / "scores.json"


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env not in {"development", "production", "test"}:
        raise ValueError("ENVIRONMENT must be 'development', 'production', or 'test'")

    if env == "production":
        env_file = ".env.prod"
    elif env == "development":
        env_file = ".env.dev"
    else:
        # test environment - no env file needed, use defaults
        env_file = ""

    # pydantic-settings supports _env_file at runtime; mypy doesn't type it.
    return Settings(_env_file=env_file or None)  # type: ignore[call-arg]
