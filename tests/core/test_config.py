from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import Settings


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("http://a.test, http://b.test", ["http://a.test", "http://b.test"]),
        ('["http://a.test"]', ["http://a.test"]),
        ("", []),
        (["http://a.test "], ["http://a.test"]),
    ],
)
def test_cors_origins_parsing(raw, expected):
    assert Settings(CORS_ORIGINS=raw).CORS_ORIGINS == expected


def test_negative_timeout_is_rejected():
    with pytest.raises(ValidationError):
        Settings(REQUEST_TIMEOUT_SECONDS=-1)


def test_config_paths_derive_from_directories(tmp_path: Path):
    settings = Settings(CONFIG_DIR=tmp_path / "cfg", RESULTS_DIR=tmp_path / "out")

    assert settings.models_config_path == tmp_path / "cfg" / "models.json"
    assert settings.scoring_config_path == tmp_path / "cfg" / "scoring.json"
    assert settings.scores_path == tmp_path / "out" / "scores.json"
