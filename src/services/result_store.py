"""On-disk storage of benchmark artifacts.

Layout::

    <results_dir>/<benchmark_id>/<safe model id>/index.html        extracted code
    <results_dir>/<benchmark_id>/<safe model id>/raw-response.txt  raw model output

Model ids often contain ``/`` (``org/model``), which is encoded as ``--`` so
each model gets a single directory.
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.exceptions import ResultNotFoundError
from services.llm.runner import BenchmarkRunResult


logger = logging.getLogger(__name__)

HTML_FILENAME = "index.html"
RAW_FILENAME = "raw-response.txt"
PUBLIC_PREFIX = "/results"


def safe_model_dir(model_id: str) -> str:
    return model_id.replace("/", "--")


def unsafe_model_dir(dir_name: str) -> str:
    return dir_name.replace("--", "/")


class ResultStore:
    """Write and read artifacts under a results directory."""

    def __init__(self, results_dir: Path) -> None:
        self.results_dir = results_dir

    def _model_dir(self, benchmark_id: str, model_id: str) -> Path:
        if not benchmark_id or "/" in benchmark_id or benchmark_id in {".", ".."}:
            raise ValueError(f"Invalid benchmark id: {benchmark_id!r}")
        safe = safe_model_dir(model_id)
        if not safe or safe in {".", ".."}:
            raise ValueError(f"Invalid model id: {model_id!r}")
        return self.results_dir / benchmark_id / safe

    def public_path(self, benchmark_id: str, model_id: str) -> str:
        safe = safe_model_dir(model_id)
        return f"{PUBLIC_PREFIX}/{benchmark_id}/{safe}/{HTML_FILENAME}"

    def save(self, benchmark_id: str, model_id: str, result: BenchmarkRunResult) -> str:
        """Persist both files verbatim and return the artifact's public path."""
        model_dir = self._model_dir(benchmark_id, model_id)
        model_dir.mkdir(parents=True, exist_ok=True)
        (model_dir / HTML_FILENAME).write_text(result.extracted_code, encoding="utf-8")
        (model_dir / RAW_FILENAME).write_text(result.raw_response, encoding="utf-8")
        logger.debug("Saved result for %s/%s in %s", benchmark_id, model_id, model_dir)
        return self.public_path(benchmark_id, model_id)

    def list_results(self) -> dict[str, list[str]]:
        """Map each benchmark id to the model ids that have an artifact."""
        if not self.results_dir.is_dir():
            return {}
        results: dict[str, list[str]] = {}
        for benchmark_dir in sorted(self.results_dir.iterdir()):
            if not benchmark_dir.is_dir():
                continue
            results[benchmark_dir.name] = [
                unsafe_model_dir(model_dir.name)
                for model_dir in sorted(benchmark_dir.iterdir())
                if model_dir.is_dir() and (model_dir / HTML_FILENAME).is_file()
            ]
        return results

    def read_html(self, benchmark_id: str, model_id: str) -> str:
        path = self._model_dir(benchmark_id, model_id) / HTML_FILENAME
        if not path.is_file():
            raise ResultNotFoundError(
                f'No result for benchmark "{benchmark_id}" and model "{model_id}"'
            )
        return path.read_text(encoding="utf-8")

    def read_raw_response(self, benchmark_id: str, model_id: str) -> str:
        path = self._model_dir(benchmark_id, model_id) / RAW_FILENAME
        if not path.is_file():
            raise ResultNotFoundError(
                f'No raw response for benchmark "{benchmark_id}" and model "{model_id}"'
            )
        return path.read_text(encoding="utf-8")

    def models_for_benchmark(self, benchmark_id: str) -> list[str]:
        """Model ids with an artifact for one benchmark, sorted."""
        return self.list_results().get(benchmark_id, [])
