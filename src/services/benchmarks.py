"""Benchmark catalog backed by ``<benchmarks_dir>/<id>/prompt.txt``."""

from __future__ import annotations

import logging
from pathlib import Path

from core.exceptions import BenchmarkNotFoundError
from schemas.benchmarks import BenchmarkInfo


logger = logging.getLogger(__name__)

PROMPT_FILENAME = "prompt.txt"


def benchmark_name(benchmark_id: str) -> str:
    """``"bouncing-ball"`` -> ``"Bouncing Ball"``."""
    return " ".join(word[:1].upper() + word[1:] for word in benchmark_id.split("-"))


def list_benchmarks(benchmarks_dir: Path) -> list[BenchmarkInfo]:
    """List every benchmark directory that holds a non-empty prompt."""
    if not benchmarks_dir.is_dir():
        logger.warning("Benchmarks directory %s does not exist", benchmarks_dir)
        return []

    benchmarks: list[BenchmarkInfo] = []
    for entry in sorted(benchmarks_dir.iterdir()):
        prompt_path = entry / PROMPT_FILENAME
        if not entry.is_dir() or not prompt_path.is_file():
            continue
        prompt = prompt_path.read_text(encoding="utf-8")
        if not prompt:
            continue
        benchmarks.append(
            BenchmarkInfo(id=entry.name, name=benchmark_name(entry.name), prompt=prompt)
        )
    return benchmarks


def get_benchmark(benchmarks_dir: Path, benchmark_id: str) -> BenchmarkInfo:
    for benchmark in list_benchmarks(benchmarks_dir):
        if benchmark.id == benchmark_id:
            return benchmark
    raise BenchmarkNotFoundError(f'Benchmark "{benchmark_id}" not found')
