"""Inference endpoint clients: SSE token reading and benchmark runs."""

from .exceptions import InferenceAPIError, InferenceConnectionError, InferenceError
from .runner import (
    BenchmarkRunResult,
    BenchmarkStream,
    run_benchmark,
    run_benchmark_streaming,
)
from .sse_reader import stream_tokens


__all__ = [
    "BenchmarkRunResult",
    "BenchmarkStream",
    "InferenceAPIError",
    "InferenceConnectionError",
    "InferenceError",
    "run_benchmark",
    "run_benchmark_streaming",
    "stream_tokens",
]
