"""Benchmark run endpoints.

``/run-benchmark`` runs one benchmark against several models concurrently and
streams progress as Server-Sent Events. Each model task pushes events onto a
shared queue; the response generator drains it, so token events of different
models interleave but stay ordered per model.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field

import httpx
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from core.config import Settings
from core.exceptions import BenchmarkNotFoundError, ModelNotFoundError
from dependencies.services import HttpClient, Registry, Results, SettingsDep
from schemas.benchmarks import (
    BenchmarkInfo,
    RunAllBenchmarksRequest,
    RunAllBenchmarksResponse,
    RunBenchmarkRequest,
    RunResult,
)
from schemas.streaming import RunSseEvent
from services.benchmarks import get_benchmark, list_benchmarks
from services.extraction import extract_code_partial
from services.llm import run_benchmark, run_benchmark_streaming
from services.model_registry import ModelRegistry
from services.result_store import ResultStore


logger = logging.getLogger(__name__)

router = APIRouter(tags=["runs"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


def failed_result(
    benchmark_id: str, model_id: str, model_name: str, error: str
) -> RunResult:
    return RunResult(
        benchmark_id=benchmark_id,
        model_id=model_id,
        model_name=model_name,
        success=False,
        error=error,
    )


@dataclass
class StreamingState:
    """Live progress of one model's run, owned by its task."""

    start_time: float = field(default_factory=time.monotonic)
    partial_content: list[str] = field(default_factory=list)
    extracted_html: str = ""
    token_count: int = 0
    last_preview_at: float = 0.0

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)


@dataclass
class _RunContext:
    benchmark: BenchmarkInfo
    registry: ModelRegistry
    results: ResultStore
    client: httpx.AsyncClient | None
    settings: Settings
    queue: asyncio.Queue[RunSseEvent | None]


async def _run_model(ctx: _RunContext, model_id: str) -> None:
    """Run one model and report through the queue; never raises."""
    benchmark_id = ctx.benchmark.id
    emit = ctx.queue.put_nowait
    try:
        model = await ctx.registry.get_model(model_id)
    except ModelNotFoundError as e:
        emit(RunSseEvent.log(f'Model "{model_id}" not found, skipping'))
        failed = failed_result(benchmark_id, model_id, model_id, str(e))
        emit(RunSseEvent.from_result(failed))
        return
    except Exception as e:
        logger.exception("Model lookup for %s failed", model_id)
        emit(RunSseEvent.log(f'Model "{model_id}" could not be loaded: {e}'))
        failed = failed_result(benchmark_id, model_id, model_id, str(e))
        emit(RunSseEvent.from_result(failed))
        return

    emit(RunSseEvent.log(f"Calling {model.name}... (streaming tokens)"))
    state = StreamingState()
    preview_interval = ctx.settings.PREVIEW_INTERVAL_MS / 1000
    try:
        stream = run_benchmark_streaming(
            ctx.benchmark, model, client=ctx.client, settings=ctx.settings
        )
        async for delta in stream:
            state.partial_content.append(delta)
            state.token_count += 1
            emit(RunSseEvent.token(model_id, delta))

            now = time.monotonic()
            if now - state.last_preview_at >= preview_interval:
                state.last_preview_at = now
                state.extracted_html = extract_code_partial(
                    "".join(state.partial_content)
                )
                if state.extracted_html:
                    emit(
                        RunSseEvent.preview(
                            model_id,
                            state.extracted_html,
                            state.token_count,
                            state.elapsed_ms(),
                        )
                    )

        outcome = stream.result
        result_path = ctx.results.save(benchmark_id, model_id, outcome)
    except Exception as e:
        logger.exception("%s failed on %s", model.name, benchmark_id)
        emit(RunSseEvent.log(f"{model.name} FAILED: {e}"))
        failed = failed_result(benchmark_id, model_id, model.name, str(e))
        emit(RunSseEvent.from_result(failed))
        return

    secs = outcome.duration_ms / 1000
    emit(
        RunSseEvent.log(
            f"{model.name} completed in {secs:.1f}s ({len(outcome.raw_response)} chars)"
        )
    )
    emit(
        RunSseEvent.from_result(
            RunResult(
                benchmark_id=benchmark_id,
                model_id=model_id,
                model_name=model.name,
                raw_response=outcome.raw_response,
                extracted_code=outcome.extracted_code,
                result_path=result_path,
                duration_ms=outcome.duration_ms,
                success=True,
            )
        )
    )


async def _finish(ctx: _RunContext, model_id: str) -> None:
    try:
        await _run_model(ctx, model_id)
    finally:
        ctx.queue.put_nowait(None)


async def build_run_stream(
    ctx: _RunContext, model_ids: list[str]
) -> AsyncGenerator[str, None]:
    """Drain model events into SSE frames until every model has finished."""
    start = time.monotonic()
    yield RunSseEvent.log(
        f'Starting benchmark "{ctx.benchmark.id}" for {len(model_ids)} model(s)'
    ).to_sse()

    tasks = [asyncio.create_task(_finish(ctx, model_id)) for model_id in model_ids]
    remaining = len(tasks)
    try:
        while remaining:
            try:
                event = await asyncio.wait_for(
                    ctx.queue.get(), timeout=ctx.settings.HEARTBEAT_INTERVAL_SECONDS
                )
            except TimeoutError:
                elapsed = round(time.monotonic() - start)
                yield RunSseEvent.log(
                    f"Still generating... ({elapsed}s elapsed, "
                    f"{remaining} model(s) running)"
                ).to_sse()
                continue
            if event is None:
                remaining -= 1
                continue
            yield event.to_sse()
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    yield RunSseEvent.done().to_sse()


@router.post("/run-benchmark", summary="Run one benchmark on several models via SSE")
async def run_benchmark_stream(
    body: RunBenchmarkRequest,
    settings: SettingsDep,
    registry: Registry,
    results: Results,
    client: HttpClient,
) -> StreamingResponse:
    """Stream ``log``, ``token``, ``preview``, ``result`` and ``done`` events.

    Event JSON (sent in ``data:`` lines) always carries ``type``:
      log: message
      token: model_id, delta
      preview: model_id, extracted_html, token_count, elapsed_ms
      result: result (a RunResult, failed runs included)
      done: message
    """
    try:
        benchmark = get_benchmark(settings.BENCHMARKS_DIR, body.benchmark_id)
    except BenchmarkNotFoundError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    ctx = _RunContext(
        benchmark=benchmark,
        registry=registry,
        results=results,
        client=client,
        settings=settings,
        queue=asyncio.Queue(),
    )
    return StreamingResponse(
        build_run_stream(ctx, body.model_ids),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/run-all-benchmarks", response_model=RunAllBenchmarksResponse)
async def run_all_benchmarks(
    body: RunAllBenchmarksRequest,
    settings: SettingsDep,
    registry: Registry,
    results: Results,
    client: HttpClient,
) -> RunAllBenchmarksResponse:
    """Run every benchmark on one model, one after another."""
    try:
        model = await registry.get_model(body.model_id)
    except ModelNotFoundError as e:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    run_results: list[RunResult] = []
    for benchmark in list_benchmarks(settings.BENCHMARKS_DIR):
        try:
            outcome = await run_benchmark(
                benchmark, model, client=client, settings=settings
            )
            result_path = results.save(benchmark.id, model.id, outcome)
        except Exception as e:
            logger.exception("%s failed on %s", model.name, benchmark.id)
            run_results.append(
                failed_result(benchmark.id, model.id, model.name, str(e))
            )
            continue
        run_results.append(
            RunResult(
                benchmark_id=benchmark.id,
                model_id=model.id,
                model_name=model.name,
                raw_response=outcome.raw_response,
                extracted_code=outcome.extracted_code,
                result_path=result_path,
                duration_ms=outcome.duration_ms,
                success=True,
            )
        )
    return RunAllBenchmarksResponse(results=run_results)
