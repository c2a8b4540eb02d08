"""Run a benchmark prompt against an OpenAI-compatible chat completion endpoint.

Local inference servers (LM Studio, llama.cpp, vLLM) all expose
``/chat/completions``, so a single httpx client covers them. The streaming
runner forwards token deltas as they arrive and extracts the final artifact
once the stream is drained; the plain runner waits for the whole response.

Both share one error policy: a non-2xx response is an ``InferenceAPIError``
and is never retried; a connection failure before any response is retried
once after a fixed delay, then surfaces as ``InferenceConnectionError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from core.config import Settings, get_settings
from schemas.benchmarks import BenchmarkInfo, ModelConfig
from services.extraction import extract_code
from services.llm.exceptions import InferenceAPIError, InferenceConnectionError
from services.llm.sse_reader import stream_tokens


logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert frontend developer. Respond ONLY with code inside a "
    "single fenced code block (```html). Do not include explanations before "
    "or after the code block."
)

# One initial attempt plus one retry
CONNECT_ATTEMPTS = 2


@dataclass(frozen=True)
class BenchmarkRunResult:
    """Terminal output of one benchmark/model pairing."""

    raw_response: str
    extracted_code: str
    duration_ms: int


def chat_completions_url(model: ModelConfig) -> str:
    return f"{model.base_url.rstrip('/')}/chat/completions"


def build_headers(model: ModelConfig) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if model.sends_auth_header:
        headers["Authorization"] = f"Bearer {model.api_key}"
    return headers


def build_payload(
    benchmark: BenchmarkInfo,
    model: ModelConfig,
    *,
    stream: bool,
    settings: Settings,
) -> dict[str, Any]:
    return {
        "model": model.default_model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": benchmark.prompt},
        ],
        "temperature": settings.COMPLETION_TEMPERATURE,
        "max_tokens": settings.COMPLETION_MAX_TOKENS,
        "stream": stream,
    }


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "Connection to inference endpoint failed (%s); retrying in %.1fs",
        exc.__class__.__name__ if exc else "unknown",
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )


@asynccontextmanager
async def _client_scope(
    client: httpx.AsyncClient | None, settings: Settings
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a short-lived one closed on exit."""
    if client is not None:
        yield client
        return
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.REQUEST_TIMEOUT_SECONDS)
    ) as owned:
        yield owned


async def _send_with_retry(
    client: httpx.AsyncClient,
    request: httpx.Request,
    model: ModelConfig,
    settings: Settings,
    *,
    stream: bool,
) -> httpx.Response:
    """Send ``request``, retrying once on a transport-level failure."""
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(CONNECT_ATTEMPTS),
        wait=wait_fixed(settings.CONNECT_RETRY_DELAY_SECONDS),
        sleep=asyncio.sleep,
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        return await retrying(client.send, request, stream=stream)
    except httpx.TransportError as e:
        raise InferenceConnectionError(model.name, str(e) or type(e).__name__) from e


async def _raise_for_api_error(response: httpx.Response, model: ModelConfig) -> None:
    if response.is_success:
        return
    await response.aread()
    logger.error(
        "Inference endpoint for %s returned HTTP %s", model.name, response.status_code
    )
    raise InferenceAPIError(response.status_code, response.text, model.name)


def _message_content(data: Any) -> str:
    """Content of a non-streamed completion, tolerating legacy ``text`` choices."""
    try:
        choice = data["choices"][0]
    except (KeyError, IndexError, TypeError):
        return ""
    message = choice.get("message") or {}
    content = message.get("content")
    if content is None:
        content = choice.get("text")
    return content if isinstance(content, str) else ""


class BenchmarkStream:
    """Token deltas of one streamed benchmark run.

    Iterate it to receive each delta as soon as the server sends it. Once the
    iteration is exhausted, ``result`` holds the ``BenchmarkRunResult`` whose
    ``raw_response`` is the concatenation of every yielded delta. The stream
    can be consumed only once.

    Usage:
        stream = run_benchmark_streaming(benchmark, model)
        async for delta in stream:
            forward(delta)
        save(stream.result)
    """

    def __init__(
        self,
        benchmark: BenchmarkInfo,
        model: ModelConfig,
        *,
        client: httpx.AsyncClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.benchmark = benchmark
        self.model = model
        self._client = client
        self._settings = settings or get_settings()
        self._result: BenchmarkRunResult | None = None
        self._deltas = self._generate()

    @property
    def result(self) -> BenchmarkRunResult:
        if self._result is None:
            raise RuntimeError("BenchmarkStream.result is available once drained")
        return self._result

    def __aiter__(self) -> BenchmarkStream:
        return self

    async def __anext__(self) -> str:
        return await self._deltas.__anext__()

    async def aclose(self) -> None:
        """Abandon the stream early, releasing the HTTP connection."""
        await self._deltas.aclose()

    async def _generate(self) -> AsyncIterator[str]:
        settings = self._settings
        accumulated: list[str] = []
        async with _client_scope(self._client, settings) as client:
            request = client.build_request(
                "POST",
                chat_completions_url(self.model),
                json=build_payload(
                    self.benchmark, self.model, stream=True, settings=settings
                ),
                headers=build_headers(self.model),
            )
            logger.info(
                "Streaming benchmark %s from %s", self.benchmark.id, self.model.name
            )
            start = time.monotonic()
            response = await _send_with_retry(
                client, request, self.model, settings, stream=True
            )
            try:
                await _raise_for_api_error(response, self.model)
                try:
                    async for delta in stream_tokens(response.aiter_bytes()):
                        accumulated.append(delta)
                        yield delta
                except httpx.TransportError as e:
                    raise InferenceConnectionError(
                        self.model.name, f"stream interrupted: {e}"
                    ) from e
                duration_ms = _elapsed_ms(start)
            finally:
                await response.aclose()

        raw_response = "".join(accumulated)
        self._result = BenchmarkRunResult(
            raw_response=raw_response,
            extracted_code=extract_code(raw_response),
            duration_ms=duration_ms,
        )
        logger.info(
            "%s finished %s in %dms (%d chars, %d deltas)",
            self.model.name,
            self.benchmark.id,
            duration_ms,
            len(raw_response),
            len(accumulated),
        )


def run_benchmark_streaming(
    benchmark: BenchmarkInfo,
    model: ModelConfig,
    *,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> BenchmarkStream:
    """Start a streamed run; nothing is sent until the stream is iterated."""
    return BenchmarkStream(benchmark, model, client=client, settings=settings)


async def run_benchmark(
    benchmark: BenchmarkInfo,
    model: ModelConfig,
    *,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> BenchmarkRunResult:
    """Run a benchmark without streaming and extract the artifact once."""
    settings = settings or get_settings()
    async with _client_scope(client, settings) as http:
        request = http.build_request(
            "POST",
            chat_completions_url(model),
            json=build_payload(benchmark, model, stream=False, settings=settings),
            headers=build_headers(model),
        )
        logger.info("Running benchmark %s on %s", benchmark.id, model.name)
        start = time.monotonic()
        response = await _send_with_retry(http, request, model, settings, stream=False)
        await _raise_for_api_error(response, model)
        content = _message_content(response.json())
        duration_ms = _elapsed_ms(start)

    logger.info(
        "%s finished %s in %dms (%d chars)",
        model.name,
        benchmark.id,
        duration_ms,
        len(content),
    )
    return BenchmarkRunResult(
        raw_response=content,
        extracted_code=extract_code(content),
        duration_ms=duration_ms,
    )
