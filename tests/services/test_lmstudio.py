"""LM Studio management client tests using an in-process transport."""

from __future__ import annotations

import json

import httpx
import pytest

from services.lmstudio import LMStudioClient, lmstudio_host


BASE_URL = "http://localhost:1234/v1"

MODELS_PAYLOAD = {
    "models": [
        {
            "key": "qwen/qwen3-coder",
            "display_name": "Qwen3 Coder",
            "params_string": "30B",
            "size_bytes": 3 * 1024 * 1024 * 1024,
            "quantization": {"name": "Q4_K_M", "bits_per_weight": 4},
            "loaded_instances": [{"id": "qwen-inst-1"}],
        },
        {
            "key": "mistral-small",
            "display_name": "Mistral Small",
            "size_bytes": 0,
            "loaded_instances": [],
        },
        {
            "key": "llama",
            "display_name": "Llama",
            "loaded_instances": [{"id": "llama-a"}, {"id": "llama-b"}],
        },
    ]
}


class FakeLMStudio:
    """Records requests and answers like LM Studio's native API."""

    def __init__(self, failing_unloads: set[str] | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.failing_unloads = failing_unloads or set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path == "/api/v1/models":
            return httpx.Response(200, json=MODELS_PAYLOAD)
        if request.url.path == "/api/v1/models/load":
            return httpx.Response(200, json={"load_time_seconds": 4.2})
        if request.url.path == "/api/v1/models/unload":
            instance_id = json.loads(request.content)["instance_id"]
            if instance_id in self.failing_unloads:
                return httpx.Response(409, text="busy")
            return httpx.Response(200, json={})
        return httpx.Response(404)


def make_client(fake: FakeLMStudio) -> LMStudioClient:
    return LMStudioClient(httpx.AsyncClient(transport=httpx.MockTransport(fake)))


def test_host_is_origin_of_base_url():
    assert lmstudio_host("http://localhost:1234/v1") == "http://localhost:1234"
    assert lmstudio_host("https://box.lan/v1/") == "https://box.lan"
    with pytest.raises(ValueError):
        lmstudio_host("not a url")


@pytest.mark.asyncio
async def test_model_states():
    fake = FakeLMStudio()
    states = await make_client(fake).get_model_states(BASE_URL)

    assert str(fake.requests[0].url) == "http://localhost:1234/api/v1/models"
    assert states["qwen/qwen3-coder"] == {
        "loaded": True,
        "instance_id": "qwen-inst-1",
        "display_name": "Qwen3 Coder",
        "params": "30B",
        "quantization": "Q4_K_M",
        "size_mb": 3072,
    }
    assert states["mistral-small"]["loaded"] is False
    assert states["mistral-small"]["instance_id"] is None


@pytest.mark.asyncio
async def test_unreachable_host_has_no_states():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = LMStudioClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    assert await client.get_model_states(BASE_URL) == {}
    result = await client.load_model(BASE_URL, "qwen/qwen3-coder")
    assert result["success"] is False
    assert "refused" in result["error"]


@pytest.mark.asyncio
async def test_load_model():
    fake = FakeLMStudio()
    result = await make_client(fake).load_model(BASE_URL, "qwen/qwen3-coder")

    assert result == {"success": True, "load_time": 4.2}
    assert json.loads(fake.requests[0].content) == {"model": "qwen/qwen3-coder"}


@pytest.mark.asyncio
async def test_unload_failure_reports_body():
    fake = FakeLMStudio(failing_unloads={"llama-a"})
    result = await make_client(fake).unload_model(BASE_URL, "llama-a")
    assert result == {"success": False, "error": "busy"}


@pytest.mark.asyncio
async def test_unload_all_models():
    fake = FakeLMStudio(failing_unloads={"llama-b"})
    result = await make_client(fake).unload_all_models(BASE_URL)

    assert sorted(result["unloaded"]) == ["llama-a", "qwen-inst-1"]
    assert result["errors"] == ["llama-b: busy"]
