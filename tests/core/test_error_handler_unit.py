"""Focused unit tests for global exception handling behaviors.

These tests exercise the public contract via a FastAPI test app using the
installed exception handler and ExceptionNormalizationMiddleware.
"""

from __future__ import annotations

import json
from unittest.mock import patch

from fastapi import FastAPI, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from core.error_handler import (
    ExceptionNormalizationMiddleware,
    _build_error_response,
    global_exception_handler,
)
from core.exceptions import BenchmarkNotFoundError, ModelNotFoundError
from core.middleware import CorrelationIdMiddleware
from services.llm.exceptions import InferenceAPIError, InferenceConnectionError


class Item(BaseModel):
    name: str = Field(min_length=3)
    qty: int = Field(ge=1)


def build_test_app(env: str) -> TestClient:
    app = FastAPI()
    app.add_middleware(ExceptionNormalizationMiddleware)
    app.add_middleware(CorrelationIdMiddleware)
    app.add_exception_handler(Exception, global_exception_handler)
    app.add_exception_handler(HTTPException, global_exception_handler)
    app.add_exception_handler(RequestValidationError, global_exception_handler)

    @app.post("/items")
    async def create_item(item: Item):  # pragma: no cover - executed via client
        return {"ok": True, "item": item.model_dump()}

    @app.get("/missing-benchmark")
    async def missing_benchmark():
        raise BenchmarkNotFoundError('Benchmark "nope" not found')

    @app.get("/missing-model")
    async def missing_model():
        raise ModelNotFoundError('Model "ghost" not found in config')

    @app.get("/upstream-error")
    async def upstream_error():
        raise InferenceAPIError(500, "boom with api_key=sk-leak", "Local Coder")

    @app.get("/upstream-down")
    async def upstream_down():
        raise InferenceConnectionError("Local Coder", "connection refused")

    @app.get("/boom")
    async def boom():
        raise RuntimeError("Exploded with secret=should_not_leak")

    @app.get("/bad-request")
    async def bad_request():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="benchmark_id required"
        )

    client = TestClient(app, raise_server_exceptions=False)

    # Patch environment setting per test invocation
    patcher = patch("core.error_handler.get_settings")
    mocked = patcher.start()
    mocked.return_value.ENVIRONMENT = env

    def fin():
        patcher.stop()

    client._finalizer = fin  # type: ignore[attr-defined]
    return client


def test_validation_error_production():
    client = build_test_app("production")
    resp = client.post("/items", json={"name": "ab", "qty": 0})
    assert resp.status_code == 422
    data = resp.json()
    assert data["error"]["type"] == "validation_error"
    assert "validation_errors" not in data["error"]


def test_validation_error_development():
    client = build_test_app("development")
    resp = client.post("/items", json={"name": "ab", "qty": 0})
    assert resp.status_code == 422
    assert "validation_errors" in resp.json()["error"]


def test_domain_not_found_production():
    client = build_test_app("production")
    resp = client.get("/missing-benchmark")
    assert resp.status_code == 404
    data = resp.json()
    assert data["error"]["type"] == "domain_error"
    assert data["message"] == "The requested benchmark was not found"
    assert "details" not in data["error"]


def test_domain_not_found_development():
    client = build_test_app("development")
    resp = client.get("/missing-model")
    assert resp.status_code == 404
    data = resp.json()
    assert data["message"] == "The requested model was not found"
    assert data["error"]["details"]["detail"] == 'Model "ghost" not found in config'


def test_inference_api_error_is_bad_gateway():
    client = build_test_app("production")
    resp = client.get("/upstream-error")
    assert resp.status_code == 502
    body = resp.json()
    assert body["error"]["type"] == "api_error"
    assert "sk-leak" not in resp.text


def test_inference_connection_error_development():
    client = build_test_app("development")
    resp = client.get("/upstream-down")
    assert resp.status_code == 502
    body = resp.json()
    assert body["error"]["type"] == "connection_error"
    assert body["error"]["details"]["detail"] == (
        "Connection to Local Coder failed: connection refused"
    )


def test_generic_exception_production():
    client = build_test_app("production")
    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"]["type"] == "internal_server_error"
    assert "traceback" not in body["error"]
    assert "secret=should_not_leak" not in str(body)


def test_generic_exception_development():
    client = build_test_app("development")
    resp = client.get("/boom")
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"]["type"] == "internal_server_error"
    assert "traceback" in body["error"]


def test_http_exception_carries_detail_as_message():
    client = build_test_app("production")
    resp = client.get("/bad-request")
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "benchmark_id required"
    assert body["error"]["type"] == "http_error"
    assert "details" not in body["error"]


def test_error_responses_carry_request_correlation_id():
    client = build_test_app("production")
    resp = client.get("/boom", headers={"X-Correlation-ID": "cid-42"})
    assert resp.json()["error"]["correlation_id"] == "cid-42"


def test_build_error_response_production_hides_optional_fields():
    resp = _build_error_response(
        correlation_id="cid",
        error_type="internal_server_error",
        message="An internal error occurred",
        environment="production",
        details={"debug": True},
        traceback_str="trace",
        exception_type="ValueError",
        validation_errors={"x": 1},
        status_code=500,
    )
    body = json.loads(resp.body)

    assert body["error"] == {"correlation_id": "cid", "type": "internal_server_error"}


def test_build_error_response_development_includes_optional_fields():
    resp = _build_error_response(
        correlation_id="cid",
        error_type="internal_server_error",
        message="An internal error occurred",
        environment="development",
        details={"debug": True},
        traceback_str="trace",
        exception_type="ValueError",
        validation_errors={"x": 1},
        status_code=500,
    )
    body = json.loads(resp.body)

    assert body["error"]["details"] == {"debug": True}
    assert body["error"]["traceback"] == "trace"
    assert body["error"]["exception_type"] == "ValueError"
    assert body["error"]["validation_errors"] == {"x": 1}
