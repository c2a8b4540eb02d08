"""Stored results, raw responses and showcase export over HTTP."""

from fastapi.testclient import TestClient

from core.config import Settings
from schemas.benchmarks import ScoreIn
from services.llm.runner import BenchmarkRunResult
from services.result_store import ResultStore
from services.score_store import ScoreStore


def _seed(settings: Settings) -> None:
    store = ResultStore(settings.RESULTS_DIR)
    store.save(
        "bouncing-ball",
        "org/scored",
        BenchmarkRunResult("raw scored", '<p title="x">scored</p>', 10),
    )
    store.save(
        "bouncing-ball", "unscored", BenchmarkRunResult("raw", "<p>plain</p>", 10)
    )
    ScoreStore(settings.scores_path).upsert(
        ScoreIn(
            benchmark_id="bouncing-ball",
            model_id="org/scored",
            scores={"visual": 9, "functionality": 7},
        )
    )


def test_results_listing(client: TestClient, settings: Settings):
    assert client.get("/api/v1/results").json() == {}

    _seed(settings)

    assert client.get("/api/v1/results").json() == {
        "bouncing-ball": ["org/scored", "unscored"]
    }


def test_raw_response(client: TestClient, settings: Settings):
    _seed(settings)

    response = client.get(
        "/api/v1/results/bouncing-ball/raw", params={"model_id": "org/scored"}
    )
    assert response.status_code == 200
    assert response.text == "raw scored"


def test_raw_response_missing_is_404(client: TestClient):
    response = client.get(
        "/api/v1/results/bouncing-ball/raw", params={"model_id": "nobody"}
    )
    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["error"]["type"] == "domain_error"


def test_raw_response_invalid_model_id_is_400(client: TestClient):
    response = client.get(
        "/api/v1/results/bouncing-ball/raw", params={"model_id": ".."}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid model id: '..'"


def test_export_requires_benchmark_id(client: TestClient):
    response = client.get("/api/v1/export-html")
    assert response.status_code == 400
    assert response.json()["message"] == "benchmark_id required"


def test_export_unknown_benchmark_is_404(client: TestClient):
    response = client.get("/api/v1/export-html", params={"benchmark_id": "missing"})
    assert response.status_code == 404


def test_export_renders_showcase(client: TestClient, settings: Settings):
    _seed(settings)

    response = client.get(
        "/api/v1/export-html", params={"benchmark_id": "bouncing-ball"}
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "content-disposition" not in response.headers
    page = response.text
    assert "Bouncing Ball" in page
    assert "&lt;p title=&#34;x&#34;&gt;scored&lt;/p&gt;" in page
    assert "8.0" in page
    assert page.index("org/scored") < page.index("unscored")


def test_export_download_sets_attachment(client: TestClient, settings: Settings):
    _seed(settings)

    response = client.get(
        "/api/v1/export-html",
        params={"benchmark_id": "bouncing-ball", "download": "1"},
    )

    assert response.headers["content-disposition"] == (
        'attachment; filename="bouncing-ball-showcase.html"'
    )
