from fastapi.testclient import TestClient


def test_scores_start_empty(client: TestClient):
    response = client.get("/api/v1/scores")
    assert response.status_code == 200
    assert response.json() == []


def test_post_score_upserts(client: TestClient):
    payload = {
        "benchmark_id": "bouncing-ball",
        "model_id": "local/coder",
        "scores": {"visual": 7, "functionality": 5},
    }
    first = client.post("/api/v1/scores", json=payload)
    assert first.status_code == 200
    assert first.json()["scored_by"] == "manual"

    client.post("/api/v1/scores", json={**payload, "notes": "re-scored"})
    scores = client.get("/api/v1/scores").json()

    assert len(scores) == 1
    assert scores[0]["notes"] == "re-scored"
    assert scores[0]["scores"] == {"visual": 7.0, "functionality": 5.0}


def test_post_score_missing_fields_is_422(client: TestClient):
    response = client.post("/api/v1/scores", json={"benchmark_id": "bouncing-ball"})

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"]["type"] == "validation_error"


def test_scoring_criteria(client: TestClient):
    response = client.get("/api/v1/scoring-criteria")

    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["visual", "functionality"]
    assert response.json()[0]["max"] == 10
