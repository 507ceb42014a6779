import uuid

import pytest
import requests
from fastapi.testclient import TestClient

from fastapi_app import main
from recommender.classifiers import TEXT_TASK, HuggingFaceClassifier


@pytest.fixture
def client() -> TestClient:
    return TestClient(main.app)


@pytest.fixture
def session_id() -> str:
    sid = f"test-{uuid.uuid4().hex}"
    yield sid
    main.sessions.end_session(sid)


class _StubResponse:
    ok = True
    status_code = 200
    text = ""

    def json(self):
        return [[{"label": "NEGATIVE", "score": 0.2}, {"label": "POSITIVE", "score": 0.8}]]


def test_health_reports_catalog_size(client: TestClient) -> None:
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["items"] == 8


def test_catalog_lists_items_in_order(client: TestClient) -> None:
    body = client.get("/api/catalog").json()
    assert [item["id"] for item in body["items"]] == list(range(1, 9))
    assert body["categories"] == ["Electronics", "Fitness", "Kitchen"]


def test_new_session_has_default_state(client: TestClient, session_id: str) -> None:
    body = client.get("/api/session", params={"sessionId": session_id}).json()
    assert body["sessionId"] == session_id
    assert body["liked"] == []
    assert body["preferences"] == {"Electronics": 0.3, "Fitness": 0.4, "Kitchen": 0.3}
    assert len(body["recommendations"]) == 4


def test_like_updates_weight_and_hides_item(client: TestClient, session_id: str) -> None:
    resp = client.post("/api/like", json={"sessionId": session_id, "itemId": 2})

    assert resp.status_code == 200
    body = resp.json()
    assert body["liked"] == [2]
    assert body["preferences"]["Fitness"] == pytest.approx(0.5)
    assert 2 not in [entry["id"] for entry in body["recommendations"]]

    again = client.get("/api/recommendations", params={"sessionId": session_id, "refresh": True}).json()
    assert 2 not in [entry["id"] for entry in again["recommendations"]]


def test_like_is_idempotent_over_http(client: TestClient, session_id: str) -> None:
    client.post("/api/like", json={"sessionId": session_id, "itemId": 3})
    body = client.post("/api/like", json={"sessionId": session_id, "itemId": 3}).json()
    assert body["liked"] == [3]
    assert body["preferences"]["Kitchen"] == pytest.approx(0.4)


@pytest.mark.parametrize("item_id", [999, "abc", None, 2.5])
def test_unknown_item_is_404_and_changes_nothing(client: TestClient, session_id: str, item_id) -> None:
    before = client.get("/api/session", params={"sessionId": session_id}).json()

    resp = client.post("/api/like", json={"sessionId": session_id, "itemId": item_id})

    assert resp.status_code == 404
    after = client.get("/api/session", params={"sessionId": session_id}).json()
    assert after["liked"] == before["liked"]
    assert after["preferences"] == before["preferences"]


def test_preference_update_clamps_and_recomputes(client: TestClient, session_id: str) -> None:
    resp = client.post("/api/preferences", json={"sessionId": session_id, "category": "Kitchen", "weight": 7})
    assert resp.status_code == 200
    body = resp.json()
    assert body["preferences"]["Kitchen"] == 1.0
    assert len(body["recommendations"]) == 4

    body = client.post(
        "/api/preferences", json={"sessionId": session_id, "category": "Electronics", "weight": "lots"}
    ).json()
    assert body["preferences"]["Electronics"] == 0.0


def test_preference_for_unknown_category_is_stored(client: TestClient, session_id: str) -> None:
    body = client.post("/api/preferences", json={"sessionId": session_id, "category": "Garden", "weight": 0.6}).json()
    assert body["preferences"]["Garden"] == 0.6


def test_ending_a_session_resets_it(client: TestClient, session_id: str) -> None:
    client.post("/api/like", json={"sessionId": session_id, "itemId": 1})

    assert client.delete(f"/api/session/{session_id}").json() == {"ok": True}
    assert client.get("/api/session", params={"sessionId": session_id}).json()["liked"] == []


def test_text_classifier_unconfigured_is_503(client: TestClient, monkeypatch) -> None:
    monkeypatch.setattr(main, "text_classifier", HuggingFaceClassifier(TEXT_TASK, "acme/sentiment", token=""))
    resp = client.post("/api/classify/text", json={"text": "nice"})
    assert resp.status_code == 503


def test_text_classifier_success(client: TestClient, monkeypatch) -> None:
    classifier = HuggingFaceClassifier(TEXT_TASK, "acme/sentiment", token="t", base_url="https://inference.test")
    monkeypatch.setattr(main, "text_classifier", classifier)
    monkeypatch.setattr(requests, "post", lambda *a, **k: _StubResponse())

    body = client.post("/api/classify/text", json={"text": "I love this blender"}).json()

    assert body["task"] == TEXT_TASK
    assert body["labels"][0] == {"label": "POSITIVE", "score": 0.8}


def test_text_classifier_failure_is_502_and_sessions_survive(client: TestClient, session_id: str, monkeypatch) -> None:
    classifier = HuggingFaceClassifier(TEXT_TASK, "acme/sentiment", token="t", base_url="https://inference.test")
    monkeypatch.setattr(main, "text_classifier", classifier)

    def _post(*args, **kwargs):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "post", _post)

    resp = client.post("/api/classify/text", json={"text": "hello"})

    assert resp.status_code == 502
    assert "connection refused" in resp.json()["detail"]
    assert client.post("/api/like", json={"sessionId": session_id, "itemId": 4}).status_code == 200


def test_empty_inputs_are_rejected(client: TestClient) -> None:
    assert client.post("/api/classify/text", json={"text": "   "}).status_code == 400
    resp = client.post("/api/classify/image", files={"file": ("empty.png", b"", "image/png")})
    assert resp.status_code == 400
