import pytest
from fastapi.testclient import TestClient

from avatar_assistant.agent.legacy import APOLOGY_TEXT
from avatar_assistant.integrations.user_context import StaticUserContext


@pytest.fixture()
def api(monkeypatch):
    # Offline generation and no outbound context calls.
    from avatar_assistant.api import main

    monkeypatch.setattr(main._pipeline.generator, "model_factory", None)
    monkeypatch.setattr(main._legacy, "llm", None)
    monkeypatch.setattr(main._pipeline, "user_context", StaticUserContext())
    monkeypatch.delenv("ASSISTANT_MODERN_ALLOWLIST", raising=False)
    main._telemetry.clear()
    return main


def test_health_reports_rollout_flag(api, monkeypatch) -> None:
    monkeypatch.setenv("ASSISTANT_MODERN_ENABLED", "true")
    client = TestClient(api.app)

    resp = client.get("/health")
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["status"] == "ok"
    assert payload["modern_enabled"] is True
    assert payload["allowlist_size"] == 0


def test_assistant_modern_path_navigates(api, monkeypatch) -> None:
    monkeypatch.setenv("ASSISTANT_MODERN_ENABLED", "true")
    client = TestClient(api.app)

    resp = client.post(
        "/api/avatar/assistant",
        json={"userId": "u1", "message": "go to my shopping list"},
    )
    assert resp.status_code == 200
    payload = resp.json()
    assert payload["navigateTo"] == "/shopping-list"
    assert payload["text"]
    assert payload["captions"] == payload["text"]

    entries = client.get("/api/avatar/telemetry").json()["items"]
    assert entries[-1]["path"] == "modern"
    assert entries[-1]["tools_used"] == ["navigate"]
    assert entries[-1]["has_navigate_to"] is True


def test_assistant_legacy_path_when_flag_off(api, monkeypatch) -> None:
    monkeypatch.setenv("ASSISTANT_MODERN_ENABLED", "false")
    client = TestClient(api.app)

    resp = client.post("/api/avatar/assistant", json={"userId": "u1", "message": "hello"})
    assert resp.status_code == 200
    assert resp.json() == {"text": APOLOGY_TEXT, "captions": APOLOGY_TEXT}

    entries = client.get("/api/avatar/telemetry").json()["items"]
    assert entries[-1]["path"] == "legacy"


def test_assistant_rejects_missing_user_id(api) -> None:
    client = TestClient(api.app)
    resp = client.post("/api/avatar/assistant", json={"message": "hello"})
    assert resp.status_code == 422


def test_knowledge_search_ranks_documents(api) -> None:
    client = TestClient(api.app)

    resp = client.post("/knowledge/search", json={"query": "open my shopping list", "top_k": 2})
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert len(items) == 2
    assert items[0]["id"] == "app-2"
    assert items[0]["route"] == "/shopping-list"
    assert [item["rank"] for item in items] == [1, 2]
    assert items[0]["score"] >= items[1]["score"]


def test_client_telemetry_round_trip(api) -> None:
    client = TestClient(api.app)

    resp = client.post(
        "/api/avatar/telemetry",
        json={"userId": "u9", "intent": "NAVIGATE", "toolsUsed": ["navigate"], "hasNavigateTo": True},
    )
    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "count": 1}

    items = client.get("/api/avatar/telemetry", params={"limit": 5}).json()["items"]
    assert len(items) == 1
    assert items[0]["user_id"] == "u9"
    assert items[0]["path"] == "client"


def test_assistant_survives_invalid_rollout_flag(api, monkeypatch) -> None:
    monkeypatch.setenv("ASSISTANT_MODERN_ENABLED", "maybe")
    client = TestClient(api.app)

    resp = client.post("/api/avatar/assistant", json={"userId": "u1", "message": "hello"})
    assert resp.status_code == 200
    assert resp.json() == {"text": APOLOGY_TEXT, "captions": APOLOGY_TEXT}
