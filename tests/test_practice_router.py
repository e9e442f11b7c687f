from __future__ import annotations

from fastapi.testclient import TestClient

from conftest import StubGateway, make_feedback, make_task
from sentence_trainer.errors import GenerationError
from sentence_trainer.main import create_app
from sentence_trainer.manager import SessionManager

BASE = "/api/v1/sessions"


def _client(gateway: StubGateway) -> tuple[TestClient, SessionManager]:
    manager = SessionManager(gateway)
    return TestClient(create_app(manager)), manager


def test_practice_flow_end_to_end():
    gateway = StubGateway(tasks=[make_task(), make_task(topic="Work")], feedback=[make_feedback])
    client, manager = _client(gateway)

    r = client.post(BASE)
    assert r.status_code == 201
    sid = r.json()["session"]
    state = r.json()["state"]
    assert state["taskStatus"] == "ready"
    assert state["task"]["section"] == "Body1"
    assert len(manager) == 1

    r = client.put(f"{BASE}/{sid}/input", json={"text": "Many people believe..."})
    assert r.status_code == 200
    assert r.json()["userInput"] == "Many people believe..."

    r = client.post(f"{BASE}/{sid}/submit", json={})
    assert r.status_code == 200
    body = r.json()
    assert body["feedback"]["originalTranslation"] == "Many people believe..."
    assert body["state"]["historyCount"] == 1

    r = client.post(f"{BASE}/{sid}/recall")
    assert r.json()["recallMode"] is True
    r = client.put(f"{BASE}/{sid}/recall/input", json={"text": "from memory"})
    assert r.json()["recallInput"] == "from memory"
    r = client.post(f"{BASE}/{sid}/recall/reveal")
    assert r.status_code == 200
    assert r.json()["comparison"]["recall"] == "from memory"
    assert r.json()["state"]["showComparison"] is True
    assert client.get(f"{BASE}/{sid}/recall/comparison").json()["recall"] == "from memory"
    r = client.post(f"{BASE}/{sid}/recall/hide")
    assert r.json()["showComparison"] is False
    assert client.get(f"{BASE}/{sid}/recall/comparison").status_code == 400

    r = client.put(f"{BASE}/{sid}/view", json={"view": "history"})
    assert r.json()["view"] == "history"
    history = client.get(f"{BASE}/{sid}/history").json()["history"]
    assert len(history) == 1
    entry = history[0]
    assert entry["userTranslation"] == "Many people believe..."
    assert {"id", "task", "feedback", "createdAt"} <= set(entry)

    r = client.post(f"{BASE}/{sid}/task")
    assert r.status_code == 200
    assert r.json()["task"]["topic"] == "Work"
    assert r.json()["state"]["feedback"] is None

    r = client.post(f"{BASE}/{sid}/history/{entry['id']}/review")
    assert r.status_code == 200
    replay = r.json()
    assert replay["view"] == "practice"
    assert replay["task"]["topic"] == "Education"
    assert replay["feedback"]["originalTranslation"] == "Many people believe..."
    assert client.get(f"{BASE}/{sid}").json()["historyCount"] == 1


def test_rejected_submission_maps_to_400_and_issues_no_request():
    gateway = StubGateway(tasks=[make_task()])
    client, _ = _client(gateway)
    sid = client.post(BASE).json()["session"]

    r = client.post(f"{BASE}/{sid}/submit", json={"text": "   "})

    assert r.status_code == 400
    assert gateway.feedback_calls == []


def test_generation_failure_maps_to_502_and_is_recorded():
    gateway = StubGateway(tasks=[make_task()], feedback=[GenerationError("feedback", "HTTP 500")])
    client, _ = _client(gateway)
    sid = client.post(BASE).json()["session"]

    r = client.post(f"{BASE}/{sid}/submit", json={"text": "An attempt"})
    assert r.status_code == 502

    state = client.get(f"{BASE}/{sid}").json()
    assert state["feedback"] is None
    assert state["evaluating"] is False
    assert state["historyCount"] == 0
    assert "HTTP 500" in state["error"]

    assert client.delete(f"{BASE}/{sid}/error").json()["error"] is None


def test_session_survives_failed_first_task():
    gateway = StubGateway(tasks=[GenerationError("task", "HTTP 503"), make_task()])
    client, _ = _client(gateway)

    r = client.post(BASE)
    assert r.status_code == 201
    sid = r.json()["session"]
    assert r.json()["state"]["taskStatus"] == "empty"
    assert "HTTP 503" in r.json()["state"]["error"]

    r = client.post(f"{BASE}/{sid}/task")
    assert r.status_code == 200
    assert r.json()["state"]["error"] is None


def test_unknown_ids_map_to_404():
    gateway = StubGateway(tasks=[make_task()])
    client, _ = _client(gateway)
    assert client.get(f"{BASE}/nope").status_code == 404
    sid = client.post(BASE).json()["session"]
    assert client.post(f"{BASE}/{sid}/history/nope/review").status_code == 404


def test_info_endpoint():
    client, _ = _client(StubGateway())
    body = client.get("/info").json()
    assert body["status"] == "ok"
    assert "gemini_configured" in body


def test_hide_comparison_while_typing_recall_is_rejected():
    gateway = StubGateway(tasks=[make_task()], feedback=[make_feedback])
    client, _ = _client(gateway)
    sid = client.post(BASE).json()["session"]
    client.post(f"{BASE}/{sid}/submit", json={"text": "Many people believe..."})
    client.post(f"{BASE}/{sid}/recall")
    client.put(f"{BASE}/{sid}/recall/input", json={"text": "half-typed recall"})

    r = client.post(f"{BASE}/{sid}/recall/hide")

    assert r.status_code == 400
    state = client.get(f"{BASE}/{sid}").json()
    assert state["recallMode"] is True
    assert state["recallInput"] == "half-typed recall"
