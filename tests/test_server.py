import xml.etree.ElementTree as ET

import pytest
from fastapi.testclient import TestClient

from umlflow.animation.engine import FLOW_DURATION, FLOW_HOLD, NODE_DELAY, TERMINAL_DELAY
from umlflow.parser import SAMPLES
from umlflow.server import app


@pytest.fixture
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_parse_text(client):
    response = client.post("/api/parse", json={"text": "A -> B: hi\nB --> A: ok"})

    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data["entities"]] == ["A", "B"]
    assert [c["kind"] for c in data["connections"]] == ["solid", "dashed"]
    assert data["statistics"]["message_count"] == 2


def test_parse_sample(client):
    response = client.post("/api/parse", json={"sample": "simple"})

    assert response.status_code == 200
    assert {e["id"] for e in response.json()["entities"]} == {"Alice", "Bob"}


def test_parse_requires_source(client):
    response = client.post("/api/parse", json={})

    assert response.status_code == 400
    assert response.json() == {"error": "Provide text or sample"}


def test_samples(client):
    data = client.get("/api/samples").json()

    assert [s["key"] for s in data["samples"]] == list(SAMPLES)
    assert data["samples"][1]["first_line"] == "Alice -> Bob: Hello!"


def test_sample_by_key(client):
    assert client.get("/api/samples/simple").json()["text"] == SAMPLES["simple"]
    assert client.get("/api/samples/missing").status_code == 404


def test_path(client):
    body = {"text": "A -> B\nB -> C\nA -> C", "from_id": "A", "to_id": "C"}

    assert client.post("/api/path", json=body).json() == {"found": True, "path": ["A", "C"]}
    body.update(from_id="C", to_id="A")
    assert client.post("/api/path", json=body).json() == {"found": False, "path": None}


def test_preview(client):
    response = client.post("/api/preview", json={"text": "A -> B\nB -> C", "entity_id": "B"})

    assert response.json() == {"entity_id": "B", "order": ["B", "C"]}
    missing = client.post("/api/preview", json={"text": "A -> B", "entity_id": "Z"})
    assert missing.status_code == 404


def test_animate_from_entity(client):
    response = client.post("/api/animate", json={"text": "A -> B", "start_id": "A"})

    assert response.status_code == 200
    data = response.json()
    assert data["start_ids"] == ["A"]
    names = [c["name"] for c in data["commands"]]
    assert names[0] == "play_effect"
    highlighted = [c["target"] for c in data["commands"] if c["name"] == "highlight_object"]
    assert highlighted == ["A", "B"]
    # ripple click delay plus one connection walk
    expected = 0.3 + NODE_DELAY * 2 + FLOW_DURATION + FLOW_HOLD + TERMINAL_DELAY
    assert data["simulated_seconds"] == pytest.approx(expected)


def test_animate_all_sources(client):
    response = client.post("/api/animate", json={"text": "A -> B\nC -> D", "speed": 2})

    data = response.json()
    assert data["start_ids"] == ["A", "C"]
    highlighted = [c["target"] for c in data["commands"] if c["name"] == "highlight_object"]
    assert highlighted == ["A", "B", "C", "D"]


def test_animate_errors(client):
    assert client.post("/api/animate", json={"text": "nothing here"}).status_code == 400
    assert client.post("/api/animate", json={"text": "A -> B", "start_id": "Z"}).status_code == 404
    assert client.post("/api/animate", json={"text": "A -> B", "speed": 0}).status_code == 422


def test_render(client):
    response = client.post("/api/render", json={"sample": "ecommerce"})

    assert response.status_code == 200
    data = response.json()
    root = ET.fromstring(data["svg_text"])
    assert root.tag == "{http://www.w3.org/2000/svg}svg"
    assert data["statistics"]["entity_count"] == 5


def test_unknown_sample_uses_configured_fallback(client, monkeypatch):
    monkeypatch.setattr("umlflow.server.settings.default_sample", "simple")

    response = client.post("/api/parse", json={"sample": "missing"})

    assert {e["id"] for e in response.json()["entities"]} == {"Alice", "Bob"}
