"""Tests for the HTTP layer with the chat session dependency overridden."""
import base64
import json

import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedProvider, text_round
from switchboard.core.chat import ChatSession, get_chat_session
from switchboard.main import app
from switchboard.models.common import Chunk, FunctionCall


@pytest.fixture
def chat_session():
    return ChatSession(provider=ScriptedProvider(
        rounds=[
            [Chunk(function_calls=[FunctionCall(id="c1", name="calculator", arguments={"expression": "2+2*10"})])],
            text_round("The answer ", "is 22."),
        ],
        classification="analyst",
    ))


@pytest.fixture
def client(chat_session):
    app.dependency_overrides[get_chat_session] = lambda: chat_session
    yield TestClient(app)
    app.dependency_overrides.clear()


def _events(response):
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "alive" in response.json()["message"]


def test_chat_streams_turn_events(client):
    response = client.post("/v1/chat/", json={"message": "2+2*10"})

    assert response.status_code == 200
    events = _events(response)
    assert events[0]["event"] == "appended"
    assert events[0]["turn"]["role"] == "user"
    assert events[-1] == {"event": "done", "agent_id": "analyst", "state": "finalized"}

    partials = [e["turn"]["content"] for e in events if e["event"] == "updated" and e["turn"]["is_streaming"]]
    assert partials == ["The answer ", "The answer is 22."]
    final = [e for e in events if e["event"] == "updated"][-1]["turn"]
    assert final["is_streaming"] is False


def test_conversation_listing_and_clearing(client):
    client.post("/v1/chat/", json={"message": "2+2*10"})

    listed = client.get("/v1/chat/messages").json()
    assert [turn["role"] for turn in listed["turns"]] == ["user", "model"]
    assert listed["active_agent_id"] == "analyst"
    assert listed["turns"][1]["agent_id"] == "analyst"

    cleared = client.delete("/v1/chat/messages").json()
    assert cleared["turns"] == []
    assert cleared["active_agent_id"] == "generalist"


def test_chat_accepts_base64_attachments(client, chat_session):
    payload = {
        "message": "",
        "attachments": [{"name": "notes.txt", "content_type": "text/plain", "data_base64": base64.b64encode(b"hello").decode()}],
    }

    response = client.post("/v1/chat/", json=payload)

    assert response.status_code == 200
    user_turn = chat_session.store.list()[0]
    assert user_turn.attachments[0].payload == "hello"
    assert user_turn.attachments[0].size_bytes == 5


def test_chat_rejects_empty_input(client):
    assert client.post("/v1/chat/", json={"message": "  "}).status_code == 400


def test_chat_rejects_bad_attachment_data(client):
    payload = {"message": "hi", "attachments": [{"name": "x.png", "content_type": "image/png", "data_base64": "%%%"}]}
    assert client.post("/v1/chat/", json=payload).status_code == 400


def test_chat_rejects_submission_while_busy(client, chat_session):
    chat_session._cancel_event = object()
    assert client.post("/v1/chat/", json={"message": "hi"}).status_code == 409


def test_agents_listing_and_override(client, chat_session):
    listed = client.get("/v1/agents/").json()
    assert {agent["id"] for agent in listed["agents"]} == {"generalist", "researcher", "analyst", "coder", "car_specialist"}
    analyst = next(agent for agent in listed["agents"] if agent["id"] == "analyst")
    assert analyst["tools"] == ["calculator"]

    forced = client.put("/v1/agents/override", json={"agent_id": "coder"}).json()
    assert forced["manual_agent_id"] == "coder"
    assert forced["active_agent_id"] == "coder"

    released = client.put("/v1/agents/override", json={"agent_id": None}).json()
    assert released["manual_agent_id"] is None


def test_unknown_override_is_rejected(client):
    assert client.put("/v1/agents/override", json={"agent_id": "astronaut"}).status_code == 422


def test_cancel_without_running_turn(client):
    assert client.post("/v1/chat/cancel").json() == {"cancelled": False}
