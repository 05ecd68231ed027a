"""Tests for the OpenAI-compatible provider with a mocked client (no real API)."""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIError

from switchboard.core.exceptions import RoutingError, StreamError
from switchboard.models.common import Attachment, CallResult, Content, Part, ToolDeclaration, ToolResult, Turn
from switchboard.services.llm_connector import (
    OpenAICompatibleProvider,
    parse_classification,
    to_openai_messages,
)


def _event(content=None, tool_calls=None):
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


def _fragment(index, id=None, name=None, arguments=None):
    return SimpleNamespace(index=index, id=id, function=SimpleNamespace(name=name, arguments=arguments))


class FakeStream:
    def __init__(self, events, error=None):
        self._events = list(events)
        self._error = error

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._events:
            return self._events.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration


def _client(create):
    client = MagicMock()
    client.chat.completions.create = create
    return client


async def _collect(session, parts):
    return [chunk async for chunk in session.send_streaming(parts)]


def test_user_content_maps_images_files_and_text():
    image = Attachment.from_upload("a.png", "image/png", b"png")
    pdf = Attachment.from_upload("b.pdf", "application/pdf", b"%PDF")
    turn = Turn(role="user", content="look", attachments=[image, pdf])

    [message] = to_openai_messages(turn.to_content())

    assert message["role"] == "user"
    kinds = [item["type"] for item in message["content"]]
    assert kinds == ["image_url", "file", "text"]
    assert message["content"][0]["image_url"]["url"].startswith("data:image/png;base64,")


def test_model_turn_maps_to_assistant_text():
    [message] = to_openai_messages(Turn(role="model", content="answer").to_content())
    assert message == {"role": "assistant", "content": "answer"}


def test_function_responses_map_to_tool_messages():
    parts = [
        CallResult(call_id="c1", tool_name="calculator", result=ToolResult.success("4")).to_part(),
        CallResult(call_id="c2", tool_name="calculator", result=ToolResult.failure("bad")).to_part(),
    ]
    messages = to_openai_messages(Content(role="user", parts=parts))

    assert [message["tool_call_id"] for message in messages] == ["c1", "c2"]
    assert json.loads(messages[1]["content"]) == {"error": "bad"}


@pytest.mark.asyncio
async def test_session_streams_text_and_assembles_tool_calls():
    events = [
        _event(content="Let me "),
        _event(content="check."),
        _event(tool_calls=[_fragment(0, id="call_a", name="calculator", arguments='{"expr')]),
        _event(tool_calls=[_fragment(0, arguments='ession": "1+1"}')]),
        _event(tool_calls=[_fragment(1, id="call_b", name="calculator", arguments='{"expression": "2"}')]),
    ]
    create = AsyncMock(return_value=FakeStream(events))
    provider = OpenAICompatibleProvider(client=_client(create), model="test-model")
    declaration = ToolDeclaration(name="calculator", description="math")
    session = provider.create_session("Be precise.", [declaration], [Turn(role="user", content="earlier").to_content()])

    chunks = await _collect(session, [Part(text="1+1?")])

    assert [chunk.text for chunk in chunks if chunk.text] == ["Let me ", "check."]
    calls = chunks[-1].function_calls
    assert [(call.id, call.arguments) for call in calls] == [
        ("call_a", {"expression": "1+1"}),
        ("call_b", {"expression": "2"}),
    ]

    kwargs = create.await_args.kwargs
    assert kwargs["stream"] is True
    assert kwargs["tools"][0]["function"]["name"] == "calculator"
    assert [message["role"] for message in session.messages] == ["system", "user", "user", "assistant"]
    assert session.messages[-1]["tool_calls"][0]["id"] == "call_a"


@pytest.mark.asyncio
async def test_tool_results_follow_the_assistant_tool_calls():
    first = FakeStream([_event(tool_calls=[_fragment(0, id="call_a", name="calculator", arguments="{}")])])
    second = FakeStream([_event(content="2")])
    create = AsyncMock(side_effect=[first, second])
    session = OpenAICompatibleProvider(client=_client(create), model="m").create_session("x", [], [])

    await _collect(session, [Part(text="1+1")])
    result = CallResult(call_id="call_a", tool_name="calculator", result=ToolResult.success("2"))
    await _collect(session, [result.to_part()])

    roles = [message["role"] for message in session.messages]
    assert roles == ["system", "user", "assistant", "tool", "assistant"]
    assert session.messages[3]["tool_call_id"] == "call_a"
    assert "tools" not in create.await_args.kwargs


@pytest.mark.asyncio
async def test_missing_call_id_is_synthesised():
    stream = FakeStream([_event(tool_calls=[_fragment(0, name="calculator", arguments="not json")])])
    session = OpenAICompatibleProvider(client=_client(AsyncMock(return_value=stream)), model="m").create_session("x", [], [])

    chunks = await _collect(session, [Part(text="go")])

    [call] = chunks[-1].function_calls
    assert call.id == "call_0"
    assert call.arguments == {}


@pytest.mark.asyncio
async def test_provider_errors_surface_as_stream_errors():
    error = APIError("upstream overloaded", httpx.Request("POST", "https://llm.example"), body={"message": "overloaded"})
    stream = FakeStream([_event(content="partial")], error=error)
    session = OpenAICompatibleProvider(client=_client(AsyncMock(return_value=stream)), model="m").create_session("x", [], [])

    received = []
    with pytest.raises(StreamError, match="overloaded"):
        async for chunk in session.send_streaming([Part(text="go")]):
            received.append(chunk.text)

    assert received == ["partial"]


@pytest.mark.asyncio
async def test_classify_uses_enum_schema_and_parses_choice():
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content='{"agent_id": "coder"}'))])
    create = AsyncMock(return_value=response)
    provider = OpenAICompatibleProvider(client=_client(create), model="m", router_model="router")

    choice = await provider.classify("route me", ["generalist", "coder"])

    assert choice == "coder"
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "router"
    schema = kwargs["response_format"]["json_schema"]["schema"]
    assert schema["properties"]["agent_id"]["enum"] == ["generalist", "coder"]


@pytest.mark.asyncio
async def test_classify_wraps_api_errors():
    error = APIError("down", httpx.Request("POST", "https://llm.example"), body=None)
    provider = OpenAICompatibleProvider(client=_client(AsyncMock(side_effect=error)), model="m")

    with pytest.raises(RoutingError):
        await provider.classify("route me", ["generalist"])


@pytest.mark.parametrize("text", [None, "", "not json", '{"agent_id": "pilot"}', '["coder"]'])
def test_parse_classification_rejects_bad_answers(text):
    with pytest.raises(RoutingError):
        parse_classification(text, ["generalist", "coder"])
