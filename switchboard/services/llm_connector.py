# The module is to define the model provider boundary and its OpenAI-compatible implementation.
# Date: 2026-10-17
# Version: 0.1.0

import json
from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from openai import AsyncOpenAI, APIError

from switchboard.core.config import get_settings
from switchboard.core.exceptions import RoutingError, StreamError
from switchboard.models.common import Chunk, Content, FunctionCall, Part, ToolDeclaration
from switchboard.utils.logger import console

SUPPORTED_PROVIDERS = ("CHATGPT", "CLAUDE", "GEMINI", "DEEPSEEK_CHAT", "DEEPSEEK_REASONER")
CLASSIFICATION_FIELD = "agent_id"


class ModelSession(ABC):
    """The live exchange with the model for one turn."""

    @abstractmethod
    def send_streaming(self, parts: List[Part]) -> AsyncIterator[Chunk]:
        """
        Sends one round of input and yields the response as incremental chunks.
        The iterator is finite and not restartable; every round needs a new call.
        """


class ModelProvider(ABC):
    """Opaque streaming text and tool-call provider."""

    @abstractmethod
    def create_session(
        self,
        instruction: str,
        tool_declarations: Sequence[ToolDeclaration],
        history: Sequence[Content],
    ) -> ModelSession:
        ...

    @abstractmethod
    async def classify(self, prompt: str, choices: Sequence[str]) -> str:
        """Single-shot request whose answer is constrained to one of choices."""


def get_llm_client_and_model() -> tuple[AsyncOpenAI, str]:
    """
    Acts as a factory to get the currently configured LLM client and model name.

    This function reads the LLM_PROVIDER from the settings and returns the
    corresponding client instance and model string.

    Raises:
        ValueError: If the configured LLM_PROVIDER is not supported or has no API key.

    Returns:
        A tuple containing the active AsyncOpenAI client and the model name.
    """
    settings = get_settings()
    provider = settings.LLM_PROVIDER.upper()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValueError(f"Unsupported or misconfigured LLM provider: {provider}")

    api_key = getattr(settings, f"{provider}_API_KEY")
    model = getattr(settings, f"{provider}_MODEL")
    if not api_key or not model:
        raise ValueError(f"Unsupported or misconfigured LLM provider: {provider}")

    client = AsyncOpenAI(api_key=api_key, base_url=getattr(settings, f"{provider}_BASE_URL"))
    return client, model


def _data_url(mime_type: str, data: str) -> str:
    return f"data:{mime_type};base64,{data}"


def _user_content(parts: Sequence[Part]) -> List[Dict[str, Any]]:
    content: List[Dict[str, Any]] = []
    for part in parts:
        if part.text is not None:
            content.append({"type": "text", "text": part.text})
        elif part.inline_data is not None:
            url = _data_url(part.inline_data.mime_type, part.inline_data.data)
            if part.inline_data.mime_type.startswith("image/"):
                content.append({"type": "image_url", "image_url": {"url": url}})
            else:
                content.append({"type": "file", "file": {"file_data": url}})
    return content


def to_openai_messages(content: Content) -> List[Dict[str, Any]]:
    """Converts one provider Content into OpenAI chat messages."""
    responses = [part.function_response for part in content.parts if part.function_response is not None]
    if responses:
        return [
            {"role": "tool", "tool_call_id": response.id, "content": json.dumps(response.response, default=str)}
            for response in responses
        ]
    if content.role == "model":
        text = "".join(part.text for part in content.parts if part.text is not None)
        return [{"role": "assistant", "content": text}]
    return [{"role": "user", "content": _user_content(content.parts)}]


def _parse_arguments(raw: str, name: str) -> Dict[str, Any]:
    if not raw:
        return {}
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError:
        console.warning(f"Could not decode arguments for tool call '{name}': {raw!r}")
        return {}
    return arguments if isinstance(arguments, dict) else {}


class OpenAICompatibleSession(ModelSession):
    """
    Chat session against an OpenAI-compatible endpoint. Keeps the message list for
    the whole turn so tool results can be sent after the assistant's tool calls.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        instruction: str,
        tool_declarations: Sequence[ToolDeclaration],
        history: Sequence[Content],
    ):
        self._client = client
        self._model = model
        self._tools = [declaration.to_openai() for declaration in tool_declarations]
        self.messages: List[Dict[str, Any]] = [{"role": "system", "content": instruction}]
        for content in history:
            self.messages.extend(to_openai_messages(content))

    async def send_streaming(self, parts: List[Part]) -> AsyncIterator[Chunk]:
        self.messages.extend(to_openai_messages(Content(role="user", parts=parts)))

        request_params: Dict[str, Any] = {
            "model": self._model,
            "messages": self.messages,
            "stream": True,
        }
        if self._tools:
            request_params["tools"] = self._tools
            request_params["tool_choice"] = "auto"

        text = ""
        # Tool call fragments arrive keyed by index; the id and name come with the first one.
        pending: Dict[int, Dict[str, str]] = {}
        try:
            stream = await self._client.chat.completions.create(**request_params)
            async for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta
                for fragment in delta.tool_calls or []:
                    slot = pending.setdefault(fragment.index, {"id": "", "name": "", "arguments": ""})
                    if fragment.id:
                        slot["id"] = fragment.id
                    if fragment.function is not None:
                        if fragment.function.name:
                            slot["name"] = fragment.function.name
                        if fragment.function.arguments:
                            slot["arguments"] += fragment.function.arguments
                if delta.content:
                    text += delta.content
                    yield Chunk(text=delta.content)
        except APIError as e:
            message = e.body.get("message", str(e)) if isinstance(e.body, dict) else str(e)
            console.error(f"An API error occurred while streaming: {message}")
            raise StreamError(f"Error from LLM provider: {message}") from e

        calls = [
            FunctionCall(
                id=slot["id"] or f"call_{index}",
                name=slot["name"],
                arguments=_parse_arguments(slot["arguments"], slot["name"]),
            )
            for index, slot in sorted(pending.items())
        ]

        assistant_message: Dict[str, Any] = {"role": "assistant", "content": text or None}
        if calls:
            assistant_message["tool_calls"] = [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
                }
                for call in calls
            ]
        self.messages.append(assistant_message)

        if calls:
            yield Chunk(function_calls=calls)


class OpenAICompatibleProvider(ModelProvider):
    """Provider backed by the configured OpenAI-compatible LLM endpoint."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None, router_model: Optional[str] = None):
        self._client = client
        self._model = model
        self._router_model = router_model

    def _resolve(self) -> tuple[AsyncOpenAI, str]:
        if self._client is None or self._model is None:
            client, model = get_llm_client_and_model()
            self._client = self._client or client
            self._model = self._model or model
        return self._client, self._model

    def create_session(
        self,
        instruction: str,
        tool_declarations: Sequence[ToolDeclaration],
        history: Sequence[Content],
    ) -> OpenAICompatibleSession:
        client, model = self._resolve()
        return OpenAICompatibleSession(client, model, instruction, tool_declarations, history)

    async def classify(self, prompt: str, choices: Sequence[str]) -> str:
        try:
            client, model = self._resolve()
            response = await client.chat.completions.create(
                model=self._router_model or get_settings().ROUTER_MODEL or model,
                messages=[{"role": "user", "content": prompt}],
                temperature=0.0,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "agent_route",
                        "strict": True,
                        "schema": {
                            "type": "object",
                            "properties": {
                                CLASSIFICATION_FIELD: {"type": "string", "enum": list(choices)},
                            },
                            "required": [CLASSIFICATION_FIELD],
                            "additionalProperties": False,
                        },
                    },
                },
            )
        except (APIError, ValueError) as e:
            raise RoutingError(f"Classification request failed: {e}") from e

        return parse_classification(response.choices[0].message.content, choices)


def parse_classification(text: Optional[str], choices: Sequence[str]) -> str:
    """Extracts the chosen value from a structured classification answer."""
    if not text:
        raise RoutingError("Classification response was empty.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RoutingError(f"Classification response is not JSON: {text!r}") from e
    value = data.get(CLASSIFICATION_FIELD) if isinstance(data, dict) else None
    if value not in choices:
        raise RoutingError(f"Classification returned an unknown value: {value!r}")
    return value


@lru_cache
def get_provider() -> ModelProvider:
    return OpenAICompatibleProvider()
