"""Shared fixtures: a scripted model provider standing in for the LLM endpoint."""
from typing import List, Optional, Sequence

import pytest

from switchboard.core.config import Settings
from switchboard.core.engine import TurnEngine
from switchboard.models.common import Chunk, Content, Part, ToolDeclaration
from switchboard.services.conversation_store import ConversationStore
from switchboard.services.llm_connector import ModelProvider, ModelSession


class ScriptedSession(ModelSession):
    """Plays back one scripted round per send_streaming call."""

    def __init__(self, provider: "ScriptedProvider"):
        self._provider = provider

    async def send_streaming(self, parts: List[Part]):
        self._provider.sent_parts.append(list(parts))
        if not self._provider.rounds:
            return
        for item in self._provider.rounds.pop(0):
            if isinstance(item, BaseException):
                raise item
            yield item


class ScriptedProvider(ModelProvider):
    def __init__(
        self,
        rounds: Sequence[Sequence[object]] = (),
        classification: Optional[str] = None,
        classify_error: Optional[Exception] = None,
    ):
        self.rounds = [list(round_) for round_ in rounds]
        self.classification = classification
        self.classify_error = classify_error
        self.sessions: List[dict] = []
        self.sent_parts: List[List[Part]] = []
        self.classify_prompts: List[str] = []

    def create_session(self, instruction: str, tool_declarations: Sequence[ToolDeclaration], history: Sequence[Content]):
        self.sessions.append({
            "instruction": instruction,
            "tools": [declaration.name for declaration in tool_declarations],
            "history": list(history),
        })
        return ScriptedSession(self)

    async def classify(self, prompt: str, choices: Sequence[str]) -> str:
        self.classify_prompts.append(prompt)
        if self.classify_error is not None:
            raise self.classify_error
        return self.classification


def text_round(*fragments: str) -> List[Chunk]:
    return [Chunk(text=fragment) for fragment in fragments]


@pytest.fixture
def store():
    return ConversationStore()


@pytest.fixture
def settings():
    return Settings(MAX_TOOL_ROUNDS=10, ROUND_TIMEOUT_SECONDS=5.0)


@pytest.fixture
def make_engine(store, settings):
    def factory(provider: ModelProvider, **kwargs):
        kwargs.setdefault("settings", settings)
        return TurnEngine(store, provider=provider, **kwargs)
    return factory
