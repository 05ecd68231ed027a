# The module is to define the chat session: the user-facing state around the turn engine.
# Date: 2026-10-17
# Version: 0.1.0

import asyncio
from functools import lru_cache
from typing import List, Optional, Sequence, Union

from switchboard.core.agents import DEFAULT_AGENT_ID, AgentId
from switchboard.core.engine import TurnEngine, TurnOutcome
from switchboard.core.exceptions import TurnInProgressError
from switchboard.models.common import Attachment, Turn
from switchboard.services.conversation_store import ConversationStore
from switchboard.services.llm_connector import ModelProvider
from switchboard.utils.logger import console


class ChatSession:
    """
    Holds the conversation, the pending attachments and the agent selection for a
    single user. Only one turn runs at a time; submissions while busy are rejected.
    """

    def __init__(
        self,
        store: Optional[ConversationStore] = None,
        engine: Optional[TurnEngine] = None,
        provider: Optional[ModelProvider] = None,
    ):
        self.store = store or ConversationStore()
        self.engine = engine or TurnEngine(self.store, provider=provider)
        self.active_agent_id: AgentId = DEFAULT_AGENT_ID
        self.manual_agent_id: Optional[AgentId] = None
        self.pending_attachments: List[Attachment] = []
        self._cancel_event: Optional[asyncio.Event] = None

    @property
    def is_loading(self) -> bool:
        return self._cancel_event is not None

    def add_attachment(self, name: str, content_type: str, data: bytes, size_bytes: Optional[int] = None) -> Attachment:
        attachment = Attachment.from_upload(name, content_type, data, size_bytes)
        self.pending_attachments.append(attachment)
        return attachment

    def remove_attachment(self, index: int) -> Attachment:
        return self.pending_attachments.pop(index)

    def set_agent(self, agent_id: Optional[Union[AgentId, str]]):
        """Sets or clears the manual agent override."""
        self.manual_agent_id = AgentId(agent_id) if agent_id else None
        if self.manual_agent_id:
            self.active_agent_id = self.manual_agent_id
        console.info(f"Manual agent override set to: {self.manual_agent_id.value if self.manual_agent_id else None}")

    def clear(self):
        self.store.clear()
        if not self.manual_agent_id:
            self.active_agent_id = DEFAULT_AGENT_ID

    def cancel(self) -> bool:
        """Asks the running turn to stop at its next suspension point."""
        if self._cancel_event is None:
            return False
        self._cancel_event.set()
        return True

    async def submit(self, text: str, attachments: Optional[Sequence[Attachment]] = None) -> Optional[TurnOutcome]:
        """
        Submits user input. Returns None when there is nothing to send.
        Attachments default to the pending ones, which are consumed.
        """
        if self.is_loading:
            raise TurnInProgressError("A turn is already in progress.")

        if attachments is None:
            attachments = self.pending_attachments
        if not text.strip() and not attachments:
            return None

        user_turn = Turn(role="user", content=text, attachments=list(attachments))
        self.pending_attachments = []
        self._cancel_event = asyncio.Event()
        try:
            outcome = await self.engine.append(user_turn, self.manual_agent_id, self._cancel_event)
        finally:
            self._cancel_event = None

        self.active_agent_id = outcome.agent_id
        return outcome


@lru_cache
def get_chat_session() -> ChatSession:
    """Returns the process-wide chat session."""
    return ChatSession()
