# This module holds the ordered, in-memory list of conversation turns.
# Date: 2026-10-17
# Version: 0.1.0

from typing import Any, Callable, Dict, List, Literal, Optional

from switchboard.core.exceptions import TurnFinalizedError, TurnNotFoundError
from switchboard.models.common import Turn
from switchboard.utils.logger import console

StoreEvent = Literal["appended", "updated", "cleared"]
StoreListener = Callable[[StoreEvent, Optional[Turn]], None]

IMMUTABLE_FIELDS = {"id", "role", "created_at"}


class ConversationStore:
    """
    Owns the turns of the conversation. Turns are replaced in place, never reordered,
    and every change is published to the subscribed listeners.
    """

    def __init__(self):
        self._turns: List[Turn] = []
        self._listeners: List[StoreListener] = []

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Registers a listener and returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: StoreEvent, turn: Optional[Turn]):
        for listener in list(self._listeners):
            try:
                listener(event, turn)
            except Exception:
                console.exception(f"Conversation listener failed while handling '{event}'.")

    def _index_of(self, turn_id: str) -> int:
        for index, turn in enumerate(self._turns):
            if turn.id == turn_id:
                return index
        raise TurnNotFoundError(turn_id)

    def append(self, turn: Turn) -> Turn:
        if any(existing.id == turn.id for existing in self._turns):
            raise ValueError(f"Turn '{turn.id}' already exists.")
        self._turns.append(turn)
        self._publish("appended", turn)
        return turn

    def get(self, turn_id: str) -> Turn:
        return self._turns[self._index_of(turn_id)]

    def update_by_id(self, turn_id: str, patch: Dict[str, Any]) -> Turn:
        """
        The only mutation path for an existing turn. Content may only grow,
        is_streaming may only go from True to False, and finalized turns are immutable.
        """
        index = self._index_of(turn_id)
        current = self._turns[index]
        if not current.is_streaming:
            raise TurnFinalizedError(f"Turn '{turn_id}' is finalized and cannot change.")

        frozen = IMMUTABLE_FIELDS.intersection(patch)
        if frozen:
            raise ValueError(f"Fields {sorted(frozen)} of a turn cannot change.")
        if "content" in patch and not patch["content"].startswith(current.content):
            raise ValueError(f"Content of turn '{turn_id}' can only be appended to.")
        if patch.get("is_streaming") is True:
            raise ValueError(f"Turn '{turn_id}' cannot start streaming again.")

        updated = current.model_copy(update=patch)
        self._turns[index] = updated
        self._publish("updated", updated)
        return updated

    def append_content(self, turn_id: str, fragment: str) -> Turn:
        current = self.get(turn_id)
        return self.update_by_id(turn_id, {"content": current.content + fragment})

    def finalize(self, turn_id: str) -> Turn:
        return self.update_by_id(turn_id, {"is_streaming": False})

    def clear(self):
        self._turns = []
        self._publish("cleared", None)

    def list(self) -> List[Turn]:
        return list(self._turns)
