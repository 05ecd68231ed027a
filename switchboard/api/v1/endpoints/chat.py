# The module is to define the API endpoints for chat interactions.
# Date: 2026-10-17
# Version: 0.1.0

import asyncio
import base64
import binascii
import json
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from switchboard.core.agents import AgentId
from switchboard.core.chat import ChatSession, get_chat_session
from switchboard.core.exceptions import TurnInProgressError
from switchboard.models.api_models import CancelResponse, ChatRequest, ConversationResponse
from switchboard.models.common import Attachment, Turn
from switchboard.utils.logger import console

router = APIRouter()


def _decode_attachments(request: ChatRequest) -> List[Attachment]:
    attachments = []
    for upload in request.attachments:
        try:
            data = base64.b64decode(upload.data_base64, validate=True)
        except (binascii.Error, ValueError):
            raise HTTPException(status_code=400, detail=f"Attachment '{upload.name}' is not valid base64 data.")
        attachments.append(Attachment.from_upload(upload.name, upload.content_type, data, upload.size_bytes))
    return attachments


def _event_line(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, default=str) + "\n"


def _conversation(session: ChatSession) -> ConversationResponse:
    return ConversationResponse(
        active_agent_id=session.active_agent_id.value,
        manual_agent_id=session.manual_agent_id.value if session.manual_agent_id else None,
        is_loading=session.is_loading,
        turns=session.store.list(),
    )


@router.post("/")
async def chat(request: ChatRequest, session: ChatSession = Depends(get_chat_session)):
    """
    Handles a single turn in the conversation. The response is a stream of
    newline-delimited JSON events mirroring every change to the conversation.
    """
    if session.is_loading:
        raise HTTPException(status_code=409, detail="A turn is already in progress.")
    if not request.message.strip() and not request.attachments:
        raise HTTPException(status_code=400, detail="A message or at least one attachment is required.")
    attachments = _decode_attachments(request)
    if request.agent_id is not None:
        try:
            session.set_agent(request.agent_id)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown agent: {request.agent_id}")

    console.info(f"Received chat message with {len(attachments)} attachment(s).")

    async def event_stream() -> AsyncIterator[str]:
        queue: "asyncio.Queue[Optional[Dict[str, Any]]]" = asyncio.Queue()

        def on_change(event: str, turn: Optional[Turn]):
            queue.put_nowait({"event": event, "turn": turn.model_dump(mode="json") if turn else None})

        unsubscribe = session.store.subscribe(on_change)
        task = asyncio.create_task(session.submit(request.message, attachments))
        task.add_done_callback(lambda _: queue.put_nowait(None))
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                yield _event_line(item)
            try:
                outcome = task.result()
            except TurnInProgressError as e:
                yield _event_line({"event": "error", "detail": str(e)})
                return
            yield _event_line({
                "event": "done",
                "agent_id": outcome.agent_id.value if outcome else None,
                "state": outcome.state.value if outcome else None,
            })
        finally:
            unsubscribe()

    return StreamingResponse(event_stream(), media_type="application/x-ndjson")


@router.get("/messages", response_model=ConversationResponse)
def list_messages(session: ChatSession = Depends(get_chat_session)):
    """Returns the conversation in order."""
    return _conversation(session)


@router.delete("/messages", response_model=ConversationResponse)
def clear_messages(session: ChatSession = Depends(get_chat_session)):
    """Clears the conversation. The active agent returns to the default unless one is forced."""
    session.clear()
    console.info("Conversation cleared.")
    return _conversation(session)


@router.post("/cancel", response_model=CancelResponse)
def cancel_turn(session: ChatSession = Depends(get_chat_session)):
    """Requests cooperative cancellation of the running turn."""
    return CancelResponse(cancelled=session.cancel())
