# The module is to define the API models for the application.
# Date: 2026-10-17
# Version: 0.1.0

from pydantic import BaseModel, Field
from typing import List, Optional

from switchboard.models.common import Turn


class AttachmentUpload(BaseModel):
    """
    A file sent along with a chat message.
    Attributes:
        name (str): The filename.
        content_type (str): The declared MIME type.
        data_base64 (str): The raw file bytes, base64 encoded.
        size_bytes (Optional[int]): The declared file size. Defaults to the decoded length.
    """
    name: str
    content_type: str = "application/octet-stream"
    data_base64: str
    size_bytes: Optional[int] = Field(default=None, ge=0)


class ChatRequest(BaseModel):
    """
    Defines the request body for the /v1/chat endpoint.
    Attributes:
        message (str): The user's text input.
        attachments (List[AttachmentUpload]): Files attached to the message.
        agent_id (Optional[str]): Manual agent override applied before this turn.
    """
    message: str = Field(default="", description="The user's text input.")
    attachments: List[AttachmentUpload] = Field(default_factory=list)
    agent_id: Optional[str] = Field(default=None, description="Optional agent to use instead of automatic routing.")


class ConversationResponse(BaseModel):
    """The ordered list of turns and the agent currently in charge."""
    active_agent_id: str
    manual_agent_id: Optional[str] = None
    is_loading: bool
    turns: List[Turn]


class AgentInfo(BaseModel):
    id: str
    display_name: str
    description: str
    tools: List[str]


class AgentsResponse(BaseModel):
    agents: List[AgentInfo]
    active_agent_id: str
    manual_agent_id: Optional[str] = None


class AgentOverrideRequest(BaseModel):
    """
    Defines the request body for the /v1/agents/override endpoint.
    Attributes:
        agent_id (Optional[str]): The agent to force, or null to return to automatic routing.
    """
    agent_id: Optional[str] = None


class CancelResponse(BaseModel):
    cancelled: bool
