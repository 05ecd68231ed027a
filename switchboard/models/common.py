# The module is to define the common models for the application.
# Date: 2026-10-17
# Version: 0.1.0

import base64
from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional

# The conversation only ever holds user and model turns.
Role = Literal["user", "model"]

TEXT_CONTENT_TYPES = {
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-yaml",
    "application/yaml",
    "application/x-sh",
    "application/sql",
}

EMPTY_TURN_PLACEHOLDER = " "


def _is_text_content_type(content_type: str) -> bool:
    base = content_type.split(";", 1)[0].strip().lower()
    return base.startswith("text/") or base in TEXT_CONTENT_TYPES


class InlineData(BaseModel):
    """Binary payload sent inline to the provider, base64 encoded."""
    mime_type: str
    data: str


class FunctionResponse(BaseModel):
    """The answer to one tool call, associated with the call by its id."""
    id: str
    name: str
    response: Dict[str, Any]


class Part(BaseModel):
    """
    One element of a provider message. Exactly one of the fields is set.
    Attributes:
        text (Optional[str]): Plain text.
        inline_data (Optional[InlineData]): An attachment sent as binary data.
        function_response (Optional[FunctionResponse]): A tool result for the model.
    """
    text: Optional[str] = None
    inline_data: Optional[InlineData] = None
    function_response: Optional[FunctionResponse] = None


class Content(BaseModel):
    """A single turn converted to the provider's message format."""
    role: Role
    parts: List[Part]


class Attachment(BaseModel):
    """
    A file attached to a turn. Immutable once created.
    Attributes:
        name (str): The original filename.
        content_type (str): The declared MIME type.
        payload (str): Base64 encoded bytes, or the decoded text for text files.
        encoding (str): 'base64' or 'text', describing how payload is stored.
        size_bytes (int): The size of the original file.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    content_type: str
    payload: str
    encoding: Literal["base64", "text"]
    size_bytes: int = Field(..., ge=0)

    @classmethod
    def from_upload(cls, name: str, content_type: str, data: bytes, size_bytes: Optional[int] = None) -> "Attachment":
        """
        Builds an attachment from raw file bytes that were already read into memory.
        Text-like files that decode as UTF-8 keep their text; everything else is base64 encoded.
        """
        content_type = content_type or "application/octet-stream"
        size = len(data) if size_bytes is None else size_bytes
        if _is_text_content_type(content_type):
            try:
                return cls(name=name, content_type=content_type, payload=data.decode("utf-8"), encoding="text", size_bytes=size)
            except UnicodeDecodeError:
                pass
        payload = base64.b64encode(data).decode("ascii")
        return cls(name=name, content_type=content_type, payload=payload, encoding="base64", size_bytes=size)

    @property
    def is_binary(self) -> bool:
        return self.encoding == "base64"

    def to_part(self) -> Part:
        if self.is_binary:
            return Part(inline_data=InlineData(mime_type=self.content_type, data=self.payload))
        return Part(text=f"\nFile: {self.name}\n```\n{self.payload}\n```")


class Turn(BaseModel):
    """
    Represents one message in the conversation, from the user or from the model.
    Attributes:
        id (str): The unique id of the turn.
        role (Role): Who produced the turn.
        content (str): The text of the turn, appended to while streaming.
        created_at (datetime): When the turn was created.
        is_streaming (bool): True while the model is still producing this turn.
        attachments (List[Attachment]): Files attached to the turn.
        agent_id (Optional[str]): The agent that handled the turn.
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Role
    content: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    is_streaming: bool = False
    attachments: List[Attachment] = Field(default_factory=list)
    agent_id: Optional[str] = None

    def to_parts(self) -> List[Part]:
        """Attachments first, then the text. Never returns an empty list."""
        parts = [attachment.to_part() for attachment in self.attachments]
        if self.content:
            parts.append(Part(text=self.content))
        if not parts:
            parts.append(Part(text=EMPTY_TURN_PLACEHOLDER))
        return parts

    def to_content(self) -> Content:
        return Content(role=self.role, parts=self.to_parts())


class ToolDeclaration(BaseModel):
    """Describes a callable tool to the model."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_openai(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


class FunctionCall(BaseModel):
    """A tool call requested by the model while streaming."""
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """One incremental piece of a streamed model response."""
    text: Optional[str] = None
    function_calls: List[FunctionCall] = Field(default_factory=list)


class ToolResult(BaseModel):
    """The outcome of a tool execution: either a value or an error message."""
    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> "ToolResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(ok=False, error=message or "Unknown error.")


class CallResult(BaseModel):
    """The result of one tool call, keyed by the call id it answers."""
    call_id: str
    tool_name: str
    result: ToolResult

    def to_part(self) -> Part:
        if self.result.ok:
            response = {"result": self.result.value}
        else:
            response = {"error": self.result.error}
        return Part(function_response=FunctionResponse(id=self.call_id, name=self.tool_name, response=response))
