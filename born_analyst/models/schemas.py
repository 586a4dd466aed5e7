"""Pydantic models for conversation turns, message payloads and the API.

Models:
    - Turn: One message in the conversation (user or model)
    - TextPart / InlinePart: Parts of a multi-part message payload
    - ChatRequest / ChatResponse: Chat endpoint payloads
    - StreamChunk: One SSE frame of a streamed response
    - SessionRequest / SessionInfo: Session start payloads
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class Role(str, Enum):
    """Speaker of a turn."""

    USER = "user"
    MODEL = "model"


class Turn(BaseModel):
    """A single message in the conversation.

    Attributes:
        id: Unique turn identifier.
        role: The speaker (user or model).
        content: The message text. Grows in place while a model turn streams.
        timestamp: When the turn was created.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class TextPart(BaseModel):
    """Plain text part of a message payload."""

    text: str


class InlineData(BaseModel):
    """Binary attachment carried inline as base64."""

    mime_type: str
    data: str = Field(..., description="Base64-encoded file content")


class InlinePart(BaseModel):
    """Attachment part of a message payload."""

    inline_data: InlineData


MessagePart = TextPart | InlinePart
MessagePayload = str | list[MessagePart]


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class ChatRequest(BaseModel):
    """Request payload for the chat endpoints.

    Attributes:
        message: The analyst's question.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class ChatResponse(BaseModel):
    """Complete (non-streamed) reply to a chat request.

    Attributes:
        turn_id: Identifier of the model turn holding the reply.
        content: The reply text (an error notice if the remote call failed).
    """

    turn_id: str
    content: str


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: Text appended since the previous chunk.
        done: Whether this is the final chunk.
        status: Current processing status.
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None


class SessionRequest(BaseModel):
    """Request payload for starting an analysis session.

    Attributes:
        context: Optional supplementary analysis data appended to the system prompt.
    """

    context: str | None = None


class SessionInfo(BaseModel):
    """Information about the active analysis session.

    Attributes:
        model_name: Gemini model identifier.
        temperature: Sampling temperature.
        has_context: Whether uploaded analysis data is part of the system prompt.
        started_at: ISO format timestamp of session creation.
    """

    model_name: str
    temperature: float
    has_context: bool
    started_at: str
