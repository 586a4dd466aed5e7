"""Pydantic models shared by the agent, API and UI layers.

Provides type safety and validation for conversation turns,
multi-part message payloads and HTTP request/response bodies.
"""

from born_analyst.models.schemas import (
    ChatRequest,
    ChatResponse,
    InlineData,
    InlinePart,
    MessagePart,
    MessagePayload,
    Role,
    SessionInfo,
    SessionRequest,
    StreamChunk,
    StreamStatus,
    TextPart,
    Turn,
)

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "InlineData",
    "InlinePart",
    "MessagePart",
    "MessagePayload",
    "Role",
    "SessionInfo",
    "SessionRequest",
    "StreamChunk",
    "StreamStatus",
    "TextPart",
    "Turn",
]
