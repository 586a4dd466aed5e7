"""Chat session management on top of the Gemini async chats API.

Exactly one session is active at a time. Starting a new one drops the
previous one; no turn history is replayed into the new session, the
conversation store is the only durable history.
"""

import base64
import logging
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from google.genai import types
from pydantic import BaseModel, Field

from born_analyst.agent.config import AnalystConfig, get_analyst_config
from born_analyst.agent.credentials import CredentialManager
from born_analyst.agent.prompts import CONTEXT_BLOCK_TEMPLATE, SYSTEM_INSTRUCTION
from born_analyst.errors import SessionUnavailableError, TransportError
from born_analyst.models.schemas import MessagePayload, TextPart

logger = logging.getLogger(__name__)


class AnalysisSession(BaseModel):
    """One configured conversation with the model.

    Attributes:
        system_instruction: Full system prompt, including uploaded context.
        temperature: Sampling temperature.
        model_name: Gemini model identifier.
        has_context: Whether uploaded analysis data was appended.
        started_at: Session creation time.
        chat: Remote chat handle (not serialized).
    """

    system_instruction: str
    temperature: float
    model_name: str
    has_context: bool = False
    started_at: datetime = Field(default_factory=datetime.now)
    chat: Any = Field(default=None, exclude=True, repr=False)


def compose_system_instruction(context_text: str | None = None) -> str:
    """Append the uploaded analysis data block to the fixed system prompt."""
    if not context_text:
        return SYSTEM_INSTRUCTION
    return SYSTEM_INSTRUCTION + CONTEXT_BLOCK_TEMPLATE.format(context=context_text)


def to_genai_message(payload: MessagePayload) -> str | list[types.Part]:
    """Convert a message payload into what the chats API accepts."""
    if isinstance(payload, str):
        return payload

    parts: list[types.Part] = []
    for part in payload:
        if isinstance(part, TextPart):
            parts.append(types.Part.from_text(text=part.text))
        else:
            parts.append(
                types.Part.from_bytes(
                    data=base64.b64decode(part.inline_data.data),
                    mime_type=part.inline_data.mime_type,
                )
            )
    return parts


class ChatSessionManager:
    """Creates, replaces and feeds the single active chat session."""

    def __init__(
        self,
        credentials: CredentialManager,
        config: AnalystConfig | None = None,
    ) -> None:
        self._credentials = credentials
        self._config = config or get_analyst_config()
        self._session: AnalysisSession | None = None
        credentials.subscribe(self._on_credential_change)

    @property
    def session(self) -> AnalysisSession | None:
        return self._session

    def _on_credential_change(self) -> None:
        if self._session is not None:
            logger.info("Credential changed, dropping active session")
        self._session = None

    async def start_session(self, context_text: str | None = None) -> AnalysisSession:
        """Start a new session, replacing any active one.

        Args:
            context_text: Optional uploaded analysis data for the system prompt.

        Returns:
            The new active session.

        Raises:
            NotConfiguredError: If no credential is available.
            SessionUnavailableError: If the remote chat cannot be created.
        """
        client = self._credentials.current_client()
        instruction = compose_system_instruction(context_text)

        try:
            chat = client.aio.chats.create(
                model=self._config.model_name,
                config=types.GenerateContentConfig(
                    system_instruction=instruction,
                    temperature=self._config.temperature,
                ),
            )
        except Exception as e:
            logger.error(f"Failed to create chat session: {e}")
            raise SessionUnavailableError(f"Chat session could not be started: {e}") from e

        self._session = AnalysisSession(
            system_instruction=instruction,
            temperature=self._config.temperature,
            model_name=self._config.model_name,
            has_context=bool(context_text),
            chat=chat,
        )
        logger.info(
            f"Started chat session (model={self._config.model_name}, "
            f"context={len(context_text or '')} chars)"
        )
        return self._session

    async def get_or_create_session(self) -> AnalysisSession:
        """Return the active session, starting one without context if needed."""
        if self._session is None:
            return await self.start_session()
        return self._session

    async def submit_turn(self, payload: MessagePayload) -> AsyncIterator[Any]:
        """Send one user turn and return the stream of response chunks.

        Args:
            payload: Plain text or a list of text / inline attachment parts.

        Returns:
            Async iterator of response chunks, each exposing ``.text``.

        Raises:
            NotConfiguredError: If no credential is available.
            SessionUnavailableError: If the session cannot be started.
            TransportError: If the remote call fails.
        """
        session = await self.get_or_create_session()
        message = to_genai_message(payload)

        try:
            stream = await session.chat.send_message_stream(message)
        except Exception as e:
            logger.error(f"Error sending message: {e}")
            raise TransportError(str(e)) from e

        return self._relay(stream)

    async def _relay(self, stream: AsyncIterator[Any]) -> AsyncIterator[Any]:
        try:
            async for chunk in stream:
                yield chunk
        except Exception as e:
            logger.error(f"Response stream failed: {e}")
            raise TransportError(str(e)) from e
