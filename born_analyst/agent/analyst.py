"""Analyst service: the per-client context object behind the chat UI.

Ties together the credential, the active chat session, the conversation
store and the stream aggregator. Each browser client (and the HTTP API)
owns one instance; there is no module-level client or session.

Error policy:
    - NotConfiguredError / SessionUnavailableError propagate to the caller,
      which shows a blocking notice. Only the user's own turn is added.
    - TransportError and AttachmentError become a model turn carrying a
      fixed Korean notice; the conversation stays usable.
"""

import logging
from collections.abc import AsyncIterator

from born_analyst.agent.config import AnalystConfig, get_analyst_config
from born_analyst.agent.conversation import ConversationStore
from born_analyst.agent.credentials import ClientFactory, CredentialManager
from born_analyst.agent.prompts import (
    ATTACHMENT_ERROR_NOTICE,
    FILE_UPDATE_PROMPT,
    FILE_UPDATE_USER_MESSAGE,
    MISSING_KEY_NOTICE,
    TRANSPORT_ERROR_NOTICE,
    WELCOME_MESSAGE,
)
from born_analyst.agent.session import AnalysisSession, ChatSessionManager
from born_analyst.agent.streaming import StreamAggregator
from born_analyst.errors import (
    AttachmentError,
    NotConfiguredError,
    SessionUnavailableError,
    TransportError,
)
from born_analyst.models.schemas import MessagePart, MessagePayload, Role, TextPart, Turn
from born_analyst.parsing.attachments import encode_attachment

logger = logging.getLogger(__name__)


def build_update_payload(content: bytes, mime_type: str | None) -> list[MessagePart]:
    """Build the two-part payload for a mid-conversation data update."""
    return [TextPart(text=FILE_UPDATE_PROMPT), encode_attachment(content, mime_type)]


class AnalystService:
    """Runs the analyst's actions against one conversation.

    Only one turn may be in flight: while ``is_busy`` is set, further
    submissions are ignored rather than queued.
    """

    def __init__(
        self,
        config: AnalystConfig | None = None,
        client_factory: ClientFactory | None = None,
        welcome: bool = True,
    ) -> None:
        """Initialize the service.

        Args:
            config: Optional analyst configuration.
                    Loads from environment if not provided.
            client_factory: Builds a Gemini client from an API key.
            welcome: Whether to seed the conversation with the greeting turn.
        """
        self.config = config or get_analyst_config()
        self.credentials = CredentialManager(
            fallback_key=self.config.api_key,
            client_factory=client_factory,
        )
        self.sessions = ChatSessionManager(self.credentials, self.config)
        self.store = ConversationStore()
        self.aggregator = StreamAggregator(self.store)
        self.is_busy = False
        self.last_error: str | None = None

        if welcome:
            self.store.add_turn(Role.MODEL, WELCOME_MESSAGE)

    async def start_analysis(
        self,
        api_key: str,
        context_text: str | None = None,
    ) -> AnalysisSession:
        """Apply the analyst's API key and start a fresh session.

        Args:
            api_key: Key typed into the landing form.
            context_text: Decoded content of the uploaded analysis data.

        Raises:
            NotConfiguredError: If the key is blank.
            SessionUnavailableError: If the session cannot be started.
        """
        if not api_key or not api_key.strip():
            raise NotConfiguredError(MISSING_KEY_NOTICE)

        self.credentials.set_credential(api_key)
        return await self.sessions.start_session(context_text)

    async def auto_start(self) -> bool:
        """Start a session from the environment key, if there is one."""
        if not self.credentials.is_configured:
            return False
        try:
            await self.sessions.start_session("")
        except SessionUnavailableError as e:
            logger.error(f"Auto init failed: {e}")
            return False
        return True

    def reserve(self) -> bool:
        """Mark a turn as in flight before it is submitted.

        Returns:
            False if another turn already holds the slot.
        """
        if self.is_busy:
            return False
        self.is_busy = True
        return True

    async def _respond(self, payload: MessagePayload, error_notice: str) -> AsyncIterator[str]:
        self.is_busy = True
        self.last_error = None
        try:
            chunks = await self.sessions.submit_turn(payload)
            turn = self.store.add_turn(Role.MODEL, "")
            async for content in self.aggregator.stream(turn.id, chunks):
                yield content
        except TransportError as e:
            logger.error(f"Analysis turn failed: {e}")
            self.last_error = error_notice
            self.store.add_turn(Role.MODEL, error_notice)
        finally:
            self.is_busy = False

    async def stream_send(self, text: str, reserved: bool = False) -> AsyncIterator[str]:
        """Submit a question, yielding the reply text as it grows.

        Blank text, or a call made while another turn is in flight, is ignored.
        Pass ``reserved=True`` when the slot was taken with ``reserve()``.
        After the stream ends, ``last_error`` holds the notice of a failed turn.

        Raises:
            NotConfiguredError: If no credential is available.
            SessionUnavailableError: If the session cannot be started.
        """
        text = text.strip()
        if not text:
            if reserved:
                self.is_busy = False
            return
        if self.is_busy and not reserved:
            return

        self.store.add_turn(Role.USER, text)
        async for content in self._respond(text, TRANSPORT_ERROR_NOTICE):
            yield content

    async def stream_file_update(
        self,
        filename: str,
        content: bytes,
        mime_type: str | None,
    ) -> AsyncIterator[str]:
        """Send an uploaded file as an inline attachment, yielding the reply text."""
        if self.is_busy:
            return

        self.store.add_turn(Role.USER, FILE_UPDATE_USER_MESSAGE.format(filename=filename))

        try:
            payload = build_update_payload(content, mime_type)
        except AttachmentError as e:
            logger.warning(f"Rejected attachment {filename}: {e}")
            self.last_error = ATTACHMENT_ERROR_NOTICE
            self.store.add_turn(Role.MODEL, ATTACHMENT_ERROR_NOTICE)
            return

        async for text in self._respond(payload, ATTACHMENT_ERROR_NOTICE):
            yield text

    async def send(self, text: str) -> Turn | None:
        """Submit a question and wait for the full reply.

        Returns:
            The final model turn (the reply or an error notice), or None if
            the submission was ignored.
        """
        count = len(self.store)
        async for _ in self.stream_send(text):
            pass
        return self._last_model_turn(count)

    async def send_file_update(
        self,
        filename: str,
        content: bytes,
        mime_type: str | None,
    ) -> Turn | None:
        """Send an uploaded file and wait for the full reply."""
        count = len(self.store)
        async for _ in self.stream_file_update(filename, content, mime_type):
            pass
        return self._last_model_turn(count)

    def _last_model_turn(self, count: int) -> Turn | None:
        turns = self.store.turns
        if len(turns) > count and turns[-1].role == Role.MODEL:
            return turns[-1]
        return None
