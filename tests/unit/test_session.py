"""Unit tests for ChatSessionManager."""

import base64
from collections.abc import Callable

import pytest
import pytest_check as check
from google.genai import types

from born_analyst.agent.config import AnalystConfig
from born_analyst.agent.credentials import CredentialManager
from born_analyst.agent.prompts import SYSTEM_INSTRUCTION
from born_analyst.agent.session import (
    ChatSessionManager,
    compose_system_instruction,
    to_genai_message,
)
from born_analyst.errors import NotConfiguredError, SessionUnavailableError, TransportError
from born_analyst.models.schemas import InlineData, InlinePart, TextPart


@pytest.fixture
def credentials(client_factory: Callable) -> CredentialManager:
    return CredentialManager(fallback_key="env-key", client_factory=client_factory)


@pytest.fixture
def manager(credentials: CredentialManager, config: AnalystConfig) -> ChatSessionManager:
    return ChatSessionManager(credentials, config)


class TestComposeSystemInstruction:
    def test_without_context(self) -> None:
        check.equal(compose_system_instruction(), SYSTEM_INSTRUCTION)
        check.equal(compose_system_instruction(""), SYSTEM_INSTRUCTION)

    def test_with_context_appends_block(self) -> None:
        instruction = compose_system_instruction("연도,매출\n2024,120")

        check.is_true(instruction.startswith(SYSTEM_INSTRUCTION))
        check.is_in("=== 사용자가 업로드한 추가 분석 데이터 ===\n연도,매출\n2024,120\n", instruction)
        check.is_true(instruction.endswith("위 데이터를 최우선으로 참고하여 분석하세요."))


class TestStartSession:
    """Tests for session creation and replacement."""

    async def test_creates_chat_with_config(
        self, manager: ChatSessionManager, fake_clients: list
    ) -> None:
        session = await manager.start_session("데이터")

        chat = fake_clients[0].chats[0]
        check.equal(chat.model, "gemini-test")
        check.equal(chat.config.temperature, 0.7)
        check.equal(chat.config.system_instruction, session.system_instruction)
        check.is_true(session.has_context)
        check.is_true(session.chat is chat)

    async def test_restart_replaces_session(self, manager: ChatSessionManager) -> None:
        """A new session fully supersedes the previous one."""
        first = await manager.start_session("old")
        second = await manager.start_session()

        check.is_false(first is second)
        check.is_true(manager.session is second)
        check.is_false(second.has_context)
        check.equal(second.system_instruction, SYSTEM_INSTRUCTION)

    async def test_get_or_create_is_lazy(self, manager: ChatSessionManager) -> None:
        check.is_none(manager.session)

        session = await manager.get_or_create_session()

        check.is_true(await manager.get_or_create_session() is session)
        check.is_false(session.has_context)

    async def test_not_configured(self, client_factory: Callable, config: AnalystConfig) -> None:
        manager = ChatSessionManager(CredentialManager(client_factory=client_factory), config)

        with pytest.raises(NotConfiguredError):
            await manager.start_session()

    async def test_create_failure_is_session_unavailable(
        self, manager: ChatSessionManager, credentials: CredentialManager
    ) -> None:
        client = credentials.current_client()

        def broken_create(model: str, config: object = None) -> None:
            raise RuntimeError("quota")

        client.aio.chats.create = broken_create

        with pytest.raises(SessionUnavailableError, match="quota"):
            await manager.start_session()

    async def test_credential_change_drops_session(
        self, manager: ChatSessionManager, credentials: CredentialManager, fake_clients: list
    ) -> None:
        await manager.start_session("ctx")

        credentials.set_credential("new-key")

        check.is_none(manager.session)
        session = await manager.get_or_create_session()
        check.equal(fake_clients[-1].api_key, "new-key")
        check.is_true(session.chat is fake_clients[-1].chats[0])

    async def test_failed_credential_change_drops_session(
        self, client_factory: Callable, config: AnalystConfig, fake_clients: list
    ) -> None:
        """A key whose client cannot be built still retires the old session."""

        def factory(api_key: str) -> object:
            if api_key == "bad-key":
                raise ValueError("invalid key")
            return client_factory(api_key)

        credentials = CredentialManager(client_factory=factory)
        manager = ChatSessionManager(credentials, config)
        credentials.set_credential("old-key")
        await manager.start_session()

        with pytest.raises(SessionUnavailableError):
            credentials.set_credential("bad-key")

        check.is_none(manager.session)
        with pytest.raises(SessionUnavailableError):
            await manager.submit_turn("q")
        check.equal(fake_clients[0].chats[0].sent, [])


class TestSubmitTurn:
    """Tests for sending turns and relaying the response stream."""

    async def test_returns_chunk_stream(self, manager: ChatSessionManager) -> None:
        stream = await manager.submit_turn("객실 가격을 알려줘")

        texts = [chunk.text async for chunk in stream]

        check.equal(texts, ["Hel", "lo, ", "world"])
        check.equal(manager.session.chat.sent, ["객실 가격을 알려줘"])

    async def test_not_configured(self, client_factory: Callable, config: AnalystConfig) -> None:
        manager = ChatSessionManager(CredentialManager(client_factory=client_factory), config)

        with pytest.raises(SessionUnavailableError):
            await manager.submit_turn("hi")

    async def test_send_failure_is_transport_error(
        self, manager: ChatSessionManager, script
    ) -> None:
        script.send_error = RuntimeError("403 PERMISSION_DENIED")

        with pytest.raises(TransportError, match="PERMISSION_DENIED"):
            await manager.submit_turn("hi")

    async def test_stream_failure_is_transport_error(
        self, manager: ChatSessionManager, script
    ) -> None:
        script.fail_after = 1
        stream = await manager.submit_turn("hi")
        received = []

        with pytest.raises(TransportError):
            async for chunk in stream:
                received.append(chunk.text)

        assert received == ["Hel"]


class TestToGenaiMessage:
    def test_plain_text_passes_through(self) -> None:
        assert to_genai_message("안녕") == "안녕"

    def test_parts_are_converted(self) -> None:
        raw = b"\x89PNG\r\n"
        payload = [
            TextPart(text="분석해주세요"),
            InlinePart(
                inline_data=InlineData(
                    mime_type="image/png",
                    data=base64.b64encode(raw).decode("ascii"),
                )
            ),
        ]

        parts = to_genai_message(payload)

        check.equal(len(parts), 2)
        check.is_instance(parts[0], types.Part)
        check.equal(parts[0].text, "분석해주세요")
        check.equal(parts[1].inline_data.mime_type, "image/png")
        check.equal(parts[1].inline_data.data, raw)
