"""Pytest fixtures and shared test configuration.

Provides a scripted stand-in for the Gemini client so the agent, API and
UI helpers can be exercised without network access.

Fixtures:
    - script: Replies and failures the fake Gemini chat will produce
    - fake_clients: Every fake client built so far, in creation order
    - client_factory: Factory handed to CredentialManager / AnalystService
    - config: AnalystConfig without an environment key
    - analyst: AnalystService wired to the fake client, no welcome turn
    - api_client: HTTPX client for an app backed by a configured analyst
"""

from collections.abc import AsyncGenerator, AsyncIterator, Callable
from types import SimpleNamespace
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from born_analyst.agent.analyst import AnalystService
from born_analyst.agent.config import AnalystConfig
from born_analyst.api.app import create_app


class ReplyScript:
    """What the fake chat answers with.

    Attributes:
        replies: Text fragments streamed back for every message.
        send_error: Raised by send_message_stream before any chunk.
        fail_after: Number of chunks delivered before the stream raises.
    """

    def __init__(self) -> None:
        self.replies: list[str | None] = ["Hel", "lo, ", "world"]
        self.send_error: Exception | None = None
        self.fail_after: int | None = None


class FakeChat:
    """Mimics google.genai AsyncChat."""

    def __init__(self, script: ReplyScript, model: str, config: Any) -> None:
        self.script = script
        self.model = model
        self.config = config
        self.sent: list[Any] = []

    async def send_message_stream(self, message: Any) -> AsyncIterator[Any]:
        self.sent.append(message)
        if self.script.send_error is not None:
            raise self.script.send_error
        return self._stream()

    async def _stream(self) -> AsyncIterator[Any]:
        for i, text in enumerate(self.script.replies):
            if self.script.fail_after is not None and i == self.script.fail_after:
                raise ConnectionError("stream interrupted")
            yield SimpleNamespace(text=text)


class FakeChats:
    def __init__(self, script: ReplyScript) -> None:
        self.script = script
        self.created: list[FakeChat] = []

    def create(self, model: str, config: Any = None) -> FakeChat:
        chat = FakeChat(self.script, model, config)
        self.created.append(chat)
        return chat


class FakeGeminiClient:
    """Mimics google.genai.Client (only the async chats surface)."""

    def __init__(self, api_key: str, script: ReplyScript) -> None:
        self.api_key = api_key
        self.aio = SimpleNamespace(chats=FakeChats(script))

    @property
    def chats(self) -> list[FakeChat]:
        return self.aio.chats.created


@pytest.fixture
def script() -> ReplyScript:
    return ReplyScript()


@pytest.fixture
def fake_clients() -> list[FakeGeminiClient]:
    return []


@pytest.fixture
def client_factory(
    script: ReplyScript,
    fake_clients: list[FakeGeminiClient],
) -> Callable[[str], FakeGeminiClient]:
    def factory(api_key: str) -> FakeGeminiClient:
        client = FakeGeminiClient(api_key, script)
        fake_clients.append(client)
        return client

    return factory


@pytest.fixture
def config() -> AnalystConfig:
    """Configuration with no environment key."""
    return AnalystConfig(api_key=None, model_name="gemini-test", temperature=0.7)


@pytest.fixture
def analyst(
    config: AnalystConfig,
    client_factory: Callable[[str], FakeGeminiClient],
) -> AnalystService:
    return AnalystService(config=config, client_factory=client_factory, welcome=False)


@pytest.fixture
async def api_client(
    client_factory: Callable[[str], FakeGeminiClient],
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for an app whose analyst has an environment key.

    Yields:
        Configured AsyncClient for making test requests.
    """
    service = AnalystService(
        config=AnalystConfig(api_key="env-test-key", model_name="gemini-test"),
        client_factory=client_factory,
        welcome=False,
    )
    transport = ASGITransport(app=create_app(analyst=service))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        client.analyst = service
        yield client
