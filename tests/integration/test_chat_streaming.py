"""Integration tests for the chat API.

Exercises the real FastAPI app over httpx ASGITransport. Only the Gemini
client is replaced, by the scripted fake from conftest.
"""

import json
from collections.abc import Callable

import pytest
import pytest_check as check
from fastapi import HTTPException
from httpx import ASGITransport, AsyncClient

from born_analyst.agent.analyst import AnalystService
from born_analyst.agent.config import AnalystConfig
from born_analyst.agent.prompts import MODEL_LABEL, TRANSPORT_ERROR_NOTICE, USER_LABEL
from born_analyst.api.app import create_app
from born_analyst.api.routes import chat_stream
from born_analyst.models.schemas import ChatRequest, StreamChunk, StreamStatus


async def _read_chunks(client: AsyncClient, message: str) -> list[StreamChunk]:
    chunks: list[StreamChunk] = []
    async with client.stream("POST", "/chat/stream", json={"message": message}) as response:
        assert response.status_code == 200
        async for line in response.aiter_lines():
            if line.startswith("data: "):
                chunks.append(StreamChunk.model_validate(json.loads(line[6:])))
    return chunks


class TestHealth:
    async def test_health_check(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "born-analyst"}

    async def test_cors_headers(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health", headers={"Origin": "http://localhost:5173"})

        assert "access-control-allow-origin" in response.headers


class TestStreamingEndpoint:
    """Integration tests for POST /chat/stream SSE endpoint."""

    async def test_stream_returns_sse_content_type(self, api_client: AsyncClient) -> None:
        async with api_client.stream(
            "POST",
            "/chat/stream",
            json={"message": "객실 가격을 알려줘"},
        ) as response:
            assert response.status_code == 200
            assert "text/event-stream" in response.headers["content-type"]

    async def test_deltas_concatenate_to_reply(self, api_client: AsyncClient) -> None:
        """Each frame carries only the new text; together they form the reply."""
        chunks = await _read_chunks(api_client, "객실 가격을 알려줘")

        check.equal([c.content for c in chunks[:-1]], ["Hel", "lo, ", "world"])
        check.equal("".join(c.content for c in chunks), "Hello, world")

    async def test_only_last_chunk_is_done(self, api_client: AsyncClient) -> None:
        chunks = await _read_chunks(api_client, "질문")

        check.is_true(chunks[-1].done)
        check.equal(chunks[-1].status, StreamStatus.COMPLETE)
        check.is_true(all(not c.done for c in chunks[:-1]))
        check.is_true(all(c.status == StreamStatus.GENERATING for c in chunks[:-1]))

    async def test_reply_lands_in_conversation(self, api_client: AsyncClient) -> None:
        await _read_chunks(api_client, "질문")

        turns = api_client.analyst.store.turns
        check.equal([t.content for t in turns], ["질문", "Hello, world"])
        check.is_false(api_client.analyst.is_busy)

    async def test_transport_error_final_chunk(self, api_client: AsyncClient, script) -> None:
        script.send_error = RuntimeError("500 INTERNAL")

        chunks = await _read_chunks(api_client, "질문")

        assert len(chunks) == 1
        check.is_true(chunks[0].done)
        check.equal(chunks[0].status, StreamStatus.ERROR)
        check.equal(chunks[0].error, TRANSPORT_ERROR_NOTICE)

    async def test_reply_matching_notice_text_completes(
        self, api_client: AsyncClient, script
    ) -> None:
        script.replies = [TRANSPORT_ERROR_NOTICE]

        chunks = await _read_chunks(api_client, "질문")

        check.equal(chunks[0].content, TRANSPORT_ERROR_NOTICE)
        check.equal(chunks[-1].status, StreamStatus.COMPLETE)
        check.is_none(chunks[-1].error)

    async def test_busy_returns_409(self, api_client: AsyncClient) -> None:
        api_client.analyst.is_busy = True

        response = await api_client.post("/chat/stream", json={"message": "질문"})

        assert response.status_code == 409

    async def test_slot_held_before_body_starts(self, api_client: AsyncClient) -> None:
        """A second request is refused while the first response body is still pending."""
        analyst = api_client.analyst

        response = await chat_stream(ChatRequest(message="첫 질문"), analyst)
        check.is_true(analyst.is_busy)

        with pytest.raises(HTTPException) as exc_info:
            await chat_stream(ChatRequest(message="두 번째 질문"), analyst)
        check.equal(exc_info.value.status_code, 409)

        frames = [frame async for frame in response.body_iterator]
        check.is_in('"done":true', frames[-1])
        check.is_false(analyst.is_busy)
        check.equal(len(analyst.store), 2)

    async def test_empty_message_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/chat/stream", json={"message": ""})

        assert response.status_code == 422

    async def test_whitespace_message_rejected(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/chat/stream", json={"message": "   \n"})

        assert response.status_code == 422

    async def test_get_not_allowed(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/chat/stream")

        assert response.status_code == 405


class TestChatEndpoint:
    """Integration tests for POST /chat."""

    async def test_returns_complete_reply(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/chat", json={"message": "질문"})

        assert response.status_code == 200
        data = response.json()
        check.equal(data["content"], "Hello, world")
        check.equal(data["turn_id"], api_client.analyst.store.turns[-1].id)

    async def test_busy_returns_409(self, api_client: AsyncClient) -> None:
        api_client.analyst.is_busy = True

        response = await api_client.post("/chat", json={"message": "질문"})

        assert response.status_code == 409

    async def test_transport_error_returns_notice(self, api_client: AsyncClient, script) -> None:
        script.fail_after = 1

        response = await api_client.post("/chat", json={"message": "질문"})

        assert response.status_code == 200
        assert response.json()["content"] == TRANSPORT_ERROR_NOTICE


class TestWithoutApiKey:
    """Endpoints report 503 when no key is configured in the environment."""

    @staticmethod
    def _client(client_factory: Callable) -> AsyncClient:
        service = AnalystService(
            config=AnalystConfig(api_key=None, model_name="gemini-test"),
            client_factory=client_factory,
            welcome=False,
        )
        return AsyncClient(transport=ASGITransport(app=create_app(analyst=service)), base_url="http://test")

    async def test_chat_returns_503(self, client_factory: Callable) -> None:
        async with self._client(client_factory) as client:
            response = await client.post("/chat", json={"message": "질문"})

        assert response.status_code == 503

    async def test_stream_returns_503(self, client_factory: Callable) -> None:
        async with self._client(client_factory) as client:
            response = await client.post("/chat/stream", json={"message": "질문"})

        assert response.status_code == 503

    async def test_session_returns_503(self, client_factory: Callable) -> None:
        async with self._client(client_factory) as client:
            response = await client.post("/session", json={})

        assert response.status_code == 503


class TestSessionEndpoint:
    async def test_start_with_context(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/session", json={"context": "연도,매출\n2025,100"})

        assert response.status_code == 200
        data = response.json()
        check.is_true(data["has_context"])
        check.equal(data["model_name"], "gemini-test")
        check.equal(data["temperature"], 0.7)

    async def test_start_without_context(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/session", json={})

        assert response.status_code == 200
        assert response.json()["has_context"] is False


class TestExportEndpoint:
    async def test_export_conversation(self, api_client: AsyncClient) -> None:
        await api_client.post("/chat", json={"message": "객실 가격을 알려줘"})

        response = await api_client.get("/export")

        assert response.status_code == 200
        check.is_in("text/markdown", response.headers["content-type"])
        check.is_in(
            'attachment; filename="TheBorn_Analysis_',
            response.headers["content-disposition"],
        )
        check.is_in(f"{USER_LABEL}:\n객실 가격을 알려줘", response.text)
        check.is_in(f"{MODEL_LABEL}:\nHello, world", response.text)

    async def test_export_empty_conversation(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/export")

        assert response.status_code == 200
        assert response.text == ""
