"""Chat endpoints for headless use of the analyst.

The API works against one process-level AnalystService configured from the
environment key; API keys are never accepted over HTTP.

Endpoints:
    - POST /session: Start (or restart) the analysis session
    - POST /chat: Complete reply to one question
    - POST /chat/stream: Server-Sent Events stream of one reply
    - GET /export: Conversation export as a markdown document
"""

import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse, StreamingResponse

from born_analyst.agent.analyst import AnalystService
from born_analyst.agent.conversation import export_filename
from born_analyst.errors import SessionUnavailableError
from born_analyst.models.schemas import (
    ChatRequest,
    ChatResponse,
    SessionInfo,
    SessionRequest,
    StreamChunk,
    StreamStatus,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def get_analyst(request: Request) -> AnalystService:
    """Return the analyst service attached to the application."""
    return request.app.state.analyst


def _ensure_ready(analyst: AnalystService) -> None:
    if analyst.is_busy:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A reply is already being generated",
        )
    if not analyst.credentials.is_configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Gemini API key is not configured",
        )


def _sse(chunk: StreamChunk) -> str:
    return f"data: {chunk.model_dump_json()}\n\n"


@router.post("/session", response_model=SessionInfo)
async def start_session(
    request: SessionRequest,
    analyst: AnalystService = Depends(get_analyst),
) -> SessionInfo:
    """Start a new analysis session, optionally with uploaded context text.

    Raises:
        503: No API key configured or the session could not be created.
    """
    try:
        session = await analyst.sessions.start_session(request.context)
    except SessionUnavailableError as e:
        logger.warning(f"Session start failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e

    return SessionInfo(
        model_name=session.model_name,
        temperature=session.temperature,
        has_context=session.has_context,
        started_at=session.started_at.isoformat(),
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    analyst: AnalystService = Depends(get_analyst),
) -> ChatResponse:
    """Answer one question and return the complete reply.

    Raises:
        409: Another reply is in flight.
        503: No API key configured or the session could not be created.
    """
    _ensure_ready(analyst)

    try:
        turn = await analyst.send(request.message)
    except SessionUnavailableError as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        ) from e

    if turn is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Message was not accepted",
        )
    return ChatResponse(turn_id=turn.id, content=turn.content)


@router.post("/chat/stream")
async def chat_stream(
    request: ChatRequest,
    analyst: AnalystService = Depends(get_analyst),
) -> StreamingResponse:
    """Stream one reply as Server-Sent Events.

    Each frame carries the text appended since the previous frame.
    The final frame has ``done=true``.
    """
    _ensure_ready(analyst)
    # busy from here on; stream_send releases the slot when the body finishes
    analyst.reserve()

    async def event_stream() -> AsyncGenerator[str]:
        previous = ""
        try:
            async for content in analyst.stream_send(request.message, reserved=True):
                delta = content[len(previous):]
                previous = content
                yield _sse(StreamChunk(content=delta, done=False, status=StreamStatus.GENERATING))
        except SessionUnavailableError as e:
            logger.warning(f"Streaming aborted: {e}")
            yield _sse(StreamChunk(content="", done=True, status=StreamStatus.ERROR, error=str(e)))
            return

        if analyst.last_error is not None:
            yield _sse(
                StreamChunk(
                    content="",
                    done=True,
                    status=StreamStatus.ERROR,
                    error=analyst.last_error,
                )
            )
            return

        yield _sse(StreamChunk(content="", done=True, status=StreamStatus.COMPLETE))

    return StreamingResponse(event_stream(), media_type="text/event-stream")


@router.get("/export", response_class=PlainTextResponse)
async def export_conversation(
    analyst: AnalystService = Depends(get_analyst),
) -> PlainTextResponse:
    """Download the conversation as a markdown document."""
    filename = export_filename()
    return PlainTextResponse(
        analyst.store.export_text(),
        media_type="text/markdown; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
