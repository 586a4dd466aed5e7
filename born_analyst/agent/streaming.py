"""Folds a stream of response chunks into one growing model turn."""

import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from born_analyst.agent.conversation import ConversationStore

logger = logging.getLogger(__name__)


def chunk_text(chunk: Any) -> str | None:
    """Text carried by a chunk, if any."""
    if isinstance(chunk, str):
        return chunk
    return getattr(chunk, "text", None)


class StreamAggregator:
    """Publishes the running concatenation of a chunk stream to one turn."""

    def __init__(self, store: ConversationStore) -> None:
        self._store = store

    async def stream(self, turn_id: str, chunks: AsyncIterable[Any]) -> AsyncIterator[str]:
        """Consume chunks in arrival order, yielding the full text after each one.

        The turn is updated before each yield. If the chunk stream raises, the
        partial text already published stays on the turn and the error
        propagates.

        Args:
            turn_id: The model turn receiving the text.
            chunks: Response chunks; ones without text are skipped.

        Yields:
            The accumulated response text.
        """
        full_response = ""
        async for chunk in chunks:
            text = chunk_text(chunk)
            if not text:
                continue
            full_response += text
            self._store.update_content(turn_id, full_response)
            yield full_response

        logger.debug(f"Turn {turn_id} complete ({len(full_response)} chars)")
