"""Ordered conversation history with change notifications and export."""

import logging
from collections.abc import Callable
from datetime import date

from born_analyst.agent.prompts import MODEL_LABEL, USER_LABEL
from born_analyst.models.schemas import Role, Turn

logger = logging.getLogger(__name__)

EXPORT_SEPARATOR = "-" * 40
EXPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

TurnListener = Callable[[str, Turn], None]


class ConversationStore:
    """Owns every turn of the conversation.

    Listeners are called with ``("added", turn)`` or ``("updated", turn)``
    so a presentation layer can re-render without polling.
    """

    def __init__(self) -> None:
        self._turns: list[Turn] = []
        self._listeners: list[TurnListener] = []

    @property
    def turns(self) -> list[Turn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def subscribe(self, listener: TurnListener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, turn: Turn) -> None:
        for listener in list(self._listeners):
            listener(event, turn)

    def add_turn(self, role: Role, content: str) -> Turn:
        turn = Turn(role=role, content=content)
        self._turns.append(turn)
        self._notify("added", turn)
        return turn

    def get(self, turn_id: str) -> Turn:
        for turn in self._turns:
            if turn.id == turn_id:
                return turn
        raise KeyError(turn_id)

    def update_content(self, turn_id: str, content: str) -> Turn:
        """Replace a turn's content with a longer (or equal) version.

        Raises:
            KeyError: If the turn does not exist.
            ValueError: If the new content is shorter than the current one.
        """
        turn = self.get(turn_id)
        if len(content) < len(turn.content):
            raise ValueError(f"Turn {turn_id} content cannot shrink during a stream")
        turn.content = content
        self._notify("updated", turn)
        return turn

    def export_text(self) -> str:
        """Serialize the conversation as a plain text / markdown document."""
        blocks = []
        for turn in self._turns:
            label = USER_LABEL if turn.role == Role.USER else MODEL_LABEL
            time = turn.timestamp.strftime(EXPORT_TIME_FORMAT)
            blocks.append(f"[{time}] {label}:\n{turn.content}\n\n{EXPORT_SEPARATOR}\n")
        logger.debug(f"Exported {len(blocks)} turns")
        return "\n".join(blocks)


def export_filename(today: date | None = None) -> str:
    """Download file name for a conversation export, dated today by default."""
    today = today or date.today()
    return f"TheBorn_Analysis_{today.isoformat()}.md"
