"""Gemini chat orchestration for hotel management analysis.

Responsibilities:
    - API credential handling and client (re)creation
    - Single active chat session bound to the analysis system prompt
    - Streaming response aggregation into conversation turns
    - Conversation history and export

Maintains clean separation from the HTTP and UI layers.
"""

from born_analyst.agent.analyst import AnalystService, build_update_payload
from born_analyst.agent.config import AnalystConfig, get_analyst_config
from born_analyst.agent.conversation import ConversationStore, export_filename
from born_analyst.agent.credentials import CredentialManager
from born_analyst.agent.session import AnalysisSession, ChatSessionManager
from born_analyst.agent.streaming import StreamAggregator

__all__ = [
    "AnalysisSession",
    "AnalystConfig",
    "AnalystService",
    "ChatSessionManager",
    "ConversationStore",
    "CredentialManager",
    "StreamAggregator",
    "build_update_payload",
    "export_filename",
    "get_analyst_config",
]
