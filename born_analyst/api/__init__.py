"""FastAPI endpoints for the analysis chat.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time reply streaming.

Endpoints:
    - GET /health: Service health status
    - POST /session: Start the analysis session
    - POST /chat, POST /chat/stream: Ask a question
    - GET /export: Download the conversation
"""

from born_analyst.api.app import app, create_app

__all__ = ["app", "create_app"]
