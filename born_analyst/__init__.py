"""Hotel The Born AI - management-analysis chat backed by Google Gemini.

Combines NiceGUI for the browser chat, FastAPI for HTTP streaming,
google-genai for the model session, and Pydantic for data validation.

Components:
    - agent: Credential, chat session, stream aggregation and conversation history
    - parsing: Markdown-subset renderer and upload decoding
    - ui: Web interface for the analyst
    - api: HTTP endpoints and streaming responses
    - models: Turn and request/response schemas
"""

__version__ = "0.1.0"
