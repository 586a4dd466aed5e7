"""Integration tests for the HTTP API working end to end.

Requests go through httpx ASGITransport into the real FastAPI app; only
the Gemini client is scripted.
"""
