"""Test package for the Hotel The Born analyst.

Structure:
    - unit/: Individual function and class tests
    - integration/: HTTP API tests against the real FastAPI app

The Gemini client is replaced by a scripted fake (see conftest.py), so no
API key or network access is needed. Leverages pytest with pytest-check
for soft assertions.
"""
