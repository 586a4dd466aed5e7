"""Unit tests for individual components in isolation.

Coverage:
    - agent/: Credentials, sessions, streaming, conversation store, service
    - parsing/: Markup rendering, PDF extraction, attachment encoding
    - ui/: HTML helpers of the chat page
"""
