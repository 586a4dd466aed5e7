"""NiceGUI interface - thin presentation layer for the analysis chat.

Responsibilities:
    - Landing form for the API key and the initial analysis data
    - Chat message display with live streaming updates
    - Mid-conversation data uploads and conversation export

Contains minimal business logic. Delegates all operations to AnalystService
and re-renders from conversation store notifications.
"""
