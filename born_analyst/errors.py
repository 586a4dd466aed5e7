"""Error taxonomy for the analysis chat.

Configuration and session errors abort the initiating action and are shown
as a blocking notice. Transport and attachment errors are converted into an
error turn by the analyst service so the conversation stays usable.
"""


class AnalystError(Exception):
    """Base class for all analysis chat errors."""

    pass


class SessionUnavailableError(AnalystError):
    """Raised when a chat session cannot be created or used."""

    pass


class NotConfiguredError(SessionUnavailableError):
    """Raised when a remote call is attempted without any credential."""

    pass


class TransportError(AnalystError):
    """Raised when the remote LLM call fails after being issued."""

    pass


class AttachmentError(AnalystError):
    """Raised when an uploaded file cannot be read or encoded."""

    pass
