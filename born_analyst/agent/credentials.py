"""Holds the Gemini API key and the client built from it."""

import logging
from collections.abc import Callable
from typing import Any

from google import genai

from born_analyst.errors import NotConfiguredError, SessionUnavailableError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


def create_gemini_client(api_key: str) -> genai.Client:
    """Default client factory."""
    return genai.Client(api_key=api_key)


class CredentialManager:
    """Owns the single API key and the remote client bound to it.

    Setting a credential rebuilds the client immediately, so a client built
    from a previous key is never handed out again. When no key was ever set,
    the fallback key (usually from the environment) is used.
    """

    def __init__(
        self,
        fallback_key: str | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._fallback_key = fallback_key
        self._client_factory = client_factory or create_gemini_client
        self._secret: str | None = None
        self._client: Any | None = None
        self._listeners: list[Callable[[], None]] = []

    @property
    def is_configured(self) -> bool:
        return bool(self._secret or self._fallback_key)

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback invoked after every credential change."""
        self._listeners.append(listener)

    def set_credential(self, secret: str) -> None:
        """Store a new API key and rebuild the client.

        Args:
            secret: The API key typed by the analyst.

        Raises:
            NotConfiguredError: If the key is blank.
            SessionUnavailableError: If the client cannot be built from the key.
        """
        if not secret or not secret.strip():
            raise NotConfiguredError("API key is required")

        secret = secret.strip()
        self._secret = secret
        self._client = None
        try:
            self._client = self._build(secret)
            logger.info("API credential updated, client recreated")
        finally:
            # sessions bound to the previous client are dropped even if the build failed
            for listener in self._listeners:
                listener()

    def current_client(self) -> Any:
        """Return the active client.

        Raises:
            NotConfiguredError: If neither a credential nor a fallback key exists.
        """
        if self._client is not None:
            return self._client

        key = self._secret or self._fallback_key
        if not key:
            raise NotConfiguredError("Gemini client is not configured. Please provide an API key.")

        self._client = self._build(key)
        return self._client

    def _build(self, key: str) -> Any:
        try:
            return self._client_factory(key)
        except Exception as e:
            logger.error(f"Failed to create Gemini client: {e}")
            raise SessionUnavailableError(f"Gemini client could not be initialized: {e}") from e
