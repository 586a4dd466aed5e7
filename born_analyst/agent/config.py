"""Analyst configuration with environment variable loading.

Pydantic-based configuration for the Gemini chat session.
The API key is optional here: the analyst can type it into the UI instead.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_MODEL = "gemini-3-flash-preview"


def _env_api_key() -> str | None:
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "VITE_GEMINI_API_KEY"):
        value = os.getenv(name)
        if value and value.strip():
            return value
    return None


class AnalystConfig(BaseModel):
    """Configuration for the analysis chat session.

    Attributes:
        api_key: Fallback Gemini API key (None when only the UI provides one).
        model_name: Gemini model identifier.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
    """

    api_key: str | None = Field(
        default_factory=_env_api_key,
        description="Fallback API key for the Gemini API",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )

    @field_validator("api_key")
    @classmethod
    def normalize_api_key(cls, v: str | None) -> str | None:
        """Strip the API key and treat blank values as missing."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("model_name")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate that a model identifier is provided."""
        if not v or not v.strip():
            raise ValueError("Model name required. Set GEMINI_MODEL in .env")
        return v.strip()


def get_analyst_config() -> AnalystConfig:
    """Create analyst configuration from environment.

    Returns:
        Configured AnalystConfig instance.
    """
    return AnalystConfig()
