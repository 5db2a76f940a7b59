"""
Extractor Configuration
=======================

Configuration for building a DocumentExtractor, either passed
explicitly or read from environment variables.

Environment variables:
    OCR_AI_PROVIDER: Provider to use (default: gemini)
    OCR_AI_MODEL: Model override (default: provider default)
    OCR_AI_API_KEY: API key, overrides the provider-specific variable
    GEMINI_API_KEY / OPENAI_API_KEY / ANTHROPIC_API_KEY / XAI_API_KEY:
        Provider-specific API keys
    GOOGLE_CLOUD_PROJECT / GOOGLE_CLOUD_LOCATION: Vertex AI settings
"""

import os
from dataclasses import dataclass

API_KEY_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "grok": "XAI_API_KEY",
}

DEFAULT_PROVIDER = "gemini"
DEFAULT_VERTEX_LOCATION = "us-central1"


@dataclass(frozen=True)
class VertexConfig:
    """Google Cloud settings for the Vertex AI provider."""

    project: str
    location: str


@dataclass
class ExtractorConfig:
    """Configuration for a DocumentExtractor."""

    provider: str
    api_key: str | None = None
    model: str | None = None
    vertex_config: VertexConfig | None = None

    @classmethod
    def from_env(cls) -> "ExtractorConfig":
        """Build a configuration from environment variables."""
        provider = os.getenv("OCR_AI_PROVIDER", DEFAULT_PROVIDER).strip().lower()

        api_key = os.getenv("OCR_AI_API_KEY")
        if not api_key and provider in API_KEY_ENV_VARS:
            api_key = os.getenv(API_KEY_ENV_VARS[provider])

        vertex_config = None
        project = os.getenv("GOOGLE_CLOUD_PROJECT")
        if project:
            vertex_config = VertexConfig(
                project=project,
                location=os.getenv("GOOGLE_CLOUD_LOCATION", DEFAULT_VERTEX_LOCATION),
            )

        return cls(
            provider=provider,
            api_key=api_key,
            model=os.getenv("OCR_AI_MODEL") or None,
            vertex_config=vertex_config,
        )
