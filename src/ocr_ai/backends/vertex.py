"""
Vertex AI Provider
==================

Gemini models served through Vertex AI. Authenticates with Google Cloud
Application Default Credentials for a project and location instead of
an API key. Request and response handling is shared with GeminiProvider.
"""

import logging
from typing import Any

from ocr_ai.config import VertexConfig
from ocr_ai.errors import CredentialError
from ocr_ai.models import ProviderName

from .gemini import GeminiProvider

logger = logging.getLogger(__name__)


class VertexProvider(GeminiProvider):
    """
    Provider using Gemini on Vertex AI.

    Setup:
        1. Run: gcloud auth application-default login
        2. Pass the Google Cloud project and region (e.g. "us-central1")
    """

    name = ProviderName.VERTEX
    DEFAULT_MODEL = "gemini-2.0-flash"
    REQUIRES_API_KEY = False

    def __init__(self, vertex_config: VertexConfig | None, model: str | None = None):
        """
        Initialize Vertex AI provider.

        Args:
            vertex_config: Google Cloud project and location
            model: Model identifier, provider default if None

        Raises:
            CredentialError: If project or location is missing
        """
        if vertex_config is None:
            raise CredentialError("vertex_config is required for Vertex AI provider")
        if not vertex_config.project or not vertex_config.location:
            raise CredentialError("Vertex AI requires both project and location")

        super().__init__(api_key=None, model=model)
        self.vertex_config = vertex_config

    def _get_client(self) -> Any:
        """Lazy-initialize the genai client in Vertex AI mode."""
        if self._client is None:
            from google import genai

            logger.info(
                "Creating Vertex AI client: project=%s, location=%s",
                self.vertex_config.project,
                self.vertex_config.location,
            )
            self._client = genai.Client(
                vertexai=True,
                project=self.vertex_config.project,
                location=self.vertex_config.location,
            )
        return self._client
