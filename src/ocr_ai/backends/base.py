"""
Base Provider
=============

Abstract base class for AI provider backends.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from ocr_ai.errors import CredentialError
from ocr_ai.json_recovery import parse_json_response
from ocr_ai.models import (
    ExtractionRequest,
    FileCategory,
    FileInfo,
    ModelParameters,
    ProviderName,
    ProviderResult,
)
from ocr_ai.prompts import build_json_prompt, build_text_prompt

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """
    Abstract base class for AI providers.

    All providers must implement:
    - extract_text(): Send the document with a text prompt, return the raw answer
    - extract_json(): Send the document with a schema prompt, return parsed JSON

    Optional overrides:
    - supports_file_type(): Restrict accepted document categories

    Subclasses set `name` and `DEFAULT_MODEL` and create their SDK client
    lazily in `_get_client()`, so constructing a provider never touches
    the network.
    """

    name: ProviderName
    DEFAULT_MODEL: str

    SUPPORTED_CATEGORIES = frozenset(FileCategory)
    REQUIRES_API_KEY = True

    def __init__(self, api_key: str | None, model: str | None = None):
        """
        Initialize provider.

        Args:
            api_key: Provider API key (required, must not be blank)
            model: Model identifier, provider default if None

        Raises:
            CredentialError: If an API key is required and missing or blank
        """
        if self.REQUIRES_API_KEY and (not api_key or not api_key.strip()):
            raise CredentialError(f"API key is required for {self.__class__.__name__}")

        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self._client: Any = None

    @abstractmethod
    async def extract_text(
        self,
        file: FileInfo,
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        """
        Extract plain text from a document.

        Args:
            file: Loaded FileInfo
            request: Extraction options (prompt, language, model parameters)

        Returns:
            ProviderResult with the model's text, unmodified
        """

    @abstractmethod
    async def extract_json(
        self,
        file: FileInfo,
        schema: dict[str, Any],
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        """
        Extract structured data following `schema`.

        Returns:
            ProviderResult with the parsed JSON value

        Raises:
            ParseError: If the model output is not valid JSON
        """

    def supports_file_type(self, category: FileCategory) -> bool:
        """Check whether this provider accepts the document category."""
        return category in self.SUPPORTED_CATEGORIES

    def build_text_prompt(self, request: ExtractionRequest | None) -> str:
        return build_text_prompt(request)

    def build_json_prompt(
        self, schema: dict[str, Any], request: ExtractionRequest | None
    ) -> str:
        return build_json_prompt(schema, request)

    def parse_json_response(self, text: str) -> Any:
        return parse_json_response(text)

    def map_model_parameters(
        self,
        request: ExtractionRequest | None,
        names: dict[str, str],
    ) -> dict[str, Any]:
        """
        Translate caller model parameters to the provider's native names.

        Only fields the caller set are forwarded. max_output_tokens always
        gets a ceiling. Fields missing from `names` are not supported by
        the provider and are dropped.

        Args:
            request: Extraction options holding ModelParameters
            names: Mapping from ModelParameters field to native parameter name

        Returns:
            Dict of native parameter names to values
        """
        parameters = (request.model_parameters if request else None) or ModelParameters()

        mapped: dict[str, Any] = {}
        for field_name, value in parameters.explicit_values().items():
            native_name = names.get(field_name)
            if native_name is None:
                logger.debug(
                    "%s does not support %s, parameter dropped", self.name.value, field_name
                )
                continue
            mapped[native_name] = value
        return mapped

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name.value}', model='{self.model}')"
