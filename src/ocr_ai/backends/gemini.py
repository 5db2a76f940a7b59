"""
Gemini Provider
===============

Document extraction using the Google Gemini API with native multimodal
support. PDFs and images are sent as inline data parts.
"""

import logging
import time
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ocr_ai.models import (
    ExtractionRequest,
    FileCategory,
    FileInfo,
    ProviderName,
    ProviderResult,
    TokenUsage,
)
from ocr_ai.prompts import with_document_text

from .base import BaseProvider

logger = logging.getLogger(__name__)


class GeminiRetryableError(RuntimeError):
    """Raised for Gemini API errors that are worth retrying (429, RESOURCE_EXHAUSTED)."""


class GeminiProvider(BaseProvider):
    """
    Provider using the Google Gemini API with an API key.

    Uses the google-genai SDK. Structured extraction sets the native
    `response_mime_type="application/json"` flag in addition to the
    schema prompt.
    """

    name = ProviderName.GEMINI
    DEFAULT_MODEL = "gemini-1.5-flash"

    PARAMETER_NAMES = {
        "temperature": "temperature",
        "max_output_tokens": "max_output_tokens",
        "top_p": "top_p",
        "top_k": "top_k",
        "stop_sequences": "stop_sequences",
    }

    def _get_client(self) -> Any:
        """Lazy-initialize the genai client."""
        if self._client is None:
            from google import genai

            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def extract_text(
        self,
        file: FileInfo,
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_text_prompt(request)
        response = await self._generate(file, prompt, request)

        return ProviderResult(
            content=response.text or "",
            token_usage=self._extract_token_usage(response),
        )

    async def extract_json(
        self,
        file: FileInfo,
        schema: dict[str, Any],
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_json_prompt(schema, request)
        response = await self._generate(
            file, prompt, request, response_mime_type="application/json"
        )

        return ProviderResult(
            content=self.parse_json_response(response.text or "{}"),
            token_usage=self._extract_token_usage(response),
        )

    async def _generate(
        self,
        file: FileInfo,
        prompt: str,
        request: ExtractionRequest | None,
        **config_overrides: Any,
    ) -> Any:
        from google.genai import types

        start_time = time.time()
        config = types.GenerateContentConfig(
            **self.build_generation_config(request),
            **config_overrides,
        )
        response = await self._call_api(self.build_contents(file, prompt), config)

        logger.info(
            "%s request completed: model=%s, file=%s, time=%.0fms",
            self.name.value,
            self.model,
            file.name,
            (time.time() - start_time) * 1000,
        )
        return response

    @retry(
        retry=retry_if_exception_type(GeminiRetryableError),
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=2, min=5, max=60),
        before_sleep=lambda retry_state: logger.warning(
            "Gemini API rate limited, retrying in %.0fs (attempt %d/5)",
            retry_state.next_action.sleep,  # type: ignore[union-attr]
            retry_state.attempt_number,
        ),
        reraise=True,
    )
    async def _call_api(self, contents: Any, config: Any) -> Any:
        """Call Gemini API with retry logic for rate limits."""
        from google.genai import errors as genai_errors

        client = self._get_client()
        try:
            return await client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.ClientError as exc:
            if "429" in str(exc) or "RESOURCE_EXHAUSTED" in str(exc):
                raise GeminiRetryableError(str(exc)) from exc
            raise  # Non-retryable client error

    def build_generation_config(self, request: ExtractionRequest | None) -> dict[str, Any]:
        """Native generation config fields for the caller's model parameters."""
        return self.map_model_parameters(request, self.PARAMETER_NAMES)

    def build_contents(self, file: FileInfo, prompt: str) -> list[Any]:
        """
        Build the content parts for a document.

        Text documents are inlined into the prompt. PDFs and images become
        an inline data part followed by the prompt.
        """
        from google.genai import types

        if file.category == FileCategory.TEXT:
            return [with_document_text(prompt, file)]

        # The SDK base64-encodes inline bytes on the wire
        return [
            types.Part.from_bytes(data=file.content, mime_type=file.mime_type),
            types.Part.from_text(text=prompt),
        ]

    def _extract_token_usage(self, response: Any) -> TokenUsage | None:
        usage = getattr(response, "usage_metadata", None)
        if usage is None:
            return None

        return TokenUsage(
            input_tokens=usage.prompt_token_count or 0,
            output_tokens=usage.candidates_token_count or 0,
            total_tokens=usage.total_token_count or 0,
        )
