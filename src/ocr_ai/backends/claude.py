"""
Claude Provider
===============

Document extraction using the Anthropic Messages API. Images are sent as
image blocks, PDFs as document blocks. There is no native JSON mode, so
structured extraction depends on the prompt and JSON recovery.
"""

import logging
import time
from typing import Any

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

SUPPORTED_IMAGE_MEDIA_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
FALLBACK_IMAGE_MEDIA_TYPE = "image/jpeg"


class ClaudeProvider(BaseProvider):
    """
    Provider using Anthropic Claude models.

    Unlike the OpenAI family, Claude supports top-k sampling.
    """

    name = ProviderName.CLAUDE
    DEFAULT_MODEL = "claude-sonnet-4-20250514"

    PARAMETER_NAMES = {
        "temperature": "temperature",
        "max_output_tokens": "max_tokens",
        "top_p": "top_p",
        "top_k": "top_k",
        "stop_sequences": "stop_sequences",
    }

    def _get_client(self) -> Any:
        """Lazy-initialize the AsyncAnthropic client."""
        if self._client is None:
            from anthropic import AsyncAnthropic

            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def extract_text(
        self,
        file: FileInfo,
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_text_prompt(request)
        response = await self._create_message(file, prompt, request)

        return ProviderResult(
            content=self._first_text_block(response) or "",
            token_usage=self._extract_token_usage(response),
        )

    async def extract_json(
        self,
        file: FileInfo,
        schema: dict[str, Any],
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_json_prompt(schema, request)
        response = await self._create_message(file, prompt, request)

        return ProviderResult(
            content=self.parse_json_response(self._first_text_block(response) or "{}"),
            token_usage=self._extract_token_usage(response),
        )

    async def _create_message(
        self,
        file: FileInfo,
        prompt: str,
        request: ExtractionRequest | None,
    ) -> Any:
        start_time = time.time()
        client = self._get_client()

        response = await client.messages.create(
            model=self.model,
            messages=[{"role": "user", "content": self.build_content(file, prompt)}],
            **self.build_message_options(request),
        )

        logger.info(
            "%s request completed: model=%s, file=%s, time=%.0fms",
            self.name.value,
            self.model,
            file.name,
            (time.time() - start_time) * 1000,
        )
        return response

    def build_message_options(self, request: ExtractionRequest | None) -> dict[str, Any]:
        """Native message options; max_tokens is always present."""
        return self.map_model_parameters(request, self.PARAMETER_NAMES)

    def build_content(self, file: FileInfo, prompt: str) -> str | list[dict[str, Any]]:
        """
        Build the user message content for a document.

        Returns:
            A plain string for text documents, otherwise a
            [document-or-image block, text block] list
        """
        if file.category == FileCategory.TEXT:
            return with_document_text(prompt, file)

        data = file.base64_data()

        if file.category == FileCategory.PDF:
            source_block = {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": "application/pdf",
                    "data": data,
                },
            }
        else:
            source_block = {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": self.get_media_type(file.mime_type),
                    "data": data,
                },
            }

        return [source_block, {"type": "text", "text": prompt}]

    @staticmethod
    def get_media_type(mime_type: str) -> str:
        """
        Map a MIME type to an image media type Claude accepts.

        Anything else is declared as JPEG without transcoding the bytes.
        """
        if mime_type in SUPPORTED_IMAGE_MEDIA_TYPES:
            return mime_type
        return FALLBACK_IMAGE_MEDIA_TYPE

    @staticmethod
    def _first_text_block(response: Any) -> str | None:
        for block in response.content:
            if getattr(block, "type", None) == "text":
                return block.text
        return None

    @staticmethod
    def _extract_token_usage(response: Any) -> TokenUsage | None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return None

        return TokenUsage(
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.input_tokens + usage.output_tokens,
        )
