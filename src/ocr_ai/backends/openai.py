"""
OpenAI Provider
===============

Document extraction using the OpenAI chat completions API. PDFs and
images are embedded as base64 data URLs in an image_url content block.
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

# Reasoning-era models reject max_tokens
MAX_COMPLETION_TOKENS_PREFIXES = ("gpt-5", "o1", "o3")


class OpenAIProvider(BaseProvider):
    """
    Provider using OpenAI chat completions with vision-capable models.

    Structured extraction sets `response_format={"type": "json_object"}`.
    OpenAI has no top-k sampling; a caller-supplied top_k is dropped.
    """

    name = ProviderName.OPENAI
    DEFAULT_MODEL = "gpt-4o"
    BASE_URL: str | None = None
    FORCE_JSON_OBJECT = True

    def _get_client(self) -> Any:
        """Lazy-initialize the AsyncOpenAI client."""
        if self._client is None:
            from openai import AsyncOpenAI

            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.BASE_URL)
        return self._client

    async def extract_text(
        self,
        file: FileInfo,
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_text_prompt(request)
        response = await self._complete(file, prompt, request)

        return ProviderResult(
            content=self._message_text(response) or "",
            token_usage=self._extract_token_usage(response),
        )

    async def extract_json(
        self,
        file: FileInfo,
        schema: dict[str, Any],
        request: ExtractionRequest | None = None,
    ) -> ProviderResult:
        prompt = self.build_json_prompt(schema, request)
        extra: dict[str, Any] = {}
        if self.FORCE_JSON_OBJECT:
            extra["response_format"] = {"type": "json_object"}

        response = await self._complete(file, prompt, request, **extra)

        return ProviderResult(
            content=self.parse_json_response(self._message_text(response) or "{}"),
            token_usage=self._extract_token_usage(response),
        )

    async def _complete(
        self,
        file: FileInfo,
        prompt: str,
        request: ExtractionRequest | None,
        **extra: Any,
    ) -> Any:
        start_time = time.time()
        client = self._get_client()

        response = await client.chat.completions.create(
            model=self.model,
            messages=self.build_messages(file, prompt),
            **self.build_completion_options(request),
            **extra,
        )

        logger.info(
            "%s request completed: model=%s, file=%s, time=%.0fms",
            self.name.value,
            self.model,
            file.name,
            (time.time() - start_time) * 1000,
        )
        return response

    def uses_max_completion_tokens(self) -> bool:
        return self.model.startswith(MAX_COMPLETION_TOKENS_PREFIXES)

    def build_completion_options(self, request: ExtractionRequest | None) -> dict[str, Any]:
        """Native completion options for the caller's model parameters."""
        token_param = (
            "max_completion_tokens" if self.uses_max_completion_tokens() else "max_tokens"
        )
        names = {
            "temperature": "temperature",
            "max_output_tokens": token_param,
            "top_p": "top_p",
            "stop_sequences": "stop",
        }
        return self.map_model_parameters(request, names)

    def build_messages(self, file: FileInfo, prompt: str) -> list[dict[str, Any]]:
        """Build the chat messages for a document."""
        if file.category == FileCategory.TEXT:
            return [{"role": "user", "content": with_document_text(prompt, file)}]

        image_url = f"data:{file.mime_type};base64,{file.base64_data()}"
        return [
            {
                "role": "user",
                "content": [
                    {
                        "type": "image_url",
                        "image_url": {"url": image_url, "detail": "high"},
                    },
                    {"type": "text", "text": prompt},
                ],
            }
        ]

    @staticmethod
    def _message_text(response: Any) -> str | None:
        if not response.choices:
            return None
        return response.choices[0].message.content

    @staticmethod
    def _extract_token_usage(response: Any) -> TokenUsage | None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return None

        return TokenUsage(
            input_tokens=usage.prompt_tokens,
            output_tokens=usage.completion_tokens,
            total_tokens=usage.total_tokens,
        )
