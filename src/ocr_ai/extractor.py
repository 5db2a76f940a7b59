"""
Document Extractor
==================

Single entry point for document extraction. Resolves the provider from
configuration, loads the document, dispatches to the provider and
packages the outcome into an ExtractionResult.

Usage:
    extractor = DocumentExtractor(ExtractorConfig(provider="claude", api_key="..."))
    result = await extractor.extract("invoice.pdf", ExtractionRequest(
        output_format="json",
        schema={"invoice_number": "string", "total": "number"},
    ))

    if result.success:
        print(result.content)
    else:
        print(result.code, result.error)

`extract` and its variants never raise: every failure (loading,
unsupported type, missing schema, provider call, JSON recovery,
persistence) is returned as an ExtractionFailure. Only construction and
reconfiguration raise, for configuration mistakes.
"""

import asyncio
import json
import logging
import time
from collections.abc import Callable, Iterable
from functools import partial
from pathlib import Path

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from ocr_ai.backends import (
    BaseProvider,
    ClaudeProvider,
    GeminiProvider,
    GrokProvider,
    OpenAIProvider,
    VertexProvider,
)
from ocr_ai.config import ExtractorConfig, VertexConfig
from ocr_ai.errors import (
    ConfigurationError,
    CredentialError,
    MissingSchemaError,
    OcrAIError,
    UnsupportedFileTypeError,
)
from ocr_ai.loaders import (
    is_url,
    load_file,
    load_file_from_base64,
    load_file_from_buffer,
    load_file_from_url,
    save_to_file,
)
from ocr_ai.models import (
    BatchItem,
    ErrorCode,
    ExtractionFailure,
    ExtractionMetadata,
    ExtractionRequest,
    ExtractionResult,
    ExtractionSuccess,
    FileInfo,
    OutputFormat,
    ProviderName,
)

logger = logging.getLogger(__name__)

API_KEY_PROVIDERS: dict[ProviderName, type[BaseProvider]] = {
    ProviderName.GEMINI: GeminiProvider,
    ProviderName.OPENAI: OpenAIProvider,
    ProviderName.CLAUDE: ClaudeProvider,
    ProviderName.GROK: GrokProvider,
}


def create_provider(config: ExtractorConfig) -> BaseProvider:
    """
    Instantiate the provider named in the configuration.

    Raises:
        ConfigurationError: If the provider is not recognized
        CredentialError: If its credentials are missing
    """
    try:
        name = ProviderName(config.provider)
    except ValueError:
        raise ConfigurationError(f"Unsupported provider: {config.provider}") from None

    if name == ProviderName.VERTEX:
        return VertexProvider(config.vertex_config, config.model)

    if not config.api_key:
        raise CredentialError(f"API key is required for {name.value} provider")
    return API_KEY_PROVIDERS[name](config.api_key, config.model)


class DocumentExtractor:
    """Document extraction through a configurable AI provider."""

    def __init__(
        self,
        config: ExtractorConfig,
        provider: BaseProvider | None = None,
    ):
        """
        Initialize the extractor.

        Args:
            config: Provider selection and credentials
            provider: Pre-built provider to use instead of one created from config

        Raises:
            ConfigurationError: Unknown provider
            CredentialError: Missing API key or Vertex AI settings
        """
        self.config = config
        self._provider = provider or create_provider(config)

        logger.info(
            "DocumentExtractor initialized: provider=%s, model=%s",
            self._provider.name.value,
            self._provider.model,
        )

    @classmethod
    def from_env(cls) -> "DocumentExtractor":
        """Create an extractor from environment variables (see ocr_ai.config)."""
        return cls(ExtractorConfig.from_env())

    def current_provider(self) -> ProviderName:
        return self._provider.name

    def current_model(self) -> str:
        return self._provider.model

    def reconfigure(
        self,
        provider: str | ProviderName,
        api_key: str | None = None,
        model: str | None = None,
        vertex_config: VertexConfig | None = None,
    ) -> None:
        """
        Replace the active provider.

        Extractions already running keep the provider they started with.

        Raises:
            ConfigurationError: Unknown provider
            CredentialError: Missing credentials; the current provider is kept
        """
        config = ExtractorConfig(
            provider=provider,
            api_key=api_key,
            model=model,
            vertex_config=vertex_config,
        )
        new_provider = create_provider(config)

        self.config = config
        self._provider = new_provider
        logger.info(
            "Provider switched: provider=%s, model=%s",
            new_provider.name.value,
            new_provider.model,
        )

    async def extract(
        self,
        source: str | Path,
        options: ExtractionRequest | None = None,
    ) -> ExtractionResult:
        """
        Extract content from a file path or URL.

        Args:
            source: Local path or http(s) URL
            options: Extraction options, plain text by default

        Returns:
            ExtractionSuccess or ExtractionFailure
        """
        start_time = time.perf_counter()
        provider = self._provider

        source_str = str(source)
        if is_url(source_str):
            load = partial(load_file_from_url, source_str)
        else:
            load = partial(load_file, source)

        return await self._process(provider, load, options, start_time)

    async def extract_from_buffer(
        self,
        data: bytes,
        file_name: str,
        options: ExtractionRequest | None = None,
        mime_type: str | None = None,
    ) -> ExtractionResult:
        """Extract content from an in-memory buffer; `file_name` sets the type."""
        start_time = time.perf_counter()
        provider = self._provider
        load = partial(load_file_from_buffer, data, file_name, mime_type)

        return await self._process(provider, load, options, start_time)

    async def extract_from_base64(
        self,
        encoded: str,
        file_name: str,
        options: ExtractionRequest | None = None,
        mime_type: str | None = None,
    ) -> ExtractionResult:
        """Extract content from a base64 string or data URL."""
        start_time = time.perf_counter()
        provider = self._provider
        load = partial(load_file_from_base64, encoded, file_name, mime_type)

        return await self._process(provider, load, options, start_time)

    async def extract_many(
        self,
        sources: Iterable[str | Path],
        options: ExtractionRequest | None = None,
    ) -> list[ExtractionResult]:
        """
        Extract several sources concurrently with the same options.

        Results are returned in the order of `sources`.
        """
        return list(await asyncio.gather(*(self.extract(s, options) for s in sources)))

    async def extract_batch(self, items: Iterable[BatchItem]) -> list[ExtractionResult]:
        """Extract several sources concurrently, each with its own options."""
        return list(
            await asyncio.gather(*(self.extract(item.source, item.options) for item in items))
        )

    async def extract_with_retry(
        self,
        source: str | Path,
        options: ExtractionRequest | None = None,
        max_attempts: int = 3,
        delay: float = 1.0,
    ) -> ExtractionResult:
        """
        Call `extract` until it succeeds or `max_attempts` is reached.

        Waits a fixed `delay` seconds between attempts. Returns the first
        success, or the last failure when every attempt fails.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_attempts),
            wait=wait_fixed(delay),
            retry=retry_if_result(lambda result: not result.success),
            retry_error_callback=lambda retry_state: retry_state.outcome.result(),
            before_sleep=lambda retry_state: logger.warning(
                "Extraction of %s failed, retrying in %.1fs (attempt %d/%d)",
                source,
                delay,
                retry_state.attempt_number,
                max_attempts,
            ),
        )
        return await retrying(self.extract, source, options)

    async def _process(
        self,
        provider: BaseProvider,
        load: Callable[[], FileInfo],
        options: ExtractionRequest | None,
        start_time: float,
    ) -> ExtractionResult:
        request = options or ExtractionRequest()

        try:
            file = await asyncio.to_thread(load)

            if not provider.supports_file_type(file.category):
                raise UnsupportedFileTypeError(
                    f"Provider {provider.name.value} does not support file type: "
                    f"{file.category.value}"
                )

            if request.output_format == OutputFormat.JSON:
                if request.schema is None:
                    raise MissingSchemaError("Schema is required for JSON extraction")
                provider_result = await provider.extract_json(file, request.schema, request)
            else:
                provider_result = await provider.extract_text(file, request)

            result = ExtractionSuccess(
                output_format=request.output_format,
                content=provider_result.content,
                metadata=ExtractionMetadata(
                    provider=provider.name,
                    model=provider.model,
                    file_type=file.category,
                    file_name=file.name,
                    processing_time_ms=(time.perf_counter() - start_time) * 1000,
                    token_usage=provider_result.token_usage,
                ),
            )

            if request.output_path:
                await asyncio.to_thread(
                    save_to_file, request.output_path, self._serialize(result)
                )

            logger.info(
                "Extraction completed: provider=%s, model=%s, file=%s, format=%s, time=%.0fms",
                provider.name.value,
                provider.model,
                file.name,
                request.output_format.value,
                result.metadata.processing_time_ms,
            )
            return result

        except Exception as e:
            return self._failure(e)

    @staticmethod
    def _serialize(result: ExtractionSuccess) -> str:
        if result.output_format == OutputFormat.JSON:
            return json.dumps(result.content, indent=2, ensure_ascii=False)
        return result.content

    @staticmethod
    def _failure(error: Exception) -> ExtractionFailure:
        code = error.code if isinstance(error, OcrAIError) else ErrorCode.EXTRACTION_ERROR
        message = str(error) or error.__class__.__name__

        logger.warning("Extraction failed (%s): %s", code.value, message)
        return ExtractionFailure(error=message, code=code)


def create_extractor(config: ExtractorConfig) -> DocumentExtractor:
    """Factory function to create a DocumentExtractor."""
    return DocumentExtractor(config)
