"""
Tests for GeminiProvider and VertexProvider
===========================================

Unit tests for the Google Gemini backends. The genai client is mocked.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.genai import errors as genai_errors
from tenacity import wait_none

from ocr_ai.backends.gemini import GeminiProvider
from ocr_ai.backends.vertex import VertexProvider
from ocr_ai.config import VertexConfig
from ocr_ai.errors import CredentialError, ParseError
from ocr_ai.models import (
    DEFAULT_MAX_OUTPUT_TOKENS,
    ExtractionRequest,
    ModelParameters,
    ProviderName,
    TokenUsage,
)


def make_response(text: str | None = "Extracted text", usage: bool = True) -> MagicMock:
    """Build a mock GenerateContentResponse."""
    response = MagicMock()
    response.text = text
    if usage:
        response.usage_metadata = MagicMock(
            prompt_token_count=100,
            candidates_token_count=20,
            total_token_count=120,
        )
    else:
        response.usage_metadata = None
    return response


def mock_client(response=None, side_effect=None) -> MagicMock:
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(
        return_value=response, side_effect=side_effect
    )
    return client


# =============================================================================
# TestGeminiProviderInit
# =============================================================================


@pytest.mark.unit
class TestGeminiProviderInit:
    """Test GeminiProvider initialization."""

    def test_default_model(self):
        provider = GeminiProvider(api_key="test-key")
        assert provider.name == ProviderName.GEMINI
        assert provider.model == "gemini-1.5-flash"

    def test_custom_model(self):
        assert GeminiProvider(api_key="k", model="gemini-2.5-pro").model == "gemini-2.5-pro"

    def test_missing_key(self):
        with pytest.raises(CredentialError):
            GeminiProvider(api_key="")


# =============================================================================
# TestGeminiExtractText
# =============================================================================


@pytest.mark.unit
class TestGeminiExtractText:
    """Test text extraction requests."""

    @pytest.mark.asyncio
    async def test_pdf_sent_as_inline_bytes(self, pdf_file):
        """PDFs should be sent as an inline data part followed by the prompt."""
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response("Invoice 12345"))

        with patch.object(provider, "_get_client", return_value=client):
            result = await provider.extract_text(pdf_file)

        assert result.content == "Invoice 12345"
        assert result.token_usage == TokenUsage(100, 20, 120)

        kwargs = client.aio.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-1.5-flash"
        image_part, text_part = kwargs["contents"]
        assert image_part.inline_data.data == pdf_file.content
        assert image_part.inline_data.mime_type == "application/pdf"
        assert text_part.text.startswith("Extract all text content from this document.")

    @pytest.mark.asyncio
    async def test_text_document_inlined(self, text_file):
        """Text documents should be appended to the prompt, not encoded."""
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response())

        with patch.object(provider, "_get_client", return_value=client):
            await provider.extract_text(text_file)

        contents = client.aio.models.generate_content.call_args.kwargs["contents"]
        assert len(contents) == 1
        assert contents[0].endswith("Document content:\nTotal: $42")

    @pytest.mark.asyncio
    async def test_default_token_ceiling(self, image_file):
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response())

        with patch.object(provider, "_get_client", return_value=client):
            await provider.extract_text(image_file)

        config = client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.max_output_tokens == DEFAULT_MAX_OUTPUT_TOKENS
        assert config.temperature is None

    @pytest.mark.asyncio
    async def test_model_parameters_forwarded(self, image_file):
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response())
        request = ExtractionRequest(
            model_parameters=ModelParameters(
                temperature=0.1,
                max_output_tokens=256,
                top_k=32,
                stop_sequences=["END"],
            )
        )

        with patch.object(provider, "_get_client", return_value=client):
            await provider.extract_text(image_file, request)

        config = client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.temperature == 0.1
        assert config.max_output_tokens == 256
        assert config.top_k == 32
        assert config.stop_sequences == ["END"]

    @pytest.mark.asyncio
    async def test_empty_response(self, image_file):
        """Missing text and usage should give an empty string and no usage."""
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response(text=None, usage=False))

        with patch.object(provider, "_get_client", return_value=client):
            result = await provider.extract_text(image_file)

        assert result.content == ""
        assert result.token_usage is None


# =============================================================================
# TestGeminiExtractJson
# =============================================================================


@pytest.mark.unit
class TestGeminiExtractJson:
    """Test structured extraction requests."""

    @pytest.mark.asyncio
    async def test_json_mode_and_parsing(self, pdf_file):
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response('```json\n{"total": 42}\n```'))

        with patch.object(provider, "_get_client", return_value=client):
            result = await provider.extract_json(pdf_file, {"total": "number"})

        assert result.content == {"total": 42}
        config = client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_empty_response_is_empty_object(self, pdf_file):
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response(text=None))

        with patch.object(provider, "_get_client", return_value=client):
            result = await provider.extract_json(pdf_file, {"total": "number"})

        assert result.content == {}

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, pdf_file):
        provider = GeminiProvider(api_key="test-key")
        client = mock_client(make_response("I could not find a total."))

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(ParseError):
                await provider.extract_json(pdf_file, {"total": "number"})


# =============================================================================
# TestGeminiRetry
# =============================================================================


@pytest.mark.unit
class TestGeminiRetry:
    """Test rate-limit retry behavior."""

    @pytest.mark.asyncio
    async def test_rate_limit_retried(self, image_file):
        """429 responses should be retried until the call succeeds."""
        provider = GeminiProvider(api_key="test-key")
        rate_limited = genai_errors.ClientError(
            429,
            {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
        )
        client = mock_client(side_effect=[rate_limited, make_response("ok")])

        with patch.object(GeminiProvider._call_api.retry, "wait", wait_none()):
            with patch.object(provider, "_get_client", return_value=client):
                result = await provider.extract_text(image_file)

        assert result.content == "ok"
        assert client.aio.models.generate_content.await_count == 2

    @pytest.mark.asyncio
    async def test_other_client_errors_not_retried(self, image_file):
        provider = GeminiProvider(api_key="test-key")
        bad_request = genai_errors.ClientError(
            400,
            {"error": {"code": 400, "message": "Invalid argument", "status": "INVALID_ARGUMENT"}},
        )
        client = mock_client(side_effect=bad_request)

        with patch.object(provider, "_get_client", return_value=client):
            with pytest.raises(genai_errors.ClientError):
                await provider.extract_text(image_file)

        assert client.aio.models.generate_content.await_count == 1


# =============================================================================
# TestVertexProvider
# =============================================================================


@pytest.mark.unit
class TestVertexProvider:
    """Test the Vertex AI variant."""

    def test_defaults(self):
        provider = VertexProvider(VertexConfig(project="my-project", location="europe-west4"))

        assert provider.name == ProviderName.VERTEX
        assert provider.model == "gemini-2.0-flash"
        assert provider.api_key is None

    def test_missing_config(self):
        with pytest.raises(CredentialError):
            VertexProvider(None)

    @pytest.mark.parametrize(
        "project, location",
        [("", "us-central1"), ("my-project", "")],
    )
    def test_incomplete_config(self, project, location):
        with pytest.raises(CredentialError):
            VertexProvider(VertexConfig(project=project, location=location))

    def test_client_uses_vertex_mode(self):
        provider = VertexProvider(VertexConfig(project="my-project", location="us-central1"))

        with patch("google.genai.Client") as mock_client_cls:
            provider._get_client()

        mock_client_cls.assert_called_once_with(
            vertexai=True,
            project="my-project",
            location="us-central1",
        )

    @pytest.mark.asyncio
    async def test_shares_gemini_request_shape(self, pdf_file):
        provider = VertexProvider(VertexConfig(project="p", location="us-central1"))
        client = mock_client(make_response('{"a": 1}'))

        with patch.object(provider, "_get_client", return_value=client):
            result = await provider.extract_json(pdf_file, {"a": "number"})

        assert result.content == {"a": 1}
        assert client.aio.models.generate_content.call_args.kwargs["model"] == "gemini-2.0-flash"
