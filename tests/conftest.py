"""
Test Configuration and Fixtures for ocr-ai

This module provides shared fixtures, markers, and configuration for all tests.
"""

import base64
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from ocr_ai.backends.base import BaseProvider
from ocr_ai.models import (
    ExtractionRequest,
    FileCategory,
    FileInfo,
    ProviderName,
    ProviderResult,
    TokenUsage,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, no external deps)")
    config.addinivalue_line("markers", "integration: Integration tests (stubbed providers, real files)")
    config.addinivalue_line("markers", "api: API/service tests")


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory(prefix="ocr_ai_test_") as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def invoice_txt(temp_dir: Path) -> Path:
    """A small text invoice on disk."""
    path = temp_dir / "invoice.txt"
    path.write_text("Total: $42", encoding="utf-8")
    return path


# =============================================================================
# FileInfo Fixtures
# =============================================================================

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\n%%EOF"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


@pytest.fixture
def text_file() -> FileInfo:
    """Text-category FileInfo."""
    return FileInfo(
        path="/docs/invoice.txt",
        name="invoice.txt",
        category=FileCategory.TEXT,
        mime_type="text/plain",
        size=10,
        content=b"Total: $42",
    )


@pytest.fixture
def pdf_file() -> FileInfo:
    """PDF-category FileInfo with pre-encoded base64."""
    return FileInfo(
        path="/docs/invoice.pdf",
        name="invoice.pdf",
        category=FileCategory.PDF,
        mime_type="application/pdf",
        size=len(PDF_BYTES),
        content=PDF_BYTES,
        base64=base64.b64encode(PDF_BYTES).decode("ascii"),
    )


@pytest.fixture
def image_file() -> FileInfo:
    """PNG image FileInfo with pre-encoded base64."""
    return FileInfo(
        path="/docs/scan.png",
        name="scan.png",
        category=FileCategory.IMAGE,
        mime_type="image/png",
        size=len(PNG_BYTES),
        content=PNG_BYTES,
        base64=base64.b64encode(PNG_BYTES).decode("ascii"),
    )


# =============================================================================
# Stub Provider
# =============================================================================

class StubProvider(BaseProvider):
    """
    Provider that records calls instead of contacting an AI service.

    extract_text echoes the document text, extract_json returns
    `json_content`. Set `error` to make both calls raise.
    """

    DEFAULT_MODEL = "stub-model"

    def __init__(
        self,
        name: ProviderName = ProviderName.GEMINI,
        model: str | None = None,
        supported: frozenset | None = None,
    ):
        super().__init__(api_key="stub-key", model=model)
        self.name = name
        if supported is not None:
            self.SUPPORTED_CATEGORIES = supported
        self.calls: list[tuple[str, FileInfo, ExtractionRequest | None]] = []
        self.json_content: Any = {"total": 42}
        self.token_usage: TokenUsage | None = TokenUsage(10, 5, 15)
        self.error: Exception | None = None
        self.before_return = None

    async def _respond(self, kind: str, file: FileInfo, request, content: Any) -> ProviderResult:
        self.calls.append((kind, file, request))
        if self.before_return is not None:
            await self.before_return()
        if self.error is not None:
            raise self.error
        return ProviderResult(content=content, token_usage=self.token_usage)

    async def extract_text(self, file, request=None):
        return await self._respond("text", file, request, f"echo: {file.text()}")

    async def extract_json(self, file, schema, request=None):
        return await self._respond("json", file, request, self.json_content)


@pytest.fixture
def stub_provider() -> StubProvider:
    """A recording provider reporting itself as gemini."""
    return StubProvider()


@pytest.fixture
def make_stub_provider():
    """Factory fixture for StubProviders with a given identity."""
    def _create(name: ProviderName = ProviderName.GEMINI, **kwargs) -> StubProvider:
        return StubProvider(name=name, **kwargs)
    return _create
