"""
OCR AI
======

Document text and data extraction through interchangeable AI providers.

Features:
- One interface over Gemini, Vertex AI, OpenAI, Claude and Grok
- PDF, image and text documents from paths, URLs, buffers or base64
- Plain text or schema-guided JSON output with token usage metadata
- Failures returned as results, never raised

Basic Usage:
    from ocr_ai import DocumentExtractor, ExtractorConfig

    extractor = DocumentExtractor(ExtractorConfig(provider="gemini", api_key="..."))
    result = await extractor.extract("invoice.pdf")
    print(result.content)

Structured Extraction:
    from ocr_ai import ExtractionRequest

    result = await extractor.extract(
        "invoice.pdf",
        ExtractionRequest(output_format="json", schema={"total": "number"}),
    )
    print(result.content["total"])
"""

__version__ = "0.1.0"

from .config import ExtractorConfig, VertexConfig
from .errors import (
    ConfigurationError,
    CredentialError,
    FileLoadError,
    MissingSchemaError,
    OcrAIError,
    ParseError,
    PersistenceError,
    UnsupportedFileTypeError,
)
from .extractor import DocumentExtractor, create_extractor, create_provider
from .models import (
    BatchItem,
    ErrorCode,
    ExtractionFailure,
    ExtractionMetadata,
    ExtractionRequest,
    ExtractionResult,
    ExtractionSuccess,
    FileCategory,
    FileInfo,
    ModelParameters,
    OutputFormat,
    ProviderName,
    TokenUsage,
)

__all__ = [
    # Version
    "__version__",
    # Extraction
    "DocumentExtractor",
    "create_extractor",
    "create_provider",
    # Configuration
    "ExtractorConfig",
    "VertexConfig",
    # Models
    "BatchItem",
    "ErrorCode",
    "ExtractionFailure",
    "ExtractionMetadata",
    "ExtractionRequest",
    "ExtractionResult",
    "ExtractionSuccess",
    "FileCategory",
    "FileInfo",
    "ModelParameters",
    "OutputFormat",
    "ProviderName",
    "TokenUsage",
    # Errors
    "OcrAIError",
    "ConfigurationError",
    "CredentialError",
    "FileLoadError",
    "MissingSchemaError",
    "ParseError",
    "PersistenceError",
    "UnsupportedFileTypeError",
]
