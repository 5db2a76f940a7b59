"""
Data Models for Document Extraction
===================================

Shared data models passed between the loader, the provider backends
and the DocumentExtractor.
"""

from base64 import b64encode
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class ProviderName(str, Enum):
    """Supported AI providers."""

    GEMINI = "gemini"
    OPENAI = "openai"
    CLAUDE = "claude"
    GROK = "grok"
    VERTEX = "vertex"  # Gemini via Vertex AI project credentials


class FileCategory(str, Enum):
    """Document category detected by the loader."""

    PDF = "pdf"
    IMAGE = "image"
    TEXT = "text"


class OutputFormat(str, Enum):
    """Output format for extraction."""

    TEXT = "text"
    JSON = "json"


class ErrorCode(str, Enum):
    """Machine-readable codes carried by failed results."""

    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    MISSING_SCHEMA = "MISSING_SCHEMA"
    EXTRACTION_ERROR = "EXTRACTION_ERROR"


DEFAULT_MAX_OUTPUT_TOKENS = 16384


@dataclass(frozen=True)
class FileInfo:
    """A loaded document, ready to be sent to a provider."""

    path: str
    name: str
    category: FileCategory
    mime_type: str
    size: int
    content: bytes = field(repr=False)
    base64: str | None = field(default=None, repr=False)

    def text(self) -> str:
        """Decode the raw content as UTF-8 (text documents)."""
        return self.content.decode("utf-8", errors="replace")

    def base64_data(self) -> str:
        """Base64 of the content, reusing the loader's pre-encoded copy."""
        if self.base64 is not None:
            return self.base64
        return b64encode(self.content).decode("ascii")


@dataclass
class ModelParameters:
    """Optional generation controls. Unset fields are never sent."""

    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    top_k: int | None = None  # Gemini/Claude only
    stop_sequences: list[str] | None = None

    def explicit_values(self) -> dict[str, Any]:
        """Return the fields the caller set, plus a max_output_tokens ceiling."""
        values = {key: value for key, value in asdict(self).items() if value is not None}
        values.setdefault("max_output_tokens", DEFAULT_MAX_OUTPUT_TOKENS)
        return values


@dataclass
class ExtractionRequest:
    """Caller options for a single extraction."""

    output_format: OutputFormat = OutputFormat.TEXT
    schema: dict[str, Any] | None = None
    prompt: str | None = None
    language: str | None = None
    output_path: str | None = None
    model_parameters: ModelParameters | None = None

    def __post_init__(self) -> None:
        self.output_format = OutputFormat(self.output_format)


@dataclass
class TokenUsage:
    """Token counts reported by a provider."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


@dataclass
class ProviderResult:
    """Raw result of a provider call, before packaging."""

    content: Any
    token_usage: TokenUsage | None = None


@dataclass
class ExtractionMetadata:
    """Metadata attached to every successful extraction."""

    provider: ProviderName
    model: str
    file_type: FileCategory
    file_name: str
    processing_time_ms: float
    token_usage: TokenUsage | None = None


@dataclass
class ExtractionSuccess:
    """Successful extraction. `content` is a str for text, parsed JSON otherwise."""

    output_format: OutputFormat
    content: Any
    metadata: ExtractionMetadata
    success: bool = field(default=True, init=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        metadata: dict[str, Any] = {
            "provider": self.metadata.provider.value,
            "model": self.metadata.model,
            "file_type": self.metadata.file_type.value,
            "file_name": self.metadata.file_name,
            "processing_time_ms": self.metadata.processing_time_ms,
        }
        if self.metadata.token_usage is not None:
            metadata["token_usage"] = asdict(self.metadata.token_usage)

        return {
            "success": True,
            "format": self.output_format.value,
            "content": self.content,
            "metadata": metadata,
        }


@dataclass
class ExtractionFailure:
    """Failed extraction. Never carries partial content."""

    error: str
    code: ErrorCode
    success: bool = field(default=False, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.error, "code": self.code.value}


ExtractionResult = ExtractionSuccess | ExtractionFailure


@dataclass
class BatchItem:
    """One entry of a batch extraction: a source with its own options."""

    source: str
    options: ExtractionRequest | None = None
