"""
Error Taxonomy
==============

Every exception raised by loaders and provider backends derives from
OcrAIError and carries the ErrorCode it is reported under. The
DocumentExtractor converts them into ExtractionFailure results.

ConfigurationError and CredentialError are raised at construction time
and are never converted.
"""

from ocr_ai.models import ErrorCode

PREVIEW_LENGTH = 200


class OcrAIError(Exception):
    """Base exception with error code support."""

    code: ErrorCode = ErrorCode.EXTRACTION_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(OcrAIError):
    """Unknown provider or otherwise unusable configuration."""


class CredentialError(ConfigurationError):
    """Required API key or cloud project settings are missing."""


class UnsupportedFileTypeError(OcrAIError):
    """The document type is not recognized or not accepted by the provider."""

    code = ErrorCode.UNSUPPORTED_FILE_TYPE


class MissingSchemaError(OcrAIError):
    """JSON output was requested without a schema."""

    code = ErrorCode.MISSING_SCHEMA


class ParseError(OcrAIError):
    """Provider output could not be parsed as JSON."""

    def __init__(self, raw_text: str) -> None:
        self.preview = raw_text[:PREVIEW_LENGTH]
        super().__init__(f"Failed to parse JSON response: {self.preview}...")


class FileLoadError(OcrAIError):
    """The document could not be read or fetched."""


class PersistenceError(OcrAIError):
    """The result could not be written to the output path."""
