"""
OCR AI Service - FastAPI Application

Minimal REST API for document extraction through the configured AI provider.
"""

import json
import logging
import time
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

load_dotenv()
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from ocr_ai import (
    ConfigurationError,
    DocumentExtractor,
    ErrorCode,
    ExtractionRequest,
    ModelParameters,
    OutputFormat,
    __version__,
)
from ocr_ai.backends import (
    ClaudeProvider,
    GeminiProvider,
    GrokProvider,
    OpenAIProvider,
    VertexProvider,
)

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="OCR AI Service",
    description="Document text and structured data extraction via AI providers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

PROVIDER_CLASSES = (
    GeminiProvider,
    VertexProvider,
    OpenAIProvider,
    ClaudeProvider,
    GrokProvider,
)

CLIENT_ERROR_CODES = {ErrorCode.UNSUPPORTED_FILE_TYPE, ErrorCode.MISSING_SCHEMA}

# Created on first use from environment variables
_extractor: DocumentExtractor | None = None


def get_extractor() -> DocumentExtractor:
    """
    Get or create the DocumentExtractor.

    Raises:
        ConfigurationError: If the environment does not describe a usable provider
    """
    global _extractor

    if _extractor is None:
        _extractor = DocumentExtractor.from_env()
    return _extractor


# ============================================================================
# Pydantic Models
# ============================================================================


class TokenUsageResponse(BaseModel):
    """Token counts reported by the provider."""

    input_tokens: int
    output_tokens: int
    total_tokens: int


class MetadataResponse(BaseModel):
    """Extraction metadata."""

    provider: str
    model: str
    file_type: str
    file_name: str
    processing_time_ms: float
    token_usage: TokenUsageResponse | None = None


class ExtractionResponse(BaseModel):
    """Successful extraction response."""

    success: bool = True
    format: str
    content: Any
    metadata: MetadataResponse


class ErrorResponse(BaseModel):
    """Error response."""

    success: bool = False
    error: str
    code: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = __version__
    uptime_seconds: float
    provider: str | None = None
    model: str | None = None


class ProviderInfo(BaseModel):
    """Provider identity and default model."""

    name: str
    default_model: str
    requires_api_key: bool


class ProvidersResponse(BaseModel):
    """Available providers and the active one."""

    active: str | None = None
    providers: list[ProviderInfo]


# ============================================================================
# Global state
# ============================================================================

_start_time = time.time()


# ============================================================================
# Endpoints
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Health check endpoint for container orchestration."""
    try:
        extractor = get_extractor()
    except ConfigurationError as e:
        logger.warning("Extractor not configured: %s", e)
        return HealthResponse(
            status="unconfigured",
            uptime_seconds=time.time() - _start_time,
        )

    return HealthResponse(
        status="healthy",
        uptime_seconds=time.time() - _start_time,
        provider=extractor.current_provider().value,
        model=extractor.current_model(),
    )


@app.get("/", tags=["System"])
async def root():
    """Root endpoint with API info."""
    return {
        "service": "ocr-ai",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/api/v1/providers", response_model=ProvidersResponse, tags=["System"])
async def list_providers():
    """List supported providers with their default models."""
    active = _extractor.current_provider().value if _extractor is not None else None

    return ProvidersResponse(
        active=active,
        providers=[
            ProviderInfo(
                name=cls.name.value,
                default_model=cls.DEFAULT_MODEL,
                requires_api_key=cls.REQUIRES_API_KEY,
            )
            for cls in PROVIDER_CLASSES
        ],
    )


def _parse_schema(schema: str | None) -> dict[str, Any] | None:
    if schema is None or not schema.strip():
        return None
    try:
        parsed = json.loads(schema)
    except json.JSONDecodeError as e:
        raise HTTPException(status_code=400, detail=f"Invalid schema JSON: {e}")
    if not isinstance(parsed, dict):
        raise HTTPException(status_code=400, detail="Schema must be a JSON object")
    return parsed


@app.post(
    "/api/v1/extract",
    response_model=ExtractionResponse,
    responses={
        400: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    tags=["Extraction"],
)
async def extract_document(
    file: UploadFile = File(..., description="PDF, image or text document"),
    format: str = Form(
        default="text",
        description="Output format: text or json",
        pattern="^(text|json)$",
    ),
    schema: str | None = Form(
        default=None,
        description="JSON object describing the fields to extract (json format only)",
    ),
    prompt: str | None = Form(default=None, description="Custom extraction prompt"),
    language: str | None = Form(default=None, description="Output language, or 'auto'"),
    temperature: float | None = Form(default=None, ge=0.0, le=2.0),
    max_tokens: int | None = Form(default=None, gt=0),
):
    """
    Extract text or structured data from an uploaded document.

    **Formats:**
    - **text**: Plain text, structure preserved as far as possible (default)
    - **json**: Object following `schema`; the schema is required

    Unsupported file types and missing schemas return 400. Provider or
    parsing failures return 502.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Uploaded file has no name")

    try:
        extractor = get_extractor()
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=f"Extractor not configured: {e}")

    request = ExtractionRequest(
        output_format=OutputFormat(format),
        schema=_parse_schema(schema),
        prompt=prompt,
        language=language,
        model_parameters=ModelParameters(
            temperature=temperature,
            max_output_tokens=max_tokens,
        ),
    )

    content = await file.read()
    result = await extractor.extract_from_buffer(content, file.filename, request)

    if not result.success:
        status_code = 400 if result.code in CLIENT_ERROR_CODES else 502
        return JSONResponse(status_code=status_code, content=result.to_dict())

    return result.to_dict()


# ============================================================================
# Error handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom HTTP exception handler."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """General exception handler."""
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "detail": str(exc)},
    )
