"""
Prompt Templates
================

Prompts shared by all provider backends so every provider receives the
same instructions.
"""

import json
from typing import Any

from ocr_ai.models import ExtractionRequest, FileInfo

DEFAULT_TEXT_PROMPT = "Extract all text content from this document."
DEFAULT_JSON_PROMPT = "Extract structured data from this document."

TEXT_INSTRUCTIONS = """Please extract and return all the text content from the provided document.
Maintain the original structure and formatting as much as possible.
Return only the extracted text, without any additional commentary or metadata."""

JSON_INSTRUCTIONS = """Important:
- Return ONLY valid JSON, no additional text or markdown formatting
- Follow the schema structure exactly
- If a field cannot be extracted, use null
- Do not include any explanation, just the JSON object"""


def _has_language(request: ExtractionRequest | None) -> bool:
    return bool(request and request.language and request.language != "auto")


def build_text_prompt(request: ExtractionRequest | None = None) -> str:
    """Build the plain-text extraction prompt."""
    base_prompt = (request.prompt if request else None) or DEFAULT_TEXT_PROMPT
    language_hint = f" Respond in {request.language}." if _has_language(request) else ""

    return f"{base_prompt}{language_hint}\n\n{TEXT_INSTRUCTIONS}"


def build_json_prompt(
    schema: dict[str, Any],
    request: ExtractionRequest | None = None,
) -> str:
    """
    Build the structured extraction prompt.

    The schema is embedded as pretty-printed JSON. It guides the model
    and is not validated against the response.
    """
    base_prompt = (request.prompt if request else None) or DEFAULT_JSON_PROMPT
    language_hint = (
        f" Text content should be in {request.language}." if _has_language(request) else ""
    )
    schema_text = json.dumps(schema, indent=2, ensure_ascii=False)

    return (
        f"{base_prompt}{language_hint}\n\n"
        "Extract data from the provided document and return it as a JSON object "
        f"following this schema:\n\n{schema_text}\n\n{JSON_INSTRUCTIONS}"
    )


def with_document_text(prompt: str, file: FileInfo) -> str:
    """Inline a text document's content after the prompt."""
    return f"{prompt}\n\nDocument content:\n{file.text()}"
