"""
JSON Recovery Module - Parse JSON from free-form model output

Models asked for "JSON only" still wrap their answer in markdown fences
now and then. This module removes a single leading fence (```json or ```)
and a single trailing fence, then parses strictly.

No repair is attempted: output that is not valid JSON after fence
stripping raises ParseError with a preview of the original text.
"""

import json
import logging
from typing import Any

from ocr_ai.errors import ParseError

logger = logging.getLogger(__name__)

FENCE = "```"
JSON_FENCE = "```json"


def strip_code_fences(text: str) -> str:
    """
    Remove one leading and one trailing markdown code fence.

    Args:
        text: Raw model output

    Returns:
        Trimmed text without the surrounding fences
    """
    cleaned = text.strip()

    if cleaned.startswith(JSON_FENCE):
        cleaned = cleaned[len(JSON_FENCE):]
    elif cleaned.startswith(FENCE):
        cleaned = cleaned[len(FENCE):]

    if cleaned.endswith(FENCE):
        cleaned = cleaned[: -len(FENCE)]

    return cleaned.strip()


def parse_json_response(text: str) -> Any:
    """
    Parse a model response as JSON.

    Args:
        text: Raw model output, optionally fenced

    Returns:
        The parsed JSON value

    Raises:
        ParseError: If the text is not valid JSON after fence stripping
    """
    cleaned = strip_code_fences(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("JSON parse failed: %s", str(e)[:100])
        raise ParseError(text) from e
