"""
Grok Provider
=============

xAI Grok through its OpenAI-compatible endpoint. Request shaping is
shared with OpenAIProvider; structured output relies on the prompt
alone because the endpoint's JSON mode is not used.
"""

from ocr_ai.models import ProviderName

from .openai import OpenAIProvider

GROK_BASE_URL = "https://api.x.ai/v1"


class GrokProvider(OpenAIProvider):
    """Provider using xAI Grok vision models."""

    name = ProviderName.GROK
    DEFAULT_MODEL = "grok-2-vision-1212"
    BASE_URL = GROK_BASE_URL
    FORCE_JSON_OBJECT = False
