"""
Provider Backends
=================

Interchangeable AI provider implementations for document extraction.

Available Providers:
- GeminiProvider: Google Gemini API (API key)
- VertexProvider: Gemini on Vertex AI (project + location credentials)
- OpenAIProvider: OpenAI chat completions
- GrokProvider: xAI Grok via the OpenAI-compatible endpoint
- ClaudeProvider: Anthropic Messages API

Usage:
    from ocr_ai.backends import ClaudeProvider

    claude = ClaudeProvider(api_key="...")
    result = await claude.extract_text(file_info)
"""

from .base import BaseProvider
from .claude import ClaudeProvider
from .gemini import GeminiProvider, GeminiRetryableError
from .grok import GrokProvider
from .openai import OpenAIProvider
from .vertex import VertexProvider

__all__ = [
    "BaseProvider",
    "ClaudeProvider",
    "GeminiProvider",
    "GeminiRetryableError",
    "GrokProvider",
    "OpenAIProvider",
    "VertexProvider",
]
