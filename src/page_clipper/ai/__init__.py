"""Generative-model extraction."""

from page_clipper.ai.client import GeminiClient
from page_clipper.ai.hints import HintRegistry, SiteHint
from page_clipper.ai.prompts import build_prompt

__all__ = [
    "GeminiClient",
    "HintRegistry",
    "SiteHint",
    "build_prompt",
]
