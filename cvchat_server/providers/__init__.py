"""Completion providers (remote model APIs)."""

from .base import CompletionProvider
from .openai_responses import OpenAIResponsesProvider

__all__ = ["CompletionProvider", "OpenAIResponsesProvider"]
