"""LLM provider abstraction module."""

from raidwatch.providers.base import LLMProvider, LLMResponse
from raidwatch.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider"]
