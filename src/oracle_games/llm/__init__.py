"""LLM client module."""

from oracle_games.llm.anthropic import AnthropicClient, create_anthropic_client
from oracle_games.llm.client import LLMClient, LLMMessage, LLMRequest, LLMResponse

__all__ = [
    "AnthropicClient",
    "LLMClient",
    "LLMMessage",
    "LLMRequest",
    "LLMResponse",
    "create_anthropic_client",
]
