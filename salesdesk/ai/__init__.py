"""
AI module for SalesDesk.
Provides the LLM client and the prompt builders used by the generation endpoints.
"""

from .llm_client import (
    AnthropicClient,
    LLMError,
    LLMConfigurationError,
    LLMRequestError,
    LLMUpstreamError,
)
from .prompts import SalesPromptBuilder

__all__ = [
    'AnthropicClient',
    'LLMError',
    'LLMConfigurationError',
    'LLMRequestError',
    'LLMUpstreamError',
    'SalesPromptBuilder',
]
