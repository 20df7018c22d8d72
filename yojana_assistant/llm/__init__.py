"""
LLM Package
Contains LLM client implementations
"""
from .client import (
    LLMError,
    LLMTimeoutError,
    LLMResponseError,
    LLMEmptyResponseError,
    BaseLLMClient,
    GeminiClient,
    OpenAIClient,
    AnthropicClient,
    OllamaClient,
    MockLLMClient,
    LLMClientFactory
)

__all__ = [
    "LLMError",
    "LLMTimeoutError",
    "LLMResponseError",
    "LLMEmptyResponseError",
    "BaseLLMClient",
    "GeminiClient",
    "OpenAIClient",
    "AnthropicClient",
    "OllamaClient",
    "MockLLMClient",
    "LLMClientFactory"
]
