"""Completion backend implementations."""

from .openai_backend import OpenAIBackend
from .anthropic_backend import AnthropicBackend

__all__ = [
    'OpenAIBackend',
    'AnthropicBackend',
]
