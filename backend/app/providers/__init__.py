"""
Inference provider adapters
"""

from .base import InferenceProvider
from .anthropic_provider import AnthropicProvider
from .openai_provider import OpenAIProvider

__all__ = [
    'InferenceProvider',
    'AnthropicProvider',
    'OpenAIProvider'
]
