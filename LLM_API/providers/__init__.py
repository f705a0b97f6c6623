"""
LLM Provider Implementations
"""

from .gemini import GeminiModel

__all__ = ['GeminiModel']
