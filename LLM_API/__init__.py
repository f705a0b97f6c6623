"""
LLM API Package - Unified async interface over generative providers
"""

from .base import CallModel
from .data_classes import (
    BaseRequest, BaseResponse,
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse,
    ProviderConfig
)
from .exceptions import (
    LLMError, LLMValidationError,
    LLMAuthenticationError, LLMRateLimitError,
    classify_status
)

__version__ = "1.0.0"
__all__ = [
    # Base
    'CallModel',
    # Data Classes
    'BaseRequest', 'BaseResponse',
    'StructuredOutputRequest', 'StructuredOutputResponse',
    'ImageGenerationRequest', 'ImageGenerationResponse',
    'ProviderConfig',
    # Exceptions
    'LLMError', 'LLMValidationError',
    'LLMAuthenticationError', 'LLMRateLimitError',
    'classify_status',
]
