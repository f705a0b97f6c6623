import base64
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


# ========== Base Classes ==========

@dataclass
class BaseRequest:
    """Base class for every provider request"""
    prompt: str = ""
    model_name: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None


@dataclass
class BaseResponse:
    """Base class for every provider response"""
    text: str = ""
    model_used: Optional[str] = None
    usage: Optional[Dict[str, int]] = None
    error: Optional[str] = None
    raw_response: Optional[Any] = None

    @property
    def success(self) -> bool:
        """Whether the request succeeded"""
        return self.error is None


# ========== Structured Output ==========

@dataclass
class StructuredOutputRequest(BaseRequest):
    """Structured (JSON schema constrained) output request"""
    schema: Dict[str, Any] = field(default_factory=dict)  # JSON Schema
    schema_name: str = "response"
    instructions: Optional[str] = None


@dataclass
class StructuredOutputResponse(BaseResponse):
    """Structured output response"""
    parsed_output: Optional[Dict[str, Any]] = None
    validation_error: Optional[str] = None

    @property
    def success(self) -> bool:
        """Whether parsing succeeded"""
        return self.error is None and self.validation_error is None and self.parsed_output is not None


# ========== Image Generation ==========

@dataclass
class ImageGenerationRequest(BaseRequest):
    """Single-image generation request"""
    aspect_ratio: str = "4:3"


@dataclass
class ImageGenerationResponse(BaseResponse):
    """Single-image generation response"""
    image_bytes: Optional[bytes] = None
    mime_type: Optional[str] = None

    @property
    def has_image(self) -> bool:
        """Whether an image payload came back"""
        return bool(self.image_bytes)

    @property
    def data_uri(self) -> Optional[str]:
        """The image as a ``data:`` URI, or None when there is no image"""
        if not self.has_image:
            return None
        encoded = base64.b64encode(self.image_bytes).decode("ascii")
        return f"data:{self.mime_type or 'image/png'};base64,{encoded}"


# ========== Provider-Specific Configuration ==========

@dataclass
class ProviderConfig:
    """Provider specific settings"""
    provider_name: str = ""
    model_name: str = ""
    image_model_name: str = ""

    # Provider specific limits
    max_tokens_limit: Optional[int] = None


# ========== Utility Functions ==========

def create_structured_output_request(
    prompt: str,
    schema: Dict[str, Any],
    schema_name: str = "response",
    **kwargs
) -> StructuredOutputRequest:
    """Convenience constructor for structured output requests"""
    return StructuredOutputRequest(
        prompt=prompt,
        schema=schema,
        schema_name=schema_name,
        **kwargs
    )


def create_image_generation_request(
    prompt: str,
    aspect_ratio: str = "4:3",
    **kwargs
) -> ImageGenerationRequest:
    """Convenience constructor for image generation requests"""
    return ImageGenerationRequest(
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        **kwargs
    )
