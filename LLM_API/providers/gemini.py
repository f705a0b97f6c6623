import json
from typing import Optional, Any, Tuple
from google import genai
from google.genai import errors, types
from dotenv import load_dotenv
from ..data_classes import (
    StructuredOutputRequest, StructuredOutputResponse,
    ImageGenerationRequest, ImageGenerationResponse,
    ProviderConfig
)
from ..decorators import log_request
from ..exceptions import LLMError, LLMValidationError, classify_status
from ._base_provider import BaseProvider


class GeminiModel(BaseProvider):
    """Gemini API implementation of CallModel using data classes"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = "gemini-2.5-flash",
        image_model_name: str = "gemini-2.5-flash-image",
    ):
        super().__init__(api_key=api_key, model_name=model_name, image_model_name=image_model_name)

    def _get_provider_config(self) -> ProviderConfig:
        """Get Gemini provider configuration"""
        return ProviderConfig(
            provider_name="Gemini",
            model_name=self.model_name or "gemini-2.5-flash",
            image_model_name=self.image_model_name or "gemini-2.5-flash-image",
            max_tokens_limit=8192,
        )

    def setup_client(self):
        """Setup Gemini client"""
        load_dotenv()
        api_key = self._get_api_key('GEMINI_API_KEY')
        self.client = genai.Client(api_key=api_key)

    @log_request
    async def generate_structured_output(self, request: StructuredOutputRequest) -> StructuredOutputResponse:
        """Generate structured output using data classes"""
        model = request.model_name or self.provider_config.model_name
        try:
            self._validate_request(request)
            contents = request.prompt
            if request.instructions:
                contents = f"{request.instructions}\n\n{request.prompt}"
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    response_schema=request.schema,
                    temperature=request.temperature,
                    max_output_tokens=request.max_tokens,
                )
            )
        except LLMValidationError as e:
            return StructuredOutputResponse(model_used=model, validation_error=str(e))
        except Exception as e:
            return StructuredOutputResponse(
                text="",
                model_used=model,
                error=f"Structured output failed: {_provider_error(e, self.provider_config.provider_name)}"
            )

        text = getattr(response, 'text', '') or ""
        parsed = getattr(response, 'parsed', None)
        validation_error = None
        if not isinstance(parsed, dict):
            parsed = None
            if text:
                try:
                    parsed = json.loads(text)
                except json.JSONDecodeError as e:
                    validation_error = f"Response is not valid JSON: {e}"
        return StructuredOutputResponse(
            text=text,
            parsed_output=parsed,
            validation_error=validation_error,
            model_used=model,
            raw_response=response
        )

    @log_request
    async def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        """Generate a single image using data classes"""
        model = request.model_name or self.provider_config.image_model_name
        try:
            self._validate_request(request)
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=request.prompt,
                config=types.GenerateContentConfig(
                    response_modalities=["IMAGE"],
                    image_config=types.ImageConfig(aspect_ratio=request.aspect_ratio),
                )
            )
        except Exception as e:
            return ImageGenerationResponse(
                model_used=model,
                error=f"Image generation failed: {_provider_error(e, self.provider_config.provider_name)}"
            )

        image_bytes, mime_type = _first_inline_image(response)
        return ImageGenerationResponse(
            text=getattr(response, 'text', '') or "",
            image_bytes=image_bytes,
            mime_type=mime_type,
            model_used=model,
            raw_response=response
        )


def _provider_error(error: Exception, provider: str) -> LLMError:
    """Wrap an exception raised by the Gemini SDK into an LLMError"""
    if isinstance(error, LLMError):
        return error
    if isinstance(error, errors.APIError):
        return classify_status(error.code, error.message or str(error), provider, error)
    return LLMError(str(error), provider=provider, original_error=error)


def _first_inline_image(response: Any) -> Tuple[Optional[bytes], Optional[str]]:
    """Return the first inline image part of a Gemini response, if any"""
    candidates = getattr(response, 'candidates', None) or []
    if not candidates:
        return None, None
    content = getattr(candidates[0], 'content', None)
    parts = getattr(content, 'parts', None) or []
    for part in parts:
        inline_data = getattr(part, 'inline_data', None)
        if inline_data is not None and getattr(inline_data, 'data', None):
            return inline_data.data, getattr(inline_data, 'mime_type', None) or "image/png"
    return None, None


__all__ = ['GeminiModel']
