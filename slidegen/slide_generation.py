"""Structured slide content and slide image generation through an LLM client."""

from __future__ import annotations

import json
import logging
import textwrap
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from LLM_API.data_classes import (
    StructuredOutputResponse,
    create_image_generation_request,
    create_structured_output_request,
)

from .constants import MIN_IMAGE_PROMPT_LENGTH
from .exceptions import GenerationError, ImageGenerationError
from .markup import sanitize_markup
from .slide_models import GeneratedPresentation, GeneratedSlide, SlideLayout

LOGGER = logging.getLogger(__name__)


class SlidePayload(BaseModel):
    """One slide as the content model must return it."""

    type: SlideLayout
    title: str
    content: Optional[List[str]] = None
    speakerNotes: Optional[str] = None
    imagePrompt: Optional[str] = None


class PresentationPayload(BaseModel):
    presentationTitle: Optional[str] = None
    presentationSubtitle: Optional[str] = None
    slides: List[SlidePayload] = Field(min_length=1)


def is_eligible_prompt(prompt: Optional[str]) -> bool:
    """Whether ``prompt`` is worth sending to the image model."""

    if not prompt:
        return False
    text = prompt.strip()
    return len(text) > MIN_IMAGE_PROMPT_LENGTH and text.lower() != "n/a"


class SlideContentGenerator:
    """Generate the text of a whole presentation via structured LLM output."""

    def __init__(
        self,
        llm_client,
        *,
        model_name: Optional[str] = None,
        max_context_chars: int = 5000,
    ) -> None:
        self.llm_client = llm_client
        self.model_name = model_name
        self.max_context_chars = max_context_chars

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def generate(
        self,
        topic: str,
        context: str,
        slide_count: int,
        style_name: str,
    ) -> GeneratedPresentation:
        """Return the presentation text for ``topic``.

        Raises :class:`GenerationError` when the client fails or the output
        cannot be parsed into ``slide_count`` slides.
        """

        if self.llm_client is None:
            raise GenerationError("LLM client is required to generate slides")

        request = create_structured_output_request(
            self._build_prompt(topic, context, slide_count, style_name),
            self._build_schema(),
            "presentation",
            model_name=self.model_name,
            instructions="Return only JSON matching the schema.",
        )
        try:
            response = await self.llm_client.generate_structured_output(request)
        except Exception as exc:
            raise GenerationError(
                f"Content generation request failed: {exc}", original_error=exc
            ) from exc

        parsed = self._extract_parsed_output(response)
        if parsed is None:
            raise GenerationError("Failed to parse generation result")

        try:
            payload = PresentationPayload.model_validate(parsed)
        except PydanticValidationError as exc:
            raise GenerationError(
                f"Generation result does not match the schema: {exc}", original_error=exc
            ) from exc

        if len(payload.slides) < slide_count:
            raise GenerationError(
                f"Expected {slide_count} slides but received {len(payload.slides)}"
            )
        if len(payload.slides) > slide_count:
            LOGGER.info(
                "Truncating %s generated slides to the requested %s",
                len(payload.slides),
                slide_count,
            )

        slides = [
            GeneratedSlide(
                layout=item.type,
                title=item.title,
                content=tuple(sanitize_markup(point) for point in item.content or []),
                speaker_notes=item.speakerNotes or "",
                image_prompt=item.imagePrompt,
            )
            for item in payload.slides[:slide_count]
        ]
        return GeneratedPresentation(
            title=payload.presentationTitle,
            subtitle=payload.presentationSubtitle,
            slides=slides,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_prompt(
        self, topic: str, context: str, slide_count: int, style_name: str
    ) -> str:
        prompt_sections = [
            "You are a professional presentation designer.",
            f'Create a PowerPoint presentation about: "{topic}".',
        ]
        if context:
            prompt_sections.extend(
                [
                    "",
                    "[Context and details]",
                    _truncate_text(context, self.max_context_chars),
                ]
            )
        prompt_sections.extend(
            [
                "",
                f"The presentation must have exactly {slide_count} slides.",
                f'The visual theme will be "{style_name}", so write content that fits this tone.',
                "",
                "Structure:",
                "1. Title slide (intro)",
                "2. Introduction / agenda",
                "3. Main content slides, broken down logically",
                "4. Conclusion / summary",
                "",
                "For each slide provide:",
                "- type: 'title', 'content', 'section' or 'conclusion'",
                "- title: the headline of the slide",
                "- content: 4-6 short bullet points",
                "- speakerNotes: a short paragraph for the presenter",
                (
                    "- imagePrompt: a detailed visual description of a professional image for"
                    " this slide (scene, objects, lighting, style). Describe the picture directly,"
                    ' without phrases like "Create an image of".'
                ),
            ]
        )
        return "\n".join(prompt_sections)

    def _build_schema(self) -> Dict[str, object]:
        return {
            "type": "object",
            "properties": {
                "presentationTitle": {"type": "string"},
                "presentationSubtitle": {"type": "string"},
                "slides": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "type": {
                                "type": "string",
                                "enum": [layout.value for layout in SlideLayout],
                            },
                            "title": {"type": "string"},
                            "content": {
                                "type": "array",
                                "items": {"type": "string"},
                            },
                            "speakerNotes": {"type": "string"},
                            "imagePrompt": {
                                "type": "string",
                                "description": "Visual description for generating an image.",
                            },
                        },
                        "required": ["type", "title", "content", "imagePrompt"],
                    },
                },
            },
            "required": ["presentationTitle", "slides"],
        }

    def _extract_parsed_output(
        self, response: StructuredOutputResponse
    ) -> Optional[Dict[str, Any]]:
        if response is None:
            return None
        if response.error:
            LOGGER.warning("Structured output error: %s", response.error)
            return None
        if isinstance(response.parsed_output, dict):
            return response.parsed_output
        if response.text:
            parsed = _parse_json_object(response.text)
            if parsed is not None:
                return parsed
            LOGGER.debug("Failed to parse structured output text: %s", response.text)
        if response.validation_error:
            LOGGER.warning("Validation error: %s", response.validation_error)
        return None


class SlideImageGenerator:
    """Turn an image prompt into a ``data:`` URI via the LLM client."""

    def __init__(
        self,
        llm_client,
        *,
        model_name: Optional[str] = None,
        aspect_ratio: str = "4:3",
    ) -> None:
        self.llm_client = llm_client
        self.model_name = model_name
        self.aspect_ratio = aspect_ratio

    async def generate(self, image_prompt: Optional[str]) -> Optional[str]:
        """Return the image for ``image_prompt`` or None when there is none.

        Raises :class:`ImageGenerationError` when the provider call fails.
        """

        if not is_eligible_prompt(image_prompt):
            return None

        request = create_image_generation_request(
            image_prompt.strip(),
            aspect_ratio=self.aspect_ratio,
            model_name=self.model_name,
        )
        try:
            response = await self.llm_client.generate_image(request)
        except Exception as exc:
            raise ImageGenerationError(
                f"Image request failed: {exc}", original_error=exc
            ) from exc

        if response.error:
            raise ImageGenerationError(response.error)
        if not response.has_image:
            LOGGER.warning(
                "Image generation returned no image data for prompt: %r",
                _truncate_text(image_prompt, 30),
            )
            return None
        return response.data_uri


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _parse_json_object(text: str) -> Optional[Dict[str, Any]]:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    try:
        parsed = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def _truncate_text(text: Optional[str], limit: int) -> str:
    if text is None:
        return ""
    text = text.strip()
    if len(text) <= limit:
        return text
    return textwrap.shorten(text, width=limit, placeholder="…")
