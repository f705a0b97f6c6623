"""Offline LLM client used when no Gemini API key is configured."""

from __future__ import annotations

import asyncio
import base64
import re
from typing import Any, Dict, List, Optional

from LLM_API.data_classes import (
    ImageGenerationRequest,
    ImageGenerationResponse,
    StructuredOutputRequest,
    StructuredOutputResponse,
)

# 1x1 PNG, enough for previews and for python-pptx to embed.
DEMO_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)

_TOPIC_PATTERN = re.compile(r'about: "(?P<topic>.*?)"')
_COUNT_PATTERN = re.compile(r"exactly (?P<count>\d+) slides")


class DemoSlideLLM:
    """Deterministic stand-in for a structured-output and image model."""

    model_name = "demo-structured"

    def __init__(self, *, image_delay: float = 0.0, default_slide_count: int = 5) -> None:
        self.image_delay = image_delay
        self.default_slide_count = default_slide_count
        self.structured_requests: List[StructuredOutputRequest] = []
        self.image_requests: List[ImageGenerationRequest] = []

    async def generate_structured_output(
        self, request: StructuredOutputRequest
    ) -> StructuredOutputResponse:
        self.structured_requests.append(request)
        topic = _match(_TOPIC_PATTERN, request.prompt, "topic") or "Your Topic"
        count_text = _match(_COUNT_PATTERN, request.prompt, "count")
        count = int(count_text) if count_text else self.default_slide_count
        payload = build_demo_outline(topic, count)
        return StructuredOutputResponse(
            parsed_output=payload,
            model_used=self.model_name,
        )

    async def generate_image(self, request: ImageGenerationRequest) -> ImageGenerationResponse:
        self.image_requests.append(request)
        if self.image_delay:
            await asyncio.sleep(self.image_delay)
        return ImageGenerationResponse(
            image_bytes=DEMO_PNG,
            mime_type="image/png",
            model_used="demo-image",
        )


def build_demo_outline(topic: str, slide_count: int) -> Dict[str, Any]:
    """Return a presentation payload with ``slide_count`` slides about ``topic``."""

    slides: List[Dict[str, Any]] = [
        {
            "type": "title",
            "title": topic,
            "content": [],
            "speakerNotes": f"Welcome everyone. Today we talk about {topic}.",
            "imagePrompt": f"A wide cinematic establishing shot representing {topic}, soft light",
        }
    ]
    for index in range(1, max(slide_count - 1, 0)):
        slides.append(
            {
                "type": "section" if index == 1 else "content",
                "title": "Agenda" if index == 1 else f"{topic}: key point {index - 1}",
                "content": [
                    f"<b>Point {index}.1</b> about {topic}",
                    f"Supporting detail {index}.2",
                    f"<i>Example</i> {index}.3",
                    f"Takeaway {index}.4",
                ],
                "speakerNotes": f"Explain point {index} in a couple of sentences.",
                "imagePrompt": f"An illustration of {topic}, detail {index}, clean flat style",
            }
        )
    if slide_count > 1:
        slides.append(
            {
                "type": "conclusion",
                "title": "Summary",
                "content": [
                    f"{topic} matters",
                    "Recap of the key points",
                    "Questions?",
                ],
                "speakerNotes": "Thank the audience and open the floor for questions.",
                "imagePrompt": "n/a",
            }
        )
    return {
        "presentationTitle": topic,
        "presentationSubtitle": "Generated in demo mode",
        "slides": slides[:slide_count],
    }


def _match(pattern: re.Pattern, text: str, group: str) -> Optional[str]:
    found = pattern.search(text or "")
    return found.group(group) if found else None


__all__ = ["DEMO_PNG", "DemoSlideLLM", "build_demo_outline"]
