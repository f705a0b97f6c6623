"""Data models representing a generated presentation and its styling."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class SlideLayout(str, Enum):
    TITLE = "title"
    CONTENT = "content"
    SECTION = "section"
    CONCLUSION = "conclusion"


class TransitionType(str, Enum):
    NONE = "none"
    FADE = "fade"
    PUSH = "push"
    WIPE = "wipe"
    COVER = "cover"
    UNCOVER = "uncover"


class ThemeId(str, Enum):
    MODERN_BLUE = "modern-blue"
    MINIMAL_DARK = "minimal-dark"
    ELEGANT_PURPLE = "elegant-purple"
    CORPORATE_GRAY = "corporate-gray"


def new_slide_id() -> str:
    """Return a fresh opaque slide identity."""

    return f"slide-{uuid.uuid4().hex}"


@dataclass(frozen=True, slots=True)
class Slide:
    """A single slide. Edits produce a new value via :func:`dataclasses.replace`."""

    id: str
    layout: SlideLayout
    title: str
    content: Tuple[str, ...] = ()
    speaker_notes: str = ""
    transition: Optional[TransitionType] = None
    image_prompt: Optional[str] = None
    image_asset: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.layout.value,
            "title": self.title,
            "content": list(self.content),
            "speakerNotes": self.speaker_notes,
            "transition": self.transition.value if self.transition else None,
            "imagePrompt": self.image_prompt,
            "imageData": self.image_asset,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Slide":
        transition = data.get("transition")
        return cls(
            id=data.get("id", ""),
            layout=SlideLayout(data.get("type", SlideLayout.CONTENT.value)),
            title=data.get("title", ""),
            content=tuple(data.get("content") or ()),
            speaker_notes=data.get("speakerNotes") or "",
            transition=TransitionType(transition) if transition else None,
            image_prompt=data.get("imagePrompt"),
            image_asset=data.get("imageData"),
        )


@dataclass(slots=True)
class PresentationDocument:
    """Container for all slides that compose the current deck."""

    title: str
    subtitle: str = ""
    slides: List[Slide] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "subtitle": self.subtitle,
            "slides": [slide.to_dict() for slide in self.slides],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PresentationDocument":
        return cls(
            title=data.get("title", ""),
            subtitle=data.get("subtitle") or "",
            slides=[Slide.from_dict(item) for item in data.get("slides", [])],
        )

    def get_slide(self, slide_id: str) -> Optional[Slide]:
        return next((slide for slide in self.slides if slide.id == slide_id), None)

    def index_of(self, slide_id: str) -> Optional[int]:
        return next(
            (idx for idx, slide in enumerate(self.slides) if slide.id == slide_id),
            None,
        )

    def slide_ids(self) -> List[str]:
        return [slide.id for slide in self.slides]


@dataclass(frozen=True, slots=True)
class ThemeColors:
    background: str
    text: str
    primary: str
    secondary: str
    accent: str


@dataclass(frozen=True, slots=True)
class ThemeFonts:
    heading: str
    body: str


@dataclass(frozen=True, slots=True)
class Theme:
    """A visual style from the theme catalog."""

    id: ThemeId
    name: str
    colors: ThemeColors
    fonts: ThemeFonts


@dataclass(slots=True)
class GenerationSettings:
    """Options picked before (or during) a generation and reused on export."""

    slide_count: int
    theme_id: ThemeId
    transition: TransitionType


@dataclass(frozen=True, slots=True)
class GeneratedSlide:
    """A slide as returned by the content generator, before it gets an identity."""

    layout: SlideLayout
    title: str
    content: Tuple[str, ...] = ()
    speaker_notes: str = ""
    image_prompt: Optional[str] = None

    def to_slide(self, slide_id: str) -> Slide:
        return Slide(
            id=slide_id,
            layout=self.layout,
            title=self.title,
            content=self.content,
            speaker_notes=self.speaker_notes,
            image_prompt=self.image_prompt,
        )


@dataclass(frozen=True, slots=True)
class GeneratedPresentation:
    """Phase-1 output: presentation text with no identities assigned yet."""

    title: Optional[str]
    subtitle: Optional[str]
    slides: Sequence[GeneratedSlide]
