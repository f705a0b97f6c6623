"""Error taxonomy for the slide generation pipeline."""

from __future__ import annotations

from typing import Optional


class SlideGenError(Exception):
    """Base exception for every user- or log-facing pipeline failure."""

    def __init__(self, message: str, *, original_error: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        return self.message


class ValidationError(SlideGenError):
    """User input cannot start a generation (nothing was called)."""


class GenerationError(SlideGenError):
    """The content generator failed or returned an unusable structure."""


class ImageGenerationError(SlideGenError):
    """A single slide image could not be produced. Never shown to the user."""


class ExtractionError(SlideGenError):
    """An uploaded document could not be turned into text."""


class ExportError(SlideGenError):
    """The document could not be serialised into a deck."""
