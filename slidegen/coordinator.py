"""Top-level entry point that runs a two-phase presentation generation."""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence

from .constants import (
    DEFAULT_PRESENTATION_TITLE,
    DEFAULT_SLIDE_COUNT,
    DEFAULT_THEME_ID,
    DEFAULT_TRANSITION,
    EXPORT_FAILURE_MESSAGE,
    GENERATION_FAILURE_MESSAGE,
    MISSING_INPUT_MESSAGE,
    SLIDE_COUNT_OPTIONS,
    THEMES,
    TRANSITION_OPTIONS,
    get_theme,
)
from .document_store import DocumentStore
from .exceptions import ExportError, GenerationError, ValidationError
from .image_scheduler import ImageFanoutScheduler
from .slide_generation import SlideContentGenerator
from .slide_models import (
    GeneratedPresentation,
    GenerationSettings,
    PresentationDocument,
    Theme,
    TransitionType,
    new_slide_id,
)

LOGGER = logging.getLogger(__name__)


class RequestCoordinator:
    """Validate a request, generate text, commit it, then start the images.

    Overlapping calls are resolved by superseding: every call takes a ticket
    and only the holder of the newest ticket may commit. An older call that
    finishes later drops its result silently.
    """

    def __init__(
        self,
        store: DocumentStore,
        content_generator: SlideContentGenerator,
        image_scheduler: ImageFanoutScheduler,
        *,
        themes: Sequence[Theme] = THEMES,
        transitions: Sequence[TransitionType] = tuple(value for _, value in TRANSITION_OPTIONS),
        slide_count_options: Sequence[int] = SLIDE_COUNT_OPTIONS,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.content_generator = content_generator
        self.image_scheduler = image_scheduler
        self.themes = list(themes)
        self.transitions = list(transitions)
        self.slide_count_options = tuple(slide_count_options)
        self.rng = rng or random.Random()
        self.settings = GenerationSettings(
            slide_count=DEFAULT_SLIDE_COUNT,
            theme_id=DEFAULT_THEME_ID,
            transition=DEFAULT_TRANSITION,
        )
        self.error: Optional[str] = None
        self._ticket = 0
        self._in_flight: Optional[int] = None

    @property
    def is_generating(self) -> bool:
        return self._in_flight is not None

    @property
    def theme(self) -> Theme:
        return next(
            (theme for theme in self.themes if theme.id == self.settings.theme_id),
            get_theme(self.settings.theme_id),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def generate(self, topic: str, description: str, slide_count: int) -> None:
        """Generate a new presentation, replacing the current one.

        Raises :class:`ValidationError` before any external call when the
        input is unusable and :class:`GenerationError` when phase 1 fails.
        Image generation keeps running after this coroutine returns.
        """

        topic = (topic or "").strip()
        description = (description or "").strip()
        if not topic and not description:
            self.error = MISSING_INPUT_MESSAGE
            raise ValidationError(MISSING_INPUT_MESSAGE)
        if slide_count not in self.slide_count_options:
            message = (
                f"Slide count must be one of {', '.join(map(str, self.slide_count_options))}."
            )
            self.error = message
            raise ValidationError(message)

        self._ticket += 1
        ticket = self._ticket
        self._in_flight = ticket

        self.store.clear()
        self.error = None

        theme = self.rng.choice(self.themes)
        transition = self.rng.choice(self.transitions)
        self.settings = GenerationSettings(
            slide_count=slide_count, theme_id=theme.id, transition=transition
        )
        LOGGER.info(
            "Generating %s slides for %r (theme=%s, transition=%s)",
            slide_count,
            topic,
            theme.name,
            transition.value,
        )

        try:
            generated = await self.content_generator.generate(
                topic, description, slide_count, theme.name
            )
        except Exception as exc:
            if ticket != self._ticket:
                LOGGER.info("Ignoring failure of superseded generation: %s", exc)
                return
            self._in_flight = None
            self.error = GENERATION_FAILURE_MESSAGE
            LOGGER.error("Presentation generation failed: %s", exc)
            raise GenerationError(GENERATION_FAILURE_MESSAGE, original_error=exc) from exc

        if ticket != self._ticket:
            LOGGER.info("Discarding result of superseded generation for %r", topic)
            return

        self._in_flight = None
        document = _build_document(generated, topic)
        epoch = self.store.replace(document)
        self.image_scheduler.dispatch(list(document.slides), epoch)

    def reset(self) -> None:
        """Forget the current document and error, as for a new project."""

        self._ticket += 1
        self._in_flight = None
        self.store.clear()
        self.error = None

    def export_document(self, renderer_factory) -> bytes:
        """Render the committed document with the current theme and transition.

        ``renderer_factory`` is called with ``(theme, transition)`` and must
        return an object with ``render_document(document)``.
        """

        document = self.store.document
        try:
            if document is None:
                raise ExportError("There is no presentation to export")
            renderer = renderer_factory(self.theme, self.settings.transition)
            data = renderer.render_document(document).getvalue()
        except ExportError as exc:
            self.error = EXPORT_FAILURE_MESSAGE
            LOGGER.error("Export failed: %s", exc)
            raise
        if self.error == EXPORT_FAILURE_MESSAGE:
            self.error = None
        return data


def _build_document(generated: GeneratedPresentation, topic: str) -> PresentationDocument:
    return PresentationDocument(
        title=generated.title or topic or DEFAULT_PRESENTATION_TITLE,
        subtitle=generated.subtitle or "",
        slides=[item.to_slide(new_slide_id()) for item in generated.slides],
    )
