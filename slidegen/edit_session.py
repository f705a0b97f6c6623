"""Synchronous user edits applied to the live document."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Protocol

from .constants import DEFAULT_BULLET_TEXT
from .document_store import DocumentStore
from .markup import (
    FormatState,
    TextFormat,
    TextSelection,
    active_formats,
    sanitize_markup,
    toggle_format,
)
from .slide_models import Slide, TransitionType


class RichTextSurface(Protocol):
    """An editable region: its current markup and the user's selection in it."""

    def current_markup(self) -> str:
        ...

    def current_selection(self) -> Optional[TextSelection]:
        ...


@dataclass
class BulletSurface:
    """A :class:`RichTextSurface` over one bullet of one slide in a store."""

    store: DocumentStore
    slide_id: str
    bullet_index: int
    selection: Optional[TextSelection] = None

    def current_markup(self) -> str:
        slide = self.store.get_slide(self.slide_id)
        if slide is None or not 0 <= self.bullet_index < len(slide.content):
            return ""
        return slide.content[self.bullet_index]

    def current_selection(self) -> Optional[TextSelection]:
        return self.selection

    def select(self, start: int, end: int) -> None:
        self.selection = TextSelection(start, end)


class EditSession:
    """User-driven slide edits.

    Every method delegates to :meth:`DocumentStore.update_slide` (or another
    store mutator) and returns whether the slide still existed. Bullet
    indices that are out of range raise :class:`IndexError`.
    """

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Text edits
    # ------------------------------------------------------------------
    def set_title(self, slide_id: str, text: str) -> bool:
        return self.store.update_slide(slide_id, lambda slide: replace(slide, title=text))

    def set_speaker_notes(self, slide_id: str, text: str) -> bool:
        return self.store.update_slide(
            slide_id, lambda slide: replace(slide, speaker_notes=text)
        )

    def set_bullet_text(self, slide_id: str, bullet_index: int, markup: str) -> bool:
        clean = sanitize_markup(markup)

        def mutate(slide: Slide) -> Slide:
            content = list(slide.content)
            _check_index(content, bullet_index)
            content[bullet_index] = clean
            return replace(slide, content=tuple(content))

        return self.store.update_slide(slide_id, mutate)

    def add_bullet(
        self,
        slide_id: str,
        text: str = DEFAULT_BULLET_TEXT,
        index: Optional[int] = None,
    ) -> Optional[int]:
        """Insert a bullet (appended by default) and return its index."""

        clean = sanitize_markup(text)
        inserted = {}

        def mutate(slide: Slide) -> Slide:
            content = list(slide.content)
            position = len(content) if index is None else index
            if not 0 <= position <= len(content):
                raise IndexError(f"Bullet index {position} out of range")
            content.insert(position, clean)
            inserted["index"] = position
            return replace(slide, content=tuple(content))

        if not self.store.update_slide(slide_id, mutate):
            return None
        return inserted["index"]

    def remove_bullet(self, slide_id: str, bullet_index: int) -> bool:
        def mutate(slide: Slide) -> Slide:
            content = list(slide.content)
            _check_index(content, bullet_index)
            del content[bullet_index]
            return replace(slide, content=tuple(content))

        return self.store.update_slide(slide_id, mutate)

    def set_transition(self, slide_id: str, transition: Optional[TransitionType]) -> bool:
        value = TransitionType(transition) if transition is not None else None
        return self.store.update_slide(
            slide_id, lambda slide: replace(slide, transition=value)
        )

    # ------------------------------------------------------------------
    # Structure edits
    # ------------------------------------------------------------------
    def delete_slide(self, slide_id: str) -> bool:
        return self.store.delete_slide(slide_id)

    def move_slide(self, slide_id: str, position: int) -> bool:
        return self.store.move_slide(slide_id, position)

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------
    def format_state(self, surface: RichTextSurface) -> FormatState:
        """Derive bold/italic/underline state for the surface's selection."""

        return active_formats(surface.current_markup(), surface.current_selection())

    def toggle_format(self, surface: BulletSurface, text_format: TextFormat) -> FormatState:
        """Toggle ``text_format`` over the surface selection and re-derive state."""

        slide = self.store.get_slide(surface.slide_id)
        if slide is None or not 0 <= surface.bullet_index < len(slide.content):
            return self.format_state(surface)
        selection = surface.current_selection()
        if selection is not None:
            markup = toggle_format(surface.current_markup(), selection, text_format)
            self.set_bullet_text(surface.slide_id, surface.bullet_index, markup)
        return self.format_state(surface)


def _check_index(content: list, bullet_index: int) -> None:
    if not 0 <= bullet_index < len(content):
        raise IndexError(f"Bullet index {bullet_index} out of range")
