"""Linear review of the committed document."""

from __future__ import annotations

from typing import Optional

from .document_store import DocumentStore
from .slide_models import Slide


class PlaybackController:
    """A cursor over the store's slides, clamped to ``[0, slide_count - 1]``."""

    NEXT_KEYS = ("ArrowRight", "Space", " ")
    PREV_KEYS = ("ArrowLeft",)
    EXIT_KEYS = ("Escape",)

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.is_playing = False
        self._cursor = 0

    @property
    def slide_count(self) -> int:
        return len(self.store.slide_ids())

    @property
    def cursor(self) -> int:
        # Slides may have been deleted since the last move.
        return max(0, min(self._cursor, self.slide_count - 1))

    def start(self) -> int:
        self._cursor = 0
        self.is_playing = self.slide_count > 0
        return self.cursor

    def next(self) -> int:
        self._cursor = min(self.cursor + 1, max(self.slide_count - 1, 0))
        return self._cursor

    def prev(self) -> int:
        self._cursor = max(self.cursor - 1, 0)
        return self._cursor

    def exit(self) -> None:
        self.is_playing = False

    def handle_key(self, key: str) -> Optional[int]:
        """Apply a keyboard shortcut; return the index, or None after exiting."""

        if not self.is_playing:
            return None
        if key in self.NEXT_KEYS:
            return self.next()
        if key in self.PREV_KEYS:
            return self.prev()
        if key in self.EXIT_KEYS:
            self.exit()
            return None
        return self.cursor

    def current_slide(self) -> Optional[Slide]:
        document = self.store.document
        if document is None or not document.slides:
            return None
        return document.slides[self.cursor]
