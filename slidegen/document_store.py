"""The single owner of the live presentation document."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from .slide_models import PresentationDocument, Slide

LOGGER = logging.getLogger(__name__)


class StoreEventKind(str, Enum):
    REPLACED = "replaced"
    CLEARED = "cleared"
    SLIDE_UPDATED = "slide_updated"
    SLIDE_DELETED = "slide_deleted"
    SLIDE_MOVED = "slide_moved"
    IMAGE_MERGED = "image_merged"


@dataclass(frozen=True)
class StoreEvent:
    kind: StoreEventKind
    epoch: int
    slide_id: Optional[str] = None


Observer = Callable[[StoreEvent], None]
SlideMutator = Callable[[Slide], Slide]


class DocumentStore:
    """Hold the current :class:`PresentationDocument` and apply every mutation.

    Every full replacement (including :meth:`clear`) bumps ``epoch``. Work
    started against an older epoch can then be recognised and discarded when
    it tries to write back. All mutators run to completion without awaiting,
    so on a single event loop each one is atomic.
    """

    def __init__(self) -> None:
        self._document: Optional[PresentationDocument] = None
        self._epoch = 0
        self._observers: List[Observer] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def document(self) -> Optional[PresentationDocument]:
        return self._document

    @property
    def epoch(self) -> int:
        return self._epoch

    def get_slide(self, slide_id: str) -> Optional[Slide]:
        if self._document is None:
            return None
        return self._document.get_slide(slide_id)

    def slide_ids(self) -> List[str]:
        if self._document is None:
            return []
        return self._document.slide_ids()

    # ------------------------------------------------------------------
    # Whole-document operations
    # ------------------------------------------------------------------
    def replace(self, document: PresentationDocument) -> int:
        """Swap in ``document`` and return the new epoch."""

        _check_identities(document)
        self._document = document
        self._epoch += 1
        LOGGER.debug(
            "Document replaced at epoch %s (%s slides)", self._epoch, len(document.slides)
        )
        self._notify(StoreEventKind.REPLACED)
        return self._epoch

    def clear(self) -> int:
        """Drop the current document. Counts as a replacement for epoch purposes."""

        self._document = None
        self._epoch += 1
        self._notify(StoreEventKind.CLEARED)
        return self._epoch

    # ------------------------------------------------------------------
    # Slide-level operations
    # ------------------------------------------------------------------
    def update_slide(self, slide_id: str, mutator: SlideMutator) -> bool:
        """Replace the slide ``slide_id`` with ``mutator(slide)``."""

        index = self._index_of(slide_id)
        if index is None:
            return False

        current = self._document.slides[index]
        updated = mutator(current)
        if updated.id != current.id:
            raise ValueError(
                f"Slide mutator changed identity {current.id!r} -> {updated.id!r}"
            )
        self._document.slides[index] = updated
        self._notify(StoreEventKind.SLIDE_UPDATED, slide_id)
        return True

    def delete_slide(self, slide_id: str) -> bool:
        index = self._index_of(slide_id)
        if index is None:
            return False
        del self._document.slides[index]
        self._notify(StoreEventKind.SLIDE_DELETED, slide_id)
        return True

    def move_slide(self, slide_id: str, position: int) -> bool:
        """Move ``slide_id`` to ``position`` (clamped), keeping the others in order."""

        index = self._index_of(slide_id)
        if index is None:
            return False
        slides = self._document.slides
        position = max(0, min(position, len(slides) - 1))
        if position != index:
            slides.insert(position, slides.pop(index))
            self._notify(StoreEventKind.SLIDE_MOVED, slide_id)
        return True

    def merge_image(self, slide_id: str, payload: str, epoch: int) -> bool:
        """Attach ``payload`` to ``slide_id`` if the result is still current.

        The merge is skipped when ``epoch`` is stale, when the slide no longer
        exists, or when the slide already has an image for this epoch.
        """

        if epoch != self._epoch:
            LOGGER.debug(
                "Discarding image for %s: epoch %s is stale (current %s)",
                slide_id,
                epoch,
                self._epoch,
            )
            return False
        index = self._index_of(slide_id)
        if index is None:
            LOGGER.debug("Discarding image for %s: slide no longer exists", slide_id)
            return False

        current = self._document.slides[index]
        if current.image_asset is not None:
            return False
        self._document.slides[index] = replace(current, image_asset=payload)
        self._notify(StoreEventKind.IMAGE_MERGED, slide_id)
        return True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register ``observer`` and return a callable that unregisters it."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _index_of(self, slide_id: str) -> Optional[int]:
        if self._document is None:
            return None
        return self._document.index_of(slide_id)

    def _notify(self, kind: StoreEventKind, slide_id: Optional[str] = None) -> None:
        event = StoreEvent(kind=kind, epoch=self._epoch, slide_id=slide_id)
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                LOGGER.exception("Document observer failed on %s", kind.value)


def _check_identities(document: PresentationDocument) -> None:
    seen = set()
    for slide in document.slides:
        if not slide.id:
            raise ValueError("Every slide needs a non-empty id")
        if slide.id in seen:
            raise ValueError(f"Duplicate slide id: {slide.id}")
        seen.add(slide.id)
