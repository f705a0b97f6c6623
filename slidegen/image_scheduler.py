"""Background fan-out of per-slide image generation."""

from __future__ import annotations

import asyncio
import logging
from contextlib import nullcontext
from enum import Enum
from typing import List, Optional, Sequence, Set

from .document_store import DocumentStore
from .exceptions import ImageGenerationError
from .slide_generation import SlideImageGenerator, is_eligible_prompt
from .slide_models import Slide

LOGGER = logging.getLogger(__name__)


class ImageTaskOutcome(str, Enum):
    MERGED = "merged"
    DISCARDED = "discarded"
    EMPTY = "empty"
    FAILED = "failed"


class ImageFanoutScheduler:
    """Launch one image task per eligible slide and merge results as they land.

    Tasks are never cancelled. A result is applied only if its slide still
    exists and the document has not been replaced since dispatch; both checks
    happen inside :meth:`DocumentStore.merge_image`.
    """

    def __init__(
        self,
        store: DocumentStore,
        image_generator: SlideImageGenerator,
        *,
        max_concurrency: Optional[int] = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store
        self.image_generator = image_generator
        self.max_concurrency = max_concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, slides: Sequence[Slide], epoch: int) -> List[asyncio.Task]:
        """Start image tasks for ``slides`` under ``epoch`` without awaiting them.

        Must be called from a running event loop.
        """

        tasks: List[asyncio.Task] = []
        for slide in slides:
            if not is_eligible_prompt(slide.image_prompt):
                continue
            task = asyncio.create_task(
                self._render_slide_image(slide.id, slide.image_prompt, epoch),
                name=f"slide-image:{slide.id}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)
        LOGGER.info(
            "Dispatched %s image tasks for epoch %s (%s slides)",
            len(tasks),
            epoch,
            len(slides),
        )
        return tasks

    async def drain(self) -> None:
        """Wait until every outstanding image task has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _render_slide_image(
        self, slide_id: str, image_prompt: str, epoch: int
    ) -> ImageTaskOutcome:
        try:
            async with self._limit():
                payload = await self.image_generator.generate(image_prompt)
        except ImageGenerationError as exc:
            LOGGER.warning("Failed to generate image for slide %s: %s", slide_id, exc)
            return ImageTaskOutcome.FAILED
        except Exception:
            LOGGER.warning(
                "Unexpected error generating image for slide %s", slide_id, exc_info=True
            )
            return ImageTaskOutcome.FAILED

        if not payload:
            LOGGER.warning("No image produced for slide %s", slide_id)
            return ImageTaskOutcome.EMPTY

        if self.store.merge_image(slide_id, payload, epoch):
            return ImageTaskOutcome.MERGED
        return ImageTaskOutcome.DISCARDED

    def _limit(self):
        if self.max_concurrency is None:
            return nullcontext()
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        return self._semaphore
