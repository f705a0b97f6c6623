"""Wiring of one user's generation pipeline."""

from __future__ import annotations

import logging
import random
from typing import Optional, Tuple

from .config import SlideGenConfig
from .constants import MAX_CHAR_COUNT
from .coordinator import RequestCoordinator
from .demo_llm import DemoSlideLLM
from .document_store import DocumentStore, StoreEvent, StoreEventKind
from .edit_session import EditSession
from .image_scheduler import ImageFanoutScheduler
from .playback import PlaybackController
from .pptx_renderer import SlideDeckRenderer
from .slide_generation import SlideContentGenerator, SlideImageGenerator

LOGGER = logging.getLogger(__name__)


def build_llm_client(config: SlideGenConfig, *, demo: bool = False):
    """Return a Gemini client, or the offline demo client when asked or keyless."""

    if demo or not config.gemini_api_key:
        LOGGER.info("Using the offline demo LLM client")
        return DemoSlideLLM()

    from LLM_API.providers import GeminiModel

    return GeminiModel(
        api_key=config.gemini_api_key,
        model_name=config.text_model,
        image_model_name=config.image_model,
    )


class PresentationSession:
    """Everything one editor needs: store, pipeline, edits and playback.

    All methods must run on the same event loop thread; see
    :class:`slidegen.runtime.BackgroundLoop` for synchronous hosts.
    """

    def __init__(
        self,
        llm_client,
        config: Optional[SlideGenConfig] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config or SlideGenConfig()
        self.llm_client = llm_client
        self.store = DocumentStore()
        self.content_generator = SlideContentGenerator(
            llm_client,
            model_name=self.config.text_model,
            max_context_chars=MAX_CHAR_COUNT,
        )
        self.image_generator = SlideImageGenerator(
            llm_client,
            model_name=self.config.image_model,
            aspect_ratio=self.config.image_aspect_ratio,
        )
        self.image_scheduler = ImageFanoutScheduler(
            self.store,
            self.image_generator,
            max_concurrency=self.config.max_image_concurrency,
        )
        self.coordinator = RequestCoordinator(
            self.store,
            self.content_generator,
            self.image_scheduler,
            rng=rng,
        )
        self.editor = EditSession(self.store)
        self.playback = PlaybackController(self.store)
        self.revision = 0
        self.images_merged = 0
        self._export_cache: Optional[Tuple[int, bytes]] = None
        self.store.subscribe(self._on_store_event)

    @classmethod
    def from_config(
        cls, config: SlideGenConfig, *, demo: bool = False, rng: Optional[random.Random] = None
    ) -> "PresentationSession":
        return cls(build_llm_client(config, demo=demo), config, rng=rng)

    @property
    def document(self):
        return self.store.document

    @property
    def error(self) -> Optional[str]:
        return self.coordinator.error

    @property
    def pending_images(self) -> int:
        return self.image_scheduler.pending

    async def generate(self, topic: str, description: str, slide_count: int) -> None:
        self.playback.exit()
        await self.coordinator.generate(topic, description, slide_count)

    async def wait_for_images(self) -> None:
        await self.image_scheduler.drain()

    def reset(self) -> None:
        self.playback.exit()
        self.coordinator.reset()

    def export_pptx(self) -> bytes:
        """Render the document, reusing the last rendering while nothing changed."""

        if self._export_cache is not None and self._export_cache[0] == self.revision:
            return self._export_cache[1]
        data = self.coordinator.export_document(SlideDeckRenderer)
        self._export_cache = (self.revision, data)
        return data

    def _on_store_event(self, event: StoreEvent) -> None:
        self.revision += 1
        if event.kind is StoreEventKind.IMAGE_MERGED:
            self.images_merged += 1
