"""AI slide generation: content first, images in the background, editable meanwhile."""

from .config import SlideGenConfig, configure_logging
from .constants import THEMES, TRANSITION_OPTIONS
from .coordinator import RequestCoordinator
from .document_store import DocumentStore, StoreEvent, StoreEventKind
from .edit_session import BulletSurface, EditSession
from .exceptions import (
    ExportError,
    ExtractionError,
    GenerationError,
    ImageGenerationError,
    SlideGenError,
    ValidationError,
)
from .image_scheduler import ImageFanoutScheduler, ImageTaskOutcome
from .markup import FormatState, TextFormat, TextSelection
from .playback import PlaybackController
from .pptx_renderer import SlideDeckRenderer
from .session import PresentationSession, build_llm_client
from .slide_generation import SlideContentGenerator, SlideImageGenerator
from .slide_models import (
    PresentationDocument,
    Slide,
    SlideLayout,
    Theme,
    ThemeId,
    TransitionType,
)

__all__ = [
    "BulletSurface",
    "DocumentStore",
    "EditSession",
    "ExportError",
    "ExtractionError",
    "FormatState",
    "GenerationError",
    "ImageFanoutScheduler",
    "ImageGenerationError",
    "ImageTaskOutcome",
    "PlaybackController",
    "PresentationDocument",
    "PresentationSession",
    "RequestCoordinator",
    "Slide",
    "SlideContentGenerator",
    "SlideDeckRenderer",
    "SlideGenConfig",
    "SlideGenError",
    "SlideImageGenerator",
    "SlideLayout",
    "StoreEvent",
    "StoreEventKind",
    "TextFormat",
    "TextSelection",
    "THEMES",
    "TRANSITION_OPTIONS",
    "Theme",
    "ThemeId",
    "TransitionType",
    "ValidationError",
    "build_llm_client",
    "configure_logging",
]
