import asyncio
import io
import random

import pytest

from slidegen.constants import (
    EXPORT_FAILURE_MESSAGE,
    GENERATION_FAILURE_MESSAGE,
    MISSING_INPUT_MESSAGE,
    THEMES,
)
from slidegen.coordinator import RequestCoordinator
from slidegen.document_store import DocumentStore
from slidegen.exceptions import ExportError, GenerationError, ValidationError
from slidegen.image_scheduler import ImageFanoutScheduler
from slidegen.slide_generation import SlideContentGenerator, SlideImageGenerator
from slidegen.slide_models import SlideLayout, TransitionType

from tests.llm_stubs import (
    FailingLLM,
    GatedContentLLM,
    GatedImageLLM,
    StubSlideLLM,
    image_data_uri,
    presentation_payload,
)


def _pipeline(llm, image_llm=None, **kwargs):
    store = DocumentStore()
    scheduler = ImageFanoutScheduler(store, SlideImageGenerator(image_llm or llm))
    coordinator = RequestCoordinator(
        store,
        SlideContentGenerator(llm),
        scheduler,
        rng=random.Random(7),
        **kwargs,
    )
    return store, scheduler, coordinator


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_generate_commits_text_before_any_image():
    gated = GatedImageLLM(presentation_payload(5))
    store, scheduler, coordinator = _pipeline(gated)

    await coordinator.generate("Solar Power", "", 5)

    document = store.document
    assert document.title == "Solar Power"
    assert document.subtitle == "Clean energy for everyone"
    assert len(document.slides) == 5
    assert len(set(document.slide_ids())) == 5
    assert document.slides[0].layout is SlideLayout.TITLE
    assert [slide.layout for slide in document.slides[1:-1]] == [SlideLayout.CONTENT] * 3
    assert document.slides[-1].layout is SlideLayout.CONCLUSION
    assert all(slide.image_asset is None for slide in document.slides)
    assert coordinator.error is None
    assert coordinator.is_generating is False
    assert scheduler.pending == 5

    gated.release_all()
    await scheduler.drain()
    assert [slide.image_asset for slide in store.document.slides] == [
        image_data_uri(f"Image prompt for slide {n}") for n in range(1, 6)
    ]


@pytest.mark.asyncio
async def test_generate_picks_theme_and_transition_from_catalogs():
    _, scheduler, coordinator = _pipeline(StubSlideLLM(presentation_payload(8)))

    await coordinator.generate("Solar Power", "", 8)
    await scheduler.drain()

    assert coordinator.settings.slide_count == 8
    assert coordinator.theme in THEMES
    assert isinstance(coordinator.settings.transition, TransitionType)


@pytest.mark.asyncio
@pytest.mark.parametrize("topic, description", [("", ""), ("   ", "\n\t ")])
async def test_missing_input_is_rejected_without_calling_the_model(topic, description):
    stub_llm = StubSlideLLM(presentation_payload(5))
    store, _, coordinator = _pipeline(stub_llm)

    with pytest.raises(ValidationError):
        await coordinator.generate(topic, description, 5)

    assert coordinator.error == MISSING_INPUT_MESSAGE
    assert stub_llm.structured_requests == []
    assert store.epoch == 0


@pytest.mark.asyncio
async def test_unsupported_slide_count_is_rejected():
    stub_llm = StubSlideLLM(presentation_payload(5))
    _, _, coordinator = _pipeline(stub_llm)

    with pytest.raises(ValidationError):
        await coordinator.generate("Solar Power", "", 6)
    assert stub_llm.structured_requests == []


@pytest.mark.asyncio
async def test_description_alone_is_enough_and_title_falls_back():
    payload = presentation_payload(5)
    payload["presentationTitle"] = None
    store, scheduler, coordinator = _pipeline(StubSlideLLM(payload))

    await coordinator.generate("", "Notes about heat pumps", 5)
    await scheduler.drain()

    assert store.document.title == "Untitled Presentation"


@pytest.mark.asyncio
async def test_generator_failure_sets_error_and_leaves_no_document():
    failing = FailingLLM()
    store, scheduler, coordinator = _pipeline(failing)

    with pytest.raises(GenerationError) as info:
        await coordinator.generate("Solar Power", "", 5)

    assert str(info.value) == GENERATION_FAILURE_MESSAGE
    assert coordinator.error == GENERATION_FAILURE_MESSAGE
    assert coordinator.is_generating is False
    assert store.document is None
    assert scheduler.pending == 0
    assert failing.calls == 1


@pytest.mark.asyncio
async def test_regenerating_discards_images_of_the_previous_document():
    gated = GatedImageLLM(presentation_payload(5))
    store, scheduler, coordinator = _pipeline(gated)

    await coordinator.generate("Solar Power", "", 5)
    first_epoch = store.epoch
    old_tasks = list(scheduler._tasks)
    await coordinator.generate("Solar Power", "again", 5)

    assert store.epoch > first_epoch
    gated.release_all()
    await scheduler.drain()
    # Old tasks share prompts with the new ones but must not merge.
    assert all(task.result().value == "discarded" for task in old_tasks)
    assert all(slide.image_asset for slide in store.document.slides)


@pytest.mark.asyncio
async def test_a_newer_request_supersedes_an_older_one():
    llm = GatedContentLLM(
        [presentation_payload(5, title="First"), presentation_payload(5, title="Second")]
    )
    store, scheduler, coordinator = _pipeline(llm)

    first = asyncio.create_task(coordinator.generate("First", "", 5))
    await _settle()
    second = asyncio.create_task(coordinator.generate("Second", "", 5))
    await _settle()
    assert coordinator.is_generating is True

    llm.gates[1].set()
    await second
    assert store.document.title == "Second"
    epoch = store.epoch

    llm.gates[0].set()
    await first
    assert store.document.title == "Second"
    assert store.epoch == epoch
    await scheduler.drain()


@pytest.mark.asyncio
async def test_failure_of_a_superseded_request_is_ignored():
    llm = GatedContentLLM([presentation_payload(5), presentation_payload(5, title="Second")])
    llm.failures[0] = RuntimeError("late failure")
    store, scheduler, coordinator = _pipeline(llm)

    first = asyncio.create_task(coordinator.generate("First", "", 5))
    await _settle()
    second = asyncio.create_task(coordinator.generate("Second", "", 5))
    await _settle()

    llm.gates[0].set()
    await first
    assert coordinator.error is None

    llm.gates[1].set()
    await second
    assert store.document.title == "Second"
    await scheduler.drain()


@pytest.mark.asyncio
async def test_reset_drops_document_and_pending_results():
    gated = GatedImageLLM(presentation_payload(5))
    store, scheduler, coordinator = _pipeline(gated)
    await coordinator.generate("Solar Power", "", 5)

    coordinator.reset()
    gated.release_all()
    await scheduler.drain()

    assert store.document is None
    assert coordinator.error is None


@pytest.mark.asyncio
async def test_export_passes_theme_and_transition_to_renderer():
    _, scheduler, coordinator = _pipeline(StubSlideLLM(presentation_payload(5)))
    await coordinator.generate("Solar Power", "", 5)
    await scheduler.drain()
    seen = {}

    class FakeRenderer:
        def __init__(self, theme, transition):
            seen["theme"] = theme
            seen["transition"] = transition

        def render_document(self, document):
            seen["slides"] = len(document.slides)
            return io.BytesIO(b"pptx")

    assert coordinator.export_document(FakeRenderer) == b"pptx"
    assert seen == {
        "theme": coordinator.theme,
        "transition": coordinator.settings.transition,
        "slides": 5,
    }


def test_export_without_document_records_error():
    _, _, coordinator = _pipeline(StubSlideLLM())

    with pytest.raises(ExportError):
        coordinator.export_document(lambda theme, transition: None)
    assert coordinator.error == EXPORT_FAILURE_MESSAGE


@pytest.mark.asyncio
async def test_successful_export_clears_previous_export_error():
    _, scheduler, coordinator = _pipeline(StubSlideLLM(presentation_payload(5)))
    await coordinator.generate("Solar Power", "", 5)
    await scheduler.drain()

    class BrokenRenderer:
        def __init__(self, theme, transition):
            pass

        def render_document(self, document):
            raise ExportError("disk full")

    class FakeRenderer(BrokenRenderer):
        def render_document(self, document):
            return io.BytesIO(b"pptx")

    with pytest.raises(ExportError):
        coordinator.export_document(BrokenRenderer)
    assert coordinator.error == EXPORT_FAILURE_MESSAGE

    assert coordinator.export_document(FakeRenderer) == b"pptx"
    assert coordinator.error is None
