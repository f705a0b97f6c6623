import pytest

from slidegen.exceptions import GenerationError, ImageGenerationError
from slidegen.slide_generation import (
    SlideContentGenerator,
    SlideImageGenerator,
    is_eligible_prompt,
)
from slidegen.slide_models import SlideLayout

from tests.llm_stubs import FailingLLM, StubSlideLLM, presentation_payload


@pytest.mark.asyncio
async def test_content_generator_builds_request_and_parses_payload():
    stub_llm = StubSlideLLM(presentation_payload(5))
    generator = SlideContentGenerator(stub_llm, model_name="text-model")

    result = await generator.generate("Solar Power", "Rooftop installs", 5, "Modern Blue")

    request = stub_llm.structured_requests[0]
    assert request.schema_name == "presentation"
    assert request.model_name == "text-model"
    assert 'about: "Solar Power"' in request.prompt
    assert "exactly 5 slides" in request.prompt
    assert "Rooftop installs" in request.prompt
    assert "Modern Blue" in request.prompt
    assert request.schema["properties"]["slides"]["items"]["properties"]["type"]["enum"] == [
        "title",
        "content",
        "section",
        "conclusion",
    ]

    assert result.title == "Solar Power"
    assert len(result.slides) == 5
    assert result.slides[0].layout is SlideLayout.TITLE
    assert result.slides[1].content == ("Point 2.a", "<b>Point</b> 2.b")
    assert result.slides[4].speaker_notes == "Notes for slide 5"


@pytest.mark.asyncio
async def test_content_generator_reads_json_from_text_response():
    stub_llm = StubSlideLLM(presentation_payload(5), as_text=True)

    result = await SlideContentGenerator(stub_llm).generate("Solar Power", "", 5, "Minimal Dark")

    assert len(result.slides) == 5
    assert "[Context and details]" not in stub_llm.structured_requests[0].prompt


@pytest.mark.asyncio
async def test_content_generator_truncates_long_context():
    stub_llm = StubSlideLLM(presentation_payload(5))
    generator = SlideContentGenerator(stub_llm, max_context_chars=100)

    await generator.generate("Solar", "word " * 500, 5, "Modern Blue")

    prompt = stub_llm.structured_requests[0].prompt
    context = prompt.split("[Context and details]\n", 1)[1].split("\n", 1)[0]
    assert len(context) <= 100


@pytest.mark.asyncio
async def test_content_generator_truncates_surplus_slides():
    stub_llm = StubSlideLLM(presentation_payload(7))

    result = await SlideContentGenerator(stub_llm).generate("Solar", "", 5, "Modern Blue")

    assert [slide.title for slide in result.slides] == [f"Slide {n}" for n in range(1, 6)]


@pytest.mark.asyncio
async def test_content_generator_rejects_too_few_slides():
    stub_llm = StubSlideLLM(presentation_payload(3))

    with pytest.raises(GenerationError):
        await SlideContentGenerator(stub_llm).generate("Solar", "", 5, "Modern Blue")


@pytest.mark.asyncio
async def test_content_generator_rejects_unknown_layout():
    payload = presentation_payload(5)
    payload["slides"][2]["type"] = "diagram"

    with pytest.raises(GenerationError):
        await SlideContentGenerator(StubSlideLLM(payload)).generate("Solar", "", 5, "Modern Blue")


@pytest.mark.asyncio
async def test_content_generator_wraps_client_failure():
    failing = FailingLLM()

    with pytest.raises(GenerationError) as info:
        await SlideContentGenerator(failing).generate("Solar", "", 5, "Modern Blue")
    assert info.value.original_error is failing.error


@pytest.mark.asyncio
async def test_content_generator_sanitizes_bullets():
    payload = presentation_payload(5)
    payload["slides"][1]["content"] = ['<strong onclick="x()">Bold</strong><script>bad()</script>']

    result = await SlideContentGenerator(StubSlideLLM(payload)).generate("Solar", "", 5, "Modern Blue")

    assert result.slides[1].content == ("<b>Bold</b>",)


@pytest.mark.parametrize(
    "prompt, expected",
    [
        (None, False),
        ("", False),
        ("  n/a  ", False),
        ("N/A", False),
        ("tiny ", False),
        ("sunny", False),
        ("sunset", True),
    ],
)
def test_image_prompt_eligibility(prompt, expected):
    assert is_eligible_prompt(prompt) is expected


@pytest.mark.asyncio
async def test_image_generator_returns_data_uri():
    stub_llm = StubSlideLLM(image_bytes=b"png-bytes")
    generator = SlideImageGenerator(stub_llm, model_name="image-model", aspect_ratio="16:9")

    result = await generator.generate("  A calm solar farm  ")

    request = stub_llm.image_requests[0]
    assert request.prompt == "A calm solar farm"
    assert request.aspect_ratio == "16:9"
    assert request.model_name == "image-model"
    assert result == "data:image/png;base64,cG5nLWJ5dGVz"


@pytest.mark.asyncio
async def test_image_generator_skips_ineligible_prompt():
    stub_llm = StubSlideLLM()

    assert await SlideImageGenerator(stub_llm).generate("n/a") is None
    assert stub_llm.image_requests == []


@pytest.mark.asyncio
async def test_image_generator_returns_none_without_image_data():
    stub_llm = StubSlideLLM(image_bytes=b"")

    assert await SlideImageGenerator(stub_llm).generate("A calm solar farm") is None


@pytest.mark.asyncio
async def test_image_generator_raises_on_failure():
    with pytest.raises(ImageGenerationError):
        await SlideImageGenerator(FailingLLM()).generate("A calm solar farm")
