"""Streamlit UI for generating, editing and presenting slide decks."""

from __future__ import annotations

from typing import List, Optional, Tuple

import streamlit as st

from slidegen.config import SlideGenConfig, configure_logging
from slidegen.constants import (
    DEFAULT_SLIDE_COUNT,
    MAX_CHAR_COUNT,
    SLIDE_COUNT_OPTIONS,
    TRANSITION_OPTIONS,
)
from slidegen.exceptions import SlideGenError
from slidegen.markup import TextFormat, TextSelection, plain_text
from slidegen.edit_session import BulletSurface
from slidegen.pptx_renderer import decode_data_uri
from slidegen.runtime import BackgroundLoop
from slidegen.session import PresentationSession
from slidegen.slide_generation import is_eligible_prompt
from slidegen.slide_models import PresentationDocument, Slide, TransitionType
from slidegen.text_extraction import (
    append_extracted_text,
    extract_text_from_pdf,
    topic_from_filename,
)

DEMO_MODE = "Demo (offline)"
GEMINI_MODE = "Gemini (GEMINI_API_KEY)"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
IMAGE_POLL_SECONDS = 1.0


@st.cache_resource
def load_config() -> SlideGenConfig:
    """Read settings once per server process and set up logging."""

    config = SlideGenConfig.from_env()
    configure_logging(config.log_level)
    return config


@st.cache_resource
def shared_loop() -> BackgroundLoop:
    """The one event loop thread that hosts every browser session's pipeline."""

    return BackgroundLoop()


def _running_loop() -> BackgroundLoop:
    loop = shared_loop()
    if not loop.is_running:
        shared_loop.clear()
        loop = shared_loop()
    return loop


def _get_runtime(mode: str) -> Tuple[BackgroundLoop, PresentationSession]:
    """Return the shared loop and this browser session's pipeline, rebuilding on mode change."""

    loop = _running_loop()
    if st.session_state.get("loop") is not loop:
        st.session_state["loop"] = loop
        st.session_state.pop("session", None)

    if st.session_state.get("mode") != mode or "session" not in st.session_state:
        config = load_config()
        # Clients are created on the loop thread so their async state binds to it.
        session = loop.call(
            lambda: PresentationSession.from_config(config, demo=mode == DEMO_MODE)
        )
        st.session_state["session"] = session
        st.session_state["mode"] = mode
        st.session_state.pop("pptx_revision", None)
    return loop, st.session_state["session"]


def _snapshot(session: PresentationSession) -> Tuple[Optional[PresentationDocument], int, Optional[str]]:
    document = session.document
    if document is not None:
        document = PresentationDocument(
            title=document.title,
            subtitle=document.subtitle,
            slides=list(document.slides),
        )
    return document, session.pending_images, session.error


def _image_progress(session: PresentationSession) -> Tuple[int, int]:
    return session.pending_images, session.images_merged


@st.fragment(run_every=IMAGE_POLL_SECONDS)
def _watch_images(
    loop: BackgroundLoop, session: PresentationSession, rendered: Tuple[int, int]
) -> None:
    """Poll image progress and rerun the page once an image lands or fails."""

    current = loop.call(_image_progress, session)
    if current != rendered:
        st.rerun()
    st.info(f"{current[0]} image(s) still generating.")


def _apply_pdf_upload(upload) -> None:
    if upload is None or st.session_state.get("pdf_file_id") == upload.file_id:
        return
    st.session_state["pdf_file_id"] = upload.file_id
    try:
        text = extract_text_from_pdf(upload.getvalue())
    except SlideGenError as exc:
        st.error(str(exc))
        return
    context = append_extracted_text(st.session_state.get("description", ""), text)
    st.session_state["description"] = context.description
    if not st.session_state.get("topic", "").strip():
        st.session_state["topic"] = topic_from_filename(upload.name)
    if context.truncated:
        st.warning(f"The extracted text was cut to {MAX_CHAR_COUNT} characters.")
    else:
        st.success(f"Added text from {upload.name}.")


def _forget_widgets(prefix) -> None:
    for key in [key for key in st.session_state if str(key).startswith(prefix)]:
        st.session_state.pop(key, None)


def _transition_labels() -> List[str]:
    return ["Deck default"] + [label for label, _ in TRANSITION_OPTIONS]


def _transition_from_label(label: str) -> Optional[TransitionType]:
    return dict(TRANSITION_OPTIONS).get(label)


def _render_bullet_editor(
    loop: BackgroundLoop, session: PresentationSession, slide: Slide
) -> None:
    for index, bullet in enumerate(slide.content):
        col_text, col_remove = st.columns([6, 1])
        with col_text:
            edited = st.text_input(
                f"Bullet {index + 1}",
                value=bullet,
                key=f"bullet-{slide.id}-{index}",
                help="Inline <b>, <i> and <u> markup is kept.",
            )
        with col_remove:
            if st.button("Remove", key=f"remove-{slide.id}-{index}"):
                loop.call(session.editor.remove_bullet, slide.id, index)
                _forget_widgets(f"bullet-{slide.id}-")
                st.rerun()
        if edited != bullet:
            loop.call(session.editor.set_bullet_text, slide.id, index, edited)

    if st.button("Add bullet", key=f"add-{slide.id}"):
        loop.call(session.editor.add_bullet, slide.id)
        st.rerun()

    if not slide.content:
        return
    with st.expander("Formatting", expanded=False):
        bullet_index = st.selectbox(
            "Bullet",
            options=list(range(len(slide.content))),
            format_func=lambda idx: f"{idx + 1}. {plain_text(slide.content[idx])[:40]}",
            key=f"fmt-bullet-{slide.id}",
        )
        length = len(plain_text(slide.content[bullet_index]))
        start, end = st.slider(
            "Selection",
            min_value=0,
            max_value=max(length, 1),
            value=(0, max(length, 1)),
            key=f"fmt-range-{slide.id}-{bullet_index}",
        )
        surface = BulletSurface(session.store, slide.id, bullet_index, TextSelection(start, end))
        state = loop.call(session.editor.format_state, surface)
        buttons = st.columns(3)
        for column, text_format in zip(buttons, TextFormat):
            active = state.is_active(text_format)
            label = f"{text_format.value.title()}{' (on)' if active else ''}"
            with column:
                if st.button(label, key=f"fmt-{text_format.value}-{slide.id}"):
                    loop.call(session.editor.toggle_format, surface, text_format)
                    st.session_state.pop(f"bullet-{slide.id}-{bullet_index}", None)
                    st.rerun()
        st.markdown(slide.content[bullet_index], unsafe_allow_html=True)


def _render_slide_editor(
    loop: BackgroundLoop,
    session: PresentationSession,
    slide: Slide,
    position: int,
    total: int,
) -> None:
    col_main, col_image = st.columns([3, 2])
    with col_main:
        title = st.text_input("Title", value=slide.title, key=f"title-{slide.id}")
        if title != slide.title:
            loop.call(session.editor.set_title, slide.id, title)
        st.caption(f"Layout: {slide.layout.value}")
        _render_bullet_editor(loop, session, slide)
        notes = st.text_area(
            "Speaker notes", value=slide.speaker_notes, key=f"notes-{slide.id}"
        )
        if notes != slide.speaker_notes:
            loop.call(session.editor.set_speaker_notes, slide.id, notes)

        labels = _transition_labels()
        current = next(
            (label for label, value in TRANSITION_OPTIONS if value == slide.transition),
            labels[0],
        )
        choice = st.selectbox(
            "Transition",
            labels,
            index=labels.index(current),
            key=f"transition-{slide.id}",
        )
        if choice != current:
            loop.call(session.editor.set_transition, slide.id, _transition_from_label(choice))

    with col_image:
        if slide.image_asset:
            st.image(decode_data_uri(slide.image_asset), width="stretch")
        elif is_eligible_prompt(slide.image_prompt):
            st.info("Generating image...")
        else:
            st.caption("No image for this slide.")
        if slide.image_prompt:
            st.caption(f"Image prompt: {slide.image_prompt}")

    col_up, col_down, col_delete = st.columns(3)
    with col_up:
        if st.button("Move up", key=f"up-{slide.id}", disabled=position == 0):
            loop.call(session.editor.move_slide, slide.id, position - 1)
            st.rerun()
    with col_down:
        if st.button("Move down", key=f"down-{slide.id}", disabled=position == total - 1):
            loop.call(session.editor.move_slide, slide.id, position + 1)
            st.rerun()
    with col_delete:
        if st.button("Delete slide", key=f"delete-{slide.id}"):
            loop.call(session.editor.delete_slide, slide.id)
            st.rerun()


def _render_playback(loop: BackgroundLoop, session: PresentationSession) -> None:
    slide = loop.call(session.playback.current_slide)
    if slide is None:
        loop.call(session.playback.exit)
        st.rerun()
        return
    cursor = loop.call(lambda: session.playback.cursor)
    count = loop.call(lambda: session.playback.slide_count)

    st.markdown(f"## {slide.title}")
    col_text, col_image = st.columns([3, 2])
    with col_text:
        for bullet in slide.content:
            st.markdown(f"- {bullet}", unsafe_allow_html=True)
    with col_image:
        if slide.image_asset:
            st.image(decode_data_uri(slide.image_asset), width="stretch")
    if slide.speaker_notes:
        with st.expander("Speaker notes"):
            st.write(slide.speaker_notes)

    col_prev, col_pos, col_next, col_exit = st.columns(4)
    with col_prev:
        if st.button("Previous", disabled=cursor == 0):
            loop.call(session.playback.handle_key, "ArrowLeft")
            st.rerun()
    with col_pos:
        st.caption(f"Slide {cursor + 1} of {count}")
    with col_next:
        if st.button("Next", disabled=cursor >= count - 1):
            loop.call(session.playback.handle_key, "ArrowRight")
            st.rerun()
    with col_exit:
        if st.button("Exit"):
            loop.call(session.playback.handle_key, "Escape")
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="SlideGen", layout="wide")
    st.title("SlideGen")

    st.session_state.setdefault("topic", "")
    st.session_state.setdefault("description", "")

    with st.sidebar:
        st.header("Generation settings")
        mode = st.radio(
            "Model",
            (DEMO_MODE, GEMINI_MODE),
            index=0 if not load_config().gemini_api_key else 1,
            help="Demo mode works without an API key.",
        )
        slide_count = st.selectbox(
            "Number of slides",
            SLIDE_COUNT_OPTIONS,
            index=SLIDE_COUNT_OPTIONS.index(DEFAULT_SLIDE_COUNT),
        )
        upload = st.file_uploader("Add context from a PDF", type="pdf")
        _apply_pdf_upload(upload)

    try:
        loop, session = _get_runtime(mode)
    except Exception as exc:
        st.error("Could not initialise the model client. Check GEMINI_API_KEY.")
        st.exception(exc)
        return

    if loop.call(lambda: session.playback.is_playing):
        _render_playback(loop, session)
        return

    st.text_input("Topic", key="topic", placeholder="e.g. The future of solar power")
    st.text_area(
        "Description / context",
        key="description",
        height=160,
        max_chars=MAX_CHAR_COUNT,
        placeholder="Optional details, audience, or text pasted from your notes",
    )

    col_generate, col_reset = st.columns([1, 1])
    with col_generate:
        if st.button("Generate presentation", type="primary"):
            with st.spinner("Writing slides..."):
                try:
                    loop.run(
                        session.generate(
                            st.session_state["topic"],
                            st.session_state["description"],
                            int(slide_count),
                        )
                    )
                except SlideGenError:
                    # The coordinator keeps the message; it is shown below.
                    pass
    with col_reset:
        if st.button("New presentation"):
            loop.call(session.reset)
            _forget_widgets(("title-", "bullet-", "notes-", "transition-", "fmt-", "pptx_"))
            st.rerun()

    (document, pending, error), progress = loop.call(
        lambda: (_snapshot(session), _image_progress(session))
    )
    if error:
        st.error(error)
    if document is None:
        st.caption("Enter a topic or upload a PDF, then generate.")
        return

    st.divider()
    st.subheader(document.title)
    if document.subtitle:
        st.caption(document.subtitle)

    col_status, col_play = st.columns([2, 1])
    with col_status:
        if pending:
            _watch_images(loop, session, progress)
        else:
            st.success("All images finished.")
    with col_play:
        if st.button("Present", disabled=not document.slides):
            loop.call(session.playback.start)
            st.rerun()

    if not document.slides:
        st.info("All slides were deleted. Generate a new presentation to continue.")
        return

    tabs = st.tabs([f"{idx + 1}. {slide.title or 'Untitled'}" for idx, slide in enumerate(document.slides)])
    for position, (tab, slide) in enumerate(zip(tabs, document.slides)):
        with tab:
            _render_slide_editor(loop, session, slide, position, len(document.slides))

    st.divider()
    revision = loop.call(lambda: session.revision)
    prepared = st.session_state.get("pptx_revision") == revision
    if not prepared and not st.button("Prepare PPTX download"):
        st.caption("The PowerPoint file is built when you ask for it.")
        return
    try:
        pptx_bytes = loop.call(session.export_pptx)
    except SlideGenError as exc:
        st.session_state.pop("pptx_revision", None)
        st.warning(loop.call(lambda: session.error) or str(exc))
    else:
        st.session_state["pptx_revision"] = revision
        st.download_button(
            "Download PPTX",
            data=pptx_bytes,
            file_name=f"{document.title or 'presentation'}.pptx",
            mime=PPTX_MIME,
        )


if __name__ == "__main__":  # pragma: no cover - Streamlit handles execution
    main()
