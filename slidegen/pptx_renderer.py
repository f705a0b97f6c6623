"""Utilities to render :class:`PresentationDocument` objects into PPTX files."""

from __future__ import annotations

import base64
import binascii
import io
import logging
from typing import Optional

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.oxml import parse_xml
from pptx.oxml.ns import nsdecls, qn
from pptx.util import Inches, Pt

from .exceptions import ExportError
from .markup import parse_runs
from .slide_models import PresentationDocument, Slide, SlideLayout, Theme, TransitionType

LOGGER = logging.getLogger(__name__)

# Indices into the default python-pptx template.
_LAYOUT_INDEX = {
    SlideLayout.TITLE: 0,
    SlideLayout.CONTENT: 1,
    SlideLayout.SECTION: 2,
    SlideLayout.CONCLUSION: 1,
}

_TRANSITION_XML = {
    TransitionType.FADE: "<p:fade/>",
    TransitionType.PUSH: '<p:push dir="u"/>',
    TransitionType.WIPE: '<p:wipe dir="d"/>',
    TransitionType.COVER: '<p:cover dir="l"/>',
    TransitionType.UNCOVER: '<p:pull dir="l"/>',
}


class SlideDeckRenderer:
    """Render presentation documents into PPTX binaries."""

    def __init__(
        self, theme: Theme, transition: TransitionType = TransitionType.NONE
    ) -> None:
        self.theme = theme
        self.transition = TransitionType(transition)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render_document(self, document: PresentationDocument) -> io.BytesIO:
        """Return a PPTX stream that represents ``document``."""

        try:
            presentation = Presentation()
            presentation.core_properties.title = document.title
            if document.subtitle:
                presentation.core_properties.subject = document.subtitle

            for slide in document.slides:
                self._render_slide(presentation, document, slide)

            buffer = io.BytesIO()
            presentation.save(buffer)
            buffer.seek(0)
            return buffer
        except ExportError:
            raise
        except Exception as exc:
            LOGGER.exception("PPTX rendering failed")
            raise ExportError(
                f"Failed to render presentation: {exc}", original_error=exc
            ) from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _render_slide(
        self, presentation, document: PresentationDocument, slide: Slide
    ) -> None:
        layout = presentation.slide_layouts[_LAYOUT_INDEX[slide.layout]]
        pptx_slide = presentation.slides.add_slide(layout)
        self._paint_background(pptx_slide)

        if pptx_slide.shapes.title is not None:
            self._write_title(pptx_slide.shapes.title, slide.title)

        body = next(
            (
                shape
                for shape in pptx_slide.placeholders
                if shape.placeholder_format.idx == 1
            ),
            None,
        )
        if body is not None:
            fragments = list(slide.content)
            if slide.layout is SlideLayout.TITLE and not fragments and document.subtitle:
                fragments = [document.subtitle]
            self._write_bullets(body, fragments)
            if slide.image_asset and slide.layout in (SlideLayout.CONTENT, SlideLayout.CONCLUSION):
                # Inherited placeholders have no own geometry; set all four.
                left, top, height = body.left, body.top, body.height
                body.left, body.top, body.height = left, top, height
                body.width = int(presentation.slide_width * 0.5) - left

        if slide.image_asset:
            self._add_image(presentation, pptx_slide, slide)

        if slide.speaker_notes:
            pptx_slide.notes_slide.notes_text_frame.text = slide.speaker_notes

        _apply_transition(pptx_slide, slide.transition or self.transition)

    def _paint_background(self, pptx_slide) -> None:
        fill = pptx_slide.background.fill
        fill.solid()
        fill.fore_color.rgb = _rgb(self.theme.colors.background)

    def _write_title(self, title_shape, text: str) -> None:
        text_frame = title_shape.text_frame
        text_frame.text = text
        for paragraph in text_frame.paragraphs:
            for run in paragraph.runs:
                run.font.name = self.theme.fonts.heading
                run.font.bold = True
                run.font.color.rgb = _rgb(self.theme.colors.primary)

    def _write_bullets(self, body, fragments) -> None:
        text_frame = body.text_frame
        text_frame.clear()
        for idx, fragment in enumerate(fragments):
            paragraph = text_frame.paragraphs[0] if idx == 0 else text_frame.add_paragraph()
            for text_run in parse_runs(fragment):
                run = paragraph.add_run()
                run.text = text_run.text.replace("\n", " ")
                run.font.name = self.theme.fonts.body
                run.font.size = Pt(20)
                run.font.color.rgb = _rgb(self.theme.colors.text)
                if text_run.bold:
                    run.font.bold = True
                if text_run.italic:
                    run.font.italic = True
                if text_run.underline:
                    run.font.underline = True

    def _add_image(self, presentation, pptx_slide, slide: Slide) -> None:
        image_bytes = decode_data_uri(slide.image_asset)
        if image_bytes is None:
            raise ExportError(f"Slide {slide.id} has an unreadable image payload")
        margin = Inches(0.4)
        width = int(presentation.slide_width * 0.5) - margin
        left = presentation.slide_width - width - margin
        top = Inches(1.8)
        pptx_slide.shapes.add_picture(io.BytesIO(image_bytes), left, top, width=width)


# ----------------------------------------------------------------------
# Helper functions
# ----------------------------------------------------------------------

def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def decode_data_uri(data_uri: str) -> Optional[bytes]:
    """Return the bytes of a base64 ``data:`` URI, or None if it is not one."""

    if "," not in data_uri:
        return None
    header, encoded = data_uri.split(",", 1)
    if not header.startswith("data:") or ";base64" not in header:
        return None
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None


def _apply_transition(pptx_slide, transition: Optional[TransitionType]) -> None:
    element = pptx_slide._element
    existing = element.find(qn("p:transition"))
    if existing is not None:
        element.remove(existing)
    if transition is None or transition is TransitionType.NONE:
        return

    transition_xml = parse_xml(
        f'<p:transition {nsdecls("p")} spd="med">{_TRANSITION_XML[transition]}</p:transition>'
    )
    anchor = element.find(qn("p:clrMapOvr"))
    if anchor is None:
        anchor = element.find(qn("p:cSld"))
    anchor.addnext(transition_xml)
