"""Turn an uploaded PDF into extra context for generation."""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from pathlib import PurePath

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from .constants import MAX_CHAR_COUNT
from .exceptions import ExtractionError

LOGGER = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


@dataclass(frozen=True)
class ExtractedContext:
    description: str
    truncated: bool


def extract_text_from_pdf(data: bytes) -> str:
    """Return the text of every page, pages separated by a blank line."""

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PyPdfError, ValueError, OSError) as exc:
        LOGGER.error("Error extracting text from PDF: %s", exc)
        raise ExtractionError(
            "Failed to extract text from PDF. Please ensure the file is a valid PDF.",
            original_error=exc,
        ) from exc
    return "\n\n".join(page.strip() for page in pages if page.strip())


def append_extracted_text(
    description: str, text: str, max_chars: int = MAX_CHAR_COUNT
) -> ExtractedContext:
    """Append ``text`` to ``description``, cutting the result at ``max_chars``."""

    combined = f"{description or ''}\n\n{text or ''}".strip()
    if len(combined) > max_chars:
        return ExtractedContext(description=combined[:max_chars], truncated=True)
    return ExtractedContext(description=combined, truncated=False)


def topic_from_filename(file_name: str) -> str:
    """Guess a topic from an upload name, e.g. ``solar-power_2024.pdf``."""

    stem = PurePath(file_name).name
    if stem.lower().endswith(".pdf"):
        stem = stem[: -len(".pdf")]
    return re.sub(r"[-_]+", " ", stem).strip()
