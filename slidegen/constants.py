"""Static catalogs and limits shared by the pipeline and the UI."""

from __future__ import annotations

from typing import Dict, List, Tuple

from .slide_models import Theme, ThemeColors, ThemeFonts, ThemeId, TransitionType

THEMES: List[Theme] = [
    Theme(
        id=ThemeId.MODERN_BLUE,
        name="Modern Blue",
        colors=ThemeColors(
            background="#FFFFFF",
            text="#1E293B",
            primary="#0EA5E9",
            secondary="#64748B",
            accent="#F0F9FF",
        ),
        fonts=ThemeFonts(heading="Inter", body="Inter"),
    ),
    Theme(
        id=ThemeId.MINIMAL_DARK,
        name="Minimal Dark",
        colors=ThemeColors(
            background="#0F172A",
            text="#F8FAFC",
            primary="#38BDF8",
            secondary="#94A3B8",
            accent="#1E293B",
        ),
        fonts=ThemeFonts(heading="Inter", body="Inter"),
    ),
    Theme(
        id=ThemeId.ELEGANT_PURPLE,
        name="Elegant Purple",
        colors=ThemeColors(
            background="#FAFAFA",
            text="#2D1B4E",
            primary="#7C3AED",
            secondary="#A78BFA",
            accent="#F5F3FF",
        ),
        fonts=ThemeFonts(heading="Inter", body="Inter"),
    ),
    Theme(
        id=ThemeId.CORPORATE_GRAY,
        name="Corporate Gray",
        colors=ThemeColors(
            background="#F8FAFC",
            text="#334155",
            primary="#475569",
            secondary="#94A3B8",
            accent="#E2E8F0",
        ),
        fonts=ThemeFonts(heading="Inter", body="Inter"),
    ),
]

TRANSITION_OPTIONS: List[Tuple[str, TransitionType]] = [
    ("None", TransitionType.NONE),
    ("Fade", TransitionType.FADE),
    ("Push", TransitionType.PUSH),
    ("Wipe", TransitionType.WIPE),
    ("Cover", TransitionType.COVER),
    ("Uncover", TransitionType.UNCOVER),
]

SLIDE_COUNT_OPTIONS: Tuple[int, ...] = (5, 8, 12, 15)
DEFAULT_SLIDE_COUNT = 8
DEFAULT_THEME_ID = ThemeId.MODERN_BLUE
DEFAULT_TRANSITION = TransitionType.FADE

# Extracted document text is cut to this many characters before generation.
MAX_CHAR_COUNT = 5000

# Image prompts must be strictly longer than this once trimmed.
MIN_IMAGE_PROMPT_LENGTH = 5

DEFAULT_PRESENTATION_TITLE = "Untitled Presentation"
DEFAULT_BULLET_TEXT = "New Point"

GENERATION_FAILURE_MESSAGE = "Failed to generate presentation content. Please try again."
EXPORT_FAILURE_MESSAGE = "Failed to generate PowerPoint file."
MISSING_INPUT_MESSAGE = "Please provide a topic or upload a PDF."

THEMES_BY_ID: Dict[ThemeId, Theme] = {theme.id: theme for theme in THEMES}


def get_theme(theme_id: ThemeId) -> Theme:
    """Return the catalog theme for ``theme_id``, falling back to the first one."""

    try:
        return THEMES_BY_ID[ThemeId(theme_id)]
    except (KeyError, ValueError):
        return THEMES[0]
