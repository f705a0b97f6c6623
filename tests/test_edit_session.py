import pytest

from slidegen.document_store import DocumentStore
from slidegen.edit_session import BulletSurface, EditSession
from slidegen.markup import FormatState, TextFormat
from slidegen.slide_models import PresentationDocument, Slide, SlideLayout, TransitionType


@pytest.fixture()
def store():
    store = DocumentStore()
    store.replace(
        PresentationDocument(
            title="Deck",
            slides=[
                Slide(id="a", layout=SlideLayout.TITLE, title="Solar Power"),
                Slide(
                    id="b",
                    layout=SlideLayout.CONTENT,
                    title="Benefits",
                    content=("Cheap", "<b>Clean</b> energy"),
                ),
                Slide(id="c", layout=SlideLayout.CONCLUSION, title="Summary"),
            ],
        )
    )
    return store


def test_text_edits_update_only_the_target_slide(store):
    editor = EditSession(store)

    assert editor.set_title("b", "Why solar") is True
    assert editor.set_speaker_notes("b", "Mention subsidies") is True
    assert editor.set_transition("b", TransitionType.PUSH) is True

    slide = store.get_slide("b")
    assert (slide.title, slide.speaker_notes, slide.transition) == (
        "Why solar",
        "Mention subsidies",
        TransitionType.PUSH,
    )
    assert store.get_slide("a").title == "Solar Power"


def test_edits_on_missing_slide_report_false(store):
    editor = EditSession(store)

    assert editor.set_title("missing", "x") is False
    assert editor.add_bullet("missing") is None


def test_bullet_text_round_trips_through_markup(store):
    editor = EditSession(store)

    editor.set_bullet_text("b", 0, '<span style="font-style: italic">Cheap</span> <u>power</u>')

    assert store.get_slide("b").content[0] == "<i>Cheap</i> <u>power</u>"


def test_add_and_remove_bullets(store):
    editor = EditSession(store)

    assert editor.add_bullet("b") == 2
    assert editor.add_bullet("b", "First", index=0) == 0
    assert store.get_slide("b").content == ("First", "Cheap", "<b>Clean</b> energy", "New Point")

    assert editor.remove_bullet("b", 1) is True
    assert store.get_slide("b").content == ("First", "<b>Clean</b> energy", "New Point")

    with pytest.raises(IndexError):
        editor.remove_bullet("b", 5)
    with pytest.raises(IndexError):
        editor.set_bullet_text("b", -1, "x")


def test_delete_and_move_slides(store):
    editor = EditSession(store)

    assert editor.move_slide("c", 0) is True
    assert store.slide_ids() == ["c", "a", "b"]
    assert editor.delete_slide("a") is True
    assert store.slide_ids() == ["c", "b"]
    assert editor.delete_slide("a") is False


def test_format_state_follows_selection(store):
    editor = EditSession(store)
    surface = BulletSurface(store, "b", 1)

    assert editor.format_state(surface) == FormatState()
    surface.select(0, 5)
    assert editor.format_state(surface).bold is True
    surface.select(0, 12)
    assert editor.format_state(surface).bold is False


def test_toggle_format_rewrites_bullet_and_reports_new_state(store):
    editor = EditSession(store)
    surface = BulletSurface(store, "b", 0)
    surface.select(0, 5)

    state = editor.toggle_format(surface, TextFormat.UNDERLINE)

    assert state.underline is True
    assert store.get_slide("b").content[0] == "<u>Cheap</u>"

    state = editor.toggle_format(surface, TextFormat.UNDERLINE)
    assert state.underline is False
    assert store.get_slide("b").content[0] == "Cheap"


def test_surface_over_deleted_slide_is_empty(store):
    surface = BulletSurface(store, "b", 0)
    store.delete_slide("b")

    assert surface.current_markup() == ""
    assert EditSession(store).format_state(surface) == FormatState()


@pytest.mark.parametrize("index", [0, 1, 2])
def test_add_then_remove_bullet_at_same_index_restores_content(store, index):
    editor = EditSession(store)
    original = store.get_slide("b").content

    assert editor.add_bullet("b", "Inserted", index=index) == index
    assert store.get_slide("b").content[index] == "Inserted"
    assert editor.remove_bullet("b", index) is True

    assert store.get_slide("b").content == original


def test_toggle_format_after_bullet_removed_leaves_slide_untouched(store):
    editor = EditSession(store)
    surface = BulletSurface(store, "b", 1)
    surface.select(0, 5)
    editor.remove_bullet("b", 1)
    epoch = store.epoch
    seen = []
    store.subscribe(seen.append)

    state = editor.toggle_format(surface, TextFormat.ITALIC)

    assert state == FormatState()
    assert store.get_slide("b").content == ("Cheap",)
    assert store.epoch == epoch
    assert seen == []


def test_toggle_format_on_deleted_slide_is_a_no_op(store):
    editor = EditSession(store)
    surface = BulletSurface(store, "b", 0)
    surface.select(0, 5)
    store.delete_slide("b")

    assert editor.toggle_format(surface, TextFormat.BOLD) == FormatState()
    assert store.get_slide("b") is None
