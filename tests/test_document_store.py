from dataclasses import replace

import pytest

from slidegen.document_store import DocumentStore, StoreEventKind
from slidegen.slide_models import PresentationDocument, Slide, SlideLayout


def _document(*ids):
    return PresentationDocument(
        title="Deck",
        slides=[Slide(id=slide_id, layout=SlideLayout.CONTENT, title=slide_id) for slide_id in ids],
    )


def test_epoch_increases_on_every_replace_and_clear():
    store = DocumentStore()
    seen = [store.epoch]

    seen.append(store.replace(_document("a")))
    seen.append(store.clear())
    seen.append(store.replace(_document("b")))

    assert seen == sorted(set(seen))
    assert store.epoch == seen[-1]


def test_replace_rejects_duplicate_or_empty_ids():
    store = DocumentStore()

    with pytest.raises(ValueError):
        store.replace(_document("a", "a"))
    with pytest.raises(ValueError):
        store.replace(_document(""))
    assert store.document is None
    assert store.epoch == 0


def test_merge_image_applies_once_for_current_epoch():
    store = DocumentStore()
    epoch = store.replace(_document("a", "b"))

    assert store.merge_image("a", "data:image/png;base64,AA==", epoch) is True
    assert store.merge_image("a", "data:image/png;base64,BB==", epoch) is False
    assert store.get_slide("a").image_asset == "data:image/png;base64,AA=="
    assert store.get_slide("b").image_asset is None


def test_merge_image_discards_stale_epoch_and_missing_slide():
    store = DocumentStore()
    old_epoch = store.replace(_document("a"))
    store.replace(_document("a"))

    assert store.merge_image("a", "payload", old_epoch) is False
    assert store.get_slide("a").image_asset is None

    store.delete_slide("a")
    assert store.merge_image("a", "payload", store.epoch) is False


def test_merge_keeps_user_edits_made_while_image_was_pending():
    store = DocumentStore()
    epoch = store.replace(_document("a"))

    store.update_slide("a", lambda slide: replace(slide, title="Edited"))
    store.merge_image("a", "payload", epoch)

    slide = store.get_slide("a")
    assert slide.title == "Edited"
    assert slide.image_asset == "payload"


def test_update_slide_cannot_change_identity():
    store = DocumentStore()
    store.replace(_document("a"))

    with pytest.raises(ValueError):
        store.update_slide("a", lambda slide: replace(slide, id="b"))
    assert store.update_slide("missing", lambda slide: slide) is False


def test_move_slide_clamps_position():
    store = DocumentStore()
    store.replace(_document("a", "b", "c"))

    assert store.move_slide("a", 10) is True
    assert store.slide_ids() == ["b", "c", "a"]
    assert store.move_slide("a", -3) is True
    assert store.slide_ids() == ["a", "b", "c"]
    assert store.move_slide("missing", 0) is False


def test_observers_receive_events_and_failures_are_isolated(caplog):
    store = DocumentStore()
    events = []

    def broken(event):
        raise RuntimeError("observer bug")

    store.subscribe(broken)
    unsubscribe = store.subscribe(events.append)

    epoch = store.replace(_document("a"))
    store.merge_image("a", "payload", epoch)
    unsubscribe()
    store.clear()

    assert [event.kind for event in events] == [
        StoreEventKind.REPLACED,
        StoreEventKind.IMAGE_MERGED,
    ]
    assert events[1].slide_id == "a"
    assert "Document observer failed" in caplog.text
