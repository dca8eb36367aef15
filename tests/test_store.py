"""Tests for the in-process note store."""
import pytest
from pydantic import ValidationError

from quillnote.errors import NoteAccessError, NoteNotFoundError
from quillnote.notes.store import NoteStore
from quillnote.schemas import NoteCreate, NoteUpdate


@pytest.fixture
def store():
    return NoteStore()


def add(store, user_id=1, title="Title", content="Body", tags=None):
    return store.create(user_id, NoteCreate(title=title, content=content, tags=tags))


class TestNoteStore:
    def test_create_assigns_ids_and_timestamps(self, store):
        first = add(store)
        second = add(store)
        assert (first.id, second.id) == (1, 2)
        assert first.created_at == first.updated_at
        assert first.created_at.tzinfo is not None

    def test_get_checks_owner(self, store):
        note = add(store, user_id=1)
        assert store.get(1, note.id) == note
        with pytest.raises(NoteAccessError):
            store.get(2, note.id)
        with pytest.raises(NoteNotFoundError):
            store.get(1, 999)

    def test_update_replaces_fields(self, store):
        note = add(store, tags=["a"])
        updated = store.update(1, note.id, NoteUpdate(title="New", content="Changed", tags=None))
        assert (updated.title, updated.content, updated.tags) == ("New", "Changed", None)
        assert updated.created_at == note.created_at
        assert updated.updated_at >= note.updated_at
        assert store.get(1, note.id) == updated

    def test_update_other_users_note(self, store):
        note = add(store, user_id=1)
        with pytest.raises(NoteAccessError):
            store.update(2, note.id, NoteUpdate(title="x", content="y"))

    def test_delete(self, store):
        note = add(store)
        store.delete(1, note.id)
        with pytest.raises(NoteNotFoundError):
            store.delete(1, note.id)

    def test_list_orders_by_most_recent_update(self, store):
        a = add(store, title="a")
        add(store, title="b")
        store.update(1, a.id, NoteUpdate(title="a2", content="touched"))
        page = store.list(1)
        assert [n.title for n in page.items] == ["a2", "b"]

    def test_list_scoped_to_user(self, store):
        add(store, user_id=1)
        add(store, user_id=2)
        page = store.list(2)
        assert page.total == 1
        assert page.items[0].user_id == 2

    def test_pagination(self, store):
        for i in range(5):
            add(store, title=f"n{i}")
        page = store.list(1, page=2, per_page=2)
        assert [n.title for n in page.items] == ["n2", "n1"]
        assert (page.total, page.pages) == (5, 3)
        assert store.list(1, page=9, per_page=2).items == []

    def test_empty_list_has_one_page(self, store):
        page = store.list(1)
        assert (page.total, page.pages, page.items) == (0, 1, [])

    def test_invalid_page(self, store):
        with pytest.raises(ValueError):
            store.list(1, page=0)

    def test_search_title_content_and_tags(self, store):
        add(store, title="Recipe", content="flour")
        add(store, title="Trip", content="Paris in SPRING")
        add(store, title="Misc", content="nothing", tags=["spring-cleaning"])
        titles = {n.title for n in store.list(1, search="spring").items}
        assert titles == {"Trip", "Misc"}
        assert store.list(1, search="   ").total == 3


def test_note_validation():
    with pytest.raises(ValidationError):
        NoteCreate(title="", content="x")
    with pytest.raises(ValidationError):
        NoteCreate(title="x" * 256, content="x")
    with pytest.raises(ValidationError):
        NoteCreate(title="ok", content="")
