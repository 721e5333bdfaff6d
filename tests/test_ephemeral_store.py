"""Almacén efímero sobre el almacenamiento local."""
import json

import pytest

from voicenotes.client.ephemeral_store import TEMP_NOTES_KEY, EphemeralNoteStore
from voicenotes.client.local_storage import LocalStorage
from voicenotes.core.errors import InvalidNoteError, StorageError


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage.json")


def test_create_then_list_round_trip(storage):
    store = EphemeralNoteStore(storage)
    created = store.create("T", "C")

    [note] = store.list()
    assert note.id == created.id
    assert note.id.startswith("temp_")
    assert note.title == "T"
    assert note.content == "C"
    assert note.is_pinned is False
    assert note.is_favorited is False
    assert note.owner is None
    assert note.created_at == note.updated_at


def test_list_is_newest_first(storage):
    store = EphemeralNoteStore(storage)
    first = store.create("uno", "")
    second = store.create("dos", "")
    assert [n.id for n in store.list()] == [second.id, first.id]


def test_notes_survive_reload_with_datetimes(storage):
    created = EphemeralNoteStore(storage).create("T", "C")

    [note] = EphemeralNoteStore(storage).list()
    assert note.id == created.id
    assert note.created_at == created.created_at
    assert note.created_at.tzinfo is not None


def test_stored_under_single_namespaced_key(storage, tmp_path):
    EphemeralNoteStore(storage).create("T", "C")
    raw = json.loads((tmp_path / "storage.json").read_text())
    assert list(raw) == [TEMP_NOTES_KEY]
    [item] = json.loads(raw[TEMP_NOTES_KEY])
    assert item["created_at"].endswith("Z")


def test_update_advances_updated_at_strictly(storage):
    store = EphemeralNoteStore(storage)
    note = store.create("T", "C")

    previous = note.updated_at
    for i in range(5):
        store.update(note.id, title=f"T{i}")
        current = store.get(note.id)
        assert current.updated_at > previous
        assert current.updated_at >= current.created_at
        previous = current.updated_at
    assert store.get(note.id).title == "T4"


def test_update_ignores_non_editable_fields(storage):
    store = EphemeralNoteStore(storage)
    note = store.create("T", "C")
    store.update(note.id, id="temp_otro", owner="u1", is_pinned=True)
    updated = store.get(note.id)
    assert updated.is_pinned is True
    assert updated.owner is None


def test_update_missing_id_is_silent(storage):
    store = EphemeralNoteStore(storage)
    store.create("T", "C")
    assert store.update("temp_nope", title="x") is None
    assert [n.title for n in store.list()] == ["T"]


def test_delete(storage):
    store = EphemeralNoteStore(storage)
    keep = store.create("keep", "")
    gone = store.create("gone", "")
    store.delete(gone.id)
    assert [n.id for n in store.list()] == [keep.id]
    assert [n.id for n in EphemeralNoteStore(storage).list()] == [keep.id]


def test_corrupt_storage_yields_empty_list(storage, tmp_path):
    storage.set_item(TEMP_NOTES_KEY, "{not json")
    assert EphemeralNoteStore(storage).list() == []

    (tmp_path / "storage.json").write_text("garbage")
    assert EphemeralNoteStore(storage).list() == []


def test_quota_failure_is_logged_and_memory_stays_authoritative(tmp_path, caplog):
    storage = LocalStorage(tmp_path / "storage.json", quota_bytes=400)
    store = EphemeralNoteStore(storage)
    small = store.create("ok", "")

    big = store.create("big", "x" * 1000)

    assert [n.id for n in store.list()] == [big.id, small.id]
    assert isinstance(store.last_error, StorageError)
    assert "Error guardando notas temporales" in caplog.text
    # El archivo conserva la última escritura exitosa
    assert [n.id for n in EphemeralNoteStore(storage).list()] == [small.id]


def test_clear_removes_key(storage):
    store = EphemeralNoteStore(storage)
    store.create("T", "C")
    store.clear()
    assert store.list() == []
    assert storage.get_item(TEMP_NOTES_KEY) is None


def test_invalid_update_is_rejected_and_collection_survives(storage):
    store = EphemeralNoteStore(storage)
    keep = store.create("uno", "")
    other = store.create("dos", "")

    with pytest.raises(InvalidNoteError):
        store.update(other.id, title=123)

    assert store.get(other.id) == other
    assert {n.id for n in EphemeralNoteStore(storage).list()} == {keep.id, other.id}


def test_bad_record_is_skipped_alone(storage, caplog):
    good = EphemeralNoteStore(storage).create("bien", "")
    [record] = json.loads(storage.get_item(TEMP_NOTES_KEY))
    broken = dict(record, id="temp_2_zzzzzzzzz", title=None)
    storage.set_item(TEMP_NOTES_KEY, json.dumps([broken, record, "no es un dict"]))

    assert [n.id for n in EphemeralNoteStore(storage).list()] == [good.id]
    assert "Nota temporal #0 descartada" in caplog.text
    assert "Nota temporal #2 descartada" in caplog.text
