"""Repositorio dual: enrutamiento por modo/id, transiciones de sesión y fallas."""
from datetime import timedelta

import pytest

from voicenotes.client.ephemeral_store import EphemeralNoteStore
from voicenotes.client.local_storage import LocalStorage
from voicenotes.client.models import EDITABLE_FIELDS, Note
from voicenotes.client.repository import NoteRepository, RepositoryMode
from voicenotes.client.session import Identity, SessionGate
from voicenotes.core.errors import AuthorizationError, InvalidNoteError, TransportError
from voicenotes.core.time import now_utc

ANA = Identity(user_id="u1", email="ana@notes.dev", access_token="tok-1")


class FakeProvider:
    def __init__(self, restored=None):
        self.restored = restored

    def restore(self):
        return self.restored

    def sign_in(self, email, password):
        return ANA

    def sign_up(self, email, password):
        return None

    def sign_out(self):
        return None


class FakeRemote:
    """Almacén remoto en memoria que registra cada llamada."""

    def __init__(self):
        self.notes = []
        self.calls = []
        self.access_token = None
        self.fail_with = None
        self._seq = 0

    def set_access_token(self, token):
        self.access_token = token

    def _check(self, op):
        self.calls.append(op)
        if self.fail_with is not None:
            raise self.fail_with
        if not self.access_token:
            raise AuthorizationError("Sin sesión activa")

    def list(self):
        self._check("list")
        return sorted(self.notes, key=lambda n: n.created_at, reverse=True)

    def create(self, title, content, **flags):
        self._check("create")
        self._seq += 1
        now = now_utc() + timedelta(seconds=self._seq)
        note = Note(id=f"remote{self._seq}", title=title, content=content, created_at=now, updated_at=now, owner="u1")
        self.notes.append(note)
        return note

    def update(self, note_id, **fields):
        self._check("update")
        for i, n in enumerate(self.notes):
            if n.id == note_id:
                changes = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
                changes["updated_at"] = n.updated_at + timedelta(seconds=1)
                self.notes[i] = n.model_copy(update=changes)
                return self.notes[i]
        raise AuthorizationError("Nota no encontrada", status_code=404)

    def delete(self, note_id):
        self._check("delete")
        before = len(self.notes)
        self.notes = [n for n in self.notes if n.id != note_id]
        if len(self.notes) == before:
            raise AuthorizationError("Nota no encontrada", status_code=404)


@pytest.fixture
def ephemeral(tmp_path):
    return EphemeralNoteStore(LocalStorage(tmp_path / "storage.json"))


@pytest.fixture
def remote():
    return FakeRemote()


def _repo(ephemeral, remote, restored=None):
    gate = SessionGate(FakeProvider(restored))
    repo = NoteRepository(ephemeral, remote, gate)
    gate.initialize()
    return repo


def test_anonymous_mode_never_touches_remote(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    assert repo.mode is RepositoryMode.ANONYMOUS

    created = repo.create("T", "C").note
    repo.update(created.id, title="T2")
    repo.toggle_pin(created.id)
    repo.toggle_favorite(created.id)
    repo.delete(created.id)

    assert remote.calls == []
    assert repo.notes() == []


def test_anonymous_mode_rejects_persistent_ids(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    result = repo.update("65f0c0ffee65f0c0ffee65f0", title="x")
    assert not result.ok
    assert isinstance(result.error, AuthorizationError)
    assert not repo.delete("65f0c0ffee65f0c0ffee65f0").ok
    assert remote.calls == []


def test_authenticated_routes_by_id_kind(ephemeral, remote):
    temp = ephemeral.create("borrador", "")
    repo = _repo(ephemeral, remote, restored=ANA)
    assert repo.mode is RepositoryMode.AUTHENTICATED
    assert remote.access_token == "tok-1"

    saved = repo.create("remota", "x").note
    assert saved.owner == "u1"
    assert remote.calls == ["list", "create"]

    repo.update(temp.id, title="borrador 2")
    assert remote.calls == ["list", "create"]
    assert ephemeral.get(temp.id).title == "borrador 2"

    repo.update(saved.id, title="remota 2")
    assert remote.calls[-1] == "update"
    assert repo.get(saved.id).title == "remota 2"


def test_sign_in_keeps_ephemeral_notes_without_migrating(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    temp = repo.create("antes de entrar", "").note

    repo.gate.sign_in("ana@notes.dev", "secreto123")

    assert repo.mode is RepositoryMode.AUTHENTICATED
    assert "create" not in remote.calls
    assert [n.id for n in repo.notes()] == [temp.id]
    assert ephemeral.get(temp.id) is not None


def test_sign_out_clears_remote_cache(ephemeral, remote):
    repo = _repo(ephemeral, remote, restored=ANA)
    repo.create("remota", "")
    assert repo.count() == 1

    repo.gate.sign_out()

    assert repo.mode is RepositoryMode.ANONYMOUS
    assert remote.access_token is None
    assert repo.notes() == []


def test_failed_remote_write_leaves_cache_untouched(ephemeral, remote):
    repo = _repo(ephemeral, remote, restored=ANA)
    saved = repo.create("remota", "").note
    before = repo.notes()

    remote.fail_with = TransportError("Backend inaccesible")
    for result in (repo.create("otra", ""), repo.update(saved.id, title="x"), repo.delete(saved.id), repo.toggle_pin(saved.id)):
        assert not result.ok
        assert isinstance(result.error, TransportError)
    assert repo.notes() == before


def test_load_failure_is_reported(ephemeral, remote):
    remote.fail_with = TransportError("Backend inaccesible")
    repo = _repo(ephemeral, remote, restored=ANA)
    assert not repo.load_result.ok
    assert repo.notes() == []


def test_toggle_flips_flags(ephemeral, remote):
    repo = _repo(ephemeral, remote, restored=ANA)
    saved = repo.create("remota", "").note

    assert repo.toggle_pin(saved.id).note.is_pinned is True
    assert repo.toggle_pin(saved.id).note.is_pinned is False
    assert repo.toggle_favorite(saved.id).note.is_favorited is True


def test_toggle_missing_notes(ephemeral, remote):
    repo = _repo(ephemeral, remote, restored=ANA)
    assert repo.toggle_pin("temp_1_abcdefghi").ok
    missing = repo.toggle_pin("65f0c0ffee65f0c0ffee65f0")
    assert not missing.ok
    assert missing.error.status_code == 404


def test_update_without_editable_fields_skips_remote(ephemeral, remote):
    repo = _repo(ephemeral, remote, restored=ANA)
    saved = repo.create("remota", "").note
    result = repo.update(saved.id, owner="otro")
    assert result.ok
    assert result.note.id == saved.id
    assert "update" not in remote.calls


def test_reads_sort_search_and_recent(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    first = repo.create("Grocery Reminder", "- milk").note
    second = repo.create("Ideas", "nada").note
    third = repo.create("Otra", "MILK").note
    repo.toggle_pin(first.id)

    assert [n.id for n in repo.notes()] == [first.id, third.id, second.id]
    assert {n.id for n in repo.search("milk")} == {first.id, third.id}
    assert [n.id for n in repo.recent(2)] == [third.id, second.id]
    assert repo.count() == 3


def test_close_unsubscribes(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    repo.close()
    repo.gate.sign_in("ana@notes.dev", "secreto123")
    assert repo.mode is RepositoryMode.ANONYMOUS


def test_invalid_ephemeral_update_is_a_typed_failure(ephemeral, remote):
    repo = _repo(ephemeral, remote)
    note = repo.create("T", "C").note

    result = repo.update(note.id, title=123)

    assert not result.ok
    assert isinstance(result.error, InvalidNoteError)
    assert repo.get(note.id).title == "T"
