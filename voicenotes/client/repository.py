"""
Repositorio de notas: fachada que enruta entre almacén efímero y persistente.

- ANONYMOUS: todo va al almacén efímero.
- AUTHENTICATED: se enruta por id. `EphemeralId` → efímero, `PersistentId` → remoto;
  las notas nuevas van al remoto. Las efímeras no se migran al iniciar sesión.

Las escrituras devuelven `OperationResult`; ante una falla la caché queda intacta
y el error viaja tipado para que la UI lo notifique.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from voicenotes.client.ephemeral_store import EphemeralNoteStore
from voicenotes.client.models import EDITABLE_FIELDS, Note, filter_notes, sort_notes
from voicenotes.client.note_id import EphemeralId, NoteId, PersistentId, parse_note_id
from voicenotes.client.persistent_store import PersistentNoteStore
from voicenotes.client.session import SessionEvent, SessionEventType, SessionGate
from voicenotes.core.errors import AuthorizationError, InvalidNoteError, NoteStoreError

_log = logging.getLogger("voicenotes.client.repository")


class RepositoryMode(str, enum.Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass
class OperationResult:
    ok: bool
    note: Optional[Note] = None
    error: Optional[NoteStoreError] = None

    @classmethod
    def success(cls, note: Optional[Note] = None) -> "OperationResult":
        return cls(ok=True, note=note)

    @classmethod
    def failure(cls, error: NoteStoreError) -> "OperationResult":
        return cls(ok=False, error=error)


class NoteRepository:
    def __init__(
        self,
        ephemeral: EphemeralNoteStore,
        persistent: PersistentNoteStore,
        gate: SessionGate,
    ) -> None:
        self.ephemeral = ephemeral
        self.persistent = persistent
        self.gate = gate
        self.mode = RepositoryMode.ANONYMOUS
        self._persistent_notes: List[Note] = []
        self.load_result: OperationResult = OperationResult.success()
        self._unsubscribe = gate.subscribe(self._on_session_event)
        if gate.identity is not None:
            self._enter_authenticated(gate.identity.access_token)

    def close(self) -> None:
        self._unsubscribe()

    # --- transiciones de sesión ---

    def _on_session_event(self, event: SessionEvent) -> None:
        if event.type is SessionEventType.IDENTITY_ACQUIRED and event.identity is not None:
            self._enter_authenticated(event.identity.access_token)
        elif event.type is SessionEventType.IDENTITY_LOST:
            self._enter_anonymous()

    def _enter_authenticated(self, token: str) -> None:
        self.mode = RepositoryMode.AUTHENTICATED
        self.persistent.set_access_token(token)
        self.load_result = self.reload_persistent()

    def _enter_anonymous(self) -> None:
        self.mode = RepositoryMode.ANONYMOUS
        self.persistent.set_access_token(None)
        self._persistent_notes = []
        self.ephemeral.reload()

    def reload_persistent(self) -> OperationResult:
        """Reemplaza la caché remota; ante falla queda vacía y se reporta."""
        try:
            self._persistent_notes = self.persistent.list()
        except NoteStoreError as e:
            _log.error("Error cargando notas: %s", e.message)
            self._persistent_notes = []
            return OperationResult.failure(e)
        return OperationResult.success()

    # --- lecturas ---

    def _store_order(self) -> List[Note]:
        if self.mode is RepositoryMode.ANONYMOUS:
            return self.ephemeral.list()
        return self._persistent_notes + self.ephemeral.list()

    def notes(self) -> List[Note]:
        """Notas visibles en orden de despliegue (fijadas primero, luego updated_at desc)."""
        return sort_notes(self._store_order())

    def search(self, query: str) -> List[Note]:
        return sort_notes(filter_notes(self._store_order(), query))

    def recent(self, limit: int = 3) -> List[Note]:
        return self._store_order()[:limit]

    def count(self) -> int:
        return len(self._store_order())

    def get(self, note_id: str | NoteId) -> Optional[Note]:
        key = str(note_id)
        return next((n for n in self._store_order() if n.id == key), None)

    # --- escrituras ---

    def _route(self, note_id: str | NoteId) -> NoteId:
        nid = parse_note_id(note_id)
        if isinstance(nid, PersistentId) and self.mode is RepositoryMode.ANONYMOUS:
            raise AuthorizationError("Inicia sesión para modificar esta nota")
        return nid

    def create(self, title: str, content: str) -> OperationResult:
        if self.mode is RepositoryMode.ANONYMOUS:
            return OperationResult.success(self.ephemeral.create(title, content))
        try:
            note = self.persistent.create(title, content)
        except NoteStoreError as e:
            _log.error("Error guardando nota: %s", e.message)
            return OperationResult.failure(e)
        self._persistent_notes = [note] + self._persistent_notes
        return OperationResult.success(note)

    def update(self, note_id: str | NoteId, **fields: Any) -> OperationResult:
        try:
            nid = self._route(note_id)
        except AuthorizationError as e:
            return OperationResult.failure(e)
        if isinstance(nid, EphemeralId):
            try:
                return OperationResult.success(self.ephemeral.update(nid.key, **fields))
            except InvalidNoteError as e:
                _log.error("Error actualizando nota %s: %s", nid.key, e.message)
                return OperationResult.failure(e)
        if not any(k in EDITABLE_FIELDS for k in fields):
            return OperationResult.success(self.get(nid))
        try:
            note = self.persistent.update(nid.key, **fields)
        except NoteStoreError as e:
            _log.error("Error actualizando nota %s: %s", nid.key, e.message)
            return OperationResult.failure(e)
        self._persistent_notes = [note if n.id == note.id else n for n in self._persistent_notes]
        return OperationResult.success(note)

    def delete(self, note_id: str | NoteId) -> OperationResult:
        try:
            nid = self._route(note_id)
        except AuthorizationError as e:
            return OperationResult.failure(e)
        if isinstance(nid, EphemeralId):
            self.ephemeral.delete(nid.key)
            return OperationResult.success()
        try:
            self.persistent.delete(nid.key)
        except NoteStoreError as e:
            _log.error("Error eliminando nota %s: %s", nid.key, e.message)
            return OperationResult.failure(e)
        self._persistent_notes = [n for n in self._persistent_notes if n.id != nid.key]
        return OperationResult.success()

    def _toggle(self, note_id: str | NoteId, field: str) -> OperationResult:
        note = self.get(note_id)
        if note is None:
            try:
                nid = self._route(note_id)
            except AuthorizationError as e:
                return OperationResult.failure(e)
            if isinstance(nid, EphemeralId):
                return OperationResult.success()
            return OperationResult.failure(AuthorizationError("Nota no encontrada", status_code=404))
        return self.update(note_id, **{field: not getattr(note, field)})

    def toggle_pin(self, note_id: str | NoteId) -> OperationResult:
        return self._toggle(note_id, "is_pinned")

    def toggle_favorite(self, note_id: str | NoteId) -> OperationResult:
        return self._toggle(note_id, "is_favorited")

