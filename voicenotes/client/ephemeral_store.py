"""
Notas efímeras (sesión anónima) sobre el almacenamiento local.

- Orden de inserción, más nuevas primero.
- Cada mutación escribe la colección completa bajo una sola llave.
- Fallas de lectura/escritura se registran y no se propagan: la copia en memoria manda.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

from pydantic import ValidationError

from voicenotes.client.local_storage import LocalStorage
from voicenotes.client.models import EDITABLE_FIELDS, Note
from voicenotes.client.note_id import new_ephemeral_id
from voicenotes.core.errors import InvalidNoteError, StorageError
from voicenotes.core.time import advance, now_utc

_log = logging.getLogger("voicenotes.client.ephemeral")

TEMP_NOTES_KEY = "voice-notes-temp"


class EphemeralNoteStore:
    def __init__(self, storage: LocalStorage, key: str = TEMP_NOTES_KEY) -> None:
        self.storage = storage
        self.key = key
        self.last_error: StorageError | None = None
        self._notes: List[Note] = self._load()

    def _load(self) -> List[Note]:
        try:
            stored = self.storage.get_item(self.key)
            if not stored:
                return []
            parsed = json.loads(stored)
        except (OSError, ValueError) as e:
            _log.error("Error cargando notas temporales: %s", e)
            return []
        if not isinstance(parsed, list):
            _log.error("Error cargando notas temporales: se esperaba una lista")
            return []
        notes: List[Note] = []
        # Un registro dañado no invalida al resto
        for i, item in enumerate(parsed):
            try:
                notes.append(Note(**item))
            except (TypeError, ValidationError) as e:
                _log.error("Nota temporal #%s descartada: %s", i, e)
        return notes

    def _save(self) -> bool:
        payload = json.dumps([n.to_storage() for n in self._notes], ensure_ascii=False)
        try:
            self.storage.set_item(self.key, payload)
        except OSError as e:
            self.last_error = StorageError(str(e))
            _log.error("Error guardando notas temporales: %s", e)
            return False
        self.last_error = None
        return True

    def reload(self) -> List[Note]:
        self._notes = self._load()
        return self.list()

    def list(self) -> List[Note]:
        return list(self._notes)

    def get(self, note_id: str) -> Note | None:
        return next((n for n in self._notes if n.id == str(note_id)), None)

    def create(self, title: str, content: str) -> Note:
        now = now_utc()
        note = Note(
            id=str(new_ephemeral_id()),
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )
        self._notes.insert(0, note)
        self._save()
        return note

    def update(self, note_id: str, **fields: Any) -> Note | None:
        """Aplica campos editables; no hace nada si el id no existe.

        Lanza `InvalidNoteError` si los valores no son válidos (la nota queda intacta).
        """
        changes: Dict[str, Any] = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        for i, note in enumerate(self._notes):
            if note.id != str(note_id):
                continue
            changes["updated_at"] = advance(note.updated_at, floor=note.created_at)
            try:
                updated = Note.model_validate({**note.model_dump(), **changes})
            except ValidationError as e:
                raise InvalidNoteError(f"Campos inválidos para la nota {note.id}: {e}") from e
            self._notes[i] = updated
            self._save()
            return updated
        return None

    def delete(self, note_id: str) -> None:
        before = len(self._notes)
        self._notes = [n for n in self._notes if n.id != str(note_id)]
        if len(self._notes) != before:
            self._save()

    def clear(self) -> None:
        self._notes = []
        try:
            self.storage.remove_item(self.key)
        except OSError as e:
            self.last_error = StorageError(str(e))
            _log.error("Error limpiando notas temporales: %s", e)
