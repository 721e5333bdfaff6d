"""
Adaptador del almacén remoto de notas (`/api/note`).

La identidad viaja solo como bearer token; el backend decide el dueño y
rechaza notas ajenas. Las fallas se lanzan como `NoteStoreError`.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from voicenotes.client.http import ApiClient
from voicenotes.client.models import EDITABLE_FIELDS, Note
from voicenotes.core.errors import AuthorizationError, TransportError


class PersistentNoteStore:
    def __init__(self, api: ApiClient, access_token: Optional[str] = None) -> None:
        self.api = api
        self.access_token = access_token

    def set_access_token(self, token: Optional[str]) -> None:
        self.access_token = token

    def _token(self) -> str:
        if not self.access_token:
            raise AuthorizationError("Sin sesión activa")
        return self.access_token

    @staticmethod
    def _note(data: Any) -> Note:
        try:
            return Note.from_remote(data)
        except (KeyError, TypeError, ValidationError) as e:
            raise TransportError(f"Nota inválida del backend: {e}") from e

    def list(self) -> List[Note]:
        """Notas del usuario, created_at desc."""
        data = self.api.json("GET", "note", token=self._token())
        items = (data or {}).get("note") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise TransportError("Respuesta inválida al listar notas")
        notes = [self._note(i) for i in items]
        return sorted(notes, key=lambda n: n.created_at, reverse=True)

    def create(self, title: str, content: str, **flags: Any) -> Note:
        body: Dict[str, Any] = {"title": title, "content": content}
        body.update({k: bool(v) for k, v in flags.items() if k in ("is_pinned", "is_favorited")})
        return self._note(self.api.json("POST", "note", json=body, token=self._token()))

    def update(self, note_id: str, **fields: Any) -> Note:
        body = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        return self._note(self.api.json("PATCH", f"note/{note_id}", json=body, token=self._token()))

    def delete(self, note_id: str) -> None:
        self.api.request("DELETE", f"note/{note_id}", token=self._token())
