"""
Modelos del cliente: `Note` (efímera o persistente) y `NotePayload` (salida del pipeline).
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from voicenotes.client.note_id import EphemeralId, NoteId, parse_note_id
from voicenotes.core.time import parse_iso, to_iso

EDITABLE_FIELDS = ("title", "content", "is_pinned", "is_favorited")


class NotePayload(BaseModel):
    """Única forma de la salida del pipeline: `{title, content}`."""
    model_config = ConfigDict(frozen=True)

    title: str
    content: str


class Note(BaseModel):
    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime
    is_pinned: bool = False
    is_favorited: bool = False
    owner: Optional[str] = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _to_datetime(cls, v: Any) -> datetime:
        return parse_iso(v)

    @model_validator(mode="after")
    def _check_invariants(self):
        if self.updated_at < self.created_at:
            raise ValueError("updated_at anterior a created_at")
        if self.is_ephemeral and self.owner is not None:
            raise ValueError("Una nota efímera no tiene dueño")
        if not self.is_ephemeral and not self.owner:
            raise ValueError("Una nota persistente requiere dueño")
        return self

    @property
    def note_id(self) -> NoteId:
        return parse_note_id(self.id)

    @property
    def is_ephemeral(self) -> bool:
        return isinstance(self.note_id, EphemeralId)

    @classmethod
    def from_remote(cls, data: Dict[str, Any]) -> "Note":
        """Construye desde el JSON del backend (`user_id` → `owner`)."""
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            content=data.get("content") or "",
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            is_pinned=bool(data.get("is_pinned", False)),
            is_favorited=bool(data.get("is_favorited", False)),
            owner=data.get("user_id"),
        )

    def to_storage(self) -> Dict[str, Any]:
        """Forma serializada del almacenamiento local (timestamps ISO, sin dueño)."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
            "is_pinned": self.is_pinned,
            "is_favorited": self.is_favorited,
        }


def sort_notes(notes: Iterable[Note]) -> List[Note]:
    """Orden de despliegue: fijadas primero; dentro de cada grupo, updated_at desc (estable)."""
    return sorted(notes, key=lambda n: (not n.is_pinned, -n.updated_at.timestamp()))


def filter_notes(notes: Iterable[Note], query: str) -> List[Note]:
    """Búsqueda por subcadena (sin distinguir mayúsculas) en título y contenido."""
    q = (query or "").lower()
    if not q:
        return list(notes)
    return [n for n in notes if q in n.title.lower() or q in n.content.lower()]
