"""Repo de la colección `note` (siempre acotado por `user_id`)."""
from typing import Dict, Any, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument

from voicenotes.core.time import advance, now_utc, parse_iso, to_iso
from voicenotes.infrastructure.db.mongo import get_db

COLLECTION = "note"

MUTABLE_FIELDS = ("title", "content", "is_pinned", "is_favorited")


def _oid(note_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(note_id)
    except (InvalidId, TypeError):
        return None


def _out(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return data


def insert_note(user_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
    """Inserta nota con defaults y devuelve el documento (con `id`)."""
    now = to_iso(now_utc())
    data = {
        "user_id": str(user_id),
        "title": doc.get("title", ""),
        "content": doc.get("content", ""),
        "is_pinned": bool(doc.get("is_pinned", False)),
        "is_favorited": bool(doc.get("is_favorited", False)),
        "created_at": now,
        "updated_at": now,
    }
    res = get_db()[COLLECTION].insert_one(data)
    data["_id"] = res.inserted_id
    return _out(data)


def list_notes(user_id: str) -> List[Dict[str, Any]]:
    """Lista notas del usuario (ordenadas por created_at desc)."""
    cursor = get_db()[COLLECTION].find({"user_id": str(user_id)}).sort("created_at", -1)
    return [_out(d) for d in cursor]


def get_note(user_id: str, note_id: str) -> Optional[Dict[str, Any]]:
    oid = _oid(note_id)
    if oid is None:
        return None
    doc = get_db()[COLLECTION].find_one({"_id": oid, "user_id": str(user_id)})
    return _out(doc) if doc else None


def update_note(user_id: str, note_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Actualiza campos permitidos y avanza `updated_at`. None si no existe o es ajena."""
    current = get_note(user_id, note_id)
    if current is None:
        return None
    changes = {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
    changes["updated_at"] = to_iso(
        advance(parse_iso(current["updated_at"]), floor=parse_iso(current["created_at"]))
    )
    doc = get_db()[COLLECTION].find_one_and_update(
        {"_id": ObjectId(current["id"]), "user_id": str(user_id)},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    return _out(doc) if doc else None


def delete_note(user_id: str, note_id: str) -> bool:
    oid = _oid(note_id)
    if oid is None:
        return False
    res = get_db()[COLLECTION].delete_one({"_id": oid, "user_id": str(user_id)})
    return res.deleted_count > 0
