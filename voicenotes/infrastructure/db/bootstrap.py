"""
Bootstrap de la base Mongo: define y aplica validadores (JSON Schema) e índices.
Se ejecuta al inicio de la app para asegurar colecciones mínimas y consistencia.
No tumba la app si algo falla; deja warnings en casos no críticos.
"""
from __future__ import annotations

from typing import Any, Dict, List
import logging
from pymongo.errors import PyMongoError
from voicenotes.infrastructure.db.mongo import get_db

_log = logging.getLogger("voicenotes.mongo.bootstrap")


def _collmod_or_create(name: str, validator: Dict[str, Any] | None) -> None:
    db = get_db()
    try:
        if name not in db.list_collection_names():
            if validator:
                db.create_collection(name, validator={"$jsonSchema": validator})
            else:
                db.create_collection(name)
        elif validator:
            db.command({
                "collMod": name,
                "validator": {"$jsonSchema": validator},
                "validationLevel": "moderate",
            })
    except PyMongoError as e:
        # No aborta el arranque; solo deja sin validator estricto.
        _log.warning("No se pudo aplicar validator en '%s': %s", name, e)


def _ensure_indexes(name: str, indexes: List[Dict[str, Any]]) -> None:
    coll = get_db()[name]
    for ix in indexes:
        ix = dict(ix)
        keys = ix.pop("keys")
        try:
            coll.create_index(keys, **ix)
        except PyMongoError as e:
            # Ignora fallas de índice (e.g., ya existe o datos no únicos previos)
            _log.warning("No se pudo crear índice en '%s' (%s): %s", name, keys, e)


USER_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["email", "password_hash", "is_active", "created_at", "updated_at"],
    "properties": {
        "email": {"bsonType": "string", "minLength": 3, "description": "lowercase"},
        "password_hash": {"bsonType": "string"},
        "is_active": {"bsonType": "bool"},
        "created_at": {"bsonType": "string", "minLength": 10},
        "updated_at": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}

NOTE_VALIDATOR: Dict[str, Any] = {
    "bsonType": "object",
    "required": ["user_id", "title", "content", "is_pinned", "is_favorited", "created_at", "updated_at"],
    "properties": {
        "user_id": {"bsonType": "string"},
        "title": {"bsonType": "string"},
        "content": {"bsonType": "string"},
        "is_pinned": {"bsonType": "bool"},
        "is_favorited": {"bsonType": "bool"},
        "created_at": {"bsonType": "string", "minLength": 10},
        "updated_at": {"bsonType": "string", "minLength": 10},
    },
    "additionalProperties": True,
}


def ensure_collections() -> None:
    """
    Garantiza colecciones, validadores e índices mínimos.
    """
    _collmod_or_create("user", USER_VALIDATOR)
    _ensure_indexes("user", [{"keys": [("email", 1)], "unique": True, "name": "uniq_email"}])

    # Notas (listado por usuario, más recientes primero)
    _collmod_or_create("note", NOTE_VALIDATOR)
    _ensure_indexes(
        "note",
        [{"keys": [("user_id", 1), ("created_at", -1)], "name": "ix_user_created"}],
    )
