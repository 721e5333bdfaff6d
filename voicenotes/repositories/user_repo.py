"""Persistencia de usuarios (auth local)."""
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId

from voicenotes.core.time import now_utc, to_iso
from voicenotes.infrastructure.db.mongo import get_db

USER_COLL = "user"


def find_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """Busca usuario por email (email en minúsculas)."""
    return get_db()[USER_COLL].find_one({"email": email})


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    """Obtiene usuario por id (str)."""
    try:
        oid = ObjectId(user_id)
    except (InvalidId, TypeError):
        return None
    return get_db()[USER_COLL].find_one({"_id": oid})


def insert_user(email: str, password_hash: str) -> str:
    """Inserta usuario activo y devuelve id (str)."""
    now = to_iso(now_utc())
    res = get_db()[USER_COLL].insert_one({
        "email": email,
        "password_hash": password_hash,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    })
    return str(res.inserted_id)
