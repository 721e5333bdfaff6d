"""
Lógica de autenticación: registro y login local (argon2 + JWT).
"""
import logging
from typing import Any, Dict

from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from argon2.low_level import Type
from pymongo.errors import DuplicateKeyError

from voicenotes.repositories import user_repo as repo
from voicenotes.services.token_service import create_access_token

_log = logging.getLogger("voicenotes.auth")

ph = PasswordHasher(time_cost=2, memory_cost=51200, parallelism=2, hash_len=32, salt_len=16, type=Type.ID)


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def public_user(u: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": str(u["_id"]), "email": u.get("email")}


def register_user(*, email: str, password: str) -> Dict[str, Any]:
    """Registra un usuario local activo. Lanza ValueError si el email ya existe."""
    email = email.lower()
    if repo.find_user_by_email(email):
        raise ValueError("Email ya registrado")
    try:
        inserted_id = repo.insert_user(email, hash_password(password))
    except DuplicateKeyError:
        raise ValueError("Email ya registrado")
    _log.info("Usuario registrado id=%s", inserted_id)
    return {"id": inserted_id, "email": email}


def login_local(*, email: str, password: str) -> Dict[str, Any]:
    u = repo.find_user_by_email(email.lower())
    if not u or not u.get("password_hash") or not verify_password(password, u["password_hash"]):
        raise ValueError("Credenciales inválidas")
    if not u.get("is_active"):
        raise ValueError("Usuario inactivo")
    return {
        "access_token": create_access_token(user=u),
        "token_type": "bearer",
        "user": public_user(u),
    }
