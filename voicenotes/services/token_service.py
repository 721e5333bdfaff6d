"""
Creación y verificación de JWTs de acceso.
"""
from datetime import timedelta
from typing import Any, Dict
from uuid import uuid4

import jwt as pyjwt

from voicenotes.core.config import settings
from voicenotes.core.time import now_utc


def create_access_token(*, user: Dict[str, Any]) -> str:
    """
    Genera un JWT (HS256 por defecto) válido por ACCESS_TOKEN_EXPIRE_MINUTES.
    Claims: sub(user_id), email, iat, exp, jti.
    """
    now = now_utc()
    exp = now + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(user["_id"]),
        "email": user.get("email"),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "jti": str(uuid4()),
    }
    return pyjwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decodifica y valida firma/expiración. Devuelve payload.
    Lanza `jwt.PyJWTError` si el token no es válido.
    """
    return pyjwt.decode(token, key=settings.jwt_secret, algorithms=[settings.jwt_algorithm])
