"""
Dependencias reutilizables para routers (FastAPI Depends).

- Autenticación: extrae y valida Access Token, devuelve el usuario actual.
- Llave pública del cliente (`apikey`): solo da forma a la petición, no autoriza.
- Mantener esta capa delgada: sin lógica de negocio pesada.
"""
from typing import Optional, Dict, Any

import jwt
from fastapi import HTTPException, Header
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from voicenotes.core.config import settings
from voicenotes.repositories import user_repo as repo
from voicenotes.services.token_service import verify_access_token


def require_client_key(apikey: Optional[str] = Header(default=None)) -> None:
    if settings.client_key and apikey != settings.client_key:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="API key inválida")


def get_current_user(authorization: Optional[str] = Header(default=None)) -> Dict[str, Any]:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Falta token")
    token = authorization.split(" ", 1)[1]
    try:
        payload = verify_access_token(token)
    except jwt.PyJWTError:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token inválido")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Token inválido")

    u = repo.get_user_by_id(user_id)
    if not u:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Usuario no encontrado")
    if not u.get("is_active"):
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Usuario inactivo")
    return u
