"""Rutas de autenticación: registro, login y usuario actual."""
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, status

from voicenotes.api.deps import get_current_user, require_client_key
from voicenotes.api.schemas.auth import LoginPayload, RegisterPayload, TokenOut, UserOut
from voicenotes.core import rate_limit
from voicenotes.services import auth_service as service

router = APIRouter(prefix="/auth", tags=["Auth"], dependencies=[Depends(require_client_key)])


@router.post(
    "/register",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar usuario",
)
def register(payload: RegisterPayload) -> UserOut:
    try:
        return UserOut(**service.register_user(email=payload.email, password=payload.password))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/login",
    response_model=TokenOut,
    summary="Login local",
    description="Valida email+password y emite un access token.",
)
def login(payload: LoginPayload, request: Request) -> TokenOut:
    # Rate limit por IP
    ip = request.client.host if request.client else ""
    if not rate_limit.allow((ip, "/auth/login"), limit=10):
        raise HTTPException(status_code=429, detail="Demasiados intentos, espera un momento")
    try:
        return TokenOut(**service.login_local(email=payload.email, password=payload.password))
    except ValueError as e:
        raise HTTPException(status_code=401, detail=f"Login inválido: {e}")


@router.get("/me", response_model=UserOut, summary="Usuario actual")
def me(user: Dict[str, Any] = Depends(get_current_user)) -> UserOut:
    return UserOut(**service.public_user(user))
