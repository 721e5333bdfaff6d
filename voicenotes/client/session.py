"""
Compuerta de sesión/identidad.

Envuelve al proveedor de autenticación y emite eventos explícitos de
adquisición/pérdida de identidad a quien se suscriba (el repositorio de notas).
Arranca en LOADING hasta que `initialize()` resuelve la sesión guardada, una sola vez.
"""
from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from voicenotes.client.http import ApiClient
from voicenotes.client.local_storage import LocalStorage
from voicenotes.core.errors import AuthError, AuthorizationError, NoteStoreError, TransportError

_log = logging.getLogger("voicenotes.client.session")

SESSION_KEY = "voice-notes-session"


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    access_token: str


class SessionState(str, enum.Enum):
    LOADING = "loading"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionEventType(str, enum.Enum):
    IDENTITY_ACQUIRED = "identity-acquired"
    IDENTITY_LOST = "identity-lost"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    identity: Optional[Identity]


Listener = Callable[[SessionEvent], None]


class AuthProvider(Protocol):
    def restore(self) -> Optional[Identity]: ...

    def sign_in(self, email: str, password: str) -> Identity: ...

    def sign_up(self, email: str, password: str) -> None: ...

    def sign_out(self) -> None: ...


class ApiAuthProvider:
    """Proveedor contra `/api/auth/*`; guarda la sesión en el almacenamiento local si se da uno."""

    def __init__(self, api: ApiClient, storage: Optional[LocalStorage] = None) -> None:
        self.api = api
        self.storage = storage

    def _stored_token(self) -> Optional[str]:
        if self.storage is None:
            return None
        try:
            raw = self.storage.get_item(SESSION_KEY)
            return (json.loads(raw) or {}).get("access_token") if raw else None
        except (OSError, ValueError, AttributeError) as e:
            _log.warning("Sesión guardada ilegible: %s", e)
            return None

    def _store(self, identity: Optional[Identity]) -> None:
        if self.storage is None:
            return
        try:
            if identity is None:
                self.storage.remove_item(SESSION_KEY)
            else:
                self.storage.set_item(SESSION_KEY, json.dumps({"access_token": identity.access_token}))
        except OSError as e:
            _log.error("No se pudo guardar la sesión: %s", e)

    def restore(self) -> Optional[Identity]:
        token = self._stored_token()
        if not token:
            return None
        try:
            me = self.api.json("GET", "auth/me", token=token)
        except AuthorizationError as e:
            _log.info("Sesión guardada no válida: %s", e.message)
            self._store(None)
            return None
        except TransportError as e:
            # Sin red: se conserva el token y este arranque queda anónimo
            _log.warning("No se pudo validar la sesión guardada: %s", e.message)
            return None
        return Identity(user_id=str(me["id"]), email=me.get("email", ""), access_token=token)

    def sign_in(self, email: str, password: str) -> Identity:
        try:
            data = self.api.json("POST", "auth/login", json={"email": email, "password": password})
        except NoteStoreError as e:
            raise AuthError(e.message) from e
        user = data.get("user") or {}
        identity = Identity(user_id=str(user.get("id")), email=user.get("email", email), access_token=data["access_token"])
        self._store(identity)
        return identity

    def sign_up(self, email: str, password: str) -> None:
        try:
            self.api.json("POST", "auth/register", json={"email": email, "password": password})
        except NoteStoreError as e:
            raise AuthError(e.message) from e

    def sign_out(self) -> None:
        self._store(None)


class SessionGate:
    def __init__(self, provider: AuthProvider) -> None:
        self.provider = provider
        self.state = SessionState.LOADING
        self.identity: Optional[Identity] = None
        self._listeners: List[Listener] = []

    @property
    def is_loading(self) -> bool:
        return self.state is SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registra un listener; devuelve la función para desuscribirse."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _set(self, identity: Optional[Identity]) -> None:
        was_loading = self.is_loading
        previous = self.identity
        self.identity = identity
        self.state = SessionState.AUTHENTICATED if identity else SessionState.ANONYMOUS
        if identity is not None and (previous is None or previous.user_id != identity.user_id or was_loading):
            self._emit(SessionEvent(SessionEventType.IDENTITY_ACQUIRED, identity))
        elif identity is None and (previous is not None or was_loading):
            self._emit(SessionEvent(SessionEventType.IDENTITY_LOST, None))

    def initialize(self) -> SessionState:
        """Resuelve la sesión inicial (una sola vez; llamadas siguientes no hacen nada)."""
        if not self.is_loading:
            return self.state
        try:
            identity = self.provider.restore()
        except AuthError as e:
            _log.warning("No se pudo restaurar la sesión: %s", e)
            identity = None
        self._set(identity)
        return self.state

    def sign_in(self, email: str, password: str) -> Identity:
        identity = self.provider.sign_in(email, password)
        self._set(identity)
        return identity

    def sign_up(self, email: str, password: str) -> None:
        self.provider.sign_up(email, password)

    def sign_out(self) -> None:
        self.provider.sign_out()
        self._set(None)
