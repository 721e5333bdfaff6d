"""Cliente HTTP mínimo (requests) hacia el backend de Voice Notes."""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from voicenotes.core.errors import AuthorizationError, TransportError

_log = logging.getLogger("voicenotes.client.http")

AUTH_STATUSES = {401, 403, 404}


def error_message(resp: Any) -> str:
    """Extrae `message`/`error`/`detail` del cuerpo de error, si lo hay."""
    try:
        data = resp.json()
    except ValueError:
        return (getattr(resp, "text", "") or "").strip() or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        for k in ("message", "error", "detail"):
            if data.get(k):
                return str(data[k])
    return f"HTTP {resp.status_code}"


class ApiClient:
    """
    Envía peticiones JSON con timeout acotado y clasifica fallas:
    red/timeout/5xx → TransportError; 401/403/404 → AuthorizationError.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.client_key = client_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def headers(self, token: Optional[str] = None) -> dict:
        h = {"Content-Type": "application/json"}
        if self.client_key:
            h["apikey"] = self.client_key
        bearer = token or self.client_key
        if bearer:
            h["Authorization"] = f"Bearer {bearer}"
        return h

    def request(self, method: str, path: str, *, json: Any = None, token: Optional[str] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}" if path else self.base_url
        try:
            resp = self.session.request(
                method,
                url,
                json=json,
                headers=self.headers(token),
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise TransportError(f"Timeout en {method} {url}") from e
        except requests.RequestException as e:
            raise TransportError(f"Backend inaccesible: {e}") from e

        if resp.status_code in AUTH_STATUSES:
            raise AuthorizationError(error_message(resp), status_code=resp.status_code)
        if not 200 <= resp.status_code < 300:
            _log.warning("%s %s -> %s", method, url, resp.status_code)
            raise TransportError(error_message(resp), status_code=resp.status_code)
        return resp

    def json(self, method: str, path: str, **kwargs: Any) -> Any:
        resp = self.request(method, path, **kwargs)
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"Respuesta no JSON de {path}") from e
