"""Compuerta de sesión: estado inicial, eventos y proveedor contra la API."""
import pytest
import requests

from conftest import TestClientSession, register_and_login
from voicenotes.client.http import ApiClient
from voicenotes.client.local_storage import LocalStorage
from voicenotes.client.session import (
    SESSION_KEY,
    ApiAuthProvider,
    Identity,
    SessionEventType,
    SessionGate,
    SessionState,
)
from voicenotes.core.errors import AuthError

ANA = Identity(user_id="u1", email="ana@notes.dev", access_token="tok-1")


class FakeProvider:
    def __init__(self, restored=None, fail_sign_in=False):
        self.restored = restored
        self.fail_sign_in = fail_sign_in
        self.restore_calls = 0
        self.signed_out = False

    def restore(self):
        self.restore_calls += 1
        return self.restored

    def sign_in(self, email, password):
        if self.fail_sign_in:
            raise AuthError("Credenciales inválidas")
        return ANA

    def sign_up(self, email, password):
        return None

    def sign_out(self):
        self.signed_out = True


def _recording(gate):
    events = []
    gate.subscribe(events.append)
    return events


def test_starts_loading_and_resolves_once():
    provider = FakeProvider()
    gate = SessionGate(provider)
    assert gate.is_loading
    assert gate.initialize() is SessionState.ANONYMOUS
    assert gate.initialize() is SessionState.ANONYMOUS
    assert provider.restore_calls == 1


def test_initial_anonymous_resolution_emits_identity_lost():
    gate = SessionGate(FakeProvider())
    events = _recording(gate)
    gate.initialize()
    assert [e.type for e in events] == [SessionEventType.IDENTITY_LOST]


def test_restored_session_emits_identity_acquired():
    gate = SessionGate(FakeProvider(restored=ANA))
    events = _recording(gate)
    gate.initialize()
    assert gate.is_authenticated
    assert [(e.type, e.identity) for e in events] == [(SessionEventType.IDENTITY_ACQUIRED, ANA)]


def test_sign_in_and_out_emit_transitions():
    provider = FakeProvider()
    gate = SessionGate(provider)
    gate.initialize()
    events = _recording(gate)

    gate.sign_in("ana@notes.dev", "secreto123")
    gate.sign_out()
    gate.sign_out()

    assert [e.type for e in events] == [SessionEventType.IDENTITY_ACQUIRED, SessionEventType.IDENTITY_LOST]
    assert provider.signed_out
    assert gate.state is SessionState.ANONYMOUS


def test_failed_sign_in_keeps_state_and_emits_nothing():
    gate = SessionGate(FakeProvider(fail_sign_in=True))
    gate.initialize()
    events = _recording(gate)
    with pytest.raises(AuthError):
        gate.sign_in("ana@notes.dev", "mal")
    assert events == []
    assert gate.state is SessionState.ANONYMOUS


def test_unsubscribe_stops_delivery():
    gate = SessionGate(FakeProvider())
    events = []
    unsubscribe = gate.subscribe(events.append)
    unsubscribe()
    unsubscribe()
    gate.initialize()
    assert events == []


def _provider(client, tmp_path):
    api = ApiClient("http://testserver/api", session=TestClientSession(client))
    return ApiAuthProvider(api, LocalStorage(tmp_path / "storage.json"))


def test_api_provider_sign_in_persists_session(client, tmp_path):
    register_and_login(client)
    provider = _provider(client, tmp_path)

    identity = provider.sign_in("ana@notes.dev", "secreto123")
    assert identity.email == "ana@notes.dev"

    restored = _provider(client, tmp_path).restore()
    assert restored is not None
    assert restored.user_id == identity.user_id


def test_api_provider_bad_credentials_raise_auth_error(client, tmp_path):
    register_and_login(client)
    with pytest.raises(AuthError):
        _provider(client, tmp_path).sign_in("ana@notes.dev", "incorrecta")


def test_api_provider_drops_invalid_stored_token(client, tmp_path):
    storage = LocalStorage(tmp_path / "storage.json")
    storage.set_item(SESSION_KEY, '{"access_token": "caducado"}')
    provider = _provider(client, tmp_path)

    assert provider.restore() is None
    assert storage.get_item(SESSION_KEY) is None


def test_api_provider_sign_out_clears_session(client, tmp_path):
    register_and_login(client)
    provider = _provider(client, tmp_path)
    provider.sign_in("ana@notes.dev", "secreto123")
    provider.sign_out()
    assert _provider(client, tmp_path).restore() is None


class OfflineSession:
    def request(self, method, url, json=None, headers=None, timeout=None):
        raise requests.ConnectionError("sin red")


def test_api_provider_keeps_token_when_offline(tmp_path):
    storage = LocalStorage(tmp_path / "storage.json")
    storage.set_item(SESSION_KEY, '{"access_token": "valid-token"}')
    provider = ApiAuthProvider(ApiClient("http://backend/api", session=OfflineSession()), storage)

    gate = SessionGate(provider)
    assert gate.initialize() is SessionState.ANONYMOUS
    assert storage.get_item(SESSION_KEY) == '{"access_token": "valid-token"}'
