"""Fixtures compartidas: Mongo en memoria (mongomock), OpenAI falso y sesión HTTP sobre TestClient."""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any, List, Optional, Tuple

import mongomock
import pytest
from fastapi.testclient import TestClient

from voicenotes.core import rate_limit
from voicenotes.infrastructure.db.mongo import set_db
from voicenotes.main import app


class FakeOpenAI:
    """Imita `client.audio.transcriptions` y `client.chat.completions` del SDK."""

    def __init__(
        self,
        transcript: str = "",
        formatted: Any = None,
        transcribe_error: Optional[Exception] = None,
        format_error: Optional[Exception] = None,
    ) -> None:
        self.transcript = transcript
        self.formatted = formatted
        self.transcribe_error = transcribe_error
        self.format_error = format_error
        self.calls: List[Tuple[str, dict]] = []
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._complete))

    def stages(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _transcribe(self, **kwargs):
        self.calls.append(("transcribe", kwargs))
        if self.transcribe_error is not None:
            raise self.transcribe_error
        return SimpleNamespace(text=self.transcript)

    def _complete(self, **kwargs):
        self.calls.append(("format", kwargs))
        if self.format_error is not None:
            raise self.format_error
        content = self.formatted if isinstance(self.formatted, str) or self.formatted is None else json.dumps(self.formatted)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestClientSession:
    """Adaptador con la firma de `requests.Session.request` que despacha a un TestClient."""

    __test__ = False

    def __init__(self, client: TestClient) -> None:
        self.client = client
        self.requests: List[Tuple[str, str]] = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.requests.append((method, url))
        return self.client.request(method, url, json=json, headers=headers)


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    rate_limit.reset()
    yield
    rate_limit.reset()


@pytest.fixture
def db():
    database = mongomock.MongoClient()["voicenotes_test"]
    set_db(database)
    yield database
    set_db(None)


@pytest.fixture
def client(db) -> TestClient:
    return TestClient(app)


@pytest.fixture
def fake_openai(monkeypatch):
    """Instala un FakeOpenAI como cliente global del servicio de transcripción."""
    fake = FakeOpenAI()
    monkeypatch.setattr("voicenotes.services.transcribe_service.get_openai", lambda: fake)
    return fake


def register_and_login(client: TestClient, email: str = "ana@notes.dev", password: str = "secreto123") -> dict:
    r = client.post("/api/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    r = client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
