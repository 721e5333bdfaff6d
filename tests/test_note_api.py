"""API remota de notas y auth (Mongo en memoria)."""
from conftest import auth_headers, register_and_login
from voicenotes.core.time import parse_iso


def test_health(client):
    assert client.get("/api/ping").json() == {"message": "pong"}
    assert client.get("/api/health").json()["ok"] is True


def test_register_duplicate_email_is_400(client):
    register_and_login(client)
    r = client.post("/api/auth/register", json={"email": "ANA@notes.dev", "password": "otro12345"})
    assert r.status_code == 400


def test_login_wrong_password_is_401(client):
    register_and_login(client)
    r = client.post("/api/auth/login", json={"email": "ana@notes.dev", "password": "nope"})
    assert r.status_code == 401


def test_me(client):
    tokens = register_and_login(client)
    r = client.get("/api/auth/me", headers=auth_headers(tokens["access_token"]))
    assert r.status_code == 200
    assert r.json()["email"] == "ana@notes.dev"


def test_notes_require_token(client):
    assert client.get("/api/note").status_code == 401
    r = client.get("/api/note", headers=auth_headers("garbage"))
    assert r.status_code == 401
    assert r.json()["message"] == "Token inválido"


def test_crud_flow(client):
    tokens = register_and_login(client)
    h = auth_headers(tokens["access_token"])

    r = client.post("/api/note", json={"title": "T", "content": "C"}, headers=h)
    assert r.status_code == 201
    note = r.json()
    assert note["user_id"] == tokens["user"]["id"]
    assert note["is_pinned"] is False and note["is_favorited"] is False
    assert note["created_at"] == note["updated_at"]

    r = client.patch(f"/api/note/{note['id']}", json={"is_pinned": True}, headers=h)
    assert r.status_code == 200
    updated = r.json()
    assert updated["is_pinned"] is True
    assert parse_iso(updated["updated_at"]) > parse_iso(note["updated_at"])

    r = client.delete(f"/api/note/{note['id']}", headers=h)
    assert r.status_code == 204
    assert client.get("/api/note", headers=h).json() == {"note": []}


def test_list_is_created_at_desc(client):
    h = auth_headers(register_and_login(client)["access_token"])
    ids = [client.post("/api/note", json={"title": f"n{i}"}, headers=h).json()["id"] for i in range(3)]
    listed = [n["id"] for n in client.get("/api/note", headers=h).json()["note"]]
    assert listed == list(reversed(ids))


def test_owner_comes_from_token_not_payload(client):
    tokens = register_and_login(client)
    h = auth_headers(tokens["access_token"])
    r = client.post("/api/note", json={"title": "T", "content": "C", "user_id": "someone-else"}, headers=h)
    assert r.json()["user_id"] == tokens["user"]["id"]


def test_foreign_notes_are_invisible(client):
    ana = auth_headers(register_and_login(client)["access_token"])
    bob = auth_headers(register_and_login(client, "bob@notes.dev")["access_token"])
    note_id = client.post("/api/note", json={"title": "secreto"}, headers=ana).json()["id"]

    assert client.get("/api/note", headers=bob).json() == {"note": []}
    assert client.patch(f"/api/note/{note_id}", json={"title": "x"}, headers=bob).status_code == 404
    assert client.delete(f"/api/note/{note_id}", headers=bob).status_code == 404
    assert client.get("/api/note", headers=ana).json()["note"][0]["title"] == "secreto"


def test_unknown_and_malformed_ids_are_404(client):
    h = auth_headers(register_and_login(client)["access_token"])
    assert client.patch("/api/note/not-an-objectid", json={"title": "x"}, headers=h).status_code == 404
    assert client.delete("/api/note/65f0c0ffee65f0c0ffee65f0", headers=h).status_code == 404


def test_empty_patch_is_422(client):
    h = auth_headers(register_and_login(client)["access_token"])
    note_id = client.post("/api/note", json={"title": "T"}, headers=h).json()["id"]
    r = client.patch(f"/api/note/{note_id}", json={}, headers=h)
    assert r.status_code == 422
    assert r.json()["message"] == "Validation error"
