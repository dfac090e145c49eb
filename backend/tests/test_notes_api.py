"""Tests for the /api/notes endpoints."""

import pytest


@pytest.fixture()
def room_id(client, auth_headers):
    resp = client.post("/api/rooms", json={"name": "Inbox"}, headers=auth_headers)
    return resp.json()["room"]["_id"]


def _create_note(client, headers, room_id, **fields):
    body = {"roomId": room_id}
    body.update(fields)
    resp = client.post("/api/notes", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["note"]


class TestCreateNote:

    def test_create_with_defaults(self, client, auth_headers, room_id):
        resp = client.post("/api/notes", json={"roomId": room_id}, headers=auth_headers)
        assert resp.status_code == 201
        note = resp.json()["note"]
        assert note["title"] == "Untitled Note"
        assert note["content"] == ""
        assert note["room"] == room_id
        assert note["user"] == "user-1"

    def test_response_uses_client_field_names(self, client, auth_headers, room_id):
        note = _create_note(client, auth_headers, room_id, title="Keys", content="c")
        assert set(note) == {
            "_id", "title", "content", "room", "user", "createdAt", "updatedAt",
        }
        assert note["_id"].startswith("note-")

    def test_missing_room_id_is_400(self, client, auth_headers):
        resp = client.post("/api/notes", json={"title": "Lost"}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "VALIDATION_ERROR"
        assert resp.json()["details"] == {"field": "roomId"}
        assert client.get("/api/notes", headers=auth_headers).json()["notes"] == []

    def test_room_of_other_owner_is_404(self, client, room_id, make_headers):
        resp = client.post(
            "/api/notes", json={"roomId": room_id, "title": "x"}, headers=make_headers("user-2")
        )
        assert resp.status_code == 404

    def test_requires_token(self, client, room_id):
        assert client.post("/api/notes", json={"roomId": room_id}).status_code == 401


class TestListNotes:

    def test_by_room_and_all(self, client, auth_headers, room_id):
        other_room = client.post(
            "/api/rooms", json={"name": "Other"}, headers=auth_headers
        ).json()["room"]["_id"]
        first = _create_note(client, auth_headers, room_id, title="First")
        second = _create_note(client, auth_headers, room_id, title="Second")
        _create_note(client, auth_headers, other_room, title="Elsewhere")

        by_room = client.get(f"/api/notes/room/{room_id}", headers=auth_headers).json()["notes"]
        assert [n["_id"] for n in by_room] == [second["_id"], first["_id"]]

        everything = client.get("/api/notes", headers=auth_headers).json()["notes"]
        assert len(everything) == 3

    def test_other_owner_sees_nothing(self, client, auth_headers, room_id, make_headers):
        _create_note(client, auth_headers, room_id, title="Private")
        resp = client.get(f"/api/notes/room/{room_id}", headers=make_headers("user-2"))
        assert resp.status_code == 200
        assert resp.json()["notes"] == []


class TestUpdateNote:

    def test_partial_update(self, client, auth_headers, room_id):
        note = _create_note(client, auth_headers, room_id, title="Keep", content="old")
        resp = client.put(f"/api/notes/{note['_id']}", json={"content": "x"}, headers=auth_headers)
        assert resp.status_code == 200
        updated = resp.json()["note"]
        assert updated["title"] == "Keep"
        assert updated["content"] == "x"

    def test_update_other_owner_is_404(self, client, auth_headers, room_id, make_headers):
        note = _create_note(client, auth_headers, room_id)
        resp = client.put(
            f"/api/notes/{note['_id']}", json={"title": "mine now"}, headers=make_headers("user-2")
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "NOTE_NOT_FOUND"


class TestDeleteNote:

    def test_delete(self, client, auth_headers, room_id):
        note = _create_note(client, auth_headers, room_id)
        resp = client.delete(f"/api/notes/{note['_id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Note deleted successfully"}
        assert client.delete(f"/api/notes/{note['_id']}", headers=auth_headers).status_code == 404
