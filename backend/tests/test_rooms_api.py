"""Tests for the /api/rooms endpoints."""

from sqlalchemy.exc import OperationalError

from noteria.repositories.room_repository import RoomRepository


def _create(client, headers, name, parent=None):
    body = {"name": name}
    if parent is not None:
        body["parentRoom"] = parent
    resp = client.post("/api/rooms", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["room"]


class TestAuthRequired:

    def test_missing_token_is_401(self, client):
        resp = client.get("/api/rooms")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_bad_token_is_401(self, client):
        resp = client.get("/api/rooms/root", headers={"Authorization": "Bearer nope.nope.nope"})
        assert resp.status_code == 401


class TestCreateRoom:

    def test_create_root(self, client, auth_headers):
        resp = client.post("/api/rooms", json={"name": "Inbox"}, headers=auth_headers)
        assert resp.status_code == 201
        data = resp.json()
        assert data["message"] == "Room created successfully"
        assert data["room"]["name"] == "Inbox"
        assert data["room"]["user"] == "user-1"
        assert data["room"]["parentRoom"] is None
        assert data["room"]["path"] == []

    def test_create_subroom_with_camel_case_parent(self, client, auth_headers):
        inbox = _create(client, auth_headers, "Inbox")
        drafts = _create(client, auth_headers, "Drafts", inbox["_id"])
        assert drafts["parentRoom"] == inbox["_id"]
        assert drafts["path"] == [inbox["_id"]]

    def test_response_uses_client_field_names(self, client, auth_headers):
        inbox = _create(client, auth_headers, "Inbox")
        drafts = _create(client, auth_headers, "Drafts", inbox["_id"])
        assert set(drafts) == {
            "_id", "name", "user", "parentRoom", "path", "createdAt", "updatedAt",
        }
        assert drafts["_id"].startswith("room-")

        listed = client.get("/api/rooms", headers=auth_headers).json()["rooms"]
        assert all("_id" in room and "id" not in room for room in listed)

    def test_snake_case_parent_accepted(self, client, auth_headers):
        inbox = _create(client, auth_headers, "Inbox")
        resp = client.post(
            "/api/rooms", json={"name": "Drafts", "parent_id": inbox["_id"]}, headers=auth_headers
        )
        assert resp.json()["room"]["path"] == [inbox["_id"]]

    def test_unknown_parent_is_404(self, client, auth_headers):
        resp = client.post(
            "/api/rooms", json={"name": "X", "parentRoom": "room-missing"}, headers=auth_headers
        )
        assert resp.status_code == 404
        assert resp.json()["error"] == "ROOM_NOT_FOUND"

    def test_empty_name_is_400(self, client, auth_headers):
        resp = client.post("/api/rooms", json={"name": "  "}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["details"] == {"field": "name"}

    def test_owner_in_body_is_ignored(self, client, auth_headers):
        resp = client.post(
            "/api/rooms", json={"name": "Mine", "owner": "someone-else"}, headers=auth_headers
        )
        assert resp.json()["room"]["user"] == "user-1"


class TestListRooms:

    def test_root_listing_excludes_subrooms(self, client, auth_headers):
        a = _create(client, auth_headers, "A")
        b = _create(client, auth_headers, "B")
        _create(client, auth_headers, "A child", a["_id"])

        resp = client.get("/api/rooms/root", headers=auth_headers)
        assert resp.status_code == 200
        assert [r["_id"] for r in resp.json()["rooms"]] == [b["_id"], a["_id"]]

        all_rooms = client.get("/api/rooms", headers=auth_headers).json()["rooms"]
        assert len(all_rooms) == 3

    def test_children_listing(self, client, auth_headers):
        a = _create(client, auth_headers, "A")
        child = _create(client, auth_headers, "Child", a["_id"])
        resp = client.get(f"/api/rooms/parent/{a['_id']}", headers=auth_headers)
        assert [r["_id"] for r in resp.json()["rooms"]] == [child["_id"]]

    def test_children_of_foreign_room_is_404(self, client, auth_headers, make_headers):
        theirs = _create(client, make_headers("user-2"), "Theirs")
        resp = client.get(f"/api/rooms/parent/{theirs['_id']}", headers=auth_headers)
        assert resp.status_code == 404

    def test_rooms_are_isolated_between_owners(self, client, auth_headers, make_headers):
        _create(client, make_headers("user-2"), "Theirs")
        assert client.get("/api/rooms", headers=auth_headers).json()["rooms"] == []


class TestGetRoom:

    def test_get_and_breadcrumb(self, client, auth_headers):
        inbox = _create(client, auth_headers, "Inbox")
        drafts = _create(client, auth_headers, "Drafts", inbox["_id"])
        urgent = _create(client, auth_headers, "Urgent", drafts["_id"])

        resp = client.get(f"/api/rooms/{urgent['_id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["room"]["path"] == [inbox["_id"], drafts["_id"]]

        crumbs = client.get(f"/api/rooms/{urgent['_id']}/breadcrumb", headers=auth_headers).json()
        assert [r["name"] for r in crumbs["rooms"]] == ["Inbox", "Drafts", "Urgent"]

    def test_foreign_and_missing_look_identical(self, client, auth_headers, make_headers):
        theirs = _create(client, make_headers("user-2"), "Theirs")
        foreign = client.get(f"/api/rooms/{theirs['_id']}", headers=auth_headers)
        missing = client.get("/api/rooms/room-missing", headers=auth_headers)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json()["error"] == missing.json()["error"]


class TestRenameAndMove:

    def test_rename(self, client, auth_headers):
        room = _create(client, auth_headers, "Old")
        resp = client.put(f"/api/rooms/{room['_id']}", json={"name": "New"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["room"]["name"] == "New"

    def test_rename_by_other_owner_is_404(self, client, auth_headers, make_headers):
        room = _create(client, auth_headers, "A")
        resp = client.put(
            f"/api/rooms/{room['_id']}", json={"name": "B"}, headers=make_headers("user-2")
        )
        assert resp.status_code == 404

    def test_move_and_cycle_rejection(self, client, auth_headers):
        a = _create(client, auth_headers, "A")
        b = _create(client, auth_headers, "B")
        a1 = _create(client, auth_headers, "A1", a["_id"])

        resp = client.put(f"/api/rooms/{a1['_id']}/move", json={"parentRoom": b["_id"]}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["room"]["path"] == [b["_id"]]

        resp = client.put(f"/api/rooms/{b['_id']}/move", json={"parentRoom": a1["_id"]}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "CIRCULAR_REFERENCE"

        resp = client.put(f"/api/rooms/{a1['_id']}/move", json={"parentRoom": None}, headers=auth_headers)
        assert resp.json()["room"]["parentRoom"] is None


class TestDeleteRoom:

    def test_cascade_delete(self, client, auth_headers):
        inbox = _create(client, auth_headers, "Inbox")
        drafts = _create(client, auth_headers, "Drafts", inbox["_id"])
        urgent = _create(client, auth_headers, "Urgent", drafts["_id"])
        note = client.post(
            "/api/notes", json={"title": "N", "content": "x", "roomId": urgent["_id"]}, headers=auth_headers
        ).json()["note"]

        resp = client.delete(f"/api/rooms/{inbox['_id']}", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json() == {
            "message": "Room deleted successfully",
            "rooms_deleted": 3,
            "notes_deleted": 1,
        }

        for room_id in (inbox["_id"], drafts["_id"], urgent["_id"]):
            assert client.get(f"/api/rooms/{room_id}", headers=auth_headers).status_code == 404
        assert client.get("/api/notes", headers=auth_headers).json()["notes"] == []
        assert client.put(
            f"/api/notes/{note['_id']}", json={"title": "gone"}, headers=auth_headers
        ).status_code == 404

    def test_store_failure_is_500_without_sql(self, client, auth_headers, monkeypatch):
        room = _create(client, auth_headers, "Inbox")

        def fail(self, owner, ids):
            raise OperationalError("DELETE FROM rooms WHERE owner = 'user-1'", {}, Exception("locked"))

        monkeypatch.setattr(RoomRepository, "delete_owned_many", fail)
        resp = client.delete(f"/api/rooms/{room['_id']}", headers=auth_headers)
        assert resp.status_code == 500
        assert resp.json() == {
            "error": "DATABASE_ERROR",
            "message": "Failed to delete room",
            "details": {},
        }
        assert "DELETE FROM" not in resp.text

        monkeypatch.undo()
        assert client.get(f"/api/rooms/{room['_id']}", headers=auth_headers).status_code == 200

    def test_delete_twice_is_404(self, client, auth_headers):
        room = _create(client, auth_headers, "Temp")
        assert client.delete(f"/api/rooms/{room['_id']}", headers=auth_headers).status_code == 200
        assert client.delete(f"/api/rooms/{room['_id']}", headers=auth_headers).status_code == 404

    def test_delete_by_other_owner_is_404(self, client, auth_headers, make_headers):
        room = _create(client, auth_headers, "Mine")
        resp = client.delete(f"/api/rooms/{room['_id']}", headers=make_headers("user-2"))
        assert resp.status_code == 404
        assert client.get(f"/api/rooms/{room['_id']}", headers=auth_headers).status_code == 200
