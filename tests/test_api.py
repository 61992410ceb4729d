"""HTTP-level tests: routing, status codes and error mapping."""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi import HTTPException
from starlette.websockets import WebSocketDisconnect

from app.database import get_supabase
from app.models.user import User
from app.services.base import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from app.utils.realtime import ConnectionManager, SocketEventPublisher
from app.utils.router_helpers import handle_service_errors


def household_url(household_id, path=""):
    return f"/api/households/{household_id}{path}"


def test_root_and_health(api, admin):
    client = api.as_user(admin)

    assert client.get("/").json()["status"] == "running"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["background_tasks"]["running"] is False


class TestHouseholds:
    def test_create_and_fetch(self, api, admin, publisher):
        client = api.as_user(admin)

        response = client.post("/api/households/", json={"name": "Cedar Flat"})
        assert response.status_code == 201
        household = response.json()["data"]
        assert household["name"] == "Cedar Flat"
        assert publisher.names() == ["household_update"]

        fetched = client.get(household_url(household["id"]))
        assert fetched.status_code == 200
        assert fetched.json()["data"]["id"] == household["id"]

        mine = client.get("/api/households/").json()["data"]
        assert [h["id"] for h in mine] == [household["id"]]

    def test_member_cannot_update(self, api, household_id, member, publisher):
        response = api.as_user(member).patch(household_url(household_id), json={"name": "Mine now"})

        assert response.status_code == 403
        assert publisher.events == []

    def test_outsider_gets_forbidden(self, api, household_id, outsider):
        assert api.as_user(outsider).get(household_url(household_id)).status_code == 403

    def test_request_body_is_validated(self, api, admin):
        response = api.as_user(admin).post("/api/households/", json={"name": ""})
        assert response.status_code == 422

    def test_pending_invitations(self, api, household_id, admin, outsider):
        api.as_user(admin).post(
            household_url(household_id, "/invitations"), json={"email": outsider.email}
        )

        response = api.as_user(outsider).get("/api/households/invitations")
        assert response.status_code == 200
        assert [i["household_id"] for i in response.json()["data"]] == [household_id]


class TestChores:
    def test_create_and_missing_chore(self, api, household_id, admin, member):
        client = api.as_user(admin)
        created = client.post(
            household_url(household_id, "/chores/"),
            json={"title": "Vacuum", "assigned_user_ids": [member.id]},
        )
        assert created.status_code == 201
        assert created.json()["data"]["assignments"][0]["user_id"] == member.id

        assert client.get(household_url(household_id, "/chores/9999")).status_code == 404

    def test_non_member_assignee_is_bad_request(self, api, household_id, admin, outsider):
        response = api.as_user(admin).post(
            household_url(household_id, "/chores/"),
            json={"title": "Vacuum", "assigned_user_ids": [outsider.id]},
        )
        assert response.status_code == 400

    def test_chore_event_lifecycle_routes(self, api, household_id, admin, member):
        client = api.as_user(admin)
        chore_id = client.post(household_url(household_id, "/chores/"), json={"title": "Mow"}).json()[
            "data"
        ]["id"]
        events_url = household_url(household_id, f"/chores/{chore_id}/events")
        event = client.post(
            events_url,
            json={"title": "Mow lawn", "start_time": "2026-05-10T18:00:00", "end_time": "2026-05-10T19:00:00"},
        ).json()["data"]

        upcoming = client.get(f"{events_url}/upcoming", params={"limit": 5})
        assert upcoming.status_code == 200
        assert [e["id"] for e in upcoming.json()["data"]] == [event["id"]]

        moved = client.post(
            f"{events_url}/{event['id']}/reschedule",
            json={"start_time": "2026-05-11T09:00:00", "end_time": "2026-05-11T10:00:00"},
        )
        assert moved.status_code == 200
        assert moved.json()["data"]["start_time"].startswith("2026-05-11T09:00")

        done = client.post(f"{events_url}/{event['id']}/complete")
        assert done.json()["data"]["status"] == "COMPLETED"
        assert client.get(f"{events_url}/upcoming").json()["data"] == []

        event_url = f"{events_url}/{event['id']}"
        assert api.as_user(member).delete(event_url).status_code == 403
        assert client.delete(event_url).status_code == 204
        assert response.status_code == 400


class TestExpenses:
    def test_only_admin_deletes(self, api, household_id, admin, member):
        created = api.as_user(admin).post(
            household_url(household_id, "/expenses/"),
            json={"description": "Groceries", "amount": 42.5},
        )
        assert created.status_code == 201
        expense_url = household_url(household_id, f"/expenses/{created.json()['data']['id']}")

        assert api.as_user(member).delete(expense_url).status_code == 403
        assert api.as_user(admin).delete(expense_url).status_code == 204
        assert api.as_user(admin).get(expense_url).status_code == 404


class TestNotifications:
    def test_settings_round_trip(self, api, member):
        client = api.as_user(member)
        assert client.get("/api/notifications/settings").json()["data"]["chore_notif"] is True

        updated = client.patch("/api/notifications/settings", json={"chore_notif": False})
        assert updated.status_code == 200
        assert updated.json()["data"]["chore_notif"] is False

    def test_list_is_paginated(self, api, household_id, admin, member):
        api.as_user(admin).post(
            household_url(household_id, "/chores/"),
            json={"title": "Dishes", "assigned_user_ids": [member.id]},
        )

        body = api.as_user(member).get("/api/notifications/", params={"page_size": 10}).json()
        assert len(body["data"]) == 1
        assert body["pagination"]["total_items"] == 1
        assert body["pagination"]["has_more"] is False

    def test_household_settings_admin_only(self, api, household_id, member):
        response = api.as_user(member).patch(
            f"/api/notifications/settings/households/{household_id}",
            json={"event_notif": False},
        )
        assert response.status_code == 403


class TestUsers:
    def test_profile(self, api, member):
        client = api.as_user(member)
        assert client.get("/api/users/me").json()["data"]["name"] == "Bob Member"

        updated = client.patch("/api/users/me", json={"name": "Bobby"})
        assert updated.json()["data"]["name"] == "Bobby"


class FakeAuth:
    def __init__(self):
        self.signed_out = False

    def get_user(self, token):
        return None

    def sign_in_with_password(self, credentials):
        if credentials["password"] != "correct horse":
            raise RuntimeError("Invalid login credentials")
        return SimpleNamespace(
            user=SimpleNamespace(
                id="supabase-new",
                email=credentials["email"],
                user_metadata={"name": "Nina New"},
            ),
            session=SimpleNamespace(
                access_token="access", refresh_token="refresh", expires_in=3600
            ),
        )

    def sign_out(self):
        self.signed_out = True


class FakeSupabase:
    def __init__(self):
        self.auth = FakeAuth()


@pytest.fixture
def supabase(api):
    client = FakeSupabase()
    api.app.dependency_overrides[get_supabase] = lambda: client
    return client


class TestAuth:
    def test_login_creates_local_user_and_sets_cookie(self, api, db, supabase):
        response = api.client.post(
            "/api/auth/login",
            json={"email": "nina@example.com", "password": "correct horse"},
        )

        assert response.status_code == 200
        body = response.json()["data"]
        assert body["access_token"] == "access"
        assert body["user"]["name"] == "Nina New"
        assert "refresh_token" in response.headers["set-cookie"]
        assert db.query(User).filter(User.supabase_id == "supabase-new").count() == 1

    def test_bad_password_is_unauthorized(self, api, supabase):
        response = api.client.post(
            "/api/auth/login",
            json={"email": "nina@example.com", "password": "wrong"},
        )
        assert response.status_code == 401

    def test_register_rejects_known_email(self, api, member, supabase):
        response = api.client.post(
            "/api/auth/register",
            json={"email": member.email, "password": "long enough", "name": "Bob"},
        )
        assert response.status_code == 400

    def test_refresh_without_cookie(self, api, supabase):
        assert api.client.post("/api/auth/refresh-token").status_code == 401

    def test_logout(self, api, supabase):
        assert api.client.post("/api/auth/logout").status_code == 204
        assert supabase.auth.signed_out is True


def test_websocket_rejects_invalid_token(api, supabase):
    with pytest.raises(WebSocketDisconnect):
        with api.client.websocket_connect("/ws?token=bogus") as websocket:
            websocket.receive_text()


@pytest.mark.parametrize(
    "error,status_code",
    [
        (UnauthorizedError("no"), 403),
        (NotFoundError("missing"), 404),
        (ValidationError("bad"), 400),
        (ConflictError("taken"), 409),
        (ValueError("odd"), 400),
        (RuntimeError("boom"), 500),
    ],
)
def test_service_errors_map_to_http_status(error, status_code):
    @handle_service_errors
    async def endpoint():
        raise error

    with pytest.raises(HTTPException) as exc_info:
        asyncio.run(endpoint())
    assert exc_info.value.status_code == status_code


def test_socket_publisher_holds_broadcast_task_until_done():
    class FakeSocket:
        def __init__(self):
            self.sent = []

        async def send_json(self, message):
            self.sent.append(message)

    connection_manager = ConnectionManager()
    socket = FakeSocket()
    connection_manager.rooms["household_1"].add(socket)
    publisher = SocketEventPublisher(connection_manager)

    async def emit_and_drain():
        publisher.emit("household_1", "chore_update", {"id": 7})
        in_flight = len(connection_manager.tasks)
        await asyncio.gather(*list(connection_manager.tasks))
        # done callbacks run on the next loop iteration
        await asyncio.sleep(0)
        return in_flight

    assert asyncio.run(emit_and_drain()) == 1
    assert connection_manager.tasks == set()
    assert socket.sent[0]["event"] == "chore_update"
    assert socket.sent[0]["data"] == {"id": 7}
