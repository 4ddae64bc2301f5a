"""Route integration tests (via HTTP client) - auth, friends, calendar, suggestions."""

from sqlalchemy.exc import OperationalError


async def _register(client, name: str) -> dict:
    """Sign up and sign in; returns {"id", "headers"}."""
    email = f"{name}@example.com"
    resp = await client.post(
        "/api/auth/signup",
        json={"email": email, "password": "secret1", "full_name": name.title()},
    )
    assert resp.status_code == 201, resp.text
    resp = await client.post("/api/auth/signin", json={"email": email, "password": "secret1"})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    return {"id": data["user_id"], "headers": {"Authorization": f"Bearer {data['access_token']}"}}


async def _make_friends(client, a: dict, b: dict, b_email: str) -> None:
    resp = await client.post("/api/friends/requests", json={"email": b_email}, headers=a["headers"])
    assert resp.status_code == 201, resp.text
    request_id = resp.json()["id"]
    resp = await client.post(f"/api/friends/requests/{request_id}/accept", headers=b["headers"])
    assert resp.status_code == 200, resp.text


# ---------------------------------------------------------------------------
# Auth & profile
# ---------------------------------------------------------------------------


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


async def test_signup_duplicate_email(client):
    await _register(client, "alice")
    resp = await client.post(
        "/api/auth/signup",
        json={"email": "alice@example.com", "password": "secret1", "full_name": "Again"},
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


async def test_signin_bad_password(client):
    await _register(client, "alice")
    resp = await client.post(
        "/api/auth/signin", json={"email": "alice@example.com", "password": "nope-nope"}
    )
    assert resp.status_code == 401


async def test_protected_route_requires_token(client):
    resp = await client.get("/api/profile/")
    assert resp.status_code == 401
    resp = await client.get("/api/profile/", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401


async def test_session_and_signout(client):
    alice = await _register(client, "alice")

    resp = await client.get("/api/auth/session", headers=alice["headers"])
    assert resp.json() == {"user_id": alice["id"]}

    resp = await client.post("/api/auth/signout", headers=alice["headers"])
    assert resp.status_code == 204

    resp = await client.get("/api/auth/session", headers=alice["headers"])
    assert resp.json() == {"user_id": None}
    resp = await client.get("/api/profile/", headers=alice["headers"])
    assert resp.status_code == 401


async def test_profile_update(client):
    alice = await _register(client, "alice")

    resp = await client.patch(
        "/api/profile/", json={"avatar_url": "https://img.example.com/a.png"}, headers=alice["headers"]
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["full_name"] == "Alice"  # unchanged
    assert data["avatar_url"] == "https://img.example.com/a.png"

    resp = await client.patch("/api/profile/", json={"full_name": ""}, headers=alice["headers"])
    assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Friends
# ---------------------------------------------------------------------------


async def test_friend_request_flow(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")

    resp = await client.post(
        "/api/friends/requests", json={"email": "bob@example.com"}, headers=alice["headers"]
    )
    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"

    resp = await client.get("/api/friends/requests", headers=bob["headers"])
    incoming = resp.json()["incoming"]
    assert len(incoming) == 1
    assert incoming[0]["counterpart"]["id"] == alice["id"]

    # duplicate request
    resp = await client.post(
        "/api/friends/requests", json={"email": "bob@example.com"}, headers=alice["headers"]
    )
    assert resp.status_code == 409

    resp = await client.post(
        f"/api/friends/requests/{incoming[0]['id']}/accept", headers=bob["headers"]
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "accepted"

    resp = await client.get("/api/friends/", headers=alice["headers"])
    assert [f["id"] for f in resp.json()] == [bob["id"]]

    # bob unfriends alice even though alice sent the request
    resp = await client.delete(f"/api/friends/{alice['id']}", headers=bob["headers"])
    assert resp.status_code == 204
    resp = await client.get("/api/friends/", headers=alice["headers"])
    assert resp.json() == []


async def test_friend_request_errors(client):
    alice = await _register(client, "alice")

    resp = await client.post(
        "/api/friends/requests", json={"email": "ghost@example.com"}, headers=alice["headers"]
    )
    assert resp.status_code == 404

    resp = await client.post(
        "/api/friends/requests", json={"email": "alice@example.com"}, headers=alice["headers"]
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "INVALID_INPUT"


async def test_reject_and_cancel(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")

    resp = await client.post(
        "/api/friends/requests", json={"email": "bob@example.com"}, headers=alice["headers"]
    )
    request_id = resp.json()["id"]
    resp = await client.post(f"/api/friends/requests/{request_id}/reject", headers=bob["headers"])
    assert resp.status_code == 204

    resp = await client.post(
        "/api/friends/requests", json={"email": "bob@example.com"}, headers=alice["headers"]
    )
    request_id = resp.json()["id"]
    resp = await client.delete(f"/api/friends/requests/{request_id}", headers=alice["headers"])
    assert resp.status_code == 204

    resp = await client.get("/api/friends/requests", headers=alice["headers"])
    assert resp.json() == {"incoming": [], "outgoing": []}


# ---------------------------------------------------------------------------
# Availability & suggestions
# ---------------------------------------------------------------------------


async def test_set_toggle_and_month_view(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")
    await _make_friends(client, alice, bob, "bob@example.com")

    resp = await client.put(
        "/api/availability/2024-06-10", json={"status": "available"}, headers=alice["headers"]
    )
    assert resp.json() == {"date": "2024-06-10", "status": "available"}

    resp = await client.post("/api/availability/2024-06-11/toggle", headers=alice["headers"])
    assert resp.json()["status"] == "busy"

    await client.put(
        "/api/availability/2024-06-12", json={"status": "available"}, headers=bob["headers"]
    )

    resp = await client.get("/api/availability/?year=2024&month=6", headers=alice["headers"])
    assert resp.status_code == 200
    days = resp.json()
    assert [d["date"] for d in days] == ["2024-06-10", "2024-06-11", "2024-06-12"]
    assert days[0]["own_status"] == "available"
    assert days[1]["own_status"] == "busy"
    assert days[2]["own_status"] == "unspecified"
    assert [f["id"] for f in days[2]["available_friends"]] == [bob["id"]]

    # clearing
    resp = await client.put(
        "/api/availability/2024-06-10", json={"status": None}, headers=alice["headers"]
    )
    assert resp.json()["status"] == "unspecified"

    resp = await client.get(
        "/api/availability/range?start=2024-06-10&end=2024-06-12", headers=alice["headers"]
    )
    assert [d["date"] for d in resp.json()] == ["2024-06-11"]


async def test_invalid_status_and_month(client):
    alice = await _register(client, "alice")

    resp = await client.put(
        "/api/availability/2024-06-10", json={"status": "maybe"}, headers=alice["headers"]
    )
    assert resp.status_code == 422

    resp = await client.get("/api/availability/?year=2024&month=13", headers=alice["headers"])
    assert resp.status_code == 422

    for year, month in ((0, 1), (9999, 12)):
        resp = await client.get(
            f"/api/availability/?year={year}&month={month}", headers=alice["headers"]
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_INPUT"

    resp = await client.get("/api/suggestions/?today=9999-12-31", headers=alice["headers"])
    assert resp.status_code == 422


async def test_suggestions(client):
    alice = await _register(client, "alice")
    bob = await _register(client, "bob")
    await _make_friends(client, alice, bob, "bob@example.com")

    for day in ("2024-06-10", "2024-06-11"):
        await client.put(f"/api/availability/{day}", json={"status": "available"}, headers=alice["headers"])
    await client.put(
        "/api/availability/2024-06-11", json={"status": "available"}, headers=bob["headers"]
    )

    resp = await client.get("/api/suggestions/?today=2024-06-10&days=7", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.json() == [
        {
            "date": "2024-06-11",
            "overlapping_friends": [{"id": bob["id"], "full_name": "Bob", "avatar_url": None}],
            "count": 1,
        }
    ]

    resp = await client.get("/api/suggestions/?today=2024-06-10&days=-1", headers=alice["headers"])
    assert resp.status_code == 422


async def test_store_outage_maps_to_503(client, monkeypatch):
    from meetcal.services.meetup_ranking import meetup_ranking_service

    alice = await _register(client, "alice")

    async def unreachable(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(meetup_ranking_service, "rank_meetups", unreachable)

    resp = await client.get("/api/suggestions/", headers=alice["headers"])
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "STORE_UNAVAILABLE"


async def test_email_case_does_not_split_accounts(client):
    resp = await client.post(
        "/api/auth/signup",
        json={"email": "Carol@Example.com", "password": "secret1", "full_name": "Carol"},
    )
    assert resp.status_code == 201
    assert resp.json()["email"] == "carol@example.com"

    resp = await client.post(
        "/api/auth/signup",
        json={"email": "carol@example.com", "password": "secret1", "full_name": "Carol 2"},
    )
    assert resp.status_code == 409

    alice = await _register(client, "alice")
    resp = await client.post(
        "/api/friends/requests", json={"email": "CAROL@example.com"}, headers=alice["headers"]
    )
    assert resp.status_code == 201
