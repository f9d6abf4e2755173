"""HTTP Routes — status codes and error envelope through the FastAPI app.

Invariants:
    - Domain errors surface with their http_status and the shared envelope
    - Missing/invalid input → 400 VALIDATION_ERROR
    - Requester identity is the X-User-Id header
"""

from uuid import uuid4


def _as(user):
    return {"X-User-Id": str(user.id)}


# ─── health ──────────────────────────────────────────────────────

async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_with_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


# ─── boosts ──────────────────────────────────────────────────────

async def test_plan_catalog(client):
    res = await client.get("/api/v1/boosts/plans")
    assert res.status_code == 200
    plans = {p["plan_id"]: p for p in res.json()}
    assert plans["boost_24h"]["credits_required"] == 3
    assert plans["boost_week"]["duration_hours"] == 168


async def test_apply_boost_returns_receipt(client, artist, track):
    res = await client.post(
        f"/api/v1/tracks/{track.id}/boosts",
        json={"plan_id": "boost_72h"},
        headers=_as(artist),
    )
    assert res.status_code == 201
    body = res.json()
    assert body["premium_credits"] == 0
    assert body["standard_credits"] == 97
    assert body["boost_pool"] == 8
    assert body["boost"]["premium_credits_spent"] == 5

    listed = await client.get(f"/api/v1/tracks/{track.id}/boosts")
    assert [b["plan_id"] for b in listed.json()] == ["boost_72h"]


async def test_apply_boost_unknown_plan(client, artist, track):
    res = await client.post(
        f"/api/v1/tracks/{track.id}/boosts",
        json={"plan_id": "boost_forever"},
        headers=_as(artist),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "UNKNOWN_BOOST_PLAN"


async def test_apply_boost_insufficient_credits(client, make_user, make_track):
    poor = await make_user(premium_credits=1, standard_credits=1)
    own_track = await make_track(poor)
    res = await client.post(
        f"/api/v1/tracks/{own_track.id}/boosts",
        json={"plan_id": "boost_24h"},
        headers=_as(poor),
    )
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "INSUFFICIENT_CREDITS"
    assert error["category"] == "business_rule"


async def test_apply_boost_not_owner(client, listener, track):
    res = await client.post(
        f"/api/v1/tracks/{track.id}/boosts",
        json={"plan_id": "boost_24h"},
        headers=_as(listener),
    )
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "NOT_TRACK_OWNER"


async def test_apply_boost_missing_track(client, artist):
    res = await client.post(
        f"/api/v1/tracks/{uuid4()}/boosts",
        json={"plan_id": "boost_24h"},
        headers=_as(artist),
    )
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_missing_identity_header_is_validation_error(client, track):
    res = await client.post(
        f"/api/v1/tracks/{track.id}/boosts", json={"plan_id": "boost_24h"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_expire_endpoint_noop_by_default(client):
    res = await client.post("/api/v1/boosts/expire")
    assert res.status_code == 200
    assert res.json() == {"expired": 0}


# ─── votes ───────────────────────────────────────────────────────

async def test_cast_then_correct_vote(client, listener, track):
    first = await client.post(
        "/api/v1/votes",
        json={"track_id": str(track.id), "vote_count": 3},
        headers=_as(listener),
    )
    assert first.status_code == 200
    assert first.json()["votes_remaining"] == 7
    assert first.json()["previous_count"] is None

    second = await client.post(
        "/api/v1/votes",
        json={"track_id": str(track.id), "vote_count": 1},
        headers=_as(listener),
    )
    body = second.json()
    assert body["previous_count"] == 3
    assert body["total_votes_delta"] == -2
    assert body["votes_remaining"] == 9
    assert body["track_total_votes"] == 1

    listed = await client.get("/api/v1/votes", params={"track_id": str(track.id)})
    assert len(listed.json()) == 1


async def test_vote_over_allowance(client, make_user, track):
    voter = await make_user(monthly_votes_remaining=2)
    res = await client.post(
        "/api/v1/votes",
        json={"track_id": str(track.id), "vote_count": 5},
        headers=_as(voter),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INSUFFICIENT_VOTES"


async def test_vote_count_below_one_is_validation_error(client, listener, track):
    res = await client.post(
        "/api/v1/votes",
        json={"track_id": str(track.id), "vote_count": 0},
        headers=_as(listener),
    )
    assert res.status_code == 400
    details = res.json()["error"]["details"]
    assert any(d["field"].endswith("vote_count") for d in details)


async def test_blank_vote_type_defaults(client, listener, track):
    res = await client.post(
        "/api/v1/votes",
        json={"track_id": str(track.id), "vote_count": 1, "vote_type": "  "},
        headers=_as(listener),
    )
    assert res.json()["vote"]["vote_type"] == "leaderboard"


async def test_leaderboard(client, artist, make_track):
    await make_track(artist, title="quiet", total_votes=1)
    await make_track(artist, title="loud", total_votes=12)
    res = await client.get("/api/v1/votes/leaderboard", params={"limit": 5})
    assert [t["title"] for t in res.json()] == ["loud", "quiet"]


async def test_wallet(client, artist):
    res = await client.get("/api/v1/wallet", headers=_as(artist))
    assert res.status_code == 200
    body = res.json()
    assert body["premium_credits"] == 5
    assert body["standard_credits"] == 100
    assert body["monthly_votes_remaining"] == 10


async def test_wallet_unknown_user(client):
    res = await client.get("/api/v1/wallet", headers={"X-User-Id": str(uuid4())})
    assert res.status_code == 404


# ─── discovery ───────────────────────────────────────────────────

async def test_discover_next_returns_track(client, listener, track):
    res = await client.get("/api/v1/discover/next", headers=_as(listener))
    assert res.status_code == 200
    body = res.json()
    assert body["exhausted"] is False
    assert body["track"]["id"] == str(track.id)


async def test_discover_next_exhausted_after_seen(client, listener, track):
    res = await client.get(
        "/api/v1/discover/next",
        params={"seen": [str(track.id)]},
        headers=_as(listener),
    )
    assert res.json() == {"track": None, "exhausted": True}


async def test_discover_eligible_count(client, listener, artist, make_track):
    await make_track(artist, title="a")
    await make_track(artist, title="b")
    res = await client.get("/api/v1/discover/eligible", headers=_as(listener))
    assert res.json()["count"] == 2


async def test_listen_and_skip_counters(client, track):
    listen = await client.post(f"/api/v1/tracks/{track.id}/listen")
    skip = await client.post(f"/api/v1/tracks/{track.id}/skip")
    assert listen.json() == {"track_id": str(track.id), "value": 1}
    assert skip.json()["value"] == 1
