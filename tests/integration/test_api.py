"""HTTP API tests: routing, status codes and response shapes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


def _payload(user_id: int, points: int = 5, **extra) -> dict:
    body = {"user_id": user_id, "pages_read": 12, "distance_km": 2.5, "timezone": "UTC"}
    body.update({f"task_{n}": 1 if n <= points else 0 for n in range(1, 11)})
    body.update(extra)
    return body


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_ready_reports_redis_unavailable(self, client: AsyncClient):
        response = await client.get("/ready")
        data = response.json()
        assert data["checks"]["database"] == "ok"
        assert data["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_version(self, client: AsyncClient):
        data = (await client.get("/version")).json()
        assert "version" in data
        assert "environment" in data

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-Id": "abc-123"})
        assert response.headers["x-request-id"] == "abc-123"


class TestUsersApi:
    @pytest.mark.asyncio
    async def test_register_and_approve(self, client: AsyncClient, admin_headers):
        response = await client.post("/api/v1/users/register", json={"user_id": 42, "name": "Ali Valiyev"})
        assert response.status_code == 201
        assert response.json()["is_approved"] is False

        profile = (await client.get("/api/v1/users/42")).json()
        assert profile["status"]["is_registered"] is True
        assert profile["status"]["is_approved"] is False

        response = await client.post("/api/v1/users/42/approve", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["is_approved"] is True

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client: AsyncClient, make_user):
        await make_user(42)
        response = await client.post("/api/v1/users/register", json={"user_id": 42, "name": "Ali Valiyev"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_register_single_word_name(self, client: AsyncClient):
        response = await client.post("/api/v1/users/register", json={"user_id": 42, "name": "Ali"})
        assert response.status_code == 422
        assert response.json()["field"] == "name"

    @pytest.mark.asyncio
    async def test_admin_token_required(self, client: AsyncClient, make_user):
        await make_user(42, approved=False)
        response = await client.post("/api/v1/users/42/approve")
        assert response.status_code == 403
        response = await client.post("/api/v1/users/42/approve", headers={"X-Admin-Token": "wrong"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_reject(self, client: AsyncClient, make_user, admin_headers):
        await make_user(42, approved=False)
        response = await client.post("/api/v1/users/42/reject", headers=admin_headers)
        assert response.status_code == 200
        profile = (await client.get("/api/v1/users/42")).json()
        assert profile["status"]["is_registered"] is False
        assert profile["user"] is None


class TestProgressApi:
    @pytest.mark.asyncio
    async def test_submit_and_read_today(self, client: AsyncClient, make_user):
        await make_user(1)
        response = await client.post("/api/v1/progress", json=_payload(1, points=7))
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["progress"]["total_points"] == 7
        assert data["progress"]["distance_km"] == 2.5
        assert data["new_achievements"] == []

        today = (await client.get("/api/v1/progress/1/today", params={"timezone": "UTC"})).json()
        assert today["exists"] is True
        assert today["total_points"] == 7
        assert [item["completed"] for item in today["items"]] == [True] * 7 + [False] * 3

        day = data["progress"]["date"]
        by_date = (await client.get(f"/api/v1/progress/1/{day}")).json()
        assert by_date["total_points"] == 7

    @pytest.mark.asyncio
    async def test_resubmit_replaces(self, client: AsyncClient, make_user):
        await make_user(1)
        await client.post("/api/v1/progress", json=_payload(1, points=10))
        response = await client.post("/api/v1/progress", json=_payload(1, points=2, pages_read=0))
        assert response.json()["progress"]["total_points"] == 2

        history = (await client.get("/api/v1/progress/1/history", params={"days": 7})).json()
        assert history["days_with_data"] == 1
        assert history["total_points"] == 2

    @pytest.mark.asyncio
    async def test_missing_day_is_zeros(self, client: AsyncClient, make_user):
        await make_user(1)
        data = (await client.get("/api/v1/progress/1/2026-01-15")).json()
        assert data["exists"] is False
        assert data["tasks"] == [0] * 10

    @pytest.mark.asyncio
    async def test_invalid_flag_names_field(self, client: AsyncClient, make_user):
        await make_user(1)
        response = await client.post("/api/v1/progress", json=_payload(1, task_4=3))
        assert response.status_code == 422
        assert response.json()["field"] == "task_4"

    @pytest.mark.asyncio
    async def test_too_many_pages(self, client: AsyncClient, make_user):
        await make_user(1)
        response = await client.post("/api/v1/progress", json=_payload(1, pages_read=10_001))
        assert response.status_code == 422
        assert response.json()["field"] == "pages_read"

    @pytest.mark.asyncio
    async def test_huge_distance_names_field(self, client: AsyncClient, make_user):
        await make_user(1)
        response = await client.post("/api/v1/progress", json=_payload(1, distance_km=1e30))
        assert response.status_code == 422
        assert response.json()["field"] == "distance_km"

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient):
        response = await client.post("/api/v1/progress", json=_payload(999))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_pending_user(self, client: AsyncClient, make_user):
        await make_user(1, approved=False)
        response = await client.post("/api/v1/progress", json=_payload(1))
        assert response.status_code == 403
        response = await client.get("/api/v1/progress/1/today")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_task_definitions(self, client: AsyncClient):
        data = (await client.get("/api/v1/tasks/definitions")).json()
        assert data["total"] == 10
        assert [t["id"] for t in data["tasks"]] == list(range(1, 11))


class TestAchievementsApi:
    @pytest.mark.asyncio
    async def test_catalogue(self, client: AsyncClient):
        data = (await client.get("/api/v1/achievements")).json()
        assert [a["id"] for a in data["achievements"]] == [
            "consistent",
            "reader",
            "athlete",
            "early_bird",
            "perfectionist",
        ]

    @pytest.mark.asyncio
    async def test_user_progress(self, client: AsyncClient, make_user):
        await make_user(1, achievements=["reader"])
        await client.post("/api/v1/progress", json=_payload(1, points=3))
        data = (await client.get("/api/v1/users/1/achievements")).json()
        assert data["earned"] == ["reader"]
        assert data["total_available"] == 5
        consistent = next(a for a in data["achievements"] if a["id"] == "consistent")
        assert consistent["current"] == 1
        assert consistent["max"] == 21

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/api/v1/users/999/achievements")
        assert response.status_code == 404


class TestStatsApi:
    @pytest.mark.asyncio
    async def test_user_statistics(self, client: AsyncClient, make_user):
        await make_user(1)
        await client.post("/api/v1/progress", json=_payload(1, points=4))
        data = (await client.get("/api/v1/users/1/statistics", params={"timezone": "UTC"})).json()
        assert len(data["this_week"]["daily_points"]) == 7
        assert data["today"]["total_points"] == 4
        assert data["all_time"]["current_streak"] == 1

    @pytest.mark.asyncio
    async def test_unknown_timezone_still_works(self, client: AsyncClient, make_user):
        await make_user(1)
        response = await client.get("/api/v1/users/1/statistics", params={"timezone": "Bogus/Zone"})
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_global(self, client: AsyncClient, make_user):
        await make_user(1)
        await client.post("/api/v1/progress", json=_payload(1, points=6))
        data = (await client.get("/api/v1/stats/global")).json()
        assert data["total_users"] == 1
        assert data["total_points_today"] == 6


class TestLeaderboardApi:
    @pytest.mark.asyncio
    async def test_daily_overall_with_focus(self, client: AsyncClient, make_user):
        for uid, points in ((7, 5), (3, 5), (9, 3)):
            await make_user(uid)
            await client.post("/api/v1/progress", json=_payload(uid, points=points))

        response = await client.get(
            "/api/v1/leaderboard",
            params={"period": "daily", "metric": "overall", "limit": 1, "user_id": 9, "timezone": "UTC"},
        )
        assert response.status_code == 200
        data = response.json()
        assert [e["user_id"] for e in data["entries"]] == [3]
        assert data["total_participants"] == 3
        assert data["focus_user"]["rank"] == 3
        assert data["focus_user"]["in_top_list"] is False

    @pytest.mark.asyncio
    async def test_unknown_period(self, client: AsyncClient):
        response = await client.get("/api/v1/leaderboard", params={"period": "monthly"})
        assert response.status_code == 422
        assert response.json()["field"] == "period"

    @pytest.mark.asyncio
    async def test_empty(self, client: AsyncClient):
        data = (await client.get("/api/v1/leaderboard")).json()
        assert data["entries"] == []
        assert data["total_participants"] == 0
        assert data["focus_user"] is None
