"""
Tests for GET /api/leaderboard and GET /api/leaderboard/rank.
"""
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from app.main import app
from app.repositories.store import PerformanceStore, get_performance_store

BASE_URL = "/api/leaderboard"


def today():
    return datetime.now(timezone.utc).date()


@pytest.fixture()
def team(make_user, add_update, add_project, add_interview):
    manager = make_user(role="manager", first_name="Mona")
    interviewer = make_user(role="interviewer", first_name="Ivan")
    alice = make_user(first_name="Alice", manager_id=manager.id)
    bob = make_user(first_name="Bob", department=None)
    for offset in range(3):
        add_update(alice, today() - timedelta(days=offset), progress_score=9)
    add_project(manager, members=[alice])
    add_interview(alice, interviewer, status="completed", rating=8.0)
    return {"manager": manager, "interviewer": interviewer, "alice": alice, "bob": bob}


class TestLeaderboard:
    def test_requires_token(self, client):
        r = client.get(BASE_URL)
        assert r.status_code == 401
        assert r.json() == {"success": False, "error": "Access token required"}

    def test_rejects_garbage_token(self, client):
        r = client.get(BASE_URL, headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401
        assert r.json()["error"] == "Invalid or expired token"

    def test_only_active_employees_are_ranked(self, client, team, make_user, auth_headers):
        make_user(first_name="Gone", is_active=False)
        r = client.get(BASE_URL, headers=auth_headers(team["manager"]))
        assert r.status_code == 200
        entries = r.json()["data"]["entries"]
        assert [e["user"]["firstName"] for e in entries] == ["Alice", "Bob"]

    def test_envelope_and_shape(self, client, team, auth_headers):
        r = client.get(BASE_URL, params={"period": "weekly"}, headers=auth_headers(team["bob"]))
        body = r.json()
        assert body["success"] is True
        assert body["data"]["period"] == "weekly"
        assert "generatedAt" in body["data"]

        alice = body["data"]["entries"][0]
        assert alice["userId"] == team["alice"].id
        assert alice["rank"] == 1
        assert alice["user"] == {"firstName": "Alice", "lastName": "User", "department": "Engineering"}
        assert alice["averageProgressScore"] == 9.0
        assert alice["interviewPerformance"] == 8.0
        assert alice["projectContributions"] == 2.0
        assert alice["totalScore"] > 0
        assert "updateConsistency" in alice
        assert "lastUpdated" in alice

    def test_missing_department_reported_as_unknown(self, client, team, auth_headers):
        entries = client.get(BASE_URL, headers=auth_headers(team["bob"])).json()["data"]["entries"]
        bob = next(e for e in entries if e["userId"] == team["bob"].id)
        assert bob["user"]["department"] == "Unknown"
        assert bob["totalScore"] == 0.0
        assert bob["rank"] == 2

    def test_defaults_to_monthly(self, client, team, auth_headers):
        r = client.get(BASE_URL, headers=auth_headers(team["bob"]))
        assert r.json()["data"]["period"] == "monthly"

    @pytest.mark.parametrize("period", ["weekly", "monthly", "quarterly"])
    def test_ranks_are_one_to_n(self, client, team, period, auth_headers):
        entries = client.get(BASE_URL, params={"period": period}, headers=auth_headers(team["bob"])).json()["data"]["entries"]
        assert [e["rank"] for e in entries] == list(range(1, len(entries) + 1))

    def test_unknown_period(self, client, team, auth_headers):
        r = client.get(BASE_URL, params={"period": "yearly"}, headers=auth_headers(team["bob"]))
        assert r.status_code == 422
        body = r.json()
        assert body["success"] is False
        assert body["error"] == "Validation failed"

    def test_old_updates_fall_outside_weekly_window(self, client, make_user, add_update, auth_headers):
        carol = make_user(first_name="Carol")
        add_update(carol, today() - timedelta(days=20), progress_score=10)
        weekly = client.get(BASE_URL, params={"period": "weekly"}, headers=auth_headers(carol)).json()
        monthly = client.get(BASE_URL, params={"period": "monthly"}, headers=auth_headers(carol)).json()
        assert weekly["data"]["entries"][0]["averageProgressScore"] == 0.0
        assert monthly["data"]["entries"][0]["averageProgressScore"] == 10.0


class TestRank:
    def test_own_entry(self, client, team, auth_headers):
        r = client.get(f"{BASE_URL}/rank", headers=auth_headers(team["bob"]))
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["userId"] == team["bob"].id
        assert data["rank"] == 2

    def test_non_employee_gets_404(self, client, team, auth_headers):
        r = client.get(f"{BASE_URL}/rank", headers=auth_headers(team["manager"]))
        assert r.status_code == 404
        assert r.json() == {"success": False, "error": "User not found in leaderboard"}

    def test_rank_matches_full_listing(self, client, team, auth_headers):
        listing = client.get(BASE_URL, params={"period": "quarterly"}, headers=auth_headers(team["alice"])).json()
        mine = client.get(f"{BASE_URL}/rank", params={"period": "quarterly"}, headers=auth_headers(team["alice"])).json()
        expected = next(e for e in listing["data"]["entries"] if e["userId"] == team["alice"].id)
        assert mine["data"]["rank"] == expected["rank"]
        assert mine["data"]["totalScore"] == expected["totalScore"]


class UnreachableStore(PerformanceStore):
    async def list_active_employees(self):
        raise ConnectionError("database unreachable")

    async def get_daily_updates(self, user_id, limit=100):
        return []

    async def get_interviews(self, user_id):
        return []

    async def get_feedback_rating(self, interview_id):
        return None

    async def count_active_projects(self, user_id):
        return 0


class TestStoreFailure:
    def test_generic_server_error(self, make_user, auth_headers):
        user = make_user()
        app.dependency_overrides[get_performance_store] = UnreachableStore
        try:
            with TestClient(app, raise_server_exceptions=False) as client:
                r = client.get(BASE_URL, headers=auth_headers(user))
        finally:
            app.dependency_overrides.clear()
        assert r.status_code == 500
        assert r.json() == {"success": False, "error": "Internal server error"}
