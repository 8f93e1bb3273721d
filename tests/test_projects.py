"""
Tests for /api/projects.
"""
BASE_URL = "/api/projects"


def project_payload(*members, **overrides):
    payload = {
        "name": "Leaderboard revamp",
        "description": "Rework scoring",
        "teamMembers": [m.id for m in members],
        "startDate": "2026-03-01",
        "status": "active",
        "priority": "high",
    }
    payload.update(overrides)
    return payload


class TestCreate:
    def test_manager_creates_project(self, client, make_user, auth_headers):
        manager = make_user(role="manager")
        dev = make_user()
        r = client.post(BASE_URL, json=project_payload(dev), headers=auth_headers(manager))
        assert r.status_code == 201
        data = r.json()["data"]
        assert data["managerId"] == manager.id
        assert data["teamMembers"] == [dev.id]
        assert data["priority"] == "high"

    def test_defaults(self, client, make_user, auth_headers):
        manager = make_user(role="manager")
        r = client.post(
            BASE_URL,
            json={"name": "Bare", "startDate": "2026-03-01"},
            headers=auth_headers(manager),
        )
        data = r.json()["data"]
        assert data["status"] == "planning"
        assert data["priority"] == "medium"
        assert data["teamMembers"] == []

    def test_employee_cannot_create(self, client, make_user, auth_headers):
        r = client.post(BASE_URL, json=project_payload(), headers=auth_headers(make_user()))
        assert r.status_code == 403

    def test_unknown_member(self, client, make_user, auth_headers):
        manager = make_user(role="manager")
        payload = project_payload(teamMembers=[999])
        r = client.post(BASE_URL, json=payload, headers=auth_headers(manager))
        assert r.status_code == 400

    def test_end_before_start(self, client, make_user, auth_headers):
        manager = make_user(role="manager")
        payload = project_payload(endDate="2026-02-01")
        r = client.post(BASE_URL, json=payload, headers=auth_headers(manager))
        assert r.status_code == 400
        assert r.json()["error"] == "End date must not be before start date"


class TestMyProjects:
    def test_members_and_managers_see_project(self, client, make_user, add_project, auth_headers):
        manager = make_user(role="manager")
        dev = make_user()
        outsider = make_user()
        project = add_project(manager, members=[dev])

        for user in (manager, dev):
            data = client.get(f"{BASE_URL}/my", headers=auth_headers(user)).json()["data"]
            assert [p["id"] for p in data] == [project.id]
            assert data[0]["teamMembers"] == [dev.id]
        assert client.get(f"{BASE_URL}/my", headers=auth_headers(outsider)).json()["data"] == []


class TestStatus:
    def test_manager_updates_status(self, client, make_user, add_project, auth_headers):
        manager = make_user(role="manager")
        project = add_project(manager, status="planning")
        r = client.patch(f"{BASE_URL}/{project.id}/status", json={"status": "active"}, headers=auth_headers(manager))
        assert r.status_code == 200
        assert r.json()["data"]["status"] == "active"

    def test_other_manager_forbidden(self, client, make_user, add_project, auth_headers):
        project = add_project(make_user(role="manager"))
        r = client.patch(
            f"{BASE_URL}/{project.id}/status",
            json={"status": "completed"},
            headers=auth_headers(make_user(role="manager")),
        )
        assert r.status_code == 403

    def test_invalid_status(self, client, make_user, add_project, auth_headers):
        manager = make_user(role="manager")
        project = add_project(manager)
        r = client.patch(f"{BASE_URL}/{project.id}/status", json={"status": "archived"}, headers=auth_headers(manager))
        assert r.status_code == 422

    def test_missing_project(self, client, make_user, auth_headers):
        r = client.patch(f"{BASE_URL}/999/status", json={"status": "active"}, headers=auth_headers(make_user(role="admin")))
        assert r.status_code == 404

    def test_only_active_projects_score(self, client, make_user, add_project, auth_headers):
        manager = make_user(role="manager")
        dev = make_user()
        project = add_project(manager, members=[dev], status="active")
        before = client.get("/api/leaderboard/rank", headers=auth_headers(dev)).json()["data"]
        client.patch(f"{BASE_URL}/{project.id}/status", json={"status": "on-hold"}, headers=auth_headers(manager))
        after = client.get("/api/leaderboard/rank", headers=auth_headers(dev)).json()["data"]
        assert before["projectContributions"] == 2.0
        assert after["projectContributions"] == 0.0
