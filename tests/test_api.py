"""HTTP surface: routing, ownership checks and the error envelope."""

import uuid

import pytest

API = "/api/v1"


@pytest.fixture
def project(client, auth_headers):
    res = client.post(f"{API}/projects", json={"name": "Renewal", "budget_amount": 30000}, headers=auth_headers)
    assert res.status_code == 201
    return res.json()


@pytest.fixture
def member(client, auth_headers):
    res = client.post(
        f"{API}/members",
        json={"name": "Aiko", "email": "aiko@example.com", "hourly_rate": 5000},
        headers=auth_headers,
    )
    assert res.status_code == 201
    return res.json()


@pytest.fixture
def task(client, auth_headers, project):
    res = client.post(
        f"{API}/projects/{project['id']}/tasks",
        json={"name": "Pages", "planned_hours": 10},
        headers=auth_headers,
    )
    assert res.status_code == 201
    return res.json()


def _log_time(client, headers, task, member, hours=8, work_date="2024-04-01"):
    return client.post(
        f"{API}/time-entries",
        json={"task_id": task["id"], "member_id": member["id"], "work_date": work_date, "hours": hours},
        headers=headers,
    )


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


class TestErrorEnvelope:
    def test_missing_token(self, client):
        res = client.get(f"{API}/projects")
        assert res.status_code == 401
        assert res.json() == {
            "success": False,
            "error": {"code": "UNAUTHORIZED", "message": "Authentication required"},
        }

    def test_bad_token(self, client):
        res = client.get(f"{API}/projects", headers={"Authorization": "Bearer not-a-jwt"})
        assert res.status_code == 401
        assert res.json()["error"]["message"] == "Invalid or expired token"

    def test_validation_failure_lists_fields(self, client, auth_headers):
        res = client.post(f"{API}/projects", json={"name": "", "budget_amount": -5}, headers=auth_headers)

        assert res.status_code == 422
        error = res.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert {d["field"] for d in error["details"]} == {"name", "budget_amount"}

    def test_not_found(self, client, auth_headers):
        res = client.get(f"{API}/projects/{uuid.uuid4()}", headers=auth_headers)
        assert res.status_code == 404
        assert res.json()["error"] == {"code": "NOT_FOUND", "message": "Project not found"}

    def test_forbidden_for_other_owner(self, client, other_auth_headers, project, task):
        for path in (
            f"/projects/{project['id']}",
            f"/projects/{project['id']}/budget",
            f"/projects/{project['id']}/summary",
            f"/tasks/{task['id']}",
        ):
            res = client.get(f"{API}{path}", headers=other_auth_headers)
            assert res.status_code == 403, path
            assert res.json()["error"]["code"] == "FORBIDDEN"


class TestProjects:
    def test_list_is_scoped_to_owner(self, client, auth_headers, other_auth_headers, project):
        client.post(f"{API}/projects", json={"name": "Someone else's"}, headers=other_auth_headers)

        body = client.get(f"{API}/projects", headers=auth_headers).json()
        assert [p["name"] for p in body["projects"]] == ["Renewal"]
        assert body["pagination"] == {"page": 1, "per_page": 10, "total": 1, "total_pages": 1}

    def test_list_search_sort_and_clamped_page_size(self, client, auth_headers):
        for name in ("Beta", "Alpha", "Gamma"):
            client.post(f"{API}/projects", json={"name": name}, headers=auth_headers)

        body = client.get(
            f"{API}/projects",
            params={"sort": "name", "order": "asc", "per_page": 1000},
            headers=auth_headers,
        ).json()
        assert [p["name"] for p in body["projects"]] == ["Alpha", "Beta", "Gamma"]
        assert body["pagination"]["per_page"] == 100

        body = client.get(f"{API}/projects", params={"search": "amm"}, headers=auth_headers).json()
        assert [p["name"] for p in body["projects"]] == ["Gamma"]

    def test_detail_stats_update_and_soft_delete(self, client, auth_headers, project, task):
        detail = client.get(f"{API}/projects/{project['id']}", headers=auth_headers).json()
        assert detail["stats"]["total_tasks"] == 1
        assert detail["stats"]["total_planned_hours"] == 10

        res = client.put(
            f"{API}/projects/{project['id']}",
            json={"status": "in_progress", "description": "Phase 2"},
            headers=auth_headers,
        )
        assert res.json()["status"] == "in_progress"
        assert res.json()["name"] == "Renewal"

        assert client.delete(f"{API}/projects/{project['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"{API}/projects/{project['id']}", headers=auth_headers).status_code == 404

    def test_update_rejects_inverted_dates(self, client, auth_headers, project):
        res = client.put(
            f"{API}/projects/{project['id']}",
            json={"start_date": "2024-05-01", "end_date": "2024-04-01"},
            headers=auth_headers,
        )
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "INVALID_INPUT"


class TestMembers:
    def test_duplicate_email_conflicts(self, client, auth_headers, member):
        res = client.post(
            f"{API}/members",
            json={"name": "Other", "email": "aiko@example.com"},
            headers=auth_headers,
        )
        assert res.status_code == 409
        assert res.json()["error"]["code"] == "CONFLICT"

    def test_rate_change_does_not_rewrite_logged_cost(self, client, auth_headers, task, member):
        entry = _log_time(client, auth_headers, task, member).json()

        client.put(f"{API}/members/{member['id']}", json={"hourly_rate": 9000}, headers=auth_headers)

        res = client.get(f"{API}/time-entries/{entry['id']}", headers=auth_headers)
        assert res.json()["hourly_rate_snapshot"] == 5000
        assert res.json()["cost"] == 40000

    def test_assignment_lifecycle(self, client, auth_headers, project, member):
        path = f"{API}/projects/{project['id']}/members"

        res = client.post(path, json={"member_id": member["id"]}, headers=auth_headers)
        assert res.status_code == 201
        assert res.json()["hourly_rate_snapshot"] == 5000
        assert res.json()["is_active"] is True

        res = client.post(path, json={"member_id": member["id"]}, headers=auth_headers)
        assert res.status_code == 409

        assert client.delete(f"{path}/{member['id']}", headers=auth_headers).status_code == 200
        assert client.get(path, headers=auth_headers).json() == []

        res = client.post(
            path,
            json={"member_id": member["id"], "hourly_rate_snapshot": 4500, "allocation_rate": 0.5},
            headers=auth_headers,
        )
        assert res.status_code == 201
        assert res.json()["hourly_rate_snapshot"] == 4500

        history = client.get(path, params={"include_inactive": True}, headers=auth_headers).json()
        assert len(history) == 2


class TestTimeAndBudgetFlow:
    def test_record_revise_and_report(self, client, auth_headers, project, task, member):
        entry = _log_time(client, auth_headers, task, member, hours=8)
        assert entry.status_code == 201
        assert entry.json()["cost"] == 40000
        assert entry.json()["member"]["name"] == "Aiko"

        task_view = client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).json()
        assert task_view["actual_hours"] == 8
        assert task_view["variance_hours"] == -2
        assert task_view["variance_percentage"] == pytest.approx(-20)

        budget = client.put(
            f"{API}/projects/{project['id']}/budget/revenue",
            json={"revenue": 100000},
            headers=auth_headers,
        ).json()
        assert (budget["total_cost"], budget["profit"]) == (40000, 60000)
        assert budget["profit_rate"] == pytest.approx(60.0)
        assert budget["currency"] == "JPY"
        assert budget["is_deficit"] is False

        client.put(f"{API}/time-entries/{entry.json()['id']}", json={"hours": 10}, headers=auth_headers)
        summary = client.get(f"{API}/projects/{project['id']}/summary", headers=auth_headers).json()
        assert summary["total_actual_hours"] == 10
        assert summary["is_over_budget"] is False

        comparison = client.get(f"{API}/projects/{project['id']}/budget/comparison", headers=auth_headers).json()
        assert comparison["actual_cost"] == 50000
        assert comparison["is_over_budget"] is True

    def test_deficit_warning_in_budget_summary(self, client, auth_headers, project, task, member):
        _log_time(client, auth_headers, task, member, hours=10)

        body = client.get(f"{API}/projects/{project['id']}/budget/summary", headers=auth_headers).json()

        assert body["budget"]["is_deficit"] is True
        assert body["budget"]["profit_rate"] == 0
        assert body["warning_message"]
        assert body["member_costs"][0]["percentage"] == 100

    def test_delete_entry_twice(self, client, auth_headers, task, member):
        entry = _log_time(client, auth_headers, task, member, hours=8).json()
        path = f"{API}/time-entries/{entry['id']}"

        assert client.delete(path, headers=auth_headers).status_code == 200
        assert client.delete(path, headers=auth_headers).status_code == 404
        assert client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).json()["actual_hours"] == 0

    def test_list_entries_with_page_summary(self, client, auth_headers, project, task, member):
        _log_time(client, auth_headers, task, member, hours=2, work_date="2024-04-01")
        _log_time(client, auth_headers, task, member, hours=3, work_date="2024-04-02")

        body = client.get(
            f"{API}/time-entries",
            params={"project_id": project["id"], "per_page": 500},
            headers=auth_headers,
        ).json()

        assert [e["work_date"] for e in body["time_entries"]] == ["2024-04-02", "2024-04-01"]
        assert body["pagination"]["per_page"] == 20
        assert body["summary"] == {"total_hours": 5, "total_cost": 25000}

    @pytest.mark.parametrize("payload", [{"hours": 25}, {"hours": 0}])
    def test_hours_out_of_range(self, client, auth_headers, task, member, payload):
        res = client.post(
            f"{API}/time-entries",
            json={"task_id": task["id"], "member_id": member["id"], "work_date": "2024-04-01", **payload},
            headers=auth_headers,
        )
        assert res.status_code == 422
        assert res.json()["error"]["details"][0]["field"] == "hours"

    def test_snapshot_and_actual_hours_are_not_writable(self, client, auth_headers, task, member):
        entry = _log_time(client, auth_headers, task, member).json()

        res = client.put(
            f"{API}/time-entries/{entry['id']}",
            json={"hourly_rate_snapshot": 1},
            headers=auth_headers,
        )
        assert res.status_code == 422

        res = client.put(f"{API}/tasks/{task['id']}", json={"actual_hours": 0}, headers=auth_headers)
        assert res.status_code == 422

    def test_other_owner_cannot_log_time(self, client, other_auth_headers, task, member):
        res = _log_time(client, other_auth_headers, task, member)
        assert res.status_code == 403


def _raw_json(client, method, path, body, headers):
    return client.request(
        method,
        f"{API}{path}",
        content=body,
        headers={**headers, "Content-Type": "application/json"},
    )


class TestNonFiniteNumbers:
    def test_infinite_revenue_is_rejected(self, client, auth_headers, project):
        path = f"/projects/{project['id']}/budget/revenue"

        res = _raw_json(client, "PUT", path, '{"revenue": Infinity}', auth_headers)

        assert res.status_code == 422
        error = res.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["details"][0]["field"] == "revenue"
        budget = client.get(f"{API}/projects/{project['id']}/budget", headers=auth_headers).json()
        assert budget["revenue"] == 0

    def test_infinite_planned_hours_are_rejected(self, client, auth_headers, project):
        path = f"/projects/{project['id']}/tasks"

        res = _raw_json(client, "POST", path, '{"name": "Forever", "planned_hours": Infinity}', auth_headers)

        assert res.status_code == 422
        assert res.json()["error"]["details"][0]["field"] == "planned_hours"

    def test_nan_hours_are_rejected(self, client, auth_headers, task, member):
        body = (
            f'{{"task_id": "{task["id"]}", "member_id": "{member["id"]}", '
            f'"work_date": "2024-04-01", "hours": NaN}}'
        )

        res = _raw_json(client, "POST", "/time-entries", body, auth_headers)

        assert res.status_code == 422
        assert res.json()["error"]["details"][0]["field"] == "hours"
        assert client.get(f"{API}/tasks/{task['id']}", headers=auth_headers).json()["actual_hours"] == 0


def test_entry_listing_agrees_with_budget_after_task_delete(client, auth_headers, project, task, member):
    dropped = client.post(
        f"{API}/projects/{project['id']}/tasks",
        json={"name": "Dropped", "planned_hours": 5},
        headers=auth_headers,
    ).json()
    _log_time(client, auth_headers, task, member, hours=2)
    _log_time(client, auth_headers, dropped, member, hours=4)
    assert client.delete(f"{API}/tasks/{dropped['id']}", headers=auth_headers).status_code == 200

    listing = client.get(
        f"{API}/time-entries", params={"project_id": project["id"]}, headers=auth_headers
    ).json()
    summary = client.get(f"{API}/projects/{project['id']}/budget/summary", headers=auth_headers).json()

    assert len(listing["time_entries"]) == 1
    assert listing["pagination"]["total"] == 1
    assert listing["summary"]["total_cost"] == summary["cost_breakdown"]["labor_cost"] == 10000
