from fastapi.testclient import TestClient

PROJECT = {
    "title": "Garden shed",
    "description": "Build it before spring",
    "team": 2,
    "start_date": "2024-01-01",
    "end_date": "2024-01-31",
}


def _create_project(client: TestClient, **overrides) -> dict:
    resp = client.post("/api/v1/projects", json={**PROJECT, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_task(client: TestClient, project_id: int, title: str = "Buy timber", due_date: str = "2024-01-15"):
    return client.post(
        "/api/v1/tasks",
        json={"project_id": project_id, "title": title, "due_date": due_date},
    )


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_create_and_list_projects(client: TestClient):
    project = _create_project(client)
    assert project["status"] == "ongoing"
    assert project["progress"] == 0
    assert project["team"] == 2

    second = _create_project(client, title="Kitchen")
    resp = client.get("/api/v1/projects")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [second["id"], project["id"]]


def test_create_project_validation_errors(client: TestClient):
    resp = client.post("/api/v1/projects", json={**PROJECT, "title": "  "})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Title is required"

    resp = client.post("/api/v1/projects", json={**PROJECT, "end_date": "2023-12-01"})
    assert resp.status_code == 400

    resp = client.post("/api/v1/projects", json={"title": "No dates"})
    assert resp.status_code == 422


def test_unknown_ids_return_404(client: TestClient):
    assert client.get("/api/v1/projects/404").status_code == 404
    assert client.get("/api/v1/tasks/404").status_code == 404
    assert client.delete("/api/v1/projects/404").status_code == 404
    assert client.post("/api/v1/tasks/404/toggle").status_code == 404
    assert _create_task(client, 404).status_code == 404


def test_task_due_date_must_fit_project_range(client: TestClient):
    project = _create_project(client)

    ok = _create_task(client, project["id"])
    assert ok.status_code == 201
    assert ok.json()["status"] == "pending"

    late = _create_task(client, project["id"], title="Paint", due_date="2024-02-01")
    assert late.status_code == 400
    assert "outside the project range" in late.json()["detail"]

    early = client.patch(f"/api/v1/tasks/{ok.json()['id']}", json={"due_date": "2023-12-31"})
    assert early.status_code == 400


def test_toggle_task_drives_project_status(client: TestClient):
    project = _create_project(client)
    task = _create_task(client, project["id"]).json()

    toggled = client.post(f"/api/v1/tasks/{task['id']}/toggle")
    assert toggled.status_code == 200
    assert toggled.json()["status"] == "completed"

    refreshed = client.get(f"/api/v1/projects/{project['id']}").json()
    assert refreshed["status"] == "completed"
    assert refreshed["progress"] == 100

    client.post(f"/api/v1/tasks/{task['id']}/toggle")
    refreshed = client.get(f"/api/v1/projects/{project['id']}").json()
    assert refreshed["status"] == "ongoing"
    assert refreshed["progress"] == 0


def test_complete_project_endpoint(client: TestClient):
    project = _create_project(client)
    task = _create_task(client, project["id"]).json()

    resp = client.post(f"/api/v1/projects/{project['id']}/complete")
    assert resp.status_code == 400

    client.patch(f"/api/v1/tasks/{task['id']}", json={"status": "completed"})
    resp = client.post(f"/api/v1/projects/{project['id']}/complete")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"


def test_update_project(client: TestClient):
    project = _create_project(client)
    resp = client.patch(f"/api/v1/projects/{project['id']}", json={"title": "Bigger shed", "team": 4})
    assert resp.status_code == 200
    assert resp.json()["title"] == "Bigger shed"
    assert resp.json()["team"] == 4


def test_delete_project_removes_its_tasks(client: TestClient):
    project = _create_project(client)
    task_ids = [_create_task(client, project["id"], title=f"Step {n}").json()["id"] for n in range(3)]

    resp = client.delete(f"/api/v1/projects/{project['id']}")
    assert resp.status_code == 204

    assert client.get(f"/api/v1/projects/{project['id']}/tasks").status_code == 404
    for task_id in task_ids:
        assert client.get(f"/api/v1/tasks/{task_id}").status_code == 404


def test_delete_task(client: TestClient):
    project = _create_project(client)
    task = _create_task(client, project["id"]).json()

    assert client.delete(f"/api/v1/tasks/{task['id']}").status_code == 204
    assert client.get(f"/api/v1/projects/{project['id']}/tasks").json() == []


def test_due_tasks_endpoint(client: TestClient):
    project = _create_project(client)
    _create_task(client, project["id"], title="Overdue", due_date="2024-01-12")
    _create_task(client, project["id"], title="Next week", due_date="2024-01-22")

    resp = client.get("/api/v1/tasks/due")
    assert resp.status_code == 200
    (item,) = resp.json()
    assert item["title"] == "Overdue"
    assert item["days_overdue"] == 3
    assert item["project_title"] == "Garden shed"
    assert item["project_status"] == "ongoing"

    resp = client.get("/api/v1/tasks/due", params={"on": "2024-01-31"})
    assert [t["title"] for t in resp.json()] == ["Overdue", "Next week"]


def test_dashboard_endpoint(client: TestClient):
    _create_project(client)
    _create_project(client, title="Next year", start_date="2025-01-01", end_date="2025-12-31")

    resp = client.get("/api/v1/dashboard")
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["total_projects"] == 2
    assert stats["ongoing"] == 1
    assert stats["planned"] == 1
    assert stats["completed"] == 0
    assert stats["unfinished_projects"] == 2
