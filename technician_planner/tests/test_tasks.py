"""Tests for the task API endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient

NEW_TASK = {
    "customerName": "Acme",
    "location": "12 Elm St",
    "taskType": "Repair",
    "scheduledTime": "2024-01-01T09:00:00Z",
}


def _create(client: TestClient, **overrides) -> dict:
    response = client.post("/api/tasks/", json={**NEW_TASK, **overrides})
    assert response.status_code == 201
    return response.json()["task"]


def test_end_to_end_lifecycle(client: TestClient):
    response = client.post("/api/tasks/", json=NEW_TASK)
    assert response.status_code == 201
    assert response.json()["message"] == "Task created successfully"

    tasks = client.get("/api/tasks/").json()
    assert len(tasks) == 1
    task = tasks[0]
    assert task["status"] == "Pending"
    assert task["completedAt"] is None
    assert task["customerName"] == "Acme"
    assert task["scheduledTime"] == "2024-01-01T09:00:00Z"

    response = client.patch(
        f"/api/tasks/{task['_id']}", json={"completedAt": "2024-01-01T09:30:00Z"}
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Task updated successfully"

    tasks = client.get("/api/tasks/").json()
    assert tasks[0]["status"] == "Completed"
    assert tasks[0]["completedAt"] == "2024-01-01T09:30:00Z"

    response = client.delete(f"/api/tasks/{task['_id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}

    assert client.get("/api/tasks/").json() == []


def test_task_json_shape(client: TestClient):
    task = _create(client, notes="Gate code 1234")
    assert set(task) == {
        "_id", "customerName", "location", "taskType", "scheduledTime",
        "notes", "status", "completedAt", "createdAt", "updatedAt",
    }
    assert task["notes"] == "Gate code 1234"


def test_create_ignores_client_status_and_completed_at(client: TestClient):
    task = _create(client, status="Completed", completedAt="2024-01-01T10:00:00Z")
    assert task["status"] == "Pending"
    assert task["completedAt"] is None


def test_create_validation_error_is_400(client: TestClient):
    response = client.post("/api/tasks/", json={**NEW_TASK, "customerName": ""})
    assert response.status_code == 400
    assert response.json() == {"message": "customerName is required", "kind": "ValidationError"}


def test_create_unknown_task_type_is_400(client: TestClient):
    response = client.post("/api/tasks/", json={**NEW_TASK, "taskType": "Painting"})
    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_malformed_body_is_400(client: TestClient):
    response = client.post(
        "/api/tasks/", content="not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Invalid request data", "kind": "ValidationError"}


def test_complete_unknown_is_404(client: TestClient):
    response = client.patch("/api/tasks/nope", json={"completedAt": "2024-01-01T09:30:00Z"})
    assert response.status_code == 404
    assert response.json() == {"message": "Task not found", "kind": "NotFoundError"}


def test_complete_without_timestamp_is_400(client: TestClient):
    task = _create(client)
    response = client.patch(f"/api/tasks/{task['_id']}", json={})
    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_delete_pending_is_409_and_keeps_task(client: TestClient):
    task = _create(client)
    response = client.delete(f"/api/tasks/{task['_id']}")
    assert response.status_code == 409
    assert response.json()["kind"] == "PreconditionError"
    assert len(client.get("/api/tasks/").json()) == 1


def test_delete_unknown_is_404(client: TestClient):
    response = client.delete("/api/tasks/nope")
    assert response.status_code == 404


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"message": "Server is up and running"}


def test_cors_allows_configured_origin(client: TestClient):
    response = client.options(
        "/api/tasks/",
        headers={
            "Origin": "http://localhost:4200",
            "Access-Control-Request-Method": "PATCH",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:4200"


def test_cors_rejects_unknown_origin(client: TestClient):
    response = client.options(
        "/api/tasks/",
        headers={
            "Origin": "http://evil.example",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert "access-control-allow-origin" not in response.headers


def test_timestamp_out_of_utc_range_is_400(client: TestClient):
    response = client.post(
        "/api/tasks/", json={**NEW_TASK, "scheduledTime": "0001-01-01T00:00:00+01:00"}
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"

    task = _create(client)
    response = client.patch(
        f"/api/tasks/{task['_id']}", json={"completedAt": "9999-12-31T23:59:59-01:00"}
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "ValidationError"


def test_unexpected_failure_is_structured_500(app, client: TestClient):
    unguarded = TestClient(app, raise_server_exceptions=False)
    with patch(
        "technician_planner.routes.tasks.TaskService.list_all",
        side_effect=RuntimeError("connection pool exhausted"),
    ):
        response = unguarded.get("/api/tasks/")
    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error", "kind": "ServerError"}


def test_long_customer_name_is_accepted(client: TestClient):
    task = _create(client, customerName="A" * 500)
    assert len(task["customerName"]) == 500
