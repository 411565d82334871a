"""
Tests for task catalogue and assignment endpoints
"""
from fastapi import status

from tasklog.models.task import Assignment
from tasklog.tests.conftest import auth_headers


def test_create_and_list_tasks(client, seeded):
    headers = auth_headers("A1")
    response = client.post(
        "/api/v1/tasks",
        json={"id": "T10", "description": " Close the till ", "category": "Store"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["description"] == "Close the till"

    response = client.get("/api/v1/tasks", headers=auth_headers("E1"))
    assert [t["id"] for t in response.json()] == ["T1", "T2", "T10"]

    response = client.get("/api/v1/tasks", params={"category": "Store"}, headers=headers)
    assert [t["id"] for t in response.json()] == ["T2", "T10"]


def test_reserved_and_duplicate_task_ids(client, seeded):
    headers = auth_headers("A1")
    for task_id in ("EXTRA", "leave", "T1"):
        response = client.post("/api/v1/tasks", json={"id": task_id, "description": "x"}, headers=headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_update_task(client, seeded):
    response = client.patch(
        "/api/v1/tasks/T1",
        json={"description": "Check and sort the shared inbox"},
        headers=auth_headers("R1"),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["description"] == "Check and sort the shared inbox"
    assert response.json()["category"] == "Office"


def test_delete_task_removes_its_assignments(client, seeded):
    response = client.delete("/api/v1/tasks/T2", headers=auth_headers("A1"))

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert seeded.query(Assignment).filter(Assignment.task_id == "T2").count() == 0


def test_assignments(client, seeded):
    headers = auth_headers("A1")

    response = client.post("/api/v1/assignments", json={"employee_id": "E2", "task_id": "T1"}, headers=headers)
    assert response.status_code == status.HTTP_201_CREATED
    assignment_id = response.json()["id"]
    assert assignment_id.startswith("ASG-")

    duplicate = client.post("/api/v1/assignments", json={"employee_id": "E2", "task_id": "T1"}, headers=headers)
    assert duplicate.status_code == status.HTTP_400_BAD_REQUEST

    unknown = client.post("/api/v1/assignments", json={"employee_id": "E2", "task_id": "T99"}, headers=headers)
    assert unknown.status_code == status.HTTP_404_NOT_FOUND

    response = client.get("/api/v1/assignments", params={"employee_id": "E2"}, headers=headers)
    assert [a["task_id"] for a in response.json()] == ["T1"]

    response = client.delete(f"/api/v1/assignments/{assignment_id}", headers=headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.get("/api/v1/assignments", params={"employee_id": "E2"}, headers=headers).json() == []


def test_employees_cannot_edit_tasks(client, seeded):
    headers = auth_headers("E1")
    assert client.post("/api/v1/tasks", json={"id": "T3", "description": "x"}, headers=headers).status_code == 403
    assert client.get("/api/v1/assignments", headers=headers).status_code == 403
