"""
Tests for employee management endpoints
"""
from fastapi import status

from tasklog.models.audit_log import SystemAuditLog
from tasklog.models.employee import Employee
from tasklog.models.task import Assignment
from tasklog.tests.conftest import auth_headers


def _create(client, headers, **overrides):
    payload = {"id": "E3", "name": "Huda Nasser", "password": "welcome1"}
    payload.update(overrides)
    return client.post("/api/v1/employees", json=payload, headers=headers)


def test_reviewer_creates_employee(client, seeded):
    response = _create(client, auth_headers("R1"), job_title="Cashier")

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["id"] == "E3"
    assert data["role"] == "User"
    assert data["permissions"] == ["log_tasks"]
    assert data["active"] is True
    assert "password_hash" not in data

    created = seeded.query(Employee).filter(Employee.id == "E3").one()
    assert created.password_hash.startswith("$argon2")
    audit = seeded.query(SystemAuditLog).filter(SystemAuditLog.target == "employee:E3").one()
    assert audit.action_type == "CREATE"
    assert audit.actor_id == "R1"


def test_duplicate_employee_id(client, seeded):
    response = _create(client, auth_headers("A1"), id="E1")
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_short_password_and_unknown_permission_are_rejected(client, seeded):
    assert _create(client, auth_headers("A1"), password="123").status_code == 422
    assert _create(client, auth_headers("A1"), permissions=["fly"]).status_code == 422


def test_employees_cannot_manage_employees(client, seeded):
    headers = auth_headers("E1")
    assert _create(client, headers).status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/v1/employees", headers=headers).status_code == status.HTTP_403_FORBIDDEN


def test_list_employees_sorted_and_filtered(client, seeded):
    response = client.get("/api/v1/employees", headers=auth_headers("A1"))
    assert [e["id"] for e in response.json()] == ["A1", "E1", "E2", "R1"]

    response = client.get("/api/v1/employees", params={"search": "omar"}, headers=auth_headers("A1"))
    assert [e["id"] for e in response.json()] == ["E2"]


def test_update_employee(client, seeded):
    response = client.patch(
        "/api/v1/employees/E2",
        json={"name": "Omar H.", "permissions": ["log_tasks", "view_reports"]},
        headers=auth_headers("A1"),
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == "Omar H."
    assert data["permissions"] == ["log_tasks", "view_reports"]
    assert data["last_modified"].endswith("Z")


def test_admin_cannot_demote_or_deactivate_self(client, seeded):
    headers = auth_headers("A1")
    assert client.patch("/api/v1/employees/A1", json={"role": "User"}, headers=headers).status_code == 403
    assert client.patch("/api/v1/employees/A1", json={"active": False}, headers=headers).status_code == 403
    assert client.delete("/api/v1/employees/A1", headers=headers).status_code == 403


def test_delete_employee_removes_assignments(client, seeded):
    response = client.delete("/api/v1/employees/E1", headers=auth_headers("A1"))

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert seeded.query(Employee).filter(Employee.id == "E1").first() is None
    assert seeded.query(Assignment).filter(Assignment.employee_id == "E1").count() == 0


def test_unknown_employee(client, seeded):
    response = client.get("/api/v1/employees/NOPE", headers=auth_headers("A1"))

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["path"] == "/api/v1/employees/NOPE"
