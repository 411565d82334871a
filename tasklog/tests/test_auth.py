"""
Tests for authentication endpoints
"""
from fastapi import status

from tasklog.core.security import hash_password, verify_password
from tasklog.models.audit_log import SystemAuditLog
from tasklog.models.employee import Employee
from tasklog.tests.conftest import PASSWORD, auth_headers


def _login(client, employee_id, password=PASSWORD):
    return client.post("/api/v1/auth/login", json={"employee_id": employee_id, "password": password})


def test_auth_login_success(client, seeded):
    """Test successful login returns 200 and access_token"""
    response = _login(client, "E1")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["token_type"] == "bearer"
    assert len(data["access_token"]) > 0
    assert data["employee_id"] == "E1"
    assert data["permissions"] == ["log_tasks"]

    token = data["access_token"]
    me = client.get("/api/v1/employees/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["name"] == "Sara Ali"
    assert "password_hash" not in me.json()


def test_admin_login_lists_every_permission(client, seeded):
    data = _login(client, "A1").json()
    assert set(data["permissions"]) == {"view_dashboard", "log_tasks", "view_reports", "manage_system"}


def test_auth_login_wrong_password(client, seeded):
    response = _login(client, "E1", "wrongpassword")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] is True


def test_auth_login_unknown_employee(client, seeded):
    assert _login(client, "NOPE").status_code == status.HTTP_401_UNAUTHORIZED


def test_auth_login_inactive_employee(client, seeded):
    employee = seeded.query(Employee).filter(Employee.id == "E2").one()
    employee.active = False
    seeded.commit()

    assert _login(client, "E2").status_code == status.HTTP_403_FORBIDDEN
    assert client.get("/api/v1/employees/me", headers=auth_headers("E2")).status_code == status.HTTP_403_FORBIDDEN


def test_employee_without_password_cannot_log_in(client, seeded):
    seeded.add(Employee(id="E9", name="Imported", role="User", active=True, permissions=["log_tasks"]))
    seeded.commit()

    assert _login(client, "E9", "anything").status_code == status.HTTP_401_UNAUTHORIZED


def test_invalid_token_is_rejected(client, seeded):
    response = client.get("/api/v1/employees/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_login_is_audited(client, seeded):
    _login(client, "E1")

    entry = seeded.query(SystemAuditLog).filter(SystemAuditLog.action_type == "LOGIN").one()
    assert entry.actor_id == "E1"
    assert entry.actor_name == "Sara Ali"


def test_change_password(client, seeded):
    response = client.post(
        "/api/v1/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "another456"},
        headers=auth_headers("E1"),
    )
    assert response.status_code == status.HTTP_200_OK

    assert _login(client, "E1").status_code == status.HTTP_401_UNAUTHORIZED
    assert _login(client, "E1", "another456").status_code == status.HTTP_200_OK


def test_change_password_requires_current_password(client, seeded):
    response = client.post(
        "/api/v1/auth/change-password",
        json={"current_password": "wrong-one", "new_password": "another456"},
        headers=auth_headers("E1"),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_bcrypt_hashes_still_verify():
    import bcrypt

    legacy = bcrypt.hashpw(b"legacy123", bcrypt.gensalt()).decode("utf-8")
    assert verify_password("legacy123", legacy)
    assert not verify_password("legacy124", legacy)
    assert verify_password("fresh123", hash_password("fresh123"))
    assert not verify_password("fresh123", "fresh123")
