"""
Tests for spreadsheet import, JSON backup/restore and admin clear
"""
from datetime import date, datetime, timezone

from fastapi import status

from tasklog.core.security import verify_password
from tasklog.models.employee import Employee
from tasklog.models.task_log import TaskLog, DailySubmission
from tasklog.schemas.backup import BackupLog
from tasklog.tests.conftest import auth_headers, recent_work_day
from tasklog.utils.datetime_utils import ensure_utc
from tasklog.utils.spreadsheet import build_xlsx_bytes


def _upload(client, entity, filename, content, employee_id="A1"):
    return client.post(
        "/api/v1/import",
        params={"entity": entity},
        files={"file": (filename, content)},
        headers=auth_headers(employee_id),
    )


def test_import_employees_from_xlsx_with_arabic_headers(client, seeded):
    content = build_xlsx_bytes(
        ["رقم الموظف", "اسم الموظف", "المسمى الوظيفي"],
        [
            {"رقم الموظف": "E10", "اسم الموظف": "Lina Fares", "المسمى الوظيفي": "Clerk"},
            {"رقم الموظف": 11, "اسم الموظف": "Yousef Adel"},
            {"رقم الموظف": "E12"},
        ],
    )

    response = _upload(client, "employees", "staff.xlsx", content)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"entity": "employees", "imported": 2, "skipped": 1}
    lina = seeded.query(Employee).filter(Employee.id == "E10").one()
    assert lina.job_title == "Clerk"
    assert lina.role == "User"
    assert lina.permissions == ["log_tasks"]
    assert lina.password_hash is None
    assert seeded.query(Employee).filter(Employee.id == "11").one().name == "Yousef Adel"


def test_import_updates_existing_employees(client, seeded):
    content = "Emp ID,Name,Active\nE2,Omar Hassan Ali,no\n".encode("utf-8")

    response = _upload(client, "employees", "staff.csv", content)

    assert response.status_code == status.HTTP_200_OK
    omar = seeded.query(Employee).filter(Employee.id == "E2").one()
    seeded.refresh(omar)
    assert omar.name == "Omar Hassan Ali"
    assert omar.active is False
    assert verify_password("secret123", omar.password_hash)


def test_import_logs_from_csv(client, seeded):
    content = (
        "\ufeffالتاريخ,رقم الموظف,رقم المهمة,نوع المهمة,وصف المهمة,الحالة,حالة الاعتماد\n"
        "2024-05-01,E1,T1,روتينية,Check the shared inbox,منفذة,معتمد\n"
        "2024-05-01,E1,,إضافية,Moved the archive boxes,منفذة,معلق\n"
    ).encode("utf-8")

    response = _upload(client, "logs", "logs.csv", content)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["imported"] == 2
    routine = seeded.query(TaskLog).filter(TaskLog.id == "LOG-E1-T1-2024-05-01").one()
    assert routine.approval_status.value == "Approved"
    assert routine.status.value == "Completed"
    assert routine.approved_by == "A1"
    extra = seeded.query(TaskLog).filter(TaskLog.task_id == "EXTRA").one()
    assert extra.id.startswith("EXTRA-")
    assert extra.approval_status.value == "PendingApproval"
    assert seeded.query(DailySubmission).filter(
        DailySubmission.employee_id == "E1",
        DailySubmission.log_date == date(2024, 5, 1),
    ).count() == 1


def test_imported_approved_logs_name_an_approver(client, seeded):
    content = (
        "date,employeeId,taskId,status,approvedBy,approvedAt\n"
        "2024-05-01,E1,T1,Completed,,\n"
        "2024-05-01,E1,T2,Completed,R1,2024-05-02T07:30:00Z\n"
    ).encode("utf-8")

    response = _upload(client, "logs", "logs.csv", content)

    assert response.status_code == status.HTTP_200_OK
    defaulted = seeded.query(TaskLog).filter(TaskLog.id == "LOG-E1-T1-2024-05-01").one()
    assert defaulted.approval_status.value == "Approved"
    assert defaulted.approved_by == "A1"
    assert defaulted.approved_at is not None
    given = seeded.query(TaskLog).filter(TaskLog.id == "LOG-E1-T2-2024-05-01").one()
    assert given.approved_by == "R1"
    assert ensure_utc(given.approved_at) == datetime(2024, 5, 2, 7, 30, tzinfo=timezone.utc)


def test_pending_imported_logs_have_no_approver(client, seeded):
    content = "date,employeeId,taskId,approvalStatus,approvedBy\n2024-05-01,E1,T1,pending,R1\n".encode("utf-8")

    _upload(client, "logs", "logs.csv", content)

    log = seeded.query(TaskLog).one()
    assert log.approval_status.value == "PendingApproval"
    assert log.approved_by is None
    assert log.approved_at is None


def test_backup_log_dumps_python_values_and_json_instants():
    item = BackupLog.model_validate({
        "id": "LOG-E1-T1-2024-05-01",
        "logDate": "2024-05-01T00:00:00Z",
        "employeeId": "E1",
        "taskId": "T1",
        "approvedBy": "R1",
        "approvedAt": "2024-05-02T07:30:00Z",
    })

    data = item.model_dump()
    assert data["log_date"] == date(2024, 5, 1)
    assert isinstance(data["approved_at"], datetime)

    wire = item.model_dump(mode="json", by_alias=True)
    assert wire["logDate"] == "2024-05-01T00:00:00Z"
    assert wire["approvedAt"] == "2024-05-02T07:30:00Z"


def test_one_bad_row_rejects_the_whole_file(client, seeded):
    content = (
        "date,employee id,task id,status\n"
        "2024-05-01,E1,T1,done\n"
        "2024-05-01,E1,T2,maybe\n"
    ).encode("utf-8")

    response = _upload(client, "logs", "logs.csv", content)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Row 3" in response.json()["detail"]
    assert seeded.query(TaskLog).count() == 0


def test_import_rejects_unknown_files_and_types(client, seeded):
    assert _upload(client, "employees", "staff.txt", b"id,name\n").status_code == 400
    assert _upload(client, "holidays", "x.csv", b"id\n1\n").status_code == 400
    assert _upload(client, "employees", "staff.xlsx", b"not a workbook").status_code == 400


def test_import_requires_a_reviewer(client, seeded):
    response = _upload(client, "tasks", "tasks.csv", b"id,description\nT9,x\n", employee_id="E1")
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_backup_clear_and_restore(client, seeded):
    day = recent_work_day().isoformat()
    client.post(
        "/api/v1/task-logs/submit",
        json={"log_date": day, "decisions": {"T1": "Completed", "T2": "NotApplicable"}},
        headers=auth_headers("E1"),
    )
    headers = auth_headers("A1")

    response = client.get("/api/v1/backup", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    backup = response.json()
    assert set(backup) == {"employees", "tasks", "assignments", "logs", "exportDate", "version"}
    assert len(backup["logs"]) == 2
    assert backup["logs"][0]["logDate"] == f"{day}T00:00:00Z"
    assert backup["logs"][0]["approvalStatus"] == "PendingApproval"
    assert "password" not in backup["employees"][0]

    cleared = client.post("/api/v1/admin/clear", params={"scope": "logs"}, headers=headers)
    assert cleared.json() == {"scope": "logs", "deleted": 2}
    assert seeded.query(TaskLog).count() == 0

    restored = client.post("/api/v1/backup/restore", json=backup, headers=headers)
    assert restored.status_code == status.HTTP_200_OK
    assert restored.json() == {"employees": 4, "tasks": 2, "assignments": 2, "logs": 2}

    again = client.get("/api/v1/backup", headers=headers).json()
    assert again["logs"] == backup["logs"]
    assert again["employees"] == backup["employees"]

    # the day stays closed after the restore
    resubmit = client.post(
        "/api/v1/task-logs/submit",
        json={"log_date": day, "decisions": {"T1": "Completed", "T2": "Completed"}},
        headers=auth_headers("E1"),
    )
    assert resubmit.status_code == status.HTTP_409_CONFLICT


def test_restore_legacy_backup_with_plaintext_password(client, seeded):
    legacy = {
        "employees": [
            {"id": 20, "name": "Nour Sami", "password": "legacy99", "permissions": "log_tasks", "active": "yes"}
        ],
        "tasks": [{"id": "T5", "description": "Water the plants", "category": ""}],
        "assignments": [{"id": "ASG-20", "employeeId": "20", "taskId": "T5"}],
        "logs": [{
            "id": "LOG-20-T5-2024-05-01",
            "logDate": "2024-05-01T00:00:00.000Z",
            "employeeId": "20",
            "taskId": "T5",
            "taskType": "Daily",
            "status": "Completed",
            "description": "Water the plants",
            "approvalStatus": "Approved",
        }],
        "exportDate": "2024-05-02T08:00:00.000Z",
        "version": "1.0",
    }

    response = client.post("/api/v1/backup/restore", json=legacy, headers=auth_headers("A1"))

    assert response.status_code == status.HTTP_200_OK
    nour = seeded.query(Employee).filter(Employee.id == "20").one()
    assert nour.password_hash != "legacy99"
    assert nour.permissions == ["log_tasks"]
    log = seeded.query(TaskLog).filter(TaskLog.id == "LOG-20-T5-2024-05-01").one()
    assert log.log_date == date(2024, 5, 1)
    assert log.approved_by == "A1"
    assert log.approved_at is not None

    login = client.post("/api/v1/auth/login", json={"employee_id": "20", "password": "legacy99"})
    assert login.status_code == status.HTTP_200_OK


def test_clear_employees_keeps_the_admin(client, seeded):
    response = client.post("/api/v1/admin/clear", params={"scope": "employees"}, headers=auth_headers("A1"))

    assert response.json() == {"scope": "employees", "deleted": 3}
    assert [e.id for e in seeded.query(Employee).all()] == ["A1"]


def test_clear_is_admin_only(client, seeded):
    response = client.post("/api/v1/admin/clear", params={"scope": "logs"}, headers=auth_headers("R1"))
    assert response.status_code == status.HTTP_403_FORBIDDEN
