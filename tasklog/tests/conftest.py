"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-task-log-suite")

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine

from tasklog.main import app
from tasklog.db.base import Base
from tasklog.core.config import settings
from tasklog.core.constants import (
    PERM_LOG_TASKS,
    PERM_MANAGE_SYSTEM,
    PERM_VIEW_DASHBOARD,
    PERM_VIEW_REPORTS,
)
from tasklog.core.deps import get_db
from tasklog.core.security import create_access_token, hash_password
from tasklog.repositories import InMemoryStore, SqlAlchemyStore
from tasklog.utils.datetime_utils import today_local

# Import all models to ensure they're registered with Base.metadata
from tasklog.models import Employee, Role, Task, Assignment  # noqa


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "secret123"

# 2024-05-01 is a Wednesday; the 2nd and 3rd are the Thursday/Friday rest days
WORK_DAY = date(2024, 5, 1)
REST_DAY = date(2024, 5, 2)
TODAY = date(2024, 5, 2)


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def build_registry():
    """
    Employees, tasks and assignments used across the suite

    E1 reports on T1 and T2, E2 has no assignments, R1 reviews through the
    manage_system permission and A1 is an admin.
    """
    password_hash = hash_password(PASSWORD)
    employees = [
        Employee(id="E1", name="Sara Ali", role=Role.USER.value, active=True,
                 permissions=[PERM_LOG_TASKS], password_hash=password_hash),
        Employee(id="E2", name="Omar Hassan", role=Role.USER.value, active=True,
                 permissions=[PERM_LOG_TASKS], password_hash=password_hash),
        Employee(id="R1", name="Reem Saleh", role=Role.USER.value, active=True,
                 permissions=[PERM_LOG_TASKS, PERM_MANAGE_SYSTEM, PERM_VIEW_DASHBOARD, PERM_VIEW_REPORTS],
                 password_hash=password_hash),
        Employee(id="A1", name="Admin", role=Role.ADMIN.value, active=True,
                 permissions=[], password_hash=password_hash),
    ]
    tasks = [
        Task(id="T1", description="Check the shared inbox", category="Office"),
        Task(id="T2", description="Update the stock sheet", category="Store"),
    ]
    assignments = [
        Assignment(id="ASG-1", employee_id="E1", task_id="T1"),
        Assignment(id="ASG-2", employee_id="E1", task_id="T2"),
    ]
    return employees, tasks, assignments


def seed_database(db):
    employees, tasks, assignments = build_registry()
    db.add_all(employees + tasks)
    db.flush()
    db.add_all(assignments)
    db.commit()


@pytest.fixture
def seeded(db):
    """Database holding the shared registry"""
    seed_database(db)
    return db


@pytest.fixture(params=["memory", "sql"])
def store(request, db):
    """The same registry behind each store adapter"""
    if request.param == "memory":
        employees, tasks, assignments = build_registry()
        return InMemoryStore(employees, tasks, assignments)
    seed_database(db)
    return SqlAlchemyStore(db)


def auth_headers(employee_id: str) -> dict:
    token = create_access_token({"sub": employee_id})
    return {"Authorization": f"Bearer {token}"}


def recent_work_day() -> date:
    """Latest day inside the submission window that is not a rest day"""
    today = today_local()
    rest = settings.get_rest_weekdays()
    for back in range(settings.SUBMISSION_WINDOW_DAYS + 1):
        day = today - timedelta(days=back)
        if day.weekday() not in rest:
            return day
    raise RuntimeError("no work day inside the submission window")
