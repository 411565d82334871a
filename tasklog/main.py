"""
Daily task log backend - main application entry point
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from tasklog.api.router import api_router
from tasklog.core.config import settings
from tasklog.core.constants import ALL_PERMISSIONS
from tasklog.core.errors import (
    TaskLogError,
    task_log_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)
from tasklog.core.logging import setup_logging
from tasklog.core.security import hash_password
from tasklog.db.session import SessionLocal, init_sqlite_schema
from tasklog.models.employee import Employee, Role
from tasklog.utils.datetime_utils import now_utc

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in DATABASE_URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme == "sqlite":
            return url
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


app = FastAPI(
    title="Daily Task Log Backend",
    description="Daily task reporting with reviewer approval",
    version=settings.VERSION or "1.0.0"
)

# Configure CORS - must be before other middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Register exception handlers
app.add_exception_handler(TaskLogError, task_log_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log DATABASE_URL at startup so it can be verified against Alembic."""
    masked = _mask_database_url(settings.DATABASE_URL)
    logger.info("DATABASE_URL (app): %s", masked)
    init_sqlite_schema()


@app.on_event("startup")
def bootstrap_initial_admin() -> None:
    """
    Create the initial admin account if no admin exists.
    This ensures the system always has at least one account that can log in.
    """
    db = SessionLocal()
    try:
        admin_exists = db.query(Employee).filter(Employee.role == Role.ADMIN.value).first()
        if admin_exists:
            logger.info("Admin user already exists, skipping initial bootstrap")
            return

        if db.query(Employee).filter(Employee.id == settings.INITIAL_ADMIN_ID).first():
            logger.warning(
                "Employee %s exists but is not an admin, skipping initial bootstrap",
                settings.INITIAL_ADMIN_ID,
            )
            return

        initial_admin = Employee(
            id=settings.INITIAL_ADMIN_ID,
            name="System Administrator",
            role=Role.ADMIN.value,
            permissions=list(ALL_PERMISSIONS),
            password_hash=hash_password(settings.INITIAL_ADMIN_PASSWORD),
            active=True,
            last_modified=now_utc(),
        )
        db.add(initial_admin)
        db.commit()

        logger.info("Initial admin user created successfully")
        logger.info("Employee id: %s", settings.INITIAL_ADMIN_ID)
        logger.info("Password: [set via INITIAL_ADMIN_PASSWORD environment variable]")

    except OperationalError as e:
        db.rollback()
        # Database not ready yet (tables might not exist)
        if "no such table" in str(e).lower():
            logger.warning("Database tables not ready yet, skipping initial bootstrap")
        else:
            logger.error("Database error during admin bootstrap: %s", e)
    finally:
        db.close()


async def _handle_operational_error(request, exc: OperationalError):
    if "no such table" in str(exc).lower():
        return JSONResponse(
            status_code=500,
            content={"detail": "Run alembic upgrade head"},
        )
    return await generic_exception_handler(request, exc)


app.add_exception_handler(OperationalError, _handle_operational_error)
