"""
Reports endpoints - dashboard, employee adherence and team comparison
"""
from datetime import date, timedelta
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from tasklog.core.constants import PERM_VIEW_DASHBOARD, PERM_VIEW_REPORTS
from tasklog.core.deps import get_db, get_store, require_permission, require_reviewer
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.repositories.base import TaskLogStore
from tasklog.schemas.report import DashboardOut, EmployeeReportOut, ComparisonRow
from tasklog.services.audit_service import log_audit
from tasklog.services.report_service import build_dashboard, build_employee_report, build_comparison
from tasklog.utils.csv_export import stream_csv
from tasklog.utils.datetime_utils import today_local
from tasklog.utils.roles import is_reviewer

router = APIRouter()

# Default reporting range when none is given
DEFAULT_RANGE_DAYS = 30

COMPARISON_CSV_HEADERS = [
    "rank",
    "employee_id",
    "name",
    "net_work_days",
    "registration_days",
    "completed",
    "pending",
    "not_applicable",
    "rate",
]


def _resolve_range(date_from: Optional[date], date_to: Optional[date]):
    date_to = date_to or today_local()
    date_from = date_from or (date_to - timedelta(days=DEFAULT_RANGE_DAYS - 1))
    if date_from > date_to:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'from' must not be after 'to'"
        )
    return date_from, date_to


@router.get("/dashboard", response_model=DashboardOut)
async def dashboard_endpoint(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    employee_id: Optional[str] = Query(None, description="Single employee (reviewers only)"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_permission(PERM_VIEW_DASHBOARD))
):
    """
    Dashboard numbers

    Role-based scoping:
    - Reviewers: everyone, or one employee via employee_id
    - Others: only their own logs
    """
    date_from, date_to = _resolve_range(date_from, date_to)
    if not is_reviewer(current_user):
        employee_id = current_user.id
    return build_dashboard(store, date_from, date_to, employee_id=employee_id)


@router.get("/employee/{employee_id}", response_model=EmployeeReportOut)
async def employee_report_endpoint(
    employee_id: str,
    date_from: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_permission(PERM_VIEW_REPORTS))
):
    """Adherence and per-task breakdown; non-reviewers can only see their own"""
    if employee_id != current_user.id and not is_reviewer(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    if store.get_employee(employee_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Employee {employee_id} not found")
    date_from, date_to = _resolve_range(date_from, date_to)
    return build_employee_report(store, employee_id, date_from, date_to)


@router.get("/comparison", response_model=List[ComparisonRow])
async def comparison_endpoint(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    employee_ids: Optional[List[str]] = Query(None, description="Employees to compare (default: all)"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    """Efficiency ranking across employees"""
    date_from, date_to = _resolve_range(date_from, date_to)
    return build_comparison(store, date_from, date_to, employee_ids)


@router.get("/comparison.csv")
async def comparison_csv_endpoint(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (YYYY-MM-DD)"),
    employee_ids: Optional[List[str]] = Query(None, description="Employees to compare (default: all)"),
    db: Session = Depends(get_db),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    date_from, date_to = _resolve_range(date_from, date_to)
    rows = build_comparison(store, date_from, date_to, employee_ids)

    filename = f"comparison_{date_from.strftime('%Y%m%d')}_{date_to.strftime('%Y%m%d')}.csv"

    log_audit(
        db,
        current_user,
        AuditAction.EXPORT,
        "report:comparison",
        meta={
            "from": date_from,
            "to": date_to,
            "employee_ids": employee_ids,
            "row_count": len(rows),
        },
    )
    return stream_csv(COMPARISON_CSV_HEADERS, rows, filename)
