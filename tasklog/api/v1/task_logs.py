"""
Task log endpoints - daily submission, review queue and approval actions
"""
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from tasklog.core.constants import PERM_LOG_TASKS
from tasklog.core.deps import get_db, get_store, get_current_user, require_reviewer, require_permission
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.models.task_log import ApprovalStatus, TaskType
from tasklog.repositories.base import TaskLogStore, LogFilters
from tasklog.schemas.task_log import (
    SubmitLogsRequest,
    LeaveSubmitRequest,
    RejectRequest,
    CommitRequest,
    BulkApproveRequest,
    BulkApproveResponse,
    TaskLogOut,
    TaskLogDetailOut,
    ChecklistOut,
)
from tasklog.services import approval_service, submission_service
from tasklog.services.audit_service import log_audit
from tasklog.services.exchange_service import (
    LOG_EXPORT_HEADERS,
    LOG_EXPORT_SHEET,
    export_log_rows,
)
from tasklog.utils.csv_export import stream_csv
from tasklog.utils.datetime_utils import today_local
from tasklog.utils.roles import is_reviewer
from tasklog.utils.spreadsheet import build_xlsx_bytes, XLSX_MEDIA_TYPE

router = APIRouter()


# Employee side

@router.get("/checklist", response_model=ChecklistOut)
async def get_checklist_endpoint(
    log_date: Optional[date] = Query(None, description="Date to report (default: today)"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_permission(PERM_LOG_TASKS))
):
    """Assigned tasks the current user is expected to report for a date"""
    return submission_service.get_checklist(store, current_user, log_date or today_local())


@router.post("/submit", response_model=List[TaskLogOut], status_code=201)
async def submit_logs_endpoint(
    data: SubmitLogsRequest,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(get_current_user)
):
    """
    Submit one day's report

    All logs of the day are written together or not at all. A second
    submission for the same date is rejected with 409.
    """
    return submission_service.submit_daily_logs(
        store,
        current_user,
        data.log_date,
        data.decisions,
        data.extra_tasks,
    )


@router.post("/leave", response_model=TaskLogOut, status_code=201)
async def submit_leave_endpoint(
    data: LeaveSubmitRequest,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(get_current_user)
):
    """Record a weekly rest day or official/sick leave for a date"""
    return submission_service.submit_leave(store, current_user, data.log_date, data.kind)


@router.get("/my", response_model=List[TaskLogOut])
async def list_my_logs_endpoint(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (inclusive)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (inclusive)"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(get_current_user)
):
    return submission_service.list_my_logs(store, current_user, date_from, date_to)


# Reviewer side

@router.get("", response_model=List[TaskLogOut])
async def list_logs_endpoint(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (inclusive)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (inclusive)"),
    employee_id: Optional[str] = Query(None, description="Filter by employee"),
    approval_status: Optional[ApprovalStatus] = Query(None, description="Filter by approval status"),
    task_type: Optional[TaskType] = Query(None, description="Filter by task type"),
    search: Optional[str] = Query(None, description="Search description, ids or employee name"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    filters = LogFilters(
        employee_id=employee_id,
        date_from=date_from,
        date_to=date_to,
        approval_statuses=(approval_status,) if approval_status else (),
        task_type=task_type,
        search=search,
    )
    return store.list_logs(filters)


@router.get("/pending", response_model=List[TaskLogOut])
async def review_queue_endpoint(
    commitments_only: bool = Query(False, description="Only logs re-submitted after a rejection"),
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    """Logs awaiting review (PendingApproval and CommitmentPending)"""
    return approval_service.list_review_queue(store, current_user, commitments_only)


@router.post("/bulk-approve", response_model=BulkApproveResponse)
async def bulk_approve_endpoint(
    data: BulkApproveRequest,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    """Approve every PendingApproval log matching the filters, all or nothing"""
    approved = approval_service.bulk_approve(
        store,
        current_user,
        date_from=data.date_from,
        date_to=data.date_to,
        employee_id=data.employee_id,
        search=data.search,
    )
    return BulkApproveResponse(approved_count=len(approved), log_ids=[log.id for log in approved])


@router.get("/export.xlsx")
async def export_logs_xlsx(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (inclusive)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (inclusive)"),
    employee_id: Optional[str] = Query(None, description="Filter by employee"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Export task logs as an Excel workbook with Arabic headers"""
    filters = LogFilters(employee_id=employee_id, date_from=date_from, date_to=date_to)
    rows = export_log_rows(db, filters)
    content = build_xlsx_bytes(LOG_EXPORT_HEADERS, rows, LOG_EXPORT_SHEET, right_to_left=True)

    log_audit(
        db,
        current_user,
        AuditAction.EXPORT,
        "task_logs:export",
        details=f"Exported {len(rows)} logs (xlsx)",
        meta={"from": date_from, "to": date_to, "employee_id": employee_id},
    )
    filename = f"task_logs_{today_local().isoformat()}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/export.csv")
async def export_logs_csv(
    date_from: Optional[date] = Query(None, alias="from", description="Start date (inclusive)"),
    date_to: Optional[date] = Query(None, alias="to", description="End date (inclusive)"),
    employee_id: Optional[str] = Query(None, description="Filter by employee"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    filters = LogFilters(employee_id=employee_id, date_from=date_from, date_to=date_to)
    rows = export_log_rows(db, filters)

    log_audit(
        db,
        current_user,
        AuditAction.EXPORT,
        "task_logs:export",
        details=f"Exported {len(rows)} logs (csv)",
        meta={"from": date_from, "to": date_to, "employee_id": employee_id},
    )
    return stream_csv(LOG_EXPORT_HEADERS, rows, f"task_logs_{today_local().isoformat()}.csv")


@router.get("/{log_id}", response_model=TaskLogDetailOut)
async def get_log_endpoint(
    log_id: str,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(get_current_user)
):
    """A log with its review history; visible to its owner and to reviewers"""
    log = store.get_log(log_id)
    if log is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Task log {log_id} not found")
    if log.employee_id != current_user.id and not is_reviewer(current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return log


@router.post("/{log_id}/approve", response_model=TaskLogOut)
async def approve_log_endpoint(
    log_id: str,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    return approval_service.approve_log(store, log_id, current_user)


@router.post("/{log_id}/reject", response_model=TaskLogOut)
async def reject_log_endpoint(
    log_id: str,
    data: RejectRequest,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    return approval_service.reject_log(store, log_id, current_user, data.reason)


@router.post("/{log_id}/commit", response_model=TaskLogOut)
async def commit_log_endpoint(
    log_id: str,
    data: Optional[CommitRequest] = None,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(get_current_user)
):
    """The owner of a rejected log commits to fixing it and sends it back for review"""
    remarks = data.remarks if data is not None else None
    return approval_service.commit_log(store, log_id, current_user, remarks)


@router.delete("/{log_id}", status_code=204)
async def delete_log_endpoint(
    log_id: str,
    store: TaskLogStore = Depends(get_store),
    current_user: Employee = Depends(require_reviewer)
):
    approval_service.delete_log(store, log_id, current_user)
