"""
Bulk data exchange endpoints - spreadsheet import and JSON backup/restore
"""
from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, require_reviewer
from tasklog.core.errors import ValidationError
from tasklog.models.employee import Employee
from tasklog.schemas.backup import BackupDocument, ImportResult, RestoreResult
from tasklog.services.exchange_service import import_rows, export_backup, restore_backup
from tasklog.utils.datetime_utils import today_local
from tasklog.utils.spreadsheet import read_rows

router = APIRouter()


@router.post("/import", response_model=ImportResult)
async def import_file_endpoint(
    entity: str = Query(..., description="employees, tasks, assignments or logs"),
    file: UploadFile = File(..., description=".xlsx or .csv file with a header row"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """
    Upsert records from a spreadsheet

    Column headers are matched loosely (case, spacing and punctuation are
    ignored) and the Arabic export headers are accepted as well.
    """
    content = await file.read()
    try:
        rows = read_rows(file.filename, content)
    except ValueError as e:
        raise ValidationError(str(e))
    return import_rows(db, entity, rows, current_user)


@router.get("/backup")
async def backup_endpoint(
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Full JSON backup of employees, tasks, assignments and logs"""
    document = export_backup(db)
    filename = f"tasklog_backup_{today_local().isoformat()}.json"
    return JSONResponse(
        content=document.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/backup/restore", response_model=RestoreResult)
async def restore_endpoint(
    document: BackupDocument,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    """Upsert a backup produced by GET /backup; records not in the file are kept"""
    return restore_backup(db, document, current_user)
