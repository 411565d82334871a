"""
Announcement endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tasklog.core.deps import get_db, get_current_user, require_reviewer
from tasklog.models.employee import Employee
from tasklog.schemas.announcement import AnnouncementCreate, AnnouncementOut, ReplyCreate
from tasklog.services import announcement_service

router = APIRouter()


@router.get("", response_model=List[AnnouncementOut])
async def list_announcements_endpoint(
    include_archived: bool = Query(False),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return announcement_service.list_announcements(db, current_user, include_archived)


@router.post("", response_model=AnnouncementOut, status_code=201)
async def create_announcement_endpoint(
    data: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return announcement_service.create_announcement(db, data, current_user)


@router.post("/{announcement_id}/archive", response_model=AnnouncementOut)
async def archive_announcement_endpoint(
    announcement_id: int,
    archived: bool = Query(True, description="false restores an archived announcement"),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    return announcement_service.set_archived(db, announcement_id, archived, current_user)


@router.delete("/{announcement_id}", status_code=204)
async def delete_announcement_endpoint(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(require_reviewer)
):
    announcement_service.delete_announcement(db, announcement_id, current_user)


@router.post("/{announcement_id}/like", response_model=AnnouncementOut)
async def toggle_like_endpoint(
    announcement_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return announcement_service.toggle_like(db, announcement_id, current_user)


@router.post("/{announcement_id}/replies", response_model=AnnouncementOut, status_code=201)
async def add_reply_endpoint(
    announcement_id: int,
    data: ReplyCreate,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user)
):
    return announcement_service.add_reply(db, announcement_id, current_user, data.content)
