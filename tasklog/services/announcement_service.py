"""
Announcement service
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from tasklog.core.errors import NotFoundError, AuthorizationError
from tasklog.models.announcement import Announcement, AnnouncementReply, AnnouncementTarget
from tasklog.models.audit_log import AuditAction
from tasklog.models.employee import Employee
from tasklog.schemas.announcement import AnnouncementCreate
from tasklog.services.audit_service import log_audit
from tasklog.utils.datetime_utils import now_utc
from tasklog.utils.roles import is_reviewer

logger = logging.getLogger(__name__)


def _is_recipient(announcement: Announcement, employee: Employee) -> bool:
    if announcement.target_type == AnnouncementTarget.ALL.value:
        return True
    return employee.id in (announcement.target_employee_ids or []) or announcement.created_by == employee.id


def get_announcement(db: Session, announcement_id: int, employee: Employee) -> Announcement:
    """
    Raises:
        NotFoundError: If it does not exist or is not addressed to the employee
    """
    announcement = db.query(Announcement).filter(Announcement.id == announcement_id).first()
    if announcement is None or not (is_reviewer(employee) or _is_recipient(announcement, employee)):
        raise NotFoundError(f"Announcement {announcement_id} not found")
    return announcement


def list_announcements(db: Session, employee: Employee, include_archived: bool = False) -> List[Announcement]:
    """Announcements visible to the employee, newest first; reviewers see all of them"""
    query = db.query(Announcement)
    if not include_archived:
        query = query.filter(Announcement.archived == False)  # noqa: E712
    announcements = query.order_by(Announcement.created_at.desc(), Announcement.id.desc()).all()
    if is_reviewer(employee):
        return announcements
    return [a for a in announcements if _is_recipient(a, employee)]


def create_announcement(db: Session, data: AnnouncementCreate, actor: Employee) -> Announcement:
    announcement = Announcement(
        title=data.title.strip(),
        content=data.content.strip(),
        priority=data.priority.value,
        created_by=actor.id,
        target_type=data.target_type.value,
        target_employee_ids=list(dict.fromkeys(data.target_employee_ids)),
        likes=[],
        archived=False,
        created_at=now_utc(),
    )
    db.add(announcement)
    db.commit()
    db.refresh(announcement)
    log_audit(
        db,
        actor,
        AuditAction.ANNOUNCE,
        f"announcement:{announcement.id}",
        details=announcement.title,
        meta={"priority": announcement.priority, "target_type": announcement.target_type},
    )
    return announcement


def set_archived(db: Session, announcement_id: int, archived: bool, actor: Employee) -> Announcement:
    announcement = get_announcement(db, announcement_id, actor)
    announcement.archived = archived
    db.commit()
    db.refresh(announcement)
    log_audit(
        db,
        actor,
        AuditAction.UPDATE,
        f"announcement:{announcement.id}",
        details="archived" if archived else "restored",
    )
    return announcement


def delete_announcement(db: Session, announcement_id: int, actor: Employee) -> None:
    announcement = get_announcement(db, announcement_id, actor)
    db.delete(announcement)
    db.commit()
    log_audit(db, actor, AuditAction.DELETE, f"announcement:{announcement_id}")


def toggle_like(db: Session, announcement_id: int, employee: Employee) -> Announcement:
    """Like, or remove the like if the employee already liked it"""
    announcement = get_announcement(db, announcement_id, employee)
    likes = list(announcement.likes or [])
    if employee.id in likes:
        likes.remove(employee.id)
    else:
        likes.append(employee.id)
    # Assign a new list so the JSON column is flagged as changed
    announcement.likes = likes
    db.commit()
    db.refresh(announcement)
    return announcement


def add_reply(db: Session, announcement_id: int, employee: Employee, content: str) -> Announcement:
    """
    Raises:
        AuthorizationError: If the announcement is archived
    """
    announcement = get_announcement(db, announcement_id, employee)
    if announcement.archived:
        raise AuthorizationError("Archived announcements cannot be replied to")
    db.add(AnnouncementReply(
        announcement_id=announcement.id,
        author_id=employee.id,
        author_name=employee.name,
        content=content.strip(),
        created_at=now_utc(),
    ))
    db.commit()
    db.refresh(announcement)
    logger.info("announcement reply: announcement_id=%s author_id=%s", announcement.id, employee.id)
    return announcement
