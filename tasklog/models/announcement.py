"""
Announcement models
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
import enum
from tasklog.db.base import Base


class AnnouncementPriority(str, enum.Enum):
    NORMAL = "Normal"
    URGENT = "Urgent"
    CRITICAL = "Critical"


class AnnouncementTarget(str, enum.Enum):
    ALL = "All"
    SPECIFIC = "Specific"


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    priority = Column(String, default=AnnouncementPriority.NORMAL.value, nullable=False)
    created_by = Column(String, nullable=False)
    target_type = Column(String, default=AnnouncementTarget.ALL.value, nullable=False)
    target_employee_ids = Column(JSON, default=list, nullable=False)
    likes = Column(JSON, default=list, nullable=False)
    archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    replies = relationship(
        "AnnouncementReply",
        back_populates="announcement",
        cascade="all, delete-orphan",
        order_by="AnnouncementReply.id",
    )


class AnnouncementReply(Base):
    __tablename__ = "announcement_replies"

    id = Column(Integer, primary_key=True, index=True)
    announcement_id = Column(Integer, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(String, nullable=False)
    author_name = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    announcement = relationship("Announcement", back_populates="replies")
