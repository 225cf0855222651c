"""Notification model"""

from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, JSON, Index
from sqlalchemy.orm import validates
from taskminder.core.database import Base
from taskminder.core.clock import utcnow

NOTIFICATION_TYPES = ("reminder", "overdue", "due_soon", "system", "update")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "read", "created_at"),
        Index("ix_notifications_dedup", "user_id", "related_task_id", "type", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    related_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)

    type = Column(String, nullable=False)
    title = Column(String(100), nullable=False)
    message = Column(String(500), nullable=False)
    # "metadata" est réservé par SQLAlchemy côté attribut
    meta = Column("metadata", JSON, default=dict)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    @validates("type")
    def validate_type(self, key, value):
        if value not in NOTIFICATION_TYPES:
            raise ValueError(f"Invalid notification type: {value}")
        return value

    @validates("title", "message")
    def strip_text(self, key, value):
        value = (value or "").strip()
        limit = 100 if key == "title" else 500
        return value[:limit]
