"""Notification service"""

from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional
from taskminder.models.notification import Notification


class NotificationStore:

    def __init__(self, db: Session):
        self.db = db

    def create(self, notification: Notification) -> Notification:
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def find_one(
        self,
        user_id: int,
        related_task_id: int,
        type: str,
        created_since: datetime
    ) -> Optional[Notification]:
        """Notification existante du même type pour la tâche, créée depuis created_since"""
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.related_task_id == related_task_id,
            Notification.type == type,
            Notification.created_at >= created_since
        ).first()

    def list_for_user(self, user_id: int, limit: int = 50) -> List[Notification]:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id
        ).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def count_unread(self, user_id: int) -> int:
        return self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False
        ).count()

    def get_for_user(self, user_id: int, notification_id: int) -> Optional[Notification]:
        return self.db.query(Notification).filter(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).first()

    def mark_read(self, notification: Notification) -> Notification:
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        updated = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.read == False
        ).update({Notification.read: True}, synchronize_session=False)
        self.db.commit()
        return updated

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.commit()

    def purge_older_than(self, cutoff: datetime) -> int:
        deleted = self.db.query(Notification).filter(
            Notification.created_at < cutoff
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted
