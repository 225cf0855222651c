"""Task service"""

from sqlalchemy.orm import Session, selectinload
from typing import List
from taskminder.models.task import Task, ACTIVE_STATUSES


class TaskStore:
    """Accès aux tâches pour la vérification des notifications"""

    def __init__(self, db: Session):
        self.db = db

    def find_active_tasks_with_due_date(self, user_id: int) -> List[Task]:
        return self.db.query(Task).options(selectinload(Task.reminders)).filter(
            Task.user_id == user_id,
            Task.status.in_(ACTIVE_STATUSES),
            Task.due_date.isnot(None)
        ).order_by(Task.due_date.asc(), Task.id.asc()).all()

    def save(self, task: Task) -> None:
        self.db.add(task)
        self.db.commit()
