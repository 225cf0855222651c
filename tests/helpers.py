from datetime import datetime, timedelta
from taskminder.models.task import Task
from taskminder.models.notification import Notification

NOW = datetime(2026, 3, 10, 12, 0, 0)
OFFSET = timedelta(hours=5)


def create_task(db, user, due_date, title="Write report", status="pending", priority="medium", reminders=()):
    """Crée une tâche avec ses rappels [(time, sent), ...]"""
    task = Task(user_id=user.id, title=title, due_date=due_date, status=status, priority=priority)
    for time, sent in reminders:
        reminder = task.add_reminder(time)
        reminder.sent = sent
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def create_notification(db, user, task, type, created_at):
    notification = Notification(
        user_id=user.id,
        related_task_id=task.id,
        type=type,
        title="Existing",
        message="Existing notification",
        meta={},
        created_at=created_at
    )
    db.add(notification)
    db.commit()
    return notification


def notifications_of(db, user, type=None):
    query = db.query(Notification).filter(Notification.user_id == user.id)
    if type is not None:
        query = query.filter(Notification.type == type)
    return query.order_by(Notification.id).all()
