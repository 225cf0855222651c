"""
Vérification des rappels, retards et échéances proches.

Appelée à chaque tick par la boucle de notifications, une fois par utilisateur.
Le déclenchement est "par niveau" : un rappel passé et non envoyé part au
prochain passage, même si plusieurs ticks ont été manqués.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional

from taskminder.core.config import settings
from taskminder.models.notification import Notification

logger = logging.getLogger(__name__)

OVERDUE_DEDUP_WINDOW = timedelta(hours=24)
DUE_SOON_DEDUP_WINDOW = timedelta(hours=2)
DUE_SOON_WINDOW = timedelta(hours=1)


def resolve_utc_offset(offset_minutes: Optional[int] = None) -> timedelta:
    """Décalage heure locale : celui de l'utilisateur sinon celui de la config"""
    if offset_minutes is None:
        offset_minutes = settings.NOTIFY_UTC_OFFSET_MINUTES
    return timedelta(minutes=offset_minutes)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_overdue_message(title: str, hours_overdue: int) -> str:
    days_overdue = hours_overdue // 24
    if days_overdue >= 1:
        return f'"{title}" is {_plural(days_overdue, "day")} overdue'
    return f'"{title}" is {_plural(max(hours_overdue, 1), "hour")} overdue'


def format_due_soon_message(title: str, minutes: int) -> str:
    if minutes <= 5:
        return f'"{title}" is due in {_plural(minutes, "minute")}'
    if minutes >= 60:
        return f'"{title}" is due in {minutes // 60}h {minutes % 60}m'
    return f'"{title}" is due in {minutes} minutes'


def _reminder_notification(user_id, task, reminder, now: datetime, local_reminder_time: datetime) -> Notification:
    return Notification(
        user_id=user_id,
        related_task_id=task.id,
        type="reminder",
        title="Task Reminder",
        message=f"{task.title} reminder",
        meta={
            "due_date": task.due_date.isoformat(),
            "priority": task.priority,
            "reminder_time": reminder.time.isoformat(),
            "local_reminder_time": local_reminder_time.isoformat(),
        },
        created_at=now,
    )


def _check_overdue(user_id, task, now, local_now, local_due_time, notification_store) -> bool:
    existing = notification_store.find_one(
        user_id, task.id, "overdue", created_since=now - OVERDUE_DEDUP_WINDOW
    )
    if existing is not None:
        return False

    hours_overdue = int((local_now - local_due_time).total_seconds() // 3600)
    notification_store.create(Notification(
        user_id=user_id,
        related_task_id=task.id,
        type="overdue",
        title="Task Overdue",
        message=format_overdue_message(task.title, hours_overdue),
        meta={
            "due_date": task.due_date.isoformat(),
            "priority": task.priority,
            "hours_overdue": hours_overdue,
            "days_overdue": hours_overdue // 24,
            "local_due_time": local_due_time.isoformat(),
        },
        created_at=now,
    ))
    return True


def _check_due_soon(user_id, task, now, local_now, local_due_time, notification_store) -> bool:
    existing = notification_store.find_one(
        user_id, task.id, "due_soon", created_since=now - DUE_SOON_DEDUP_WINDOW
    )
    if existing is not None:
        return False

    minutes = math.ceil((local_due_time - local_now).total_seconds() / 60)
    notification_store.create(Notification(
        user_id=user_id,
        related_task_id=task.id,
        type="due_soon",
        title="Task Due Soon",
        message=format_due_soon_message(task.title, minutes),
        meta={
            "due_date": task.due_date.isoformat(),
            "priority": task.priority,
            "minutes_until_due": minutes,
            "local_due_time": local_due_time.isoformat(),
        },
        created_at=now,
    ))
    return True


def check_task_notifications(
    user_id: int,
    now: datetime,
    task_store,
    notification_store,
    utc_offset: Optional[timedelta] = None
) -> int:
    """
    Crée les notifications dues pour les tâches actives d'un utilisateur.

    Pour chaque tâche pending / in-progress avec échéance :
    1. rappels non envoyés dont l'heure est passée -> notification "reminder",
       le rappel passe à sent=True
    2. échéance passée (égalité comprise) -> "overdue", au plus une par 24h
    3. sinon échéance dans l'heure -> "due_soon", au plus une par 2h
    4. la tâche est sauvegardée une seule fois si un rappel a changé

    Les erreurs des stores remontent à l'appelant.
    Retourne le nombre de notifications créées.
    """
    if utc_offset is None:
        utc_offset = resolve_utc_offset()

    local_now = now + utc_offset
    created = 0

    for task in task_store.find_active_tasks_with_due_date(user_id):
        task_updated = False

        for reminder in list(task.reminders):
            if reminder.sent:
                continue
            local_reminder_time = reminder.time + utc_offset
            if local_reminder_time <= local_now:
                # commité avec la notification par create()
                reminder.sent = True
                notification_store.create(
                    _reminder_notification(user_id, task, reminder, now, local_reminder_time)
                )
                task_updated = True
                created += 1
                logger.debug("Reminder sent for task %s (%s)", task.id, local_reminder_time.isoformat())

        local_due_time = task.due_date + utc_offset
        if local_due_time <= local_now:
            if _check_overdue(user_id, task, now, local_now, local_due_time, notification_store):
                created += 1
                logger.debug("Overdue notification for task %s", task.id)
        elif local_due_time <= local_now + DUE_SOON_WINDOW:
            if _check_due_soon(user_id, task, now, local_now, local_due_time, notification_store):
                created += 1
                logger.debug("Due soon notification for task %s", task.id)

        if task_updated:
            task_store.save(task)

    logger.info("Created %d notifications for user %s", created, user_id)
    return created
