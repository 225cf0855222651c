"""
Boucle de notifications.

A chaque intervalle :
- liste les utilisateurs,
- lance la vérification des notifications pour chacun (une session DB par utilisateur),
- une erreur pour un utilisateur est loggée et n'empêche pas les suivants,
- purge périodiquement les notifications plus vieilles que la rétention.

Une seule vérification à la fois par utilisateur dans le process : un passage
qui chevauche un autre (tick + déclenchement manuel) est sauté.

Pour arrêter la boucle, annuler la tâche asyncio.
"""

import asyncio
import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

from taskminder.core import database
from taskminder.core.clock import utcnow
from taskminder.models.user import User
from taskminder.services.task_service import TaskStore
from taskminder.services.notification_service import NotificationStore
from taskminder.services.notification_checker import check_task_notifications, resolve_utc_offset

logger = logging.getLogger(__name__)


class CheckAlreadyRunning(Exception):
    """Une vérification est déjà en cours pour cet utilisateur"""

    def __init__(self, user_id: int):
        super().__init__(f"Notification check already running for user {user_id}")
        self.user_id = user_id


class UserLocks:
    """Verrous non bloquants par utilisateur"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = self._locks[user_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, user_id: int) -> Iterator[bool]:
        lock = self._lock_for(user_id)
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def is_running(self, user_id: int) -> bool:
        with self._guard:
            lock = self._locks.get(user_id)
        return lock is not None and lock.locked()


user_locks = UserLocks()


def default_stores(db: Session):
    return TaskStore(db), NotificationStore(db)


def check_user_notifications(
    db: Session,
    user_id: int,
    now: Optional[datetime] = None,
    utc_offset: Optional[timedelta] = None,
    locks: UserLocks = user_locks,
    stores: Callable = default_stores
) -> int:
    """Vérifie un utilisateur, lève CheckAlreadyRunning si un passage est en cours"""
    if now is None:
        now = utcnow()

    with locks.hold(user_id) as acquired:
        if not acquired:
            raise CheckAlreadyRunning(user_id)
        task_store, notification_store = stores(db)
        return check_task_notifications(user_id, now, task_store, notification_store, utc_offset)


def run_notification_check(
    session_factory: Optional[Callable[[], Session]] = None,
    now: Optional[datetime] = None,
    locks: UserLocks = user_locks,
    stores: Callable = default_stores
) -> int:
    """Un tick : vérifie tous les utilisateurs. Retourne le nombre de notifications créées."""
    if session_factory is None:
        session_factory = database.SessionLocal
    if now is None:
        now = utcnow()

    db = session_factory()
    try:
        users = db.query(User.id, User.utc_offset_minutes).order_by(User.id).all()
    finally:
        db.close()

    created = 0
    failed = 0
    for user_id, offset_minutes in users:
        db = session_factory()
        try:
            created += check_user_notifications(
                db,
                user_id,
                now=now,
                utc_offset=resolve_utc_offset(offset_minutes),
                locks=locks,
                stores=stores,
            )
        except CheckAlreadyRunning:
            logger.info("Skipping user %s: check already running", user_id)
        except Exception:
            # Les écritures déjà commitées restent, le prochain tick reprend
            db.rollback()
            failed += 1
            logger.exception("Notification check failed for user %s", user_id)
        finally:
            db.close()

    logger.info(
        "Notification check completed for %d users (%d created, %d failed)",
        len(users), created, failed
    )
    return created


def purge_old_notifications(
    session_factory: Optional[Callable[[], Session]] = None,
    now: Optional[datetime] = None,
    retention_days: int = 30
) -> int:
    if session_factory is None:
        session_factory = database.SessionLocal
    if now is None:
        now = utcnow()

    db = session_factory()
    try:
        deleted = NotificationStore(db).purge_older_than(now - timedelta(days=retention_days))
    finally:
        db.close()

    logger.info("Purged %d notifications older than %d days", deleted, retention_days)
    return deleted


async def run_notification_scheduler(
        *,
        interval_seconds: float = 60.0,
        retention_days: int = 30,
        cleanup_interval_hours: float = 24.0,
        session_factory: Optional[Callable[[], Session]] = None,
) -> None:
    """
    Boucle de polling. Le premier tick part immédiatement au démarrage.

    Le travail SQLAlchemy (synchrone) tourne dans un thread pour ne pas bloquer l'API.
    """
    sleep_s = max(1.0, float(interval_seconds))
    cleanup_s = max(60.0, float(cleanup_interval_hours) * 3600)
    last_cleanup: Optional[float] = None

    logger.info("Notification scheduler started (every %.0fs)", sleep_s)
    while True:
        try:
            await asyncio.to_thread(run_notification_check, session_factory)
        except Exception:
            logger.exception("Notification check tick failed")

        mono_now = time.monotonic()
        if last_cleanup is None or mono_now - last_cleanup >= cleanup_s:
            try:
                await asyncio.to_thread(purge_old_notifications, session_factory, None, retention_days)
            except Exception:
                logger.exception("Notification cleanup failed")
            last_cleanup = mono_now

        await asyncio.sleep(sleep_s)
