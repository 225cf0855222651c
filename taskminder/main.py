import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from taskminder.core import database
from taskminder.core.config import settings
from taskminder.core.logging_setup import setup_logging
from taskminder.models import user, task, notification  # noqa: F401 (tables)
from taskminder.routers import health, notifications
from taskminder.services.scheduler import run_notification_scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)

    # Init DB
    database.Base.metadata.create_all(bind=database.engine)

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = asyncio.create_task(run_notification_scheduler(
            interval_seconds=settings.NOTIFY_INTERVAL_SECONDS,
            retention_days=settings.NOTIFY_RETENTION_DAYS,
            cleanup_interval_hours=settings.NOTIFY_CLEANUP_INTERVAL_HOURS,
        ))

    yield

    if scheduler is not None:
        scheduler.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler


app = FastAPI(
    title="Taskminder API",
    version="0.1.0",
    lifespan=lifespan
)

# Routes
app.include_router(health.router, prefix="/health")
app.include_router(notifications.router)
