from os import getenv


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskminder:taskminder@db:5432/taskminder")

    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "15"))  # expire au bout de 15 minutes

    # Boucle de notifications
    NOTIFY_INTERVAL_SECONDS = float(getenv("NOTIFY_INTERVAL_SECONDS", "60"))
    NOTIFY_UTC_OFFSET_MINUTES = int(getenv("NOTIFY_UTC_OFFSET_MINUTES", "300"))  # UTC+5
    NOTIFY_RETENTION_DAYS = int(getenv("NOTIFY_RETENTION_DAYS", "30"))
    NOTIFY_CLEANUP_INTERVAL_HOURS = float(getenv("NOTIFY_CLEANUP_INTERVAL_HOURS", "24"))
    SCHEDULER_ENABLED = _as_bool(getenv("SCHEDULER_ENABLED", "true"))

    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

settings = Settings()
