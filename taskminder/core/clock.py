from datetime import datetime, timezone


def utcnow() -> datetime:
    """UTC naïf, comme les colonnes DateTime de la base"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
