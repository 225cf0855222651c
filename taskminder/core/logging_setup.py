import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> None:
    """Configure le logger racine (à appeler une seule fois au démarrage)"""
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Evite les doublons si uvicorn --reload relance le module
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)

    # SQLAlchemy est très bavard en DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
