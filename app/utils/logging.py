# app/utils/logging.py
import logging
import sys

from app.utils.settings import LOG_LEVEL

_FORMAT = "%(asctime)s - %(levelname)s - [PID:%(process)d] - %(name)s - %(message)s"


def setup_logging(level: str | None = None):
    """
    Globalna konfiguracja logowania (stdout, zgodne z dockerem).
    Wywolywane raz przy starcie api i workera celery.
    """
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format=_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # mniej szumu z bibliotek
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("kombu").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
