# app/celery_worker.py
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from app.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "delivery",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# WAŻNE: Explicite importuj taski, żeby Celery je zarejestrował
celery_app.conf.imports = (
    "app.services.notification_service",
)

celery_app.conf.timezone = "UTC"
#powiadomienia sa best-effort - bez ponawiania po stronie workera
celery_app.conf.task_acks_late = False


@celery_setup_logging.connect
def _configure_worker_logging(**kwargs):
    from app.utils.logging import setup_logging

    setup_logging()
