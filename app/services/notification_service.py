# app/services/notification_service.py
from typing import Callable

from sqlalchemy.orm import Session

from app.celery_worker import celery_app
from app.data.database import SessionLocal
from app.data.models.notification import NotificationModel
from app.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_MESSAGES = {
    "pending": ("Order Placed", "Your order #{order_id} has been placed successfully!"),
    "assigned": ("Rider Assigned", "A rider has been assigned to your order #{order_id}"),
    "rider_started": ("Rider on the Way", "The rider is on the way to pick up your order #{order_id}"),
    "picked_up": ("Order Picked Up", "Your order #{order_id} has been picked up and is on the way!"),
    "delivered": ("Order Delivered", "Your order #{order_id} has been delivered. Enjoy!"),
    "cancelled": ("Order Cancelled", "Your order #{order_id} has been cancelled"),
    "refunded": ("Order Refunded", "Your order #{order_id} has been refunded"),
}


class NotificationService:
    """
    Powiadomienia o zmianie statusu zamowienia.
    Best-effort: wysylka przez Celery, blad jest logowany i nigdy nie wychodzi
    do wywolujacego - zamowienie jest juz zapisane.
    """

    def __init__(self, dispatch: Callable[[int, int, str], object] | None = None):
        self.dispatch = dispatch or send_order_status_notification_task.delay

    def send_order_status(self, order_id: int, user_id: int, status: str) -> bool:
        try:
            self.dispatch(order_id, user_id, status)
        except Exception:
            logger.exception(f"[NOTIFICATION] Failed to dispatch '{status}' for order {order_id}")
            return False

        logger.info(f"[NOTIFICATION] Queued '{status}' for user {user_id}, order {order_id}")
        return True


def create_status_notification(db: Session, order_id: int, user_id: int, status: str) -> NotificationModel | None:
    message = STATUS_MESSAGES.get(status)
    if not message:
        # status spoza mapy (np. po override) - brak tresci do wyslania
        logger.info(f"[NOTIFICATION] No message for status '{status}', order {order_id}")
        return None

    title, body = message
    notification = NotificationModel(
        user_id=user_id,
        title=title,
        body=body.format(order_id=order_id),
        type="order_status",
        related_id=order_id,
    )
    db.add(notification)
    db.commit()
    return notification


@celery_app.task(name="app.services.notification_service.send_order_status_notification_task")
def send_order_status_notification_task(order_id: int, user_id: int, status: str):
    """
    Zapisuje powiadomienie in-app. Wysylka push (FCM) poza zakresem serwisu.
    """
    db = SessionLocal()
    try:
        notification = create_status_notification(db, order_id, user_id, status)
    finally:
        db.close()

    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {status}")
    return {
        "user_id": user_id,
        "order_id": order_id,
        "status": status,
        "notification_id": notification.id if notification else None,
    }
