# app/services/order_service.py
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.unit_of_work import unit_of_work
from app.domain.errors import AccessDeniedError, NotFoundError, ValidationError
from app.domain.order_status import (
    Caller,
    OrderStatus,
    Role,
    ensure_transition,
    require_role,
)
from app.repos.order_repo import OrderRepo
from app.repos.rider_repo import RiderRepo
from app.services.notification_service import NotificationService
from app.utils.logging import get_logger
from app.utils.settings import ORDER_TX_TIMEOUT_MS

logger = get_logger(__name__)

DATE_FILTERS = ("today", "yesterday", "week", "month")

# legacy PUT /orders/status/{id} - tylko kroki jazdy ridera
RIDER_STEPS = (OrderStatus.RIDER_STARTED, OrderStatus.PICKED_UP, OrderStatus.DELIVERED)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class OrderService:
    """
    Maszyna stanow zamowienia i odczyty z kontrola dostepu.

    Kazda operacja dostaje zweryfikowanego Caller i sprawdza po kolei:
    rola -> istnienie zamowienia -> wlasnosc -> dozwolone przejscie.
    Po commicie zmiany statusu idzie powiadomienie (best-effort).
    Kazdy zapis statusu ma limit czasu transakcji (lock_timeout na postgresie).
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationService | None = None,
        clock: Callable[[], datetime] | None = None,
        tx_timeout_ms: int | None = ORDER_TX_TIMEOUT_MS,
    ):
        self.db = db
        self.tx_timeout_ms = tx_timeout_ms
        self.repo = OrderRepo(db)
        self.riders = RiderRepo(db)
        self.notifier = notifier or NotificationService()
        self.clock = clock or _utcnow

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, caller: Caller, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if caller.role == Role.CUSTOMER and order.user_id != caller.user_id:
            raise AccessDeniedError("Access denied")

        if caller.role == Role.RIDER and order.rider_id != caller.user_id:
            raise AccessDeniedError("Access denied")

        #admin - pelny dostep
        items = self.repo.get_items(order_id)

        return {
            "order": order,
            "items": [
                {
                    "id": i.id,
                    "order_id": i.order_id,
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "price": i.price,
                    "product_name": i.product.name if i.product else None,
                }
                for i in items
            ],
        }

    def list_my_orders(self, caller: Caller) -> List[OrderModel]:
        require_role(caller, Role.CUSTOMER)
        return self.repo.list_orders(user_id=caller.user_id)

    def list_rider_orders(self, caller: Caller) -> List[OrderModel]:
        require_role(caller, Role.RIDER)
        return self.repo.list_orders(rider_id=caller.user_id)

    def list_all_orders(self, caller: Caller) -> List[OrderModel]:
        require_role(caller, Role.ADMIN)
        return self.repo.list_orders()

    def filter_orders(
        self,
        caller: Caller,
        status: str | None = None,
        customer_id: int | None = None,
        rider_id: int | None = None,
        date_filter: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> List[OrderModel]:
        require_role(caller, Role.ADMIN)

        if status:
            status = OrderStatus.parse(status).value

        created_from, created_to = self._date_window(date_filter)

        #zakres wlasny dziala tylko gdy podano oba konce, wlacznie z dniem "to"
        if date_from and date_to:
            if date_from > date_to:
                raise ValidationError("'from' must not be after 'to'")
            range_from = _day_start(date_from)
            range_to = _day_start(date_to + timedelta(days=1))
            created_from = max(created_from, range_from) if created_from else range_from
            created_to = min(created_to, range_to) if created_to else range_to

        return self.repo.list_orders(
            user_id=customer_id,
            rider_id=rider_id,
            status=status,
            created_from=created_from,
            created_to=created_to,
        )

    def _date_window(self, date_filter: str | None) -> tuple[datetime | None, datetime | None]:
        if not date_filter:
            return None, None

        today = self.clock().astimezone(timezone.utc).date()

        if date_filter == "today":
            return _day_start(today), _day_start(today + timedelta(days=1))
        if date_filter == "yesterday":
            return _day_start(today - timedelta(days=1)), _day_start(today)
        if date_filter == "week":
            return _day_start(today - timedelta(days=7)), None
        if date_filter == "month":
            first = today.replace(day=1)
            next_first = (first + timedelta(days=32)).replace(day=1)
            return _day_start(first), _day_start(next_first)

        raise ValidationError(f"date must be one of: {', '.join(DATE_FILTERS)}")

    # =====================================================
    # COMMANDS - ADMIN
    # =====================================================
    def assign_rider(self, caller: Caller, order_id: int, rider_id: int) -> OrderModel:
        require_role(caller, Role.ADMIN)

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            order = self._lock_order(order_id)

            #rider_id to users.id ridera z rosteru
            if not self.riders.get_by_user_id(rider_id):
                raise NotFoundError("Rider not found")

            ensure_transition(order.status, OrderStatus.ASSIGNED)
            self.repo.update_order_status(
                order, OrderStatus.ASSIGNED.value, caller.user_id, caller.role.value, rider_id=rider_id
            )

        logger.info(f"Order {order_id}: rider {rider_id} assigned by admin {caller.user_id}")
        self._notify(order)
        return order

    def cancel_order(self, caller: Caller, order_id: int) -> OrderModel:
        require_role(caller, Role.ADMIN)

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            order = self._lock_order(order_id)
            ensure_transition(order.status, OrderStatus.CANCELLED)
            self.repo.update_order_status(
                order, OrderStatus.CANCELLED.value, caller.user_id, caller.role.value, rider_id=None
            )

        logger.info(f"Order {order_id} cancelled by admin {caller.user_id}")
        self._notify(order)
        return order

    def refund_order(self, caller: Caller, order_id: int) -> OrderModel:
        require_role(caller, Role.ADMIN)

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            order = self._lock_order(order_id)
            previous = ensure_transition(order.status, OrderStatus.REFUNDED)

            # TODO: potwierdzic z biznesem czy refund wymaga wczesniejszego delivered
            if previous != OrderStatus.DELIVERED:
                logger.warning(f"Order {order_id} refunded from status {previous.value}, not delivered")

            self.repo.update_order_status(order, OrderStatus.REFUNDED.value, caller.user_id, caller.role.value)

        logger.info(f"Order {order_id} refunded by admin {caller.user_id}")
        self._notify(order)
        return order

    def force_set_status(self, caller: Caller, order_id: int, status: str | None, reason: str | None = None) -> OrderModel:
        """
        UNSAFE: ustawia dowolny znany status z pominieciem tabeli przejsc.
        Kazde uzycie trafia do order_status_audit z forced=True.
        """
        require_role(caller, Role.ADMIN)

        if not status:
            raise ValidationError("Status is required")
        target = OrderStatus.parse(status)

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            order = self._lock_order(order_id)
            previous = order.status
            self.repo.update_order_status(
                order, target.value, caller.user_id, caller.role.value, forced=True, reason=reason
            )

        logger.warning(
            f"FORCED status change on order {order_id}: {previous} -> {target.value} "
            f"by admin {caller.user_id} (reason: {reason or '-'})"
        )
        self._notify(order)
        return order

    # =====================================================
    # COMMANDS - RIDER
    # =====================================================
    def start_order(self, caller: Caller, order_id: int) -> OrderModel:
        return self._rider_step(caller, order_id, OrderStatus.RIDER_STARTED)

    def pickup_order(self, caller: Caller, order_id: int) -> OrderModel:
        return self._rider_step(caller, order_id, OrderStatus.PICKED_UP)

    def deliver_order(self, caller: Caller, order_id: int) -> OrderModel:
        return self._rider_step(caller, order_id, OrderStatus.DELIVERED)

    def update_status(self, caller: Caller, order_id: int, status: str | None) -> OrderModel:
        """Stara sciezka PUT /orders/status/{id} - kierowana przez te same walidowane przejscia."""
        require_role(caller, Role.RIDER)

        if not status:
            raise ValidationError("Status is required")

        target = OrderStatus.parse(status)
        if target not in RIDER_STEPS:
            allowed = ", ".join(s.value for s in RIDER_STEPS)
            raise ValidationError(f"Rider can only set status to: {allowed}")

        return self._rider_step(caller, order_id, target)

    def _rider_step(self, caller: Caller, order_id: int, target: OrderStatus) -> OrderModel:
        require_role(caller, Role.RIDER)

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            order = self._lock_order(order_id)

            if order.rider_id != caller.user_id:
                raise AccessDeniedError("Order not assigned to this rider")

            ensure_transition(order.status, target)
            self.repo.update_order_status(order, target.value, caller.user_id, caller.role.value)

        logger.info(f"Order {order_id} -> {target.value} by rider {caller.user_id}")
        self._notify(order)
        return order

    # =====================================================
    # HELPERS
    # =====================================================
    def _lock_order(self, order_id: int) -> OrderModel:
        order = self.repo.get_order_for_update(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _notify(self, order: OrderModel) -> None:
        self.notifier.send_order_status(order.id, order.user_id, order.status)
