# app/repos/order_repo.py
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.order_status_audit import OrderStatusAuditModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        # bez commita - transakcja nalezy do wywolujacego
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_for_update(self, order_id: int) -> OrderModel | None:
        # zmiana statusu: check + update pod blokada wiersza
        return self.db.execute(
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_items(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def list_orders(
        self,
        user_id: int | None = None,
        rider_id: int | None = None,
        status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
    ) -> list[OrderModel]:
        """Lista zamowien, najnowsze pierwsze. created_to jest wylaczne."""
        stmt = select(OrderModel)
        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if rider_id is not None:
            stmt = stmt.where(OrderModel.rider_id == rider_id)
        if status is not None:
            stmt = stmt.where(OrderModel.status == status)
        if created_from is not None:
            stmt = stmt.where(OrderModel.created_at >= created_from)
        if created_to is not None:
            stmt = stmt.where(OrderModel.created_at < created_to)

        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        return list(self.db.execute(stmt).scalars())

    def update_order_status(
        self,
        order: OrderModel,
        status: str,
        actor_id: int,
        actor_role: str,
        forced: bool = False,
        reason: str | None = None,
        **changes,
    ) -> OrderModel:
        previous = order.status
        order.status = status
        for field, value in changes.items():
            setattr(order, field, value)

        self.add_audit(
            OrderStatusAuditModel(
                order_id=order.id,
                from_status=previous,
                to_status=status,
                actor_id=actor_id,
                actor_role=actor_role,
                forced=forced,
                reason=reason,
            )
        )
        self.db.flush()
        return order

    def add_audit(self, entry: OrderStatusAuditModel) -> OrderStatusAuditModel:
        self.db.add(entry)
        return entry
