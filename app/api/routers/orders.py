# app/api/routers/orders.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_caller, get_notifier
from app.data.database import get_db
from app.domain.order_status import Caller
from app.domain.schemas import (
    AssignRiderIn,
    OrderActionOut,
    OrderCreate,
    OrderCreatedOut,
    OrderDetailOut,
    OrderOut,
    OverrideStatusIn,
    OverrideStatusOut,
    StatusIn,
)
from app.services.notification_service import NotificationService
from app.services.order_service import OrderService
from app.services.order_workflow import OrderWorkflow

router = APIRouter(prefix="/orders", tags=["orders"])

#kontrola roli i dostepu jest w serwisach, router tylko uwierzytelnia


def get_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> OrderService:
    return OrderService(db, notifier=notifier)


def get_workflow(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
) -> OrderWorkflow:
    return OrderWorkflow(db, notifier=notifier)


def _action(order, message: str) -> dict:
    return {"message": message, "order_id": order.id, "status": order.status}


# =====================================================
# CUSTOMER
# =====================================================
@router.post("/", response_model=OrderCreatedOut, status_code=201)
def create_order(
    payload: OrderCreate,
    caller: Caller = Depends(get_caller),
    workflow: OrderWorkflow = Depends(get_workflow),
):
    """
    Tworzy zamowienie w jednej transakcji: promo, stan magazynu, pozycje, koszyk.
    Powiadomienie wysylane po commicie.
    """
    return workflow.create_order(
        caller,
        items=[item.model_dump() for item in payload.items],
        delivery_address=payload.delivery_address,
        promo_code_id=payload.promo_code_id,
        discount_amount=payload.discount_amount,
        total_price=payload.total_price,
    )


@router.get("/my", response_model=List[OrderOut])
def my_orders(caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return svc.list_my_orders(caller)


# =====================================================
# RIDER
# =====================================================
@router.get("/rider/my", response_model=List[OrderOut])
def rider_orders(caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return svc.list_rider_orders(caller)


@router.put("/status/{order_id}", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: StatusIn,
    caller: Caller = Depends(get_caller),
    svc: OrderService = Depends(get_service),
):
    return svc.update_status(caller, order_id, payload.status)


@router.put("/rider/start/{order_id}", response_model=OrderActionOut)
def start_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return _action(svc.start_order(caller, order_id), "Order started")


@router.put("/rider/picked/{order_id}", response_model=OrderActionOut)
def pickup_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return _action(svc.pickup_order(caller, order_id), "Order picked up")


@router.put("/rider/delivered/{order_id}", response_model=OrderActionOut)
def deliver_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return _action(svc.deliver_order(caller, order_id), "Order delivered")


# =====================================================
# ADMIN
# =====================================================
@router.get("/admin/all", response_model=List[OrderOut])
def all_orders(caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return svc.list_all_orders(caller)


@router.get("/admin/filter", response_model=List[OrderOut])
def filter_orders(
    status: str | None = Query(None),
    customer_id: int | None = Query(None),
    rider_id: int | None = Query(None),
    date_filter: str | None = Query(None, alias="date"),
    date_from: date | None = Query(None, alias="from"),
    date_to: date | None = Query(None, alias="to"),
    caller: Caller = Depends(get_caller),
    svc: OrderService = Depends(get_service),
):
    return svc.filter_orders(
        caller,
        status=status,
        customer_id=customer_id,
        rider_id=rider_id,
        date_filter=date_filter,
        date_from=date_from,
        date_to=date_to,
    )


@router.put("/assign/{order_id}", response_model=OrderActionOut)
def assign_rider(
    order_id: int,
    payload: AssignRiderIn,
    caller: Caller = Depends(get_caller),
    svc: OrderService = Depends(get_service),
):
    return _action(svc.assign_rider(caller, order_id, payload.rider_id), "Rider assigned successfully")


@router.put("/admin/cancel/{order_id}", response_model=OrderActionOut)
def cancel_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return _action(svc.cancel_order(caller, order_id), "Order cancelled successfully")


@router.put("/admin/refund/{order_id}", response_model=OrderActionOut)
def refund_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return _action(svc.refund_order(caller, order_id), "Order refunded successfully")


@router.put("/admin/status/{order_id}", response_model=OverrideStatusOut)
def override_status(
    order_id: int,
    payload: OverrideStatusIn,
    caller: Caller = Depends(get_caller),
    svc: OrderService = Depends(get_service),
):
    """UNSAFE: wymuszenie statusu bez walidacji przejsc, zapisywane w audycie."""
    order = svc.force_set_status(caller, order_id, payload.status, reason=payload.reason)
    return {"message": "Order status updated", "order_id": order.id, "new_status": order.status}


# =====================================================
# SHARED (po /my i /admin/*, zeby nie przechwycic tych sciezek)
# =====================================================
@router.get("/{order_id}", response_model=OrderDetailOut)
def get_order(order_id: int, caller: Caller = Depends(get_caller), svc: OrderService = Depends(get_service)):
    return svc.get_order(caller, order_id)
