# app/domain/order_status.py
from dataclasses import dataclass
from enum import Enum

from app.domain.errors import AccessDeniedError, ConflictError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    RIDER_STARTED = "rider_started"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @classmethod
    def parse(cls, value: str) -> "OrderStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown order status: {value}") from None


class Role(str, Enum):
    CUSTOMER = "customer"
    RIDER = "rider"
    ADMIN = "admin"


TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED})

# refunded nie ma wymaganego poprzednika (otwarte pytanie biznesowe),
# dlatego jest osiagalny z kazdego stanu poza samym refunded
TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.ASSIGNED, OrderStatus.CANCELLED, OrderStatus.REFUNDED,
    }),
    OrderStatus.ASSIGNED: frozenset({
        OrderStatus.ASSIGNED, OrderStatus.RIDER_STARTED, OrderStatus.CANCELLED, OrderStatus.REFUNDED,
    }),
    OrderStatus.RIDER_STARTED: frozenset({
        OrderStatus.PICKED_UP, OrderStatus.CANCELLED, OrderStatus.REFUNDED,
    }),
    OrderStatus.PICKED_UP: frozenset({
        OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED,
    }),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.REFUNDED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]


def ensure_transition(current: str, target: OrderStatus) -> OrderStatus:
    """Zwraca aktualny stan jako OrderStatus albo rzuca ConflictError."""
    current_status = OrderStatus.parse(current)
    if not can_transition(current_status, target):
        raise ConflictError(
            f"Cannot change order status from {current_status.value} to {target.value}"
        )
    return current_status


@dataclass(frozen=True)
class Caller:
    """Zweryfikowana tozsamosc wywolujacego (z tokenu sesji)."""

    user_id: int
    role: Role


def require_role(caller: Caller, *roles: Role) -> None:
    if caller.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise AccessDeniedError(f"Access denied. Allowed roles: {allowed}")
