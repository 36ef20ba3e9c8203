# app/domain/errors.py
"""
Wyjatki domenowe serwisu zamowien.

Kazdy wyjatek niesie status_code, ktory handler w app/api/__init__.py zamienia
na odpowiedz {"error": ...}. Klasy dziedzicza tez po wbudowanych
ValueError / LookupError / PermissionError, wiec stary kod lapiacy
te typy dalej dziala.
"""
from enum import Enum


class OrderError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(OrderError, ValueError):
    status_code = 400


class NotFoundError(OrderError, LookupError):
    status_code = 404


class AccessDeniedError(OrderError, PermissionError):
    status_code = 403


class ConflictError(OrderError):
    status_code = 400


class InternalError(OrderError):
    status_code = 500


class TransientError(InternalError):
    """Timeout / blokada w bazie - cala operacje mozna powtorzyc."""

    status_code = 503


class InsufficientStock(ConflictError):
    def __init__(self, product_id: int, requested: int):
        self.product_id = product_id
        self.requested = requested
        super().__init__(f"Insufficient stock for product {product_id}")


class ProductNotFound(NotFoundError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class PromoRejection(str, Enum):
    INVALID = "invalid"
    EXPIRED = "expired"
    NOT_YET_ACTIVE = "not_yet_active"
    BELOW_MINIMUM = "below_minimum"
    LIMIT_REACHED = "limit_reached"
    ALREADY_USED = "already_used"


class PromoRejected(ConflictError):
    def __init__(self, reason: PromoRejection, message: str, status_code: int | None = None):
        self.reason = reason
        super().__init__(message, status_code=status_code)
