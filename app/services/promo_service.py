# app/services/promo_service.py
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.data.models.promo_code import PromoCodeModel
from app.data.models.promo_code_usage import PromoCodeUsageModel
from app.domain.errors import ConflictError, NotFoundError, PromoRejected, PromoRejection, ValidationError
from app.repos.promo_repo import PromoRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
DISCOUNT_TYPES = ("percentage", "fixed")
REQUIRED_PROMO_FIELDS = ("code", "discount_type", "discount_value", "min_order_amount", "is_active")


def round_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _as_utc(value: datetime | None) -> datetime | None:
    # sqlite zwraca naive datetime, zakladamy UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PromoService:
    """
    Walidacja i realizacja kodow promocyjnych.

    validate            - podglad dla ekranu koszyka (tylko odczyt)
    validate_for_order  - ta sama walidacja w transakcji zamowienia, wiersz kodu zablokowany
    redeem              - zuzycie kodu (licznik + wpis w promo_code_usage)
    """

    def __init__(self, db: Session, clock: Callable[[], datetime] | None = None):
        self.db = db
        self.repo = PromoRepo(db)
        self.clock = clock or _utcnow

    # =====================================================
    # QUERY
    # =====================================================
    def validate(self, code: str, user_id: int, cart_total: Decimal) -> Dict[str, Any]:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Code and cart_total are required")

        cart_total = Decimal(cart_total)
        promo = self.repo.get_by_code(code)

        if not promo or not promo.is_active:
            raise PromoRejected(PromoRejection.INVALID, "Invalid or expired promo code", status_code=404)

        self._check_rules(promo, user_id, cart_total)

        discount = self.compute_discount(promo, cart_total)

        return {
            "valid": True,
            "promo_code_id": promo.id,
            "code": promo.code,
            "discount_type": promo.discount_type,
            "discount_value": promo.discount_value,
            "discount_amount": round_money(discount),
            "original_amount": round_money(cart_total),
            "final_amount": round_money(cart_total - discount),
        }

    def list_promo_codes(self) -> list[PromoCodeModel]:
        return self.repo.list_all()

    # =====================================================
    # ORDER TRANSACTION
    # =====================================================
    def validate_for_order(self, promo_code_id: int, user_id: int, cart_total: Decimal):
        """
        Walidacja w transakcji tworzenia zamowienia.
        Zwraca (promo, discount) - discount w pelnej precyzji.
        """
        promo = self.repo.get_for_update(promo_code_id)

        if not promo or not promo.is_active:
            raise PromoRejected(PromoRejection.INVALID, "Invalid promo code")

        self._check_rules(promo, user_id, cart_total)

        return promo, self.compute_discount(promo, cart_total)

    def redeem(self, promo: PromoCodeModel, user_id: int, order_id: int, discount: Decimal) -> PromoCodeUsageModel:
        """Zuzycie kodu. Tylko wewnatrz transakcji zamowienia."""
        if self.repo.increment_used_count(promo.id) == 0:
            raise PromoRejected(PromoRejection.LIMIT_REACHED, "Promo code usage limit reached")

        try:
            usage = self.repo.add_usage(
                PromoCodeUsageModel(
                    promo_code_id=promo.id,
                    user_id=user_id,
                    order_id=order_id,
                    discount_amount=round_money(discount),
                )
            )
        except IntegrityError:
            #unique (promo_code_id, user_id) - rownolegla realizacja wygrala
            raise PromoRejected(PromoRejection.ALREADY_USED, "You have already used this promo code") from None

        logger.info(f"Promo code {promo.code} redeemed by user {user_id} on order {order_id}")
        return usage

    # =====================================================
    # RULES
    # =====================================================
    def _check_rules(self, promo: PromoCodeModel, user_id: int, cart_total: Decimal) -> None:
        now = self.clock()

        valid_until = _as_utc(promo.valid_until)
        if valid_until and valid_until < now:
            raise PromoRejected(PromoRejection.EXPIRED, "Promo code has expired")

        valid_from = _as_utc(promo.valid_from)
        if valid_from and valid_from > now:
            raise PromoRejected(PromoRejection.NOT_YET_ACTIVE, "Promo code is not yet active")

        min_order = promo.min_order_amount or Decimal("0")
        if cart_total < min_order:
            raise PromoRejected(
                PromoRejection.BELOW_MINIMUM,
                f"Minimum order amount is {round_money(min_order)}",
            )

        if promo.usage_limit is not None and promo.used_count >= promo.usage_limit:
            raise PromoRejected(PromoRejection.LIMIT_REACHED, "Promo code usage limit reached")

        if self.repo.has_usage(promo.id, user_id):
            raise PromoRejected(PromoRejection.ALREADY_USED, "You have already used this promo code")

    @staticmethod
    def compute_discount(promo: PromoCodeModel, cart_total: Decimal) -> Decimal:
        cart_total = Decimal(cart_total)
        value = Decimal(promo.discount_value)

        if promo.discount_type == "percentage":
            discount = cart_total * value / Decimal(100)
            if promo.max_discount is not None and discount > promo.max_discount:
                discount = Decimal(promo.max_discount)
        elif promo.discount_type == "fixed":
            discount = value
        else:
            raise ValidationError(f"Unknown discount type: {promo.discount_type}")

        # rabat nigdy wiekszy niz koszyk i nigdy ujemny
        return max(Decimal("0"), min(discount, cart_total))

    # =====================================================
    # ADMIN COMMANDS
    # =====================================================
    def create_promo_code(self, data: Dict[str, Any]) -> PromoCodeModel:
        code = (data.get("code") or "").strip().upper()
        if not code or not data.get("discount_type") or data.get("discount_value") is None:
            raise ValidationError("Code, discount_type, and discount_value are required")

        if data["discount_type"] not in DISCOUNT_TYPES:
            raise ValidationError("discount_type must be 'percentage' or 'fixed'")

        if self.repo.get_by_code(code):
            raise ConflictError("Promo code already exists")

        promo = PromoCodeModel(
            code=code,
            discount_type=data["discount_type"],
            discount_value=data["discount_value"],
            min_order_amount=data.get("min_order_amount") or Decimal("0"),
            max_discount=data.get("max_discount"),
            usage_limit=data.get("usage_limit"),
            valid_from=data.get("valid_from"),
            valid_until=data.get("valid_until"),
            used_count=0,
            is_active=True,
        )

        try:
            self.repo.add(promo)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise ConflictError("Promo code already exists") from None

        logger.info(f"Promo code {promo.code} created")
        return promo

    def deactivate_promo_code(self, promo_code_id: int) -> PromoCodeModel:
        promo = self.repo.get(promo_code_id)
        if not promo:
            raise NotFoundError("Promo code not found")

        promo.is_active = False
        self.repo.commit()

        logger.info(f"Promo code {promo.code} deactivated")
        return promo

    def update_promo_code(self, promo_code_id: int, changes: Dict[str, Any]) -> PromoCodeModel:
        """Zmienia tylko przeslane pola. Pola wymagane nie moga byc wyzerowane."""
        promo = self.repo.get(promo_code_id)
        if not promo:
            raise NotFoundError("Promo code not found")

        for field in REQUIRED_PROMO_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null")

        if "code" in changes:
            code = changes["code"].strip().upper()
            if not code:
                raise ValidationError("Code, discount_type, and discount_value are required")
            other = self.repo.get_by_code(code)
            if other and other.id != promo.id:
                raise ConflictError("Promo code already exists")
            changes["code"] = code

        if "discount_type" in changes and changes["discount_type"] not in DISCOUNT_TYPES:
            raise ValidationError("discount_type must be 'percentage' or 'fixed'")

        for field, value in changes.items():
            setattr(promo, field, value)

        try:
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise ConflictError("Promo code already exists") from None

        logger.info(f"Promo code {promo.id} updated: {', '.join(sorted(changes)) or '-'}")
        return promo

    def delete_promo_code(self, promo_code_id: int) -> None:
        promo = self.repo.get(promo_code_id)
        if not promo:
            raise NotFoundError("Promo code not found")

        #uzyty kod trzyma klucze obce z zamowien i promo_code_usage
        if self.repo.is_referenced(promo.id):
            raise ConflictError("Promo code has already been used, deactivate it instead")

        self.repo.delete(promo)
        self.repo.commit()
        logger.info(f"Promo code {promo.code} deleted")
