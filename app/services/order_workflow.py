# app/services/order_workflow.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.order_status_audit import OrderStatusAuditModel
from app.data.unit_of_work import unit_of_work
from app.domain.errors import ValidationError
from app.domain.order_status import Caller, OrderStatus, Role, require_role
from app.repos.cart_repo import CartRepo
from app.repos.order_repo import OrderRepo
from app.services.inventory_service import InventoryService
from app.services.notification_service import NotificationService
from app.services.promo_service import PromoService, round_money
from app.utils.logging import get_logger
from app.utils.settings import ORDER_TX_TIMEOUT_MS

logger = get_logger(__name__)

PAYMENT_METHOD = "cash_on_delivery"


class OrderWorkflow:
    """
    Tworzenie zamowienia jako jedna transakcja:
    promo (walidacja pod blokada) -> zamowienie -> pozycje + rezerwacja stanu
    -> zuzycie promo -> czyszczenie koszyka -> commit.
    Blad na dowolnym kroku = rollback calosci, wywolujacy dostaje jeden wyjatek.
    Powiadomienie dopiero po commicie, poza transakcja.
    """

    def __init__(
        self,
        db: Session,
        notifier: NotificationService | None = None,
        promo_service: PromoService | None = None,
        tx_timeout_ms: int | None = ORDER_TX_TIMEOUT_MS,
    ):
        self.db = db
        self.orders = OrderRepo(db)
        self.carts = CartRepo(db)
        self.inventory = InventoryService(db)
        self.promos = promo_service or PromoService(db)
        self.notifier = notifier or NotificationService()
        self.tx_timeout_ms = tx_timeout_ms

    def create_order(
        self,
        caller: Caller,
        items: List[Dict[str, Any]],
        delivery_address: str,
        promo_code_id: int | None = None,
        discount_amount: Decimal | None = None,
        total_price: Decimal | None = None,
    ) -> Dict[str, Any]:
        require_role(caller, Role.CUSTOMER)
        user_id = caller.user_id

        if not items:
            raise ValidationError("Order must contain items")

        if not delivery_address or not delivery_address.strip():
            raise ValidationError("Delivery address is required")

        lines = [self._parse_item(item) for item in items]

        #total liczony po stronie serwera, total z klienta tylko do porownania
        cart_total = sum((price * quantity for _, quantity, price in lines), Decimal("0"))
        if total_price is not None and round_money(total_price) != round_money(cart_total):
            logger.warning(
                f"User {user_id}: client total {total_price} differs from items total {cart_total}, using items total"
            )

        with unit_of_work(self.db, timeout_ms=self.tx_timeout_ms):
            promo = None
            discount = Decimal("0")

            if promo_code_id is not None:
                promo, discount = self.promos.validate_for_order(promo_code_id, user_id, cart_total)
                discount = round_money(discount)

                if discount_amount is not None and round_money(discount_amount) != discount:
                    logger.warning(
                        f"User {user_id}: client discount {discount_amount} ignored, "
                        f"server discount for promo {promo.code} is {discount}"
                    )

            order = self.orders.create_order(
                OrderModel(
                    user_id=user_id,
                    total_price=cart_total - discount,
                    delivery_address=delivery_address.strip(),
                    status=OrderStatus.PENDING.value,
                    payment_method=PAYMENT_METHOD,
                    promo_code_id=promo.id if promo else None,
                    discount_amount=discount,
                )
            )
            self.orders.add_audit(
                OrderStatusAuditModel(
                    order_id=order.id,
                    from_status=None,
                    to_status=order.status,
                    actor_id=user_id,
                    actor_role=caller.role.value,
                )
            )

            #rezerwacja przed insertem pozycji - brak produktu to 404, nie blad klucza obcego
            #blokady wierszy zawsze w kolejnosci product_id, bez zakleszczen miedzy zamowieniami
            for product_id, quantity, _ in sorted(lines, key=lambda line: line[0]):
                self.inventory.reserve(product_id, quantity)

            for product_id, quantity, price in lines:
                self.orders.add_item(
                    OrderItemModel(
                        order_id=order.id,
                        product_id=product_id,
                        quantity=quantity,
                        price=price,
                    )
                )

            if promo:
                self.promos.redeem(promo, user_id, order.id, discount)

            cleared = self.carts.clear_for_user(user_id)
            logger.info(f"Cleared {cleared} cart rows for user {user_id}")

        logger.info(
            f"Order {order.id} created for user {user_id}: total {order.total_price}, discount {discount}"
        )

        self.notifier.send_order_status(order.id, user_id, order.status)

        return {
            "message": "Order created successfully",
            "order_id": order.id,
            "order": order,
            "discount_applied": discount,
        }

    @staticmethod
    def _parse_item(item: Dict[str, Any]) -> tuple[int, int, Decimal]:
        try:
            product_id = int(item["product_id"])
            quantity = int(item["quantity"])
            price = Decimal(str(item["price"]))
        except (KeyError, TypeError, ValueError, ArithmeticError):
            raise ValidationError("Each item needs product_id, quantity and price") from None

        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")
        if price < 0:
            raise ValidationError("Price must not be negative")

        return product_id, quantity, price
