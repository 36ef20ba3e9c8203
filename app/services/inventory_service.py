# app/services/inventory_service.py
from sqlalchemy.orm import Session

from app.domain.errors import InsufficientStock, ProductNotFound, ValidationError
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryService:
    """
    Rezerwacja stanu magazynowego produktu.
    Dziala w transakcji wywolujacego - nie robi commit ani rollback,
    blad przerywa cala transakcje tworzenia zamowienia.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def reserve(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0")

        rowcount = self.repo.decrement_stock(product_id, quantity)

        if rowcount == 0:
            #0 wierszy - albo brak produktu albo za malo sztuk
            if not self.repo.exists(product_id):
                raise ProductNotFound(product_id)
            logger.info(f"Reservation rejected: product {product_id}, requested {quantity}")
            raise InsufficientStock(product_id, quantity)

        logger.info(f"Reserved {quantity} x product {product_id}")
