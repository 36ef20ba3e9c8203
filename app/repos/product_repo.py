# app/repos/product_repo.py
from sqlalchemy import update, case
from sqlalchemy.orm import Session

from app.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        """
        Warunkowy UPDATE: stock - quantity tylko gdy stock >= quantity.
        Sprawdzenie i zmniejszenie to jedno zapytanie, wiec nie ma oversell.
        Zwraca rowcount (0 = brak produktu albo za malo na stanie).
        """
        new_stock = ProductModel.stock - quantity
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.stock >= quantity)
            .values(
                stock=new_stock,
                is_available=case((new_stock > 0, True), else_=False),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def exists(self, product_id: int) -> bool:
        return self.db.query(ProductModel.id).filter(ProductModel.id == product_id).first() is not None
