from sqlalchemy import Column, Integer, String, Boolean, Numeric, CheckConstraint

from app.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    stock = Column(Integer, nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=False)  # zawsze stock > 0

    __table_args__ = (CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),)
