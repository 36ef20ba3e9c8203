from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint

from app.data.database import Base


class CartItemModel(Base):
    __tablename__ = "cart"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    quantity = Column(Integer, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="u_cart_user_product"),)
