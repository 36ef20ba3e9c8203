from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from datetime import datetime, timezone

from app.data.database import Base

class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    total_price = Column(Numeric(10, 2), nullable=False)  # po rabacie
    delivery_address = Column(String, nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # patrz app/domain/order_status.py
    payment_method = Column(String(32), nullable=False, default="cash_on_delivery")

    rider_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    promo_code_id = Column(Integer, ForeignKey("promo_codes.id"), nullable=True)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True)
