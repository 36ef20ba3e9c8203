from sqlalchemy import Column, Integer, ForeignKey, DateTime, Numeric, UniqueConstraint
from datetime import datetime, timezone

from app.data.database import Base


class PromoCodeUsageModel(Base):
    __tablename__ = "promo_code_usage"

    id = Column(Integer, primary_key=True)
    promo_code_id = Column(Integer, ForeignKey("promo_codes.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)

    discount_amount = Column(Numeric(10, 2), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    # jeden user - jedno uzycie kodu, ostateczny arbiter przy wyscigu
    __table_args__ = (UniqueConstraint("promo_code_id", "user_id", name="u_promo_usage_code_user"),)
