from sqlalchemy import Column, Integer, ForeignKey, String, Boolean, DateTime
from datetime import datetime, timezone

from app.data.database import Base


class OrderStatusAuditModel(Base):
    __tablename__ = "order_status_audit"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    from_status = Column(String(20), nullable=True)  # None przy utworzeniu
    to_status = Column(String(20), nullable=False)
    actor_id = Column(Integer, nullable=False)
    actor_role = Column(String(20), nullable=False)

    forced = Column(Boolean, nullable=False, default=False)  # override admina
    reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
