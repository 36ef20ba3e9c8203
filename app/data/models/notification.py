from sqlalchemy import Column, Integer, ForeignKey, String, Boolean, DateTime
from datetime import datetime, timezone

from app.data.database import Base


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    type = Column(String(32), nullable=False, default="general")
    related_id = Column(Integer, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
