from sqlalchemy import Column, Integer, ForeignKey, Boolean

from app.data.database import Base


class RiderModel(Base):
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True)
    # orders.rider_id wskazuje na users.id, nie riders.id
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)
    is_available = Column(Boolean, nullable=False, default=True)
