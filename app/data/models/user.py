from sqlalchemy import Column, Integer, String
from app.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    full_name = Column(String, nullable=False)
    phone = Column(String(32), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False, default="customer")  # customer, rider, admin
