# app/data/seed.py
from decimal import Decimal

from app.data.database import SessionLocal
from app.data.models import ProductModel, PromoCodeModel, RiderModel, UserModel


def seed():
    """Dane deweloperskie: admin, rider, klient, kilka produktow i kod SAVE10."""
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(UserModel).first():
            return

        admin = UserModel(full_name="Admin", phone="+10000000001", role="admin")
        rider = UserModel(full_name="Rider One", phone="+10000000002", role="rider")
        customer = UserModel(full_name="Customer One", phone="+10000000003", role="customer")
        db.add_all([admin, rider, customer])
        db.flush()

        db.add(RiderModel(user_id=rider.id, is_available=True))
        db.add_all([
            ProductModel(name="Margherita", price=Decimal("24.99"), stock=50, is_available=True),
            ProductModel(name="Burger", price=Decimal("31.50"), stock=30, is_available=True),
            ProductModel(name="Lemonade", price=Decimal("8.00"), stock=0, is_available=False),
        ])
        db.add(PromoCodeModel(code="SAVE10", discount_type="percentage", discount_value=Decimal("10")))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
