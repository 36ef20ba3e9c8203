# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


class OrderItemIn(BaseModel):
    """Schema pozycji zamowienia (request)."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Cena jednostkowa z koszyka")


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    items: List[OrderItemIn] = Field(default_factory=list)
    total_price: Decimal | None = Field(None, ge=0, description="Tylko do porownania, serwer liczy sam")
    delivery_address: str = Field(..., max_length=500)
    promo_code_id: int | None = Field(None, gt=0)
    discount_amount: Decimal | None = Field(None, ge=0, description="Ignorowany, rabat liczy serwer")


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    total_price: Decimal
    delivery_address: str
    status: str
    payment_method: str
    rider_id: int | None = None
    promo_code_id: int | None = None
    discount_amount: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderCreatedOut(BaseModel):
    message: str
    order_id: int
    order: OrderOut
    discount_applied: Decimal


class OrderItemOut(BaseModel):
    id: int
    order_id: int
    product_id: int
    quantity: int
    price: Decimal
    product_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(BaseModel):
    order: OrderOut
    items: List[OrderItemOut]


class OrderActionOut(BaseModel):
    """Odpowiedz na zmiane statusu."""

    message: str
    order_id: int
    status: str


class AssignRiderIn(BaseModel):
    rider_id: int = Field(..., gt=0, description="users.id ridera")


class StatusIn(BaseModel):
    status: str | None = None


class OverrideStatusIn(BaseModel):
    status: str | None = None
    reason: str | None = Field(None, max_length=500)


class OverrideStatusOut(BaseModel):
    message: str
    order_id: int
    new_status: str


class PromoValidateIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    cart_total: Decimal = Field(..., ge=0)


class PromoValidateOut(BaseModel):
    valid: bool
    promo_code_id: int
    code: str
    discount_type: str
    discount_value: Decimal
    discount_amount: Decimal
    original_amount: Decimal
    final_amount: Decimal


class PromoCodeCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    discount_type: Literal["percentage", "fixed"]
    discount_value: Decimal = Field(..., gt=0)
    min_order_amount: Decimal | None = Field(None, ge=0)
    max_discount: Decimal | None = Field(None, gt=0)
    usage_limit: int | None = Field(None, gt=0)
    valid_from: datetime | None = None
    valid_until: datetime | None = None


class PromoCodeUpdate(BaseModel):
    # tylko przeslane pola sa zmieniane
    code: str | None = Field(None, min_length=1, max_length=64)
    discount_type: Literal["percentage", "fixed"] | None = None
    discount_value: Decimal | None = Field(None, gt=0)
    min_order_amount: Decimal | None = Field(None, ge=0)
    max_discount: Decimal | None = Field(None, gt=0)
    usage_limit: int | None = Field(None, gt=0)
    is_active: bool | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None


class PromoCodeOut(BaseModel):
    id: int
    code: str
    discount_type: str
    discount_value: Decimal
    min_order_amount: Decimal
    max_discount: Decimal | None = None
    usage_limit: int | None = None
    used_count: int
    is_active: bool
    valid_from: datetime | None = None
    valid_until: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str


class OtpSendIn(BaseModel):
    phone: str = Field(..., min_length=1, max_length=32)


class OtpSendOut(BaseModel):
    message: str
    expires_in: int
    otp: str | None = None


class OtpVerifyIn(BaseModel):
    phone: str = Field(..., min_length=1, max_length=32)
    code: str = Field(..., min_length=1, max_length=12)


class SessionOut(BaseModel):
    token: str
    user_id: int
    role: str
