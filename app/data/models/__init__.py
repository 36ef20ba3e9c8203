#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.user import UserModel
from app.data.models.rider import RiderModel
from app.data.models.product import ProductModel
from app.data.models.cart_item import CartItemModel
from app.data.models.promo_code import PromoCodeModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.models.promo_code_usage import PromoCodeUsageModel
from app.data.models.order_status_audit import OrderStatusAuditModel
from app.data.models.notification import NotificationModel

__all__ = [
    "UserModel",
    "RiderModel",
    "ProductModel",
    "CartItemModel",
    "PromoCodeModel",
    "OrderModel",
    "OrderItemModel",
    "PromoCodeUsageModel",
    "OrderStatusAuditModel",
    "NotificationModel",
]
