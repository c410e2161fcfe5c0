from .base import Base
from .product import Product
from .cart import Cart
from .cart_item import CartItem
from .order import Order
from .order_item import OrderItem
from .order_status_history import OrderStatusHistory

__all__ = [
    "Base",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
]
