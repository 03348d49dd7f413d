"""Application models package."""

from coop_api.models.audit_log import AuditLog
from coop_api.models.order import Order, OrderItem
from coop_api.models.product import Product
from coop_api.models.user import User

__all__ = ["AuditLog", "Order", "OrderItem", "Product", "User"]
