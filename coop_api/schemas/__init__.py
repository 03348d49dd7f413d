"""Schema exports."""

from coop_api.schemas.common import CamelModel, Pagination
from coop_api.schemas.order import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderItemPayload,
    OrderItemRead,
    OrderPage,
    OrderRead,
    OrderStatusUpdateRequest,
)
from coop_api.schemas.product import ProductCreate, ProductPage, ProductRead, ProductUpdate
from coop_api.schemas.user import UserRead

__all__ = [
    "CamelModel",
    "Pagination",
    "OrderCreateRequest",
    "OrderCreateResponse",
    "OrderItemPayload",
    "OrderItemRead",
    "OrderPage",
    "OrderRead",
    "OrderStatusUpdateRequest",
    "ProductCreate",
    "ProductPage",
    "ProductRead",
    "ProductUpdate",
    "UserRead",
]
