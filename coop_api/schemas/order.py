"""Order API schemas."""

from datetime import datetime

from pydantic import Field

from coop_api.schemas.common import CamelModel, Pagination


class OrderItemPayload(CamelModel):
    """Single requested order line."""

    product_id: int
    qty: int = Field(ge=1)


class OrderCreateRequest(CamelModel):
    """Order submission from the storefront cart."""

    items: list[OrderItemPayload]
    delivery_method: str = "PICKUP"
    address_or_class: str | None = None
    notes: str | None = None


class OrderCreateResponse(CamelModel):
    order_id: int
    order_code: str


class OrderStatusUpdateRequest(CamelModel):
    status: str
    notes: str | None = None


class OrderItemRead(CamelModel):
    id: int
    product_id: int
    product_name: str | None = None
    unit: str | None = None
    qty: int
    unit_price: int
    line_total: int


class OrderRead(CamelModel):
    """Serialized order with its line snapshots."""

    id: int
    order_code: str
    user_id: int
    status: str
    delivery_method: str
    address_or_class: str
    notes: str
    subtotal: int
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemRead]


class OrderPage(CamelModel):
    data: list[OrderRead]
    pagination: Pagination
