"""Product API schemas."""

from datetime import datetime

from pydantic import Field

from coop_api.schemas.common import CamelModel, Pagination


class ProductCreate(CamelModel):
    sku: str | None = None
    name: str = Field(min_length=1)
    category: str = ""
    unit: str = "pcs"
    description: str | None = None
    image_url: str | None = None
    price: int = Field(ge=0)
    stock: int = Field(default=0, ge=0)


class ProductUpdate(CamelModel):
    """Partial product edit; only sent fields are applied."""

    sku: str | None = None
    name: str | None = Field(default=None, min_length=1)
    category: str | None = None
    unit: str | None = None
    description: str | None = None
    image_url: str | None = None
    price: int | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    is_active: bool | None = None


class ProductRead(CamelModel):
    id: int
    sku: str | None
    name: str
    category: str
    unit: str
    description: str | None
    image_url: str | None
    price: int
    stock: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductPage(CamelModel):
    data: list[ProductRead]
    pagination: Pagination
