"""Catalog endpoints: public listing and admin edits."""

import math

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from coop_api.core.errors import NotFoundError
from coop_api.core.security import require_admin
from coop_api.db.session import get_db
from coop_api.models import Product, User
from coop_api.schemas.common import Pagination
from coop_api.schemas.product import ProductCreate, ProductPage, ProductRead, ProductUpdate
from coop_api.services import catalog_service

router: APIRouter = APIRouter()


@router.get("", response_model=ProductPage)
def list_products(
    q: str = Query(default=""),
    category: str = Query(default=""),
    page: int = Query(default=1),
    size: int = Query(default=20),
    sort: str = Query(default="name"),
    db: Session = Depends(get_db),
) -> ProductPage:
    page = max(1, page)
    size = min(100, max(1, size))
    products, total = catalog_service.list_products(db, q=q, category=category, page=page, size=size, sort=sort)
    return ProductPage(
        data=[ProductRead.model_validate(product) for product in products],
        pagination=Pagination(page=page, size=size, total=total, pages=math.ceil(total / size)),
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)) -> Product:
    product = catalog_service.get_product_by_id(db, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Product:
    return catalog_service.create_product(db, actor_id=admin.id, data=payload.model_dump())


@router.patch("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Product:
    return catalog_service.update_product(
        db,
        actor_id=admin.id,
        product_id=product_id,
        updates=payload.model_dump(exclude_unset=True),
    )


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> dict[str, str]:
    catalog_service.deactivate_product(db, actor_id=admin.id, product_id=product_id)
    return {"message": "Product deleted successfully"}
