"""Catalog store: product reads, checked stock decrement and admin edits."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coop_api.core.errors import ConflictError, NotFoundError, ValidationError
from coop_api.models import Product
from coop_api.services.audit_service import log_action

logger = logging.getLogger(__name__)

SORTABLE_FIELDS: dict[str, Any] = {
    "name": Product.name,
    "price": Product.price,
    "stock": Product.stock,
    "category": Product.category,
    "created_at": Product.created_at,
}
EDITABLE_FIELDS: set[str] = {"sku", "name", "category", "unit", "description", "image_url", "price", "stock", "is_active"}
NON_NULLABLE_FIELDS: set[str] = {"name", "category", "unit", "price", "stock", "is_active"}


def get_product_by_id(db: Session, product_id: int) -> Product | None:
    return db.get(Product, product_id)


def get_product_for_update(db: Session, product_id: int) -> Product | None:
    """Read a product with a row lock held until the transaction ends."""
    return db.scalar(
        select(Product)
        .where(Product.id == product_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def decrement_stock(db: Session, product_id: int, amount: int) -> None:
    """Subtract ``amount`` from stock only if enough is left."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= amount)
        .values(stock=Product.stock - amount)
        .execution_options(synchronize_session="evaluate")
    )
    if result.rowcount != 1:
        logger.warning("[STOCK] Guarded decrement rejected product_id=%s amount=%s", product_id, amount)
        raise ConflictError(f"Insufficient stock for product ID {product_id}")


def list_products(
    db: Session,
    *,
    q: str = "",
    category: str = "",
    page: int = 1,
    size: int = 20,
    sort: str = "name",
) -> tuple[list[Product], int]:
    """Return one page of active products and the total match count."""
    conditions = [Product.is_active.is_(True)]
    if q:
        pattern = f"%{q.lower()}%"
        conditions.append(
            or_(func.lower(Product.name).like(pattern), func.lower(func.coalesce(Product.description, "")).like(pattern))
        )
    if category:
        conditions.append(Product.category == category)

    order_column = SORTABLE_FIELDS.get(sort, Product.name)
    total = db.scalar(select(func.count(Product.id)).where(*conditions)) or 0
    rows = db.scalars(
        select(Product)
        .where(*conditions)
        .order_by(order_column.asc(), Product.id.asc())
        .offset((page - 1) * size)
        .limit(size)
    ).all()
    return list(rows), int(total)


def _sku_taken(db: Session, sku: str | None, exclude_id: int | None = None) -> bool:
    if not sku:
        return False
    stmt = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    return db.scalar(stmt.limit(1)) is not None


def _save_catalog_edit(db: Session, sku: str | None, stage: Callable[[], None]) -> None:
    """Run ``stage`` and commit; a unique-sku clash from a concurrent writer becomes a conflict."""
    try:
        stage()
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if sku:
            raise ConflictError(f"SKU {sku} already exists") from exc
        raise
    except Exception:
        db.rollback()
        raise


def create_product(db: Session, *, actor_id: int, data: dict[str, Any]) -> Product:
    if not data.get("name") or data.get("price") is None:
        raise ValidationError("Name and price are required")
    sku = data.get("sku")
    if _sku_taken(db, sku):
        raise ConflictError(f"SKU {sku} already exists")
    product = Product(**{key: value for key, value in data.items() if key in EDITABLE_FIELDS})

    def stage() -> None:
        db.add(product)
        db.flush()
        log_action(db, actor_id=actor_id, action="CREATE", entity="Product", entity_id=product.id, meta={"productName": product.name})

    _save_catalog_edit(db, sku, stage)
    db.refresh(product)
    return product


def update_product(db: Session, *, actor_id: int, product_id: int, updates: dict[str, Any]) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    changes = {key: value for key, value in updates.items() if key in EDITABLE_FIELDS}
    nulled = sorted(key for key, value in changes.items() if value is None and key in NON_NULLABLE_FIELDS)
    if nulled:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulled)}")
    if "stock" in changes and changes["stock"] < 0:
        raise ValidationError("Stock cannot be negative")
    sku = changes.get("sku")
    if _sku_taken(db, sku, exclude_id=product.id):
        raise ConflictError(f"SKU {sku} already exists")

    def stage() -> None:
        for key, value in changes.items():
            setattr(product, key, value)
        log_action(db, actor_id=actor_id, action="UPDATE", entity="Product", entity_id=product.id, meta={"updates": changes})

    _save_catalog_edit(db, sku, stage)
    db.refresh(product)
    return product


def deactivate_product(db: Session, *, actor_id: int, product_id: int) -> Product:
    """Soft delete: products referenced by order lines are never removed."""
    product = db.get(Product, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    try:
        product.is_active = False
        log_action(db, actor_id=actor_id, action="DELETE", entity="Product", entity_id=product.id, meta={"productName": product.name})
        db.commit()
    except Exception:
        db.rollback()
        raise
    return product
