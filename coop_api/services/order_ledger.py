"""Order ledger: persistence helpers for orders and their lines."""

from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from coop_api.models import Order, OrderItem


def next_order_seq(db: Session, order_date: date) -> int:
    """Return the next per-day order sequence number."""
    current = db.scalar(select(func.max(Order.order_seq)).where(Order.order_date == order_date))
    return int(current or 0) + 1


def insert_order(db: Session, order: Order, lines: list[OrderItem]) -> Order:
    """Stage an order with its lines and flush so ids are assigned."""
    order.items = lines
    db.add(order)
    db.flush()
    return order


def get_order_by_id(
    db: Session,
    order_id: int,
    *,
    with_lines: bool = True,
    for_update: bool = False,
) -> Order | None:
    stmt = select(Order).where(Order.id == order_id)
    if with_lines:
        stmt = stmt.options(selectinload(Order.items).selectinload(OrderItem.product))
    if for_update:
        stmt = stmt.with_for_update(of=Order).execution_options(populate_existing=True)
    return db.scalar(stmt)


def update_order_status(order: Order, status: str, notes: str | None) -> Order:
    """Set status, replace notes when given and bump ``updated_at``."""
    order.status = status
    if notes:
        order.notes = notes
    order.updated_at = datetime.now(timezone.utc)
    return order


def list_user_orders(db: Session, user_id: int) -> list[Order]:
    return list(
        db.scalars(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()
    )


def list_orders(
    db: Session,
    *,
    status: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: int = 1,
    size: int = 20,
) -> tuple[list[Order], int]:
    """Return one page of orders for the admin dashboard and the total count."""
    conditions = []
    if status:
        conditions.append(Order.status == status)
    if date_from is not None:
        conditions.append(Order.created_at >= date_from)
    if date_to is not None:
        conditions.append(Order.created_at <= date_to)

    total = db.scalar(select(func.count(Order.id)).where(*conditions)) or 0
    rows = db.scalars(
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.product), selectinload(Order.user))
        .where(*conditions)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * size)
        .limit(size)
    ).all()
    return list(rows), int(total)
