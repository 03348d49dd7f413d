"""Order workflow: order creation and admin status transitions.

Both operations run as a single transaction on the caller's session. Nothing is
committed until every check, write and audit insert has succeeded; any error
rolls the whole unit back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coop_api.core.config import settings
from coop_api.core.errors import ConflictError, NotFoundError, StateError, ValidationError
from coop_api.models import Order, OrderItem
from coop_api.models.order import DELIVERY_METHODS
from coop_api.services import catalog_service, order_ledger
from coop_api.services.audit_service import log_action
from coop_api.services.order_code import format_order_code
from coop_api.services.order_status import EFFECT_DECREMENT_STOCK, TARGET_STATUSES, transition_effect

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OrderLineRequest:
    product_id: int
    qty: int


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _in_transaction(db: Session, work: Callable[[], T]) -> T:
    try:
        result = work()
        db.commit()
    except Exception:
        db.rollback()
        raise
    return result


def _merge_lines(items: Sequence[OrderLineRequest]) -> list[OrderLineRequest]:
    """Combine repeated product ids, keeping first-seen order."""
    merged: dict[int, int] = {}
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.qty
    return [OrderLineRequest(product_id=product_id, qty=qty) for product_id, qty in merged.items()]


def _validate_create_input(
    items: Sequence[OrderLineRequest],
    delivery_method: str,
    delivery_target: str | None,
) -> None:
    if not items:
        raise ValidationError("Items are required")
    for item in items:
        if item.qty <= 0:
            raise ValidationError(f"Quantity for product {item.product_id} must be greater than zero")
    if delivery_method not in DELIVERY_METHODS:
        raise ValidationError(f"Invalid delivery method: {delivery_method}")
    if delivery_method == "DELIVER_TO_CLASS" and not (delivery_target or "").strip():
        raise ValidationError("Delivery target is required when delivering to a class")


def _build_order(
    db: Session,
    *,
    user_id: int,
    lines: list[OrderLineRequest],
    delivery_method: str,
    delivery_target: str | None,
    notes: str | None,
    today: date,
) -> Order:
    subtotal = 0
    order_items: list[OrderItem] = []
    for line in lines:
        product = catalog_service.get_product_by_id(db, line.product_id)
        if product is None:
            raise NotFoundError(f"Product {line.product_id} not found")
        if not product.is_active:
            raise ConflictError(f"Product {line.product_id} is inactive")
        if product.stock < line.qty:
            raise ConflictError(
                f"Insufficient stock for {product.name} (available {product.stock}, requested {line.qty})"
            )
        subtotal += product.price * line.qty
        order_items.append(OrderItem(product_id=product.id, qty=line.qty, unit_price=product.price))

    seq = order_ledger.next_order_seq(db, today)
    order = Order(
        order_code=format_order_code(today, seq),
        order_date=today,
        order_seq=seq,
        user_id=user_id,
        status="PENDING",
        delivery_method=delivery_method,
        delivery_target=(delivery_target or "").strip() if delivery_method == "DELIVER_TO_CLASS" else "",
        notes=notes or "",
        subtotal=subtotal,
    )
    order_ledger.insert_order(db, order, order_items)
    log_action(
        db,
        actor_id=user_id,
        action="CREATE",
        entity="Order",
        entity_id=order.id,
        meta={"orderCode": order.order_code, "subtotal": subtotal, "lineCount": len(order_items)},
    )
    return order


def create_order(
    db: Session,
    *,
    user_id: int,
    items: Sequence[OrderLineRequest],
    delivery_method: str,
    delivery_target: str | None = None,
    notes: str | None = None,
) -> Order:
    """Place a PENDING order after checking every line against the catalog.

    Stock is only checked here, not decremented; the decrement happens when an
    admin moves the order to PROCESSING.
    """
    _validate_create_input(items, delivery_method, delivery_target)
    lines = _merge_lines(items)

    attempts = max(1, settings.order_code_max_attempts)
    attempt = 0
    while True:
        attempt += 1
        try:
            order = _in_transaction(
                db,
                lambda: _build_order(
                    db,
                    user_id=user_id,
                    lines=lines,
                    delivery_method=delivery_method,
                    delivery_target=delivery_target,
                    notes=notes,
                    today=_utc_today(),
                ),
            )
        except IntegrityError:
            # Another order took the same daily sequence number.
            if attempt >= attempts:
                logger.exception("[ORDER] Could not allocate an order code after %s attempts", attempts)
                raise
            logger.info("[ORDER] Order code collision, retrying (attempt %s/%s)", attempt, attempts)
            continue
        break

    db.refresh(order)
    logger.info(
        "[ORDER] Created order %s id=%s user_id=%s subtotal=%s lines=%s",
        order.order_code,
        order.id,
        user_id,
        order.subtotal,
        len(lines),
    )
    return order


def _reserve_stock(db: Session, order: Order) -> None:
    """Check every line against a locked fresh read, then decrement."""
    for line in order.items:
        product = catalog_service.get_product_for_update(db, line.product_id)
        if product is None or product.stock < line.qty:
            logger.warning(
                "[STOCK] Order %s blocked: product_id=%s available=%s requested=%s",
                order.order_code,
                line.product_id,
                None if product is None else product.stock,
                line.qty,
            )
            raise ConflictError(f"Insufficient stock for product ID {line.product_id}")

    for line in order.items:
        catalog_service.decrement_stock(db, line.product_id, line.qty)


def _apply_transition(
    db: Session,
    *,
    order_id: int,
    target_status: str,
    notes: str | None,
    actor_id: int,
) -> tuple[Order, str]:
    order = order_ledger.get_order_by_id(db, order_id, with_lines=True, for_update=True)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")

    old_status = order.status
    effect = transition_effect(old_status, target_status)
    if effect is None:
        raise StateError(f"Cannot change status from {old_status} to {target_status}")

    if effect == EFFECT_DECREMENT_STOCK:
        _reserve_stock(db, order)

    order_ledger.update_order_status(order, target_status, notes)
    log_action(
        db,
        actor_id=actor_id,
        action="UPDATE_STATUS",
        entity="Order",
        entity_id=order.id,
        meta={
            "oldStatus": old_status,
            "newStatus": target_status,
            "notes": notes,
            "orderCode": order.order_code,
        },
    )
    return order, old_status


def transition_status(
    db: Session,
    *,
    order_id: int,
    target_status: str,
    notes: str | None = None,
    actor_id: int,
) -> Order:
    """Move an order along the status table, reserving stock on PENDING -> PROCESSING."""
    if target_status not in TARGET_STATUSES:
        raise StateError(f"Invalid status: {target_status}")
    notes = notes.strip() if notes else None
    if target_status == "REJECTED" and not notes:
        raise StateError("Notes required for rejected orders")

    order, old_status = _in_transaction(
        db,
        lambda: _apply_transition(
            db,
            order_id=order_id,
            target_status=target_status,
            notes=notes,
            actor_id=actor_id,
        ),
    )
    logger.info(
        "[ORDER] Order %s moved %s -> %s by user_id=%s",
        order.order_code,
        old_status,
        target_status,
        actor_id,
    )
    return order_ledger.get_order_by_id(db, order.id, with_lines=True)
