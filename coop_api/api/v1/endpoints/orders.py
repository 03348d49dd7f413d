"""Order endpoints: storefront submission and admin status changes."""

import math
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from coop_api.core.security import get_current_user, require_admin
from coop_api.db.session import get_db
from coop_api.models import Order, User
from coop_api.schemas.common import Pagination
from coop_api.schemas.order import (
    OrderCreateRequest,
    OrderCreateResponse,
    OrderItemRead,
    OrderPage,
    OrderRead,
    OrderStatusUpdateRequest,
)
from coop_api.services import order_ledger
from coop_api.services.order_status import is_known_status
from coop_api.services.order_workflow import OrderLineRequest, create_order, transition_status

router: APIRouter = APIRouter()


def serialize_order(order: Order) -> OrderRead:
    return OrderRead(
        id=order.id,
        order_code=order.order_code,
        user_id=order.user_id,
        status=order.status,
        delivery_method=order.delivery_method,
        address_or_class=order.delivery_target,
        notes=order.notes,
        subtotal=order.subtotal,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemRead(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name if item.product else None,
                unit=item.product.unit if item.product else None,
                qty=item.qty,
                unit_price=item.unit_price,
                line_total=item.unit_price * item.qty,
            )
            for item in order.items
        ],
    )


@router.post("", response_model=OrderCreateResponse, status_code=status.HTTP_201_CREATED)
def submit_order(
    payload: OrderCreateRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrderCreateResponse:
    order = create_order(
        db,
        user_id=current_user.id,
        items=[OrderLineRequest(product_id=item.product_id, qty=item.qty) for item in payload.items],
        delivery_method=payload.delivery_method,
        delivery_target=payload.address_or_class,
        notes=payload.notes,
    )
    return OrderCreateResponse(order_id=order.id, order_code=order.order_code)


@router.get("/my", response_model=list[OrderRead])
def my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[OrderRead]:
    return [serialize_order(order) for order in order_ledger.list_user_orders(db, current_user.id)]


@router.get("", response_model=OrderPage)
def list_orders(
    status_filter: str | None = Query(default=None, alias="status"),
    date_from: datetime | None = Query(default=None, alias="from"),
    date_to: datetime | None = Query(default=None, alias="to"),
    page: int = Query(default=1),
    size: int = Query(default=20),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> OrderPage:
    """Paginated order list for the admin dashboard."""
    if status_filter and not is_known_status(status_filter):
        raise HTTPException(status_code=400, detail=f"Invalid status: {status_filter}")
    page = max(1, page)
    size = min(100, max(1, size))
    orders, total = order_ledger.list_orders(
        db,
        status=status_filter,
        date_from=date_from,
        date_to=date_to,
        page=page,
        size=size,
    )
    return OrderPage(
        data=[serialize_order(order) for order in orders],
        pagination=Pagination(page=page, size=size, total=total, pages=math.ceil(total / size)),
    )


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> OrderRead:
    order = order_ledger.get_order_by_id(db, order_id)
    # Other users' orders are reported as missing so ids do not leak.
    if order is None or (current_user.role != "ADMIN" and order.user_id != current_user.id):
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize_order(order)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdateRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> OrderRead:
    order = transition_status(
        db,
        order_id=order_id,
        target_status=payload.status,
        notes=payload.notes,
        actor_id=admin.id,
    )
    return serialize_order(order)
