"""Sales reports over completed orders: monthly summary and rolling analytics."""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from coop_api.core.config import settings
from coop_api.core.errors import ValidationError
from coop_api.models import Order, OrderItem, Product

TOP_PRODUCTS_LIMIT = 10
MIN_REPORT_YEAR = 1
MAX_REPORT_YEAR = 9998
MAX_ANALYTICS_DAYS = 3660


def month_window(year: int, month: int) -> tuple[datetime, datetime]:
    """Return UTC [start, end) boundaries for a calendar month."""
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
        raise ValidationError(f"Year must be between {MIN_REPORT_YEAR} and {MAX_REPORT_YEAR}")
    start = datetime(year, month, 1, tzinfo=timezone.utc)
    end = datetime(year + 1, 1, 1, tzinfo=timezone.utc) if month == 12 else datetime(year, month + 1, 1, tzinfo=timezone.utc)
    return start, end


def monthly_report(db: Session, *, year: int, month: int) -> dict[str, Any]:
    start, end = month_window(year, month)
    orders = db.scalars(
        select(Order)
        .options(selectinload(Order.items).selectinload(OrderItem.product))
        .where(Order.status == "COMPLETED", Order.created_at >= start, Order.created_at < end)
        .order_by(Order.created_at.asc())
    ).all()

    product_stats: dict[int, dict[str, Any]] = {}
    daily: dict[int, dict[str, int]] = defaultdict(lambda: {"orderCount": 0, "revenue": 0})
    total_items = 0
    for order in orders:
        day_stats = daily[order.created_at.day]
        day_stats["orderCount"] += 1
        day_stats["revenue"] += order.subtotal
        for item in order.items:
            total_items += item.qty
            stats = product_stats.setdefault(
                item.product_id,
                {
                    "productId": item.product_id,
                    "productName": item.product.name,
                    "category": item.product.category,
                    "unit": item.product.unit,
                    "totalQty": 0,
                    "totalRevenue": 0,
                    "orderCount": 0,
                },
            )
            stats["totalQty"] += item.qty
            stats["totalRevenue"] += item.unit_price * item.qty
            stats["orderCount"] += 1

    total_revenue = sum(order.subtotal for order in orders)
    top_products = sorted(product_stats.values(), key=lambda row: (-row["totalQty"], row["productId"]))[:TOP_PRODUCTS_LIMIT]

    stock_rows = db.scalars(
        select(Product).where(Product.is_active.is_(True)).order_by(Product.stock.asc(), Product.id.asc())
    ).all()
    low_stock = [
        {"id": product.id, "name": product.name, "category": product.category, "stock": product.stock, "unit": product.unit}
        for product in stock_rows
        if product.stock < settings.low_stock_threshold
    ]

    return {
        "period": {
            "year": year,
            "month": month,
            "monthName": calendar.month_name[month],
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
        },
        "summary": {
            "totalOrders": len(orders),
            "totalRevenue": total_revenue,
            "totalItems": total_items,
            "averageOrderValue": total_revenue // len(orders) if orders else 0,
        },
        "topProducts": top_products,
        "dailySales": [{"day": day, **daily[day]} for day in sorted(daily)],
        "lowStockItems": low_stock,
    }


def analytics_report(db: Session, *, days: int) -> dict[str, Any]:
    """Status mix of recent orders and per-category volume of the completed ones."""
    if not 1 <= days <= MAX_ANALYTICS_DAYS:
        raise ValidationError(f"Days must be between 1 and {MAX_ANALYTICS_DAYS}")
    end = datetime.now(timezone.utc)
    start = end - timedelta(days=days)

    status_rows = db.execute(
        select(Order.status, func.count(Order.id))
        .where(Order.created_at >= start)
        .group_by(Order.status)
        .order_by(Order.status.asc())
    ).all()
    category_rows = db.execute(
        select(Product.category, func.sum(OrderItem.qty), func.count(OrderItem.id))
        .join(OrderItem.order)
        .join(OrderItem.product)
        .where(Order.status == "COMPLETED", Order.created_at >= start, Product.category != "")
        .group_by(Product.category)
    ).all()
    categories = [
        {"category": category, "totalQty": int(total_qty or 0), "orderCount": line_count}
        for category, total_qty, line_count in category_rows
    ]
    categories.sort(key=lambda row: (-row["totalQty"], row["category"]))

    return {
        "period": {"days": days, "startDate": start.isoformat(), "endDate": end.isoformat()},
        "orderStatus": [{"status": status, "count": count} for status, count in status_rows],
        "categoryPerformance": categories,
    }
