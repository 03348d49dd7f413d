"""Order ledger models."""

from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, DateTime, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coop_api.db.base import Base

ORDER_STATUSES = ("PENDING", "PROCESSING", "REJECTED", "COMPLETED")
DELIVERY_METHODS = ("PICKUP", "DELIVER_TO_CLASS")


class Order(Base):
    """Customer order; status and notes are the only mutable fields."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_code: Mapped[str] = mapped_column(String(32), nullable=False)
    order_date: Mapped[date] = mapped_column(Date, nullable=False)
    order_seq: Mapped[int] = mapped_column(Integer, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    status: Mapped[str] = mapped_column(Enum(*ORDER_STATUSES, name="order_status"), nullable=False, default="PENDING")
    delivery_method: Mapped[str] = mapped_column(
        Enum(*DELIVERY_METHODS, name="delivery_method"),
        nullable=False,
        default="PICKUP",
    )
    delivery_target: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    user: Mapped["User"] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    __table_args__ = (
        Index("uq_orders_order_code", "order_code", unique=True),
        Index("uq_orders_order_date_seq", "order_date", "order_seq", unique=True),
        Index("ix_orders_user_id", "user_id"),
    )


class OrderItem(Base):
    """Order line with the unit price copied at creation time."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_id: Mapped[int] = mapped_column(ForeignKey("orders.id"), nullable=False)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    qty: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()

    __table_args__ = (CheckConstraint("qty > 0", name="ck_order_items_qty_positive"),)
