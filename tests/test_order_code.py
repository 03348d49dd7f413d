"""Order code format and uniqueness tests."""

from datetime import date
from pathlib import Path

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from coop_api.db.base import Base
from coop_api.models import AuditLog, Order, Product, User
from coop_api.services import order_ledger
from coop_api.services.order_code import format_order_code, is_valid_order_code
from coop_api.services.order_workflow import OrderLineRequest, create_order


def _session(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'codes.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = session_local()
    db.add_all(
        [
            User(id=1, name="Fajar", email="fajar@example.com", password_hash="x", role="USER"),
            Product(id=1, name="Pen", category="ATK", unit="pcs", price=1000, stock=100),
        ]
    )
    db.commit()
    return db


def _place(db) -> Order:
    return create_order(db, user_id=1, items=[OrderLineRequest(product_id=1, qty=1)], delivery_method="PICKUP")


def test_format_order_code() -> None:
    assert format_order_code(date(2026, 1, 7), 3) == "KOP-20260107-0003"
    assert format_order_code(date(2026, 1, 7), 12345, prefix="SMP") == "SMP-20260107-12345"
    assert is_valid_order_code("KOP-20260107-0003")
    assert not is_valid_order_code("KOP-2026017-0003")


def test_orders_on_the_same_day_get_distinct_codes(tmp_path: Path) -> None:
    db = _session(tmp_path)
    try:
        codes = [_place(db).order_code for _ in range(5)]
    finally:
        db.close()

    assert len(set(codes)) == 5
    assert all(is_valid_order_code(code) for code in codes)
    assert [code[-4:] for code in codes] == ["0001", "0002", "0003", "0004", "0005"]


def test_sequence_collision_is_retried(tmp_path: Path, monkeypatch) -> None:
    db = _session(tmp_path)
    real_next_order_seq = order_ledger.next_order_seq
    calls: list[int] = []

    def stale_next_order_seq(session, order_date):
        calls.append(1)
        if len(calls) == 1:
            return 1
        return real_next_order_seq(session, order_date)

    try:
        first = _place(db)
        monkeypatch.setattr(order_ledger, "next_order_seq", stale_next_order_seq)
        second = _place(db)

        assert first.order_code.endswith("-0001")
        assert second.order_code.endswith("-0002")
        assert len(calls) == 2
        assert db.scalar(select(func.count()).select_from(Order)) == 2
        assert db.scalar(select(func.count()).select_from(AuditLog)) == 2
    finally:
        db.close()
