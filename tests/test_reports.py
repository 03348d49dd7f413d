"""Sales report tests."""

from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coop_api import main as main_module
from coop_api.core.errors import ValidationError
from coop_api.core.security import create_access_token
from coop_api.db import session as db_session
from coop_api.db.base import Base
from coop_api.main import app
from coop_api.models import Order, OrderItem, Product, User
from coop_api.services.report_service import analytics_report, month_window, monthly_report


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'reports.db'}", connect_args={"check_same_thread": False})
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", testing_session_local)
    return testing_session_local


def _order(seq: int, status: str, created_at: datetime, lines: list[tuple[int, int, int]]) -> Order:
    return Order(
        order_code=f"KOP-{created_at:%Y%m%d}-{seq:04d}",
        order_date=created_at.date(),
        order_seq=seq,
        user_id=1,
        status=status,
        delivery_method="PICKUP",
        subtotal=sum(qty * price for _, qty, price in lines),
        created_at=created_at,
        updated_at=created_at,
        items=[OrderItem(product_id=product_id, qty=qty, unit_price=price) for product_id, qty, price in lines],
    )


def _seed(session_local) -> None:
    with session_local() as db:
        db.add_all(
            [
                User(id=1, name="Eko", email="eko@example.com", password_hash="x", role="USER"),
                User(id=2, name="Admin", email="admin@example.com", password_hash="x", role="ADMIN"),
                Product(id=1, name="Pen", category="ATK", unit="pcs", price=1000, stock=3),
                Product(id=2, name="Notebook", category="ATK", unit="pcs", price=4500, stock=30),
            ]
        )
        db.flush()
        db.add_all(
            [
                _order(1, "COMPLETED", datetime(2026, 3, 2, 8, tzinfo=timezone.utc), [(1, 4, 1000), (2, 1, 4000)]),
                _order(1, "COMPLETED", datetime(2026, 3, 9, 9, tzinfo=timezone.utc), [(1, 1, 1000)]),
                _order(2, "COMPLETED", datetime(2026, 3, 9, 10, tzinfo=timezone.utc), [(2, 2, 4500)]),
                _order(3, "REJECTED", datetime(2026, 3, 9, 11, tzinfo=timezone.utc), [(2, 9, 4500)]),
                _order(1, "COMPLETED", datetime(2026, 4, 1, 7, tzinfo=timezone.utc), [(1, 1, 1000)]),
            ]
        )
        db.commit()


def test_monthly_report_counts_completed_orders_only(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with session_local() as db:
        report = monthly_report(db, year=2026, month=3)

    assert report["period"]["monthName"] == "March"
    assert report["summary"] == {
        "totalOrders": 3,
        "totalRevenue": 8000 + 1000 + 9000,
        "totalItems": 8,
        "averageOrderValue": 6000,
    }
    assert report["topProducts"][0]["productId"] == 1
    assert report["topProducts"][0]["totalQty"] == 5
    assert report["topProducts"][1]["totalRevenue"] == 4000 + 9000
    assert report["dailySales"] == [
        {"day": 2, "orderCount": 1, "revenue": 8000},
        {"day": 9, "orderCount": 2, "revenue": 10000},
    ]
    assert [row["id"] for row in report["lowStockItems"]] == [1]


def test_month_window_rolls_over_year() -> None:
    start, end = month_window(2026, 12)

    assert start.date() == date(2026, 12, 1)
    assert end.date() == date(2027, 1, 1)
    with pytest.raises(ValidationError):
        month_window(2026, 13)
    with pytest.raises(ValidationError):
        month_window(0, 1)
    with pytest.raises(ValidationError):
        month_window(9999, 12)


def test_report_endpoint_is_admin_only(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed(session_local)

    with TestClient(app) as client:
        as_admin = client.get(
            "/api/v1/reports/monthly",
            params={"year": 2026, "month": 4},
            headers={"Authorization": f"Bearer {create_access_token(2, 'ADMIN')}"},
        )
        as_user = client.get(
            "/api/v1/reports/monthly",
            headers={"Authorization": f"Bearer {create_access_token(1, 'USER')}"},
        )

    assert as_admin.status_code == 200
    assert as_admin.json()["summary"]["totalOrders"] == 1
    assert as_user.status_code == 403


def test_monthly_report_rejects_explicit_out_of_range_values(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)
    headers = {"Authorization": f"Bearer {create_access_token(2, 'ADMIN')}"}

    with TestClient(app) as client:
        year_zero = client.get("/api/v1/reports/monthly", params={"year": 0, "month": 1}, headers=headers)
        month_zero = client.get("/api/v1/reports/monthly", params={"year": 2026, "month": 0}, headers=headers)

    assert year_zero.status_code == 400
    assert year_zero.json() == {"error": "Year must be between 1 and 9998"}
    assert month_zero.status_code == 400
    assert month_zero.json() == {"error": "Month must be between 1 and 12"}


def _seed_recent(session_local) -> datetime:
    now = datetime.now(timezone.utc)
    with session_local() as db:
        db.add_all(
            [
                User(id=1, name="Eko", email="eko@example.com", password_hash="x", role="USER"),
                User(id=2, name="Admin", email="admin@example.com", password_hash="x", role="ADMIN"),
                Product(id=1, name="Pen", category="ATK", unit="pcs", price=1000, stock=40),
                Product(id=2, name="Notebook", category="ATK", unit="pcs", price=4500, stock=30),
                Product(id=3, name="Uniform Tie", category="Seragam", unit="pcs", price=15000, stock=10),
            ]
        )
        db.flush()
        db.add_all(
            [
                _order(11, "COMPLETED", now - timedelta(hours=12), [(1, 2, 1000), (2, 1, 4500)]),
                _order(12, "COMPLETED", now - timedelta(days=2), [(3, 5, 15000)]),
                _order(13, "PENDING", now - timedelta(days=3), [(1, 1, 1000)]),
                _order(14, "REJECTED", now - timedelta(days=3), [(3, 9, 15000)]),
                _order(15, "COMPLETED", now - timedelta(days=40), [(1, 50, 1000)]),
            ]
        )
        db.commit()
    return now


def test_analytics_report_groups_recent_orders(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed_recent(session_local)

    with session_local() as db:
        month = analytics_report(db, days=30)
        last_day = analytics_report(db, days=1)

    assert month["period"]["days"] == 30
    assert month["orderStatus"] == [
        {"status": "COMPLETED", "count": 2},
        {"status": "PENDING", "count": 1},
        {"status": "REJECTED", "count": 1},
    ]
    assert month["categoryPerformance"] == [
        {"category": "Seragam", "totalQty": 5, "orderCount": 1},
        {"category": "ATK", "totalQty": 3, "orderCount": 2},
    ]
    assert last_day["orderStatus"] == [{"status": "COMPLETED", "count": 1}]
    assert last_day["categoryPerformance"] == [{"category": "ATK", "totalQty": 3, "orderCount": 2}]


def test_analytics_endpoint(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    _seed_recent(session_local)
    admin = {"Authorization": f"Bearer {create_access_token(2, 'ADMIN')}"}

    with TestClient(app) as client:
        default_window = client.get("/api/v1/reports/analytics", headers=admin)
        wide_window = client.get("/api/v1/reports/analytics", params={"days": 60}, headers=admin)
        empty_window = client.get("/api/v1/reports/analytics", params={"days": 0}, headers=admin)
        as_user = client.get(
            "/api/v1/reports/analytics",
            headers={"Authorization": f"Bearer {create_access_token(1, 'USER')}"},
        )

    assert default_window.status_code == 200
    assert set(default_window.json()["period"]) == {"days", "startDate", "endDate"}
    assert default_window.json()["period"]["days"] == 30
    assert default_window.json()["categoryPerformance"][0] == {"category": "Seragam", "totalQty": 5, "orderCount": 1}
    assert wide_window.json()["categoryPerformance"][0] == {"category": "ATK", "totalQty": 53, "orderCount": 3}
    assert empty_window.status_code == 400
    assert as_user.status_code == 403
