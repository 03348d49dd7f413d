"""Reporting endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from coop_api.core.security import require_admin
from coop_api.db.session import get_db
from coop_api.models import User
from coop_api.services.report_service import analytics_report, monthly_report

router: APIRouter = APIRouter()


@router.get("/monthly")
def get_monthly_report(
    year: int | None = Query(default=None),
    month: int | None = Query(default=None),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> dict[str, Any]:
    """Sales summary of completed orders for one month (defaults to the current one)."""
    now = datetime.now(timezone.utc)
    return monthly_report(
        db,
        year=year if year is not None else now.year,
        month=month if month is not None else now.month,
    )


@router.get("/analytics")
def get_analytics_report(
    days: int = Query(default=30),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> dict[str, Any]:
    return analytics_report(db, days=days)
