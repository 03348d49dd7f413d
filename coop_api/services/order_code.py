"""Human-readable order code generation."""

from __future__ import annotations

import re
from datetime import date

from coop_api.core.config import settings

ORDER_CODE_PATTERN = re.compile(r"^(?P<prefix>[A-Z0-9]+)-(?P<date>\d{8})-(?P<seq>\d{4,})$")


def format_order_code(order_date: date, seq: int, prefix: str | None = None) -> str:
    """Build ``PREFIX-YYYYMMDD-NNNN`` from the order date and per-day sequence."""
    return f"{prefix or settings.order_code_prefix}-{order_date:%Y%m%d}-{seq:04d}"


def is_valid_order_code(code: str) -> bool:
    return ORDER_CODE_PATTERN.match(code) is not None
