"""Order status transition table."""

from __future__ import annotations

from coop_api.models.order import ORDER_STATUSES

TARGET_STATUSES: set[str] = {"PROCESSING", "REJECTED", "COMPLETED"}

EFFECT_NONE = "none"
EFFECT_DECREMENT_STOCK = "decrement-stock-checked"

# (from, to) -> side effect applied inside the transition transaction.
# PENDING is initial; REJECTED and COMPLETED have no outgoing edges.
TRANSITIONS: dict[tuple[str, str], str] = {
    ("PENDING", "PROCESSING"): EFFECT_DECREMENT_STOCK,
    ("PENDING", "REJECTED"): EFFECT_NONE,
    ("PROCESSING", "COMPLETED"): EFFECT_NONE,
    ("PROCESSING", "REJECTED"): EFFECT_NONE,
}


def is_known_status(value: str) -> bool:
    return value in ORDER_STATUSES


def transition_effect(current: str, new: str) -> str | None:
    """Return the side effect for an edge, or ``None`` when the edge is not allowed."""
    return TRANSITIONS.get((current, new))
