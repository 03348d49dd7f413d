"""Audit log helpers."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from coop_api.models import AuditLog


def log_action(
    db: Session,
    *,
    actor_id: int | None,
    action: str,
    entity: str,
    entity_id: int | None = None,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction.

    The row is flushed immediately so a failing insert aborts the surrounding
    operation instead of surfacing at commit time.
    """
    entry = AuditLog(
        actor_user_id=actor_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        meta=meta,
    )
    db.add(entry)
    db.flush()
    return entry
