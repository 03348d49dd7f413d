"""Database seeding helpers."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from coop_api.core.config import settings
from coop_api.core.security import get_password_hash
from coop_api.models import User

logger = logging.getLogger(__name__)


def ensure_admin_user(session: Session) -> User | None:
    """Create or refresh the configured admin account in development only."""
    if settings.app_env != "dev":
        return None
    if not settings.admin_password:
        logger.info("[BOOTSTRAP] ADMIN_PASSWORD not set; skipping admin seed.")
        return None

    user = session.scalar(select(User).where(User.email == settings.admin_email).limit(1))
    if user is None:
        user = User(email=settings.admin_email, name=settings.admin_name, role="ADMIN", is_active=True, password_hash="")
        session.add(user)
        logger.warning("[BOOTSTRAP] Admin account created for %s", settings.admin_email)
    else:
        logger.info("[BOOTSTRAP] Admin exists; refreshing role and password for %s", settings.admin_email)
    user.name = settings.admin_name
    user.role = "ADMIN"
    user.password_hash = get_password_hash(settings.admin_password)
    session.commit()
    session.refresh(user)
    return user
