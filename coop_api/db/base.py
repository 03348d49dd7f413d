"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from coop_api.models import audit_log as _audit_log  # noqa: E402,F401
from coop_api.models import order as _order  # noqa: E402,F401
from coop_api.models import product as _product  # noqa: E402,F401
from coop_api.models import user as _user  # noqa: E402,F401
