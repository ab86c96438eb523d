"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from bistro.models import idempotency as _idempotency  # noqa: E402,F401
from bistro.models import order as _order  # noqa: E402,F401
from bistro.models import reservation as _reservation  # noqa: E402,F401
