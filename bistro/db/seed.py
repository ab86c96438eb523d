"""Database seeding helpers."""

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bistro.core.config import settings
from bistro.models.reservation import Table

logger = logging.getLogger(__name__)

DEFAULT_TABLES: list[tuple[str, int, str]] = [
    ("T1", 2, "window"),
    ("T2", 2, "window"),
    ("T3", 4, "hall"),
    ("T4", 4, "hall"),
    ("T5", 4, "hall"),
    ("T6", 6, "hall"),
    ("T7", 4, "terrace"),
    ("T8", 4, "terrace"),
    ("T9", 8, "terrace"),
]


def ensure_default_tables(session: Session) -> None:
    """Seed seating inventory for development databases that have none."""
    if settings.app_env != "dev" or not settings.seed_tables:
        return

    existing: int = int(session.scalar(select(func.count()).select_from(Table)) or 0)
    if existing:
        return

    session.add_all(Table(name=name, capacity=capacity, zone=zone) for name, capacity, zone in DEFAULT_TABLES)
    session.commit()
    logger.info("[BOOTSTRAP] Seeded %s default tables", len(DEFAULT_TABLES))
