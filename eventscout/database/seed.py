"""
eventscout.database.seed — Default Category Seeder
===================================================

Baseline categories inserted on first startup so event creation works
out of the box.

Idempotent — does nothing once any category exists, so categories
renamed or deleted by users are never resurrected.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, func, select
from sqlalchemy.orm import Session

from eventscout.constants import DEFAULT_CATEGORIES
from eventscout.database.models import Category

logger = logging.getLogger(__name__)


def seed_default_categories(engine: Engine) -> int:
    """Insert :data:`DEFAULT_CATEGORIES` into an empty ``categories`` table.

    Returns the number of rows inserted.
    """
    session = Session(engine)
    inserted = 0
    try:
        existing = session.scalar(select(func.count()).select_from(Category)) or 0
        if existing == 0:
            for name, description, icon in DEFAULT_CATEGORIES:
                session.add(Category(name=name, description=description, icon=icon))
                inserted += 1
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    if inserted:
        logger.info("Seeded %d default categories.", inserted)
    return inserted
