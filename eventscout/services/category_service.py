"""
eventscout.services.category_service — Category CRUD
=====================================================

Category names are deliberately not unique; two categories may share a
name.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, select

from eventscout.database.engine import get_session
from eventscout.database.models import Category

logger = logging.getLogger(__name__)

_CATEGORY_FIELDS = ("name", "description", "icon")


def list_categories(engine: Engine) -> list[Category]:
    with get_session(engine) as session:
        return list(session.scalars(select(Category).order_by(Category.id)).all())


def get_category(engine: Engine, category_id: int) -> Category | None:
    with get_session(engine) as session:
        return session.get(Category, category_id)


def create_category(
    engine: Engine,
    *,
    name: str,
    description: str | None = None,
    icon: str | None = None,
) -> Category:
    with get_session(engine) as session:
        category = Category(name=name, description=description, icon=icon)
        session.add(category)
        session.flush()
        session.refresh(category)

    logger.info("Created category %d (%s)", category.id, category.name)
    return category


def update_category(engine: Engine, category_id: int, changes: dict[str, Any]) -> Category | None:
    """Merge supplied fields.  Returns ``None`` if the category is missing."""
    with get_session(engine) as session:
        category = session.get(Category, category_id)
        if category is None:
            return None
        for key, value in changes.items():
            if key in _CATEGORY_FIELDS:
                setattr(category, key, value)
        session.flush()
        session.refresh(category)
        return category


def delete_category(engine: Engine, category_id: int) -> bool:
    """Delete a category and (by cascade) every event filed under it."""
    with get_session(engine) as session:
        category = session.get(Category, category_id)
        if category is None:
            return False
        session.delete(category)

    logger.info("Deleted category %d", category_id)
    return True
