"""
eventscout.services.bookmark_service — Saved Events
====================================================
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import IntegrityError

from eventscout.database.engine import get_session
from eventscout.database.models import Bookmark, Event
from eventscout.errors import Conflict, NotFound

logger = logging.getLogger(__name__)

ALREADY_BOOKMARKED = "Event is already bookmarked"


def list_bookmarked_events(engine: Engine, user_id: int) -> list[tuple[Event, datetime]]:
    """``(event, bookmarked_at)`` for every bookmark, soonest event first."""
    with get_session(engine) as session:
        rows = session.execute(
            select(Event, Bookmark.created_at)
            .join(Bookmark, Bookmark.event_id == Event.id)
            .where(Bookmark.user_id == user_id)
            .order_by(Event.start_date.asc(), Event.id)
        ).all()
        return [(event, created_at) for event, created_at in rows]


def is_bookmarked(engine: Engine, user_id: int, event_id: int) -> bool:
    with get_session(engine) as session:
        return session.scalar(
            select(Bookmark.id).where(Bookmark.user_id == user_id, Bookmark.event_id == event_id)
        ) is not None


def add_bookmark(engine: Engine, user_id: int, event_id: int) -> Bookmark:
    with get_session(engine) as session:
        if session.get(Event, event_id) is None:
            raise NotFound("Event not found")
        existing = session.scalar(
            select(Bookmark.id).where(Bookmark.user_id == user_id, Bookmark.event_id == event_id)
        )
        if existing is not None:
            raise Conflict(ALREADY_BOOKMARKED)

        bookmark = Bookmark(user_id=user_id, event_id=event_id)
        session.add(bookmark)
        try:
            session.flush()
        except IntegrityError:
            raise Conflict(ALREADY_BOOKMARKED)
        session.refresh(bookmark)

    logger.info("User %d bookmarked event %d", user_id, event_id)
    return bookmark


def remove_bookmark(engine: Engine, user_id: int, event_id: int) -> None:
    with get_session(engine) as session:
        result = session.execute(
            delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.event_id == event_id)
        )
        if result.rowcount == 0:
            raise NotFound("Bookmark not found")

    logger.info("User %d removed bookmark for event %d", user_id, event_id)
