"""
eventscout.services.event_service — Event Catalogue
====================================================

CRUD plus the three read paths clients browse with:

* ``list_events`` — conjunctive filters (category, text search, date
  window, radius) with limit/offset paging.  The radius filter runs
  in-process over the rows the other filters admit.
* ``get_nearby_events`` — radius search evaluated in SQL, nearest first.
* ``get_events_by_date_range`` — events starting inside a window.

Only the organizer may update or delete an event.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Engine, func, or_, select
from sqlalchemy.orm import Session

from eventscout.constants import REGISTRATION_CONFIRMED
from eventscout.database.engine import get_session
from eventscout.database.models import Bookmark, Category, Event, Registration
from eventscout.engine.geo import distance_expression, filter_nearby
from eventscout.errors import Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)

_EVENT_FIELDS = (
    "title",
    "description",
    "location",
    "latitude",
    "longitude",
    "start_date",
    "end_date",
    "image_url",
    "category_id",
    "capacity",
    "price",
)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EventFilters:
    """Listing filters; every field set narrows the result (logical AND)."""

    category_id: int | None = None
    search: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    lat: float | None = None
    lng: float | None = None
    radius_km: float | None = None
    limit: int = 20
    offset: int = 0

    @property
    def is_geo(self) -> bool:
        return self.lat is not None and self.lng is not None


@dataclass(frozen=True, slots=True)
class EventDetail:
    event: Event
    registered_count: int
    is_registered: bool | None = None  # None when viewed anonymously
    is_bookmarked: bool | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


_LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """Make ``%``, ``_`` and the escape character match literally in LIKE."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _check_dates(start: datetime, end: datetime) -> None:
    if as_utc(end) <= as_utc(start):
        raise ValidationError("end_date must be after start_date")


def _require_category(session: Session, category_id: int) -> None:
    if session.get(Category, category_id) is None:
        raise ValidationError("Category not found")


def count_registrations(session: Session, event_id: int) -> int:
    """Confirmed registrations for *event_id*."""
    return session.scalar(
        select(func.count())
        .select_from(Registration)
        .where(
            Registration.event_id == event_id,
            Registration.status == REGISTRATION_CONFIRMED,
        )
    ) or 0


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def get_event(engine: Engine, event_id: int) -> Event | None:
    with get_session(engine) as session:
        return session.get(Event, event_id)


def get_event_detail(engine: Engine, event_id: int, viewer_id: int | None = None) -> EventDetail:
    """Event plus attendance info; viewer flags only when *viewer_id* is given."""
    with get_session(engine) as session:
        event = session.get(Event, event_id)
        if event is None:
            raise NotFound("Event not found")

        registered = count_registrations(session, event_id)
        if viewer_id is None:
            return EventDetail(event=event, registered_count=registered)

        is_registered = session.scalar(
            select(Registration.id).where(
                Registration.event_id == event_id, Registration.user_id == viewer_id
            )
        ) is not None
        is_bookmarked = session.scalar(
            select(Bookmark.id).where(
                Bookmark.event_id == event_id, Bookmark.user_id == viewer_id
            )
        ) is not None
        return EventDetail(
            event=event,
            registered_count=registered,
            is_registered=is_registered,
            is_bookmarked=is_bookmarked,
        )


def list_events(
    engine: Engine,
    filters: EventFilters,
    *,
    default_radius_km: float = 10.0,
) -> list[tuple[Event, float | None]]:
    """Return ``(event, distance_km)`` pairs ordered by start date.

    ``distance_km`` is ``None`` unless a lat/lng filter was given.
    """
    if (filters.lat is None) != (filters.lng is None):
        raise ValidationError("Latitude and longitude must be supplied together")

    stmt = select(Event)
    if filters.category_id is not None:
        stmt = stmt.where(Event.category_id == filters.category_id)
    if filters.search:
        pattern = f"%{_escape_like(filters.search.strip())}%"
        stmt = stmt.where(or_(
            Event.title.ilike(pattern, escape=_LIKE_ESCAPE),
            Event.description.ilike(pattern, escape=_LIKE_ESCAPE),
            Event.location.ilike(pattern, escape=_LIKE_ESCAPE),
        ))
    if filters.start_date is not None:
        stmt = stmt.where(Event.start_date >= as_utc(filters.start_date))
    if filters.end_date is not None:
        stmt = stmt.where(Event.start_date <= as_utc(filters.end_date))
    stmt = stmt.order_by(Event.start_date.asc(), Event.id)

    with get_session(engine) as session:
        if not filters.is_geo:
            rows = session.scalars(stmt.offset(filters.offset).limit(filters.limit)).all()
            return [(event, None) for event in rows]

        radius = filters.radius_km if filters.radius_km is not None else default_radius_km
        candidates = session.scalars(stmt).all()

    matches = filter_nearby(filters.lat, filters.lng, radius, candidates)
    return matches[filters.offset:filters.offset + filters.limit]


def get_nearby_events(
    engine: Engine,
    lat: float,
    lng: float,
    radius_km: float = 10.0,
    limit: int = 20,
) -> list[tuple[Event, float]]:
    """Events within *radius_km* of ``(lat, lng)``, nearest first."""
    distance = distance_expression(lat, lng, Event.latitude, Event.longitude)
    stmt = (
        select(Event, distance.label("distance"))
        .where(distance <= radius_km)
        .order_by(distance.asc(), Event.id)
        .limit(limit)
    )
    with get_session(engine) as session:
        return [(event, float(dist)) for event, dist in session.execute(stmt).all()]


def get_events_by_date_range(
    engine: Engine,
    start_date: datetime,
    end_date: datetime,
    limit: int = 20,
) -> list[Event]:
    """Events whose start date falls within ``[start_date, end_date]``."""
    if as_utc(end_date) < as_utc(start_date):
        raise ValidationError("end_date must not be before start_date")

    with get_session(engine) as session:
        return list(session.scalars(
            select(Event)
            .where(
                Event.start_date >= as_utc(start_date),
                Event.start_date <= as_utc(end_date),
            )
            .order_by(Event.start_date.asc(), Event.id)
            .limit(limit)
        ).all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
def create_event(engine: Engine, organizer_id: int, data: dict[str, Any]) -> Event:
    """Publish a new event owned by *organizer_id*."""
    values = {k: v for k, v in data.items() if k in _EVENT_FIELDS}
    _check_dates(values["start_date"], values["end_date"])
    values["start_date"] = as_utc(values["start_date"])
    values["end_date"] = as_utc(values["end_date"])

    with get_session(engine) as session:
        _require_category(session, values["category_id"])
        event = Event(organizer_id=organizer_id, **values)
        session.add(event)
        session.flush()
        session.refresh(event)

    logger.info("User %d created event %d (%s)", organizer_id, event.id, event.title)
    return event


def _owned_event(session: Session, event_id: int, actor_id: int, verb: str) -> Event:
    event = session.get(Event, event_id)
    if event is None:
        raise NotFound("Event not found")
    if event.organizer_id != actor_id:
        raise Forbidden(f"Not authorized to {verb} this event")
    return event


def update_event(engine: Engine, event_id: int, actor_id: int, changes: dict[str, Any]) -> Event:
    """Merge *changes* into an event the actor organizes.

    ``organizer_id`` is never taken from *changes*.  The merged start/end
    dates must still be ordered.
    """
    updates = {k: v for k, v in changes.items() if k in _EVENT_FIELDS}
    with get_session(engine) as session:
        event = _owned_event(session, event_id, actor_id, "update")

        start = updates.get("start_date", event.start_date)
        end = updates.get("end_date", event.end_date)
        if "start_date" in updates or "end_date" in updates:
            _check_dates(start, end)
        for key in ("start_date", "end_date"):
            if key in updates:
                updates[key] = as_utc(updates[key])
        if "category_id" in updates:
            _require_category(session, updates["category_id"])

        for key, value in updates.items():
            setattr(event, key, value)
        session.flush()
        session.refresh(event)

    logger.info("User %d updated event %d", actor_id, event_id)
    return event


def delete_event(engine: Engine, event_id: int, actor_id: int) -> None:
    with get_session(engine) as session:
        event = _owned_event(session, event_id, actor_id, "delete")
        session.delete(event)

    logger.info("User %d deleted event %d", actor_id, event_id)
