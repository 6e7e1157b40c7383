"""
eventscout.services.registration_service — Attendance Admission
================================================================

Admission runs inside **one** transaction:

  1. Lock the event row (``SELECT … FOR UPDATE``) — 404 if missing.
  2. Count confirmed registrations; refuse if the event is full.
  3. Refuse if this user already holds a registration.
  4. Insert.

Because every admission for the same event takes the same row lock,
concurrent requests for the last seat are serialized on PostgreSQL and
the capacity check is exact.  SQLite ignores ``FOR UPDATE``; there the
engine opens every transaction with ``BEGIN IMMEDIATE``
(:func:`eventscout.database.engine.configure_sqlite`), which takes the
database write lock before step 1 and gives the same serialization.
The unique constraint on ``(user_id, event_id)`` stays the final guard:
a violation on insert is reported as the same "already registered"
conflict.
"""

from __future__ import annotations

import logging

from sqlalchemy import Engine, delete, select
from sqlalchemy.exc import IntegrityError

from eventscout.database.engine import get_session
from eventscout.database.models import Event, Registration
from eventscout.engine.admission import (
    ALREADY_REGISTERED,
    AdmissionState,
    check_admission,
)
from eventscout.errors import Conflict, NotFound
from eventscout.services.event_service import count_registrations

logger = logging.getLogger(__name__)


def register_for_event(engine: Engine, user_id: int, event_id: int) -> Registration:
    """Admit *user_id* to *event_id* and return the new registration.

    Raises
    ------
    NotFound
        The event does not exist.
    Conflict
        The event is full, or the user is already registered.
    """
    with get_session(engine) as session:
        event = session.scalar(
            select(Event).where(Event.id == event_id).with_for_update()
        )
        if event is None:
            raise NotFound("Event not found")

        existing = session.scalar(
            select(Registration.id).where(
                Registration.event_id == event_id, Registration.user_id == user_id
            )
        )
        state = AdmissionState(
            capacity=event.capacity,
            registered=count_registrations(session, event_id) if event.capacity is not None else 0,
            already_registered=existing is not None,
        )
        try:
            check_admission(state)
        except Conflict as exc:
            logger.info("Registration refused: user %d event %d (%s)", user_id, event_id, exc.message)
            raise

        registration = Registration(user_id=user_id, event_id=event_id)
        session.add(registration)
        try:
            session.flush()
        except IntegrityError:
            raise Conflict(ALREADY_REGISTERED)
        session.refresh(registration)

    logger.info(
        "User %d registered for event %d (%s seats left)",
        user_id, event_id,
        "unlimited" if state.remaining is None else state.remaining - 1,
    )
    return registration


def cancel_registration(engine: Engine, user_id: int, event_id: int) -> None:
    """Delete the (user, event) registration; :class:`NotFound` if absent."""
    with get_session(engine) as session:
        result = session.execute(
            delete(Registration).where(
                Registration.event_id == event_id, Registration.user_id == user_id
            )
        )
        if result.rowcount == 0:
            raise NotFound("Registration not found")

    logger.info("User %d cancelled registration for event %d", user_id, event_id)
