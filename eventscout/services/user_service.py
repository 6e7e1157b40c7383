"""
eventscout.services.user_service — Profiles & Accounts
=======================================================

Every mutation here targets the *verified* identity handed in by the API
layer; there is no way to address another user's profile.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError

from eventscout.database.engine import get_session
from eventscout.database.models import Event, Registration, User
from eventscout.errors import Conflict, NotFound, ValidationError
from eventscout.services.auth_service import check_password, hash_password, normalize_email

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("username", "email", "name", "avatar_url")
_NULLABLE_PROFILE_FIELDS = frozenset({"avatar_url"})


def get_user(engine: Engine, user_id: int) -> User | None:
    with get_session(engine) as session:
        return session.get(User, user_id)


def get_user_by_email(engine: Engine, email: str) -> User | None:
    with get_session(engine) as session:
        return session.scalar(select(User).where(User.email == normalize_email(email)))


def get_user_by_username(engine: Engine, username: str) -> User | None:
    with get_session(engine) as session:
        return session.scalar(select(User).where(User.username == username))


def update_profile(engine: Engine, user_id: int, changes: dict[str, Any]) -> User:
    """Merge the supplied profile fields into the user's row.

    Keys outside ``username``/``email``/``name``/``avatar_url`` are
    ignored.  ``None`` clears ``avatar_url`` and is ignored for the
    required fields.

    Raises
    ------
    NotFound
        The user no longer exists.
    Conflict
        The new email or username belongs to someone else.
    """
    updates = {
        k: v for k, v in changes.items()
        if k in _PROFILE_FIELDS and (v is not None or k in _NULLABLE_PROFILE_FIELDS)
    }
    if "email" in updates:
        updates["email"] = normalize_email(updates["email"])

    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")

        if "email" in updates:
            owner = session.scalar(
                select(User.id).where(User.email == updates["email"], User.id != user_id)
            )
            if owner is not None:
                raise Conflict("Email is already in use")
        if "username" in updates:
            owner = session.scalar(
                select(User.id).where(User.username == updates["username"], User.id != user_id)
            )
            if owner is not None:
                raise Conflict("Username is already in use")

        for key, value in updates.items():
            setattr(user, key, value)
        try:
            session.flush()
        except IntegrityError:
            raise Conflict("Email or username is already in use")
        session.refresh(user)

    logger.info("User %d updated profile fields %s", user_id, sorted(updates))
    return user


def change_password(
    engine: Engine,
    user_id: int,
    current_password: str,
    new_password: str,
    *,
    rounds: int = 10,
) -> None:
    """Replace the user's password after checking the current one."""
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        if not check_password(current_password, user.password):
            raise ValidationError("Current password is incorrect")
        user.password = hash_password(new_password, rounds)

    logger.info("User %d changed password", user_id)


def get_registered_events(engine: Engine, user_id: int) -> list[Event]:
    """Events *user_id* is registered for, soonest first."""
    with get_session(engine) as session:
        return list(session.scalars(
            select(Event)
            .join(Registration, Registration.event_id == Event.id)
            .where(Registration.user_id == user_id)
            .order_by(Event.start_date.asc(), Event.id)
        ).all())


def delete_user(engine: Engine, user_id: int) -> bool:
    """Delete the account and, by cascade, its events, registrations,
    bookmarks and notifications.  Returns ``False`` if it did not exist."""
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            return False
        session.delete(user)

    logger.info("Deleted user %d", user_id)
    return True
