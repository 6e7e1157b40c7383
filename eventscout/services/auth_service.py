"""
eventscout.services.auth_service — Passwords, Accounts & Bearer Tokens
=======================================================================

* Passwords are stored as bcrypt hashes (``users.password``).
* Tokens are HS256 JWTs carrying ``sub`` (user id), ``email``,
  ``username``, ``iat`` and ``exp``.  They are self-contained: there is
  no server-side revocation list, so logging out means the client drops
  its token.
* ``login`` answers an unknown email and a wrong password with the same
  :class:`Unauthorized` message so callers cannot probe for accounts.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from jwt.exceptions import InvalidTokenError
from sqlalchemy import Engine, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eventscout.config import EventScoutConfig
from eventscout.database.engine import get_session
from eventscout.database.models import User
from eventscout.errors import Conflict, NotFound, Unauthorized

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_TOKEN = "Invalid token"
EMAIL_TAKEN = "User with this email already exists"
USERNAME_TAKEN = "Username is already in use"

_BCRYPT_MAX_BYTES = 72


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------
def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes; newer releases refuse longer input.
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = 10) -> str:
    """Return a bcrypt hash of *password* with cost factor *rounds*."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds)).decode("utf-8")


def check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        logger.warning("Malformed password hash encountered during check")
        return False


def normalize_email(email: str) -> str:
    return email.strip().lower()


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------
def issue_token(user: User, *, secret: str, ttl_hours: int, now: datetime | None = None) -> str:
    """Sign a JWT for *user*, valid for *ttl_hours* from *now*."""
    issued_at = now or datetime.now(UTC)
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "username": user.username,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=ttl_hours),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str, *, secret: str) -> int:
    """Validate *token* and return the user id it is bound to.

    Raises :class:`Unauthorized` when the token is malformed, expired, or
    signed with another key.
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
        return int(payload["sub"])
    except (InvalidTokenError, ValueError):
        raise Unauthorized(INVALID_TOKEN)


def verify_token(engine: Engine, token: str, *, secret: str) -> User:
    """Resolve *token* to its :class:`User`.

    Raises
    ------
    Unauthorized
        The token itself is not acceptable.
    NotFound
        The token is fine but the user has since been deleted.
    """
    user_id = decode_token(token, secret=secret)
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFound("User not found")
        return user


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
def _taken_key_message(session: Session, email: str, username: str) -> str | None:
    """Conflict message for the first of *email* / *username* already in use."""
    if session.scalar(select(User.id).where(User.email == email)) is not None:
        return EMAIL_TAKEN
    if session.scalar(select(User.id).where(User.username == username)) is not None:
        return USERNAME_TAKEN
    return None


def register(
    engine: Engine,
    *,
    username: str,
    email: str,
    password: str,
    name: str | None = None,
    avatar_url: str | None = None,
    cfg: EventScoutConfig,
    secret: str,
) -> tuple[str, User]:
    """Create an account and return ``(token, user)``.

    Raises :class:`Conflict` if the email or username is already taken.
    """
    email = normalize_email(email)
    with get_session(engine) as session:
        taken = _taken_key_message(session, email, username)
        if taken is not None:
            raise Conflict(taken)

        user = User(
            username=username,
            email=email,
            password=hash_password(password, cfg.bcrypt_rounds),
            name=name or username,
            avatar_url=avatar_url or None,
        )
        session.add(user)
        try:
            session.flush()
        except IntegrityError:
            # Lost a race against a concurrent sign-up; report the key it took.
            session.rollback()
            raise Conflict(_taken_key_message(session, email, username) or EMAIL_TAKEN)
        session.refresh(user)

    logger.info("Registered user %d (%s)", user.id, user.username)
    return issue_token(user, secret=secret, ttl_hours=cfg.token_ttl_hours), user


def login(
    engine: Engine,
    email: str,
    password: str,
    *,
    cfg: EventScoutConfig,
    secret: str,
) -> tuple[str, User]:
    """Check credentials and return ``(token, user)``."""
    with get_session(engine) as session:
        user = session.scalar(select(User).where(User.email == normalize_email(email)))

    if user is None or not check_password(password, user.password):
        logger.info("Failed login attempt for %s", normalize_email(email))
        raise Unauthorized(INVALID_CREDENTIALS)

    logger.info("User %d logged in", user.id)
    return issue_token(user, secret=secret, ttl_hours=cfg.token_ttl_hours), user
