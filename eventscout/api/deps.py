"""
eventscout.api.deps — FastAPI dependency injection
===================================================

Engine, config, signing secret and the two identity dependencies:

* :func:`get_current_user` — the route requires a valid bearer token.
* :func:`get_optional_user` — anonymous access is fine; the handler gets
  ``User | None`` and decides what to show.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import Engine

from eventscout.config import EventScoutConfig, load_config
from eventscout.database.engine import create_db_engine
from eventscout.database.models import User
from eventscout.errors import NotFound, Unauthorized
from eventscout.services import auth_service

logger = logging.getLogger(__name__)

_WEAK_SECRETS = frozenset({
    "your-secret-key",
    "eventscout-dev-secret-change-me",
    "change-me",
    "secret",
    "dev",
    "",
})

_MIN_SECRET_LENGTH = 32

JWT_ALGORITHM = auth_service.JWT_ALGORITHM


def _load_jwt_secret() -> str:
    """Load and validate JWT_SECRET from the environment.

    Raises RuntimeError at import time if the secret is missing, blank,
    too short (< 32 chars), or a known weak default.
    """
    secret = os.getenv("JWT_SECRET", "")
    if not secret:
        raise RuntimeError(
            "JWT_SECRET environment variable is not set. "
            "Generate one with: python -c \"import secrets; print(secrets.token_urlsafe(64))\""
        )
    if secret in _WEAK_SECRETS:
        raise RuntimeError(
            f"JWT_SECRET is set to a known weak default ('{secret}'). "
            "Please set a strong, unique secret."
        )
    if len(secret) < _MIN_SECRET_LENGTH:
        raise RuntimeError(
            f"JWT_SECRET is too short ({len(secret)} chars). "
            f"Minimum length is {_MIN_SECRET_LENGTH} characters."
        )
    return secret


JWT_SECRET: str = _load_jwt_secret()


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> EventScoutConfig:
    return load_config(os.getenv("EVENTSCOUT_CONFIG", "config.yaml"))


def get_jwt_secret() -> str:
    return JWT_SECRET


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def _resolve_user(engine: Engine, token: str, secret: str) -> User:
    try:
        return auth_service.verify_token(engine, token, secret=secret)
    except Unauthorized:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    except NotFound:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")


def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    engine: Engine = Depends(get_engine),
    secret: str = Depends(get_jwt_secret),
) -> User:
    """Validate the bearer token and return the user. Raises 401 if invalid."""
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Authentication required")
    return _resolve_user(engine, token, secret)


def get_optional_user(
    authorization: Annotated[str | None, Header()] = None,
    engine: Engine = Depends(get_engine),
    secret: str = Depends(get_jwt_secret),
) -> User | None:
    """Like :func:`get_current_user`, but no header means anonymous (``None``).

    A header that is present but invalid is still rejected with 401.
    """
    if authorization is None:
        return None
    token = _bearer_token(authorization)
    if token is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return _resolve_user(engine, token, secret)


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
