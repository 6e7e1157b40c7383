"""
eventscout.api.auth — Sign-up, login & token validation
========================================================
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from eventscout.api.deps import get_config, get_engine, get_jwt_secret
from eventscout.api.schemas import LoginRequest, RegisterRequest, user_dict
from eventscout.config import EventScoutConfig
from eventscout.database.engine import run_db
from eventscout.errors import NotFound, Unauthorized
from eventscout.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
    secret: str = Depends(get_jwt_secret),
):
    """Create an account and return a token for it."""
    token, user = await run_db(
        auth_service.register,
        engine,
        username=body.username,
        email=str(body.email),
        password=body.password,
        name=body.name,
        avatar_url=body.avatar_url,
        cfg=cfg,
        secret=secret,
    )
    return {"token": token, "user": user_dict(user)}


@router.post("/login")
async def login(
    body: LoginRequest,
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
    secret: str = Depends(get_jwt_secret),
):
    token, user = await run_db(
        auth_service.login, engine, body.email, body.password, cfg=cfg, secret=secret
    )
    return {"token": token, "user": user_dict(user)}


@router.get("/validate")
async def validate(
    authorization: Annotated[str | None, Header()] = None,
    engine=Depends(get_engine),
    secret: str = Depends(get_jwt_secret),
):
    """Tell a client whether its stored token is still good."""
    token = authorization.split(" ", 1)[1].strip() if authorization and " " in authorization else None
    if not token:
        return JSONResponse(status_code=401, content={"error": "No token provided", "valid": False})

    try:
        user = await run_db(auth_service.verify_token, engine, token, secret=secret)
    except Unauthorized as exc:
        return JSONResponse(status_code=401, content={"error": exc.message, "valid": False})
    except NotFound as exc:
        return JSONResponse(status_code=404, content={"error": exc.message, "valid": False})

    return {"valid": True, "user": user_dict(user)}
