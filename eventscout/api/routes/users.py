"""
eventscout.api.routes.users — The signed-in user's own account
===============================================================

There is no user id in any path: every route acts on the identity from
the bearer token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from eventscout.api.deps import CurrentUser, get_config, get_engine
from eventscout.api.schemas import PasswordChange, ProfileUpdate, event_dict, user_dict
from eventscout.config import EventScoutConfig
from eventscout.database.engine import run_db
from eventscout.errors import NotFound
from eventscout.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/profile")
async def get_profile(user: CurrentUser):
    return user_dict(user)


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    changes = body.model_dump(exclude_unset=True)
    if "email" in changes and changes["email"] is not None:
        changes["email"] = str(changes["email"])
    updated = await run_db(user_service.update_profile, engine, user.id, changes)
    return user_dict(updated)


@router.put("/password")
async def change_password(
    body: PasswordChange,
    user: CurrentUser,
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
):
    await run_db(
        user_service.change_password,
        engine,
        user.id,
        body.current_password,
        body.new_password,
        rounds=cfg.bcrypt_rounds,
    )
    return {"message": "Password updated successfully"}


@router.get("/events")
async def registered_events(user: CurrentUser, engine=Depends(get_engine)):
    """Events the user is registered for, soonest first."""
    events = await run_db(user_service.get_registered_events, engine, user.id)
    return [event_dict(e) for e in events]


@router.delete("")
async def delete_account(user: CurrentUser, engine=Depends(get_engine)):
    if not await run_db(user_service.delete_user, engine, user.id):
        raise NotFound("User not found")
    return {"message": "Account deleted successfully"}
