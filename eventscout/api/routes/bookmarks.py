"""
eventscout.api.routes.bookmarks — Saved events
===============================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from eventscout.api.deps import CurrentUser, get_engine
from eventscout.api.schemas import bookmark_dict, event_dict
from eventscout.database.engine import run_db
from eventscout.services import bookmark_service

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


@router.get("")
async def list_bookmarks(user: CurrentUser, engine=Depends(get_engine)):
    """Bookmarked events, soonest first, each with ``bookmarked_at``."""
    rows = await run_db(bookmark_service.list_bookmarked_events, engine, user.id)
    return [
        {**event_dict(event), "bookmarked_at": bookmarked_at.isoformat() if bookmarked_at else None}
        for event, bookmarked_at in rows
    ]


@router.post("/{event_id}", status_code=201)
async def add_bookmark(event_id: int, user: CurrentUser, engine=Depends(get_engine)):
    bookmark = await run_db(bookmark_service.add_bookmark, engine, user.id, event_id)
    return bookmark_dict(bookmark)


@router.delete("/{event_id}")
async def remove_bookmark(event_id: int, user: CurrentUser, engine=Depends(get_engine)):
    await run_db(bookmark_service.remove_bookmark, engine, user.id, event_id)
    return {"message": "Bookmark removed successfully"}


@router.get("/{event_id}/check")
async def check_bookmark(event_id: int, user: CurrentUser, engine=Depends(get_engine)):
    return {"isBookmarked": await run_db(bookmark_service.is_bookmarked, engine, user.id, event_id)}
