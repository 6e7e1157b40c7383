"""
eventscout.api.routes.events — Event catalogue, nearby search & attendance
===========================================================================

Static paths (``/nearby``, ``/dates``) are declared before ``/{event_id}``
so they are not captured as ids.
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from eventscout.api.deps import CurrentUser, OptionalUser, get_config, get_engine
from eventscout.api.schemas import EventCreate, EventUpdate, event_dict, registration_dict
from eventscout.config import EventScoutConfig
from eventscout.database.engine import run_db
from eventscout.errors import ValidationError
from eventscout.services import event_service, registration_service
from eventscout.services.event_service import EventFilters

router = APIRouter(prefix="/events", tags=["events"])


# ---------------------------------------------------------------------------
# Listing & search
# ---------------------------------------------------------------------------
@router.get("")
async def list_events(
    category_id: int | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float | None = Query(None, gt=0),
    limit: int | None = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
):
    """All events, optionally narrowed by category, text, dates and radius."""
    filters = EventFilters(
        category_id=category_id,
        search=search,
        start_date=start_date,
        end_date=end_date,
        lat=lat,
        lng=lng,
        radius_km=radius,
        limit=cfg.clamp_limit(limit),
        offset=offset,
    )
    rows = await run_db(
        event_service.list_events,
        engine,
        filters,
        default_radius_km=cfg.nearby_default_radius_km,
    )
    return [event_dict(event, distance) for event, distance in rows]


@router.get("/nearby")
async def nearby_events(
    lat: float | None = Query(None, ge=-90, le=90),
    lng: float | None = Query(None, ge=-180, le=180),
    radius: float | None = Query(None, gt=0),
    limit: int | None = Query(None, ge=1),
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
):
    """Events within ``radius`` km of ``(lat, lng)``, nearest first."""
    if lat is None or lng is None:
        raise ValidationError("Latitude and longitude are required")
    rows = await run_db(
        event_service.get_nearby_events,
        engine,
        lat,
        lng,
        radius or cfg.nearby_default_radius_km,
        cfg.clamp_limit(limit),
    )
    return [event_dict(event, distance) for event, distance in rows]


@router.get("/dates")
async def events_by_date_range(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int | None = Query(None, ge=1),
    engine=Depends(get_engine),
    cfg: EventScoutConfig = Depends(get_config),
):
    if start_date is None or end_date is None:
        raise ValidationError("Start date and end date are required")
    events = await run_db(
        event_service.get_events_by_date_range,
        engine,
        start_date,
        end_date,
        cfg.clamp_limit(limit),
    )
    return [event_dict(e) for e in events]


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------
@router.post("", status_code=201)
async def create_event(
    body: EventCreate,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    event = await run_db(event_service.create_event, engine, user.id, body.model_dump())
    return event_dict(event)


@router.get("/{event_id}")
async def get_event(
    event_id: int,
    viewer: OptionalUser,
    engine=Depends(get_engine),
):
    """Single event.  Signed-in viewers also see their own attendance flags."""
    detail = await run_db(
        event_service.get_event_detail, engine, event_id, viewer.id if viewer else None
    )
    data = event_dict(detail.event)
    data["registered_count"] = detail.registered_count
    if viewer is not None:
        data["is_registered"] = detail.is_registered
        data["is_bookmarked"] = detail.is_bookmarked
    return data


@router.put("/{event_id}")
async def update_event(
    event_id: int,
    body: EventUpdate,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    event = await run_db(event_service.update_event, engine, event_id, user.id, body.changes())
    return event_dict(event)


@router.delete("/{event_id}")
async def delete_event(
    event_id: int,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    await run_db(event_service.delete_event, engine, event_id, user.id)
    return {"message": "Event deleted successfully"}


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------
@router.post("/{event_id}/register", status_code=201)
async def register_for_event(
    event_id: int,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    registration = await run_db(
        registration_service.register_for_event, engine, user.id, event_id
    )
    return registration_dict(registration)


@router.delete("/{event_id}/register")
async def cancel_registration(
    event_id: int,
    user: CurrentUser,
    engine=Depends(get_engine),
):
    await run_db(registration_service.cancel_registration, engine, user.id, event_id)
    return {"message": "Registration cancelled successfully"}
