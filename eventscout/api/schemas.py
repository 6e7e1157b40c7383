"""
eventscout.api.schemas — Request bodies & response shaping
===========================================================

Request bodies are pydantic models; responses are plain dicts built by
the ``*_dict`` helpers so the password hash can never leak by accident.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from eventscout.database.models import Bookmark, Category, Event, Registration, User
from eventscout.services.event_service import as_utc


# ---------------------------------------------------------------------------
# Auth / users
# ---------------------------------------------------------------------------
class RegisterRequest(BaseModel):
    username: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=1)
    name: str | None = Field(None, max_length=100)
    avatar_url: str | None = None


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ProfileUpdate(BaseModel):
    username: str | None = Field(None, min_length=1, max_length=50)
    email: EmailStr | None = None
    name: str | None = Field(None, min_length=1, max_length=100)
    avatar_url: str | None = None


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str | None = None
    icon: str | None = Field(None, max_length=50)


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = None
    icon: str | None = Field(None, max_length=50)

    def changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        if data.get("name") is None:
            data.pop("name", None)
        return data


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------
_NULLABLE_EVENT_FIELDS = frozenset({"image_url", "capacity", "price"})


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1, max_length=255)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    start_date: datetime
    end_date: datetime
    image_url: str | None = None
    category_id: int
    capacity: int | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def _dates_ordered(self):
        if as_utc(self.end_date) <= as_utc(self.start_date):
            raise ValueError("end_date must be after start_date")
        return self


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    location: str | None = Field(None, min_length=1, max_length=255)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    start_date: datetime | None = None
    end_date: datetime | None = None
    image_url: str | None = None
    category_id: int | None = None
    capacity: int | None = Field(None, ge=0)
    price: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)

    @model_validator(mode="after")
    def _dates_ordered(self):
        if self.start_date and self.end_date and as_utc(self.end_date) <= as_utc(self.start_date):
            raise ValueError("end_date must be after start_date")
        return self

    def changes(self) -> dict[str, Any]:
        """Supplied fields only; ``null`` clears optional columns and is
        ignored for required ones."""
        return {
            k: v for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in _NULLABLE_EVENT_FIELDS
        }


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------
def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _num(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def user_dict(u: User) -> dict:
    """Public user record; never includes the password hash."""
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "name": u.name,
        "avatar_url": u.avatar_url,
        "created_at": _iso(u.created_at),
        "updated_at": _iso(u.updated_at),
    }


def category_dict(c: Category) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "description": c.description,
        "icon": c.icon,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def event_dict(e: Event, distance: float | None = None) -> dict:
    data = {
        "id": e.id,
        "title": e.title,
        "description": e.description,
        "location": e.location,
        "latitude": _num(e.latitude),
        "longitude": _num(e.longitude),
        "start_date": _iso(e.start_date),
        "end_date": _iso(e.end_date),
        "image_url": e.image_url,
        "category_id": e.category_id,
        "organizer_id": e.organizer_id,
        "capacity": e.capacity,
        "price": _num(e.price),
        "created_at": _iso(e.created_at),
        "updated_at": _iso(e.updated_at),
    }
    if distance is not None:
        data["distance"] = distance
    return data


def registration_dict(r: Registration) -> dict:
    return {
        "id": r.id,
        "user_id": r.user_id,
        "event_id": r.event_id,
        "registration_date": _iso(r.registration_date),
        "status": r.status,
    }


def bookmark_dict(b: Bookmark) -> dict:
    return {
        "id": b.id,
        "user_id": b.user_id,
        "event_id": b.event_id,
        "created_at": _iso(b.created_at),
    }
