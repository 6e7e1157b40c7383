"""
eventscout.engine.geo — Great-Circle Distance & Nearby Filtering
=================================================================

One formula, two evaluation sites:

* :func:`haversine_km` / :func:`filter_nearby` run in-process over a
  candidate list that is already in memory.
* :func:`distance_expression` renders the *same* formula as a SQL column
  expression so the relational store can filter and order by distance.

Both clamp the Haversine term ``a`` to ``[0, 1]`` before taking square
roots; floating-point round-off near antipodal points can push ``a``
a hair above 1, which would make ``sqrt(1 - a)`` undefined.  Both admit
a point when ``distance <= radius`` (boundary inclusive).
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import Float, case, cast, func
from sqlalchemy.sql.elements import ColumnElement

from eventscout.constants import EARTH_RADIUS_KM

__all__ = [
    "haversine_km",
    "filter_nearby",
    "distance_expression",
    "register_sqlite_math",
]

T = TypeVar("T")
Number = float | int | Decimal


# ---------------------------------------------------------------------------
# In-process evaluation
# ---------------------------------------------------------------------------
def _clamp_unit(a: float) -> float:
    return min(1.0, max(0.0, a))


def haversine_km(lat1: Number, lng1: Number, lat2: Number, lng2: Number) -> float:
    """Return the great-circle distance in kilometres between two points.

    Coordinates are in degrees; ``Decimal`` values (as stored in the
    ``events`` table) are accepted.
    """
    lat1, lng1, lat2, lng2 = float(lat1), float(lng1), float(lat2), float(lng2)
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(d_lat / 2) * math.sin(d_lat / 2)
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
        * math.sin(d_lng / 2) * math.sin(d_lng / 2)
    )
    a = _clamp_unit(a)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def _default_key(candidate: Any) -> tuple[Number, Number]:
    if isinstance(candidate, dict):
        return candidate["latitude"], candidate["longitude"]
    return candidate.latitude, candidate.longitude


def filter_nearby(
    lat: Number,
    lng: Number,
    radius_km: Number,
    candidates: Iterable[T],
    *,
    key: Callable[[T], tuple[Number, Number]] = _default_key,
) -> list[tuple[T, float]]:
    """Keep the candidates within *radius_km* of ``(lat, lng)``.

    Parameters
    ----------
    candidates:
        Objects with ``latitude``/``longitude`` attributes, dicts with those
        keys, or anything *key* can turn into a ``(lat, lng)`` pair.

    Returns
    -------
    list of ``(candidate, distance_km)`` in input order.
    """
    radius = float(radius_km)
    result: list[tuple[T, float]] = []
    for candidate in candidates:
        c_lat, c_lng = key(candidate)
        distance = haversine_km(lat, lng, c_lat, c_lng)
        if distance <= radius:
            result.append((candidate, distance))
    return result


# ---------------------------------------------------------------------------
# Store-side evaluation
# ---------------------------------------------------------------------------
def distance_expression(
    lat: Number,
    lng: Number,
    lat_col: ColumnElement,
    lng_col: ColumnElement,
) -> ColumnElement[float]:
    """Build a SQL expression for the distance (km) from ``(lat, lng)``.

    The query point's trigonometry is folded into Python constants; only
    the per-row terms are left to the database.  Columns are cast to
    FLOAT so ``NUMERIC`` coordinates work with PostgreSQL's ``sin``/``cos``.
    """
    lat1 = math.radians(float(lat))
    lng1 = math.radians(float(lng))
    cos_lat1 = math.cos(lat1)

    lat2 = func.radians(cast(lat_col, Float))
    lng2 = func.radians(cast(lng_col, Float))
    half_d_lat = (lat2 - lat1) / 2
    half_d_lng = (lng2 - lng1) / 2

    raw_a = (
        func.sin(half_d_lat) * func.sin(half_d_lat)
        + cos_lat1 * func.cos(lat2) * func.sin(half_d_lng) * func.sin(half_d_lng)
    )
    a = case((raw_a > 1.0, 1.0), (raw_a < 0.0, 0.0), else_=raw_a)
    return 2 * EARTH_RADIUS_KM * func.atan2(func.sqrt(a), func.sqrt(1 - a))


def register_sqlite_math(dbapi_connection) -> None:
    """Expose the math functions used by :func:`distance_expression` to SQLite.

    Many SQLite builds ship without ``SQLITE_ENABLE_MATH_FUNCTIONS``.
    """
    dbapi_connection.create_function("radians", 1, math.radians, deterministic=True)
    dbapi_connection.create_function("sin", 1, math.sin, deterministic=True)
    dbapi_connection.create_function("cos", 1, math.cos, deterministic=True)
    dbapi_connection.create_function("sqrt", 1, math.sqrt, deterministic=True)
    dbapi_connection.create_function("atan2", 2, math.atan2, deterministic=True)
