"""
tests/test_geo.py — Great-Circle Distance Tests
================================================
Pure-function checks for haversine_km / filter_nearby, plus agreement
between the in-process filter and the SQL distance expression.
"""

from __future__ import annotations

import math
from decimal import Decimal

import pytest
from sqlalchemy import select

from eventscout.constants import EARTH_RADIUS_KM
from eventscout.database.models import Event
from eventscout.engine.geo import distance_expression, filter_nearby, haversine_km

KM_PER_DEGREE = 2 * math.pi * EARTH_RADIUS_KM / 360  # ~111.195


# ===========================================================================
# haversine_km
# ===========================================================================
class TestHaversine:
    def test_identical_points_are_zero(self):
        assert haversine_km(40.758, -73.9855, 40.758, -73.9855) == 0.0

    def test_symmetric(self):
        a = haversine_km(40.758, -73.9855, 51.5074, -0.1278)
        b = haversine_km(51.5074, -0.1278, 40.758, -73.9855)
        assert a == pytest.approx(b)

    def test_one_degree_of_latitude(self):
        assert haversine_km(0, 0, 1, 0) == pytest.approx(KM_PER_DEGREE, rel=1e-9)

    def test_new_york_to_london(self):
        assert haversine_km(40.7128, -74.0060, 51.5074, -0.1278) == pytest.approx(5570, abs=10)

    def test_antipodal_points_do_not_blow_up(self):
        d = haversine_km(0, 0, 0, 180)
        assert d == pytest.approx(math.pi * EARTH_RADIUS_KM)

    def test_accepts_decimal(self):
        d = haversine_km(Decimal("40.75800000"), Decimal("-73.98550000"), 40.758, -73.9855)
        assert d == pytest.approx(0.0, abs=1e-9)


# ===========================================================================
# filter_nearby
# ===========================================================================
class TestFilterNearby:
    def test_keeps_only_points_in_radius_in_input_order(self):
        candidates = [
            {"id": 1, "latitude": 0.0, "longitude": 0.5},   # ~55.6 km
            {"id": 2, "latitude": 0.0, "longitude": 5.0},   # ~556 km
            {"id": 3, "latitude": 0.0, "longitude": 0.1},   # ~11.1 km
        ]
        result = filter_nearby(0.0, 0.0, 100, candidates)
        assert [c["id"] for c, _ in result] == [1, 3]
        assert result[1][1] == pytest.approx(0.1 * KM_PER_DEGREE)

    def test_boundary_is_inclusive(self):
        target = {"latitude": 1.0, "longitude": 0.0}
        exact = haversine_km(0.0, 0.0, 1.0, 0.0)
        assert filter_nearby(0.0, 0.0, exact, [target]) == [(target, exact)]

    def test_attribute_candidates(self):
        class Spot:
            latitude = 10.0
            longitude = 10.0

        spot = Spot()
        assert filter_nearby(10.0, 10.0, 1, [spot]) == [(spot, 0.0)]

    def test_custom_key(self):
        points = [(0.0, 0.0), (0.0, 3.0)]
        result = filter_nearby(0.0, 0.0, 50, points, key=lambda p: p)
        assert [p for p, _ in result] == [(0.0, 0.0)]

    def test_empty_candidates(self):
        assert filter_nearby(0.0, 0.0, 10, []) == []


# ===========================================================================
# SQL expression vs in-process
# ===========================================================================
class TestSqlAgreement:
    def test_sql_distance_matches_python(self, db_engine, make_user, make_category, make_event):
        _, user = make_user()
        category = make_category()
        spots = [(40.758, -73.9855), (40.7484, -73.9857), (40.6892, -74.0445), (41.0, -73.0)]
        for lat, lng in spots:
            make_event(user.id, category.id, latitude=lat, longitude=lng)

        origin = (40.7580, -73.9855)
        distance = distance_expression(origin[0], origin[1], Event.latitude, Event.longitude)
        with db_engine.connect() as conn:
            rows = conn.execute(
                select(Event.latitude, Event.longitude, distance.label("d")).order_by(Event.id)
            ).all()

        for lat, lng, d in rows:
            assert d == pytest.approx(haversine_km(origin[0], origin[1], lat, lng), abs=1e-6)

    def test_same_points_admitted_by_both(self, db_engine, make_user, make_category, make_event):
        _, user = make_user()
        category = make_category()
        for lng in (0.05, 0.09, 0.2, 1.0):
            make_event(user.id, category.id, latitude=0.0, longitude=lng)

        radius = 15.0
        distance = distance_expression(0.0, 0.0, Event.latitude, Event.longitude)
        with db_engine.connect() as conn:
            sql_ids = list(conn.scalars(
                select(Event.id).where(distance <= radius).order_by(Event.id)
            ))
            all_rows = conn.execute(select(Event.id, Event.latitude, Event.longitude)).all()

        py_ids = sorted(
            row.id for row, _ in filter_nearby(0.0, 0.0, radius, all_rows)
        )
        assert sql_ids == py_ids
        assert len(sql_ids) == 2
