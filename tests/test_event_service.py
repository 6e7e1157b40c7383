"""
tests/test_event_service.py — Event Catalogue Service Tests
============================================================
Listing filters, nearby search, date windows and organizer-only writes,
against the in-memory SQLite database.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from eventscout.errors import Forbidden, NotFound, ValidationError
from eventscout.services import bookmark_service, category_service, event_service
from eventscout.services.event_service import EventFilters

from conftest import NYC

JUNE = datetime(2030, 6, 1, 18, 0, tzinfo=UTC)


@pytest.fixture
def org(make_user):
    return make_user("org")[1]


@pytest.fixture
def music(make_category):
    return make_category("Music")


# ===========================================================================
# list_events
# ===========================================================================
class TestListEvents:
    def test_ordered_by_start_date(self, db_engine, org, music, make_event):
        later = make_event(org.id, music.id, title="Later", start_date=JUNE + timedelta(days=2))
        sooner = make_event(org.id, music.id, title="Sooner", start_date=JUNE)

        rows = event_service.list_events(db_engine, EventFilters())
        assert [e.id for e, _ in rows] == [sooner.id, later.id]
        assert all(d is None for _, d in rows)

    def test_category_filter(self, db_engine, org, music, make_category, make_event):
        tech = make_category("Technology")
        make_event(org.id, music.id)
        hack = make_event(org.id, tech.id, title="Hack Night")

        rows = event_service.list_events(db_engine, EventFilters(category_id=tech.id))
        assert [e.id for e, _ in rows] == [hack.id]

    def test_search_is_case_insensitive_over_title_description_location(
        self, db_engine, org, music, make_event
    ):
        by_title = make_event(org.id, music.id, title="Brooklyn Beats", start_date=JUNE)
        by_location = make_event(
            org.id, music.id, title="Other", location="BROOKLYN Navy Yard",
            start_date=JUNE + timedelta(days=1),
        )
        make_event(org.id, music.id, title="Unrelated", start_date=JUNE + timedelta(days=2))

        rows = event_service.list_events(db_engine, EventFilters(search="brooklyn"))
        assert [e.id for e, _ in rows] == [by_title.id, by_location.id]

    @pytest.mark.parametrize("term", ["%", "_", "\\"])
    def test_search_wildcards_match_literally(self, db_engine, org, music, make_event, term):
        make_event(org.id, music.id, title="Plain Title")
        assert event_service.list_events(db_engine, EventFilters(search=term)) == []

    def test_search_for_literal_percent(self, db_engine, org, music, make_event):
        sale = make_event(org.id, music.id, title="50% off tickets", start_date=JUNE)
        make_event(org.id, music.id, title="500 seats", start_date=JUNE + timedelta(days=1))

        rows = event_service.list_events(db_engine, EventFilters(search="50%"))
        assert [e.id for e, _ in rows] == [sale.id]

    def test_date_window_applies_to_start_date(self, db_engine, org, music, make_event):
        make_event(org.id, music.id, start_date=JUNE - timedelta(days=10))
        inside = make_event(org.id, music.id, start_date=JUNE)
        make_event(org.id, music.id, start_date=JUNE + timedelta(days=10))

        rows = event_service.list_events(
            db_engine,
            EventFilters(start_date=JUNE - timedelta(days=1), end_date=JUNE + timedelta(days=1)),
        )
        assert [e.id for e, _ in rows] == [inside.id]

    def test_limit_and_offset(self, db_engine, org, music, make_event):
        ids = [make_event(org.id, music.id, start_date=JUNE + timedelta(days=i)).id for i in range(5)]
        rows = event_service.list_events(db_engine, EventFilters(limit=2, offset=1))
        assert [e.id for e, _ in rows] == ids[1:3]

    def test_radius_filter_reports_distance(self, db_engine, org, music, make_event):
        near = make_event(org.id, music.id, latitude=NYC[0], longitude=NYC[1])
        make_event(org.id, music.id, latitude=34.0522, longitude=-118.2437)  # Los Angeles

        rows = event_service.list_events(
            db_engine, EventFilters(lat=NYC[0], lng=NYC[1], radius_km=50)
        )
        assert [e.id for e, _ in rows] == [near.id]
        assert rows[0][1] == pytest.approx(0.0, abs=1e-6)

    def test_radius_defaults_when_omitted(self, db_engine, org, music, make_event):
        make_event(org.id, music.id, latitude=NYC[0] + 0.2, longitude=NYC[1])  # ~22 km

        rows = event_service.list_events(db_engine, EventFilters(lat=NYC[0], lng=NYC[1]))
        assert rows == []
        rows = event_service.list_events(
            db_engine, EventFilters(lat=NYC[0], lng=NYC[1]), default_radius_km=30
        )
        assert len(rows) == 1

    def test_lat_without_lng(self, db_engine):
        with pytest.raises(ValidationError):
            event_service.list_events(db_engine, EventFilters(lat=1.0))


# ===========================================================================
# Nearby & date range
# ===========================================================================
class TestNearbyAndDates:
    def test_nearby_orders_by_distance(self, db_engine, org, music, make_event):
        far = make_event(org.id, music.id, latitude=NYC[0] + 0.05, longitude=NYC[1])
        here = make_event(org.id, music.id, latitude=NYC[0], longitude=NYC[1])
        make_event(org.id, music.id, latitude=NYC[0] + 1.0, longitude=NYC[1])  # ~111 km

        rows = event_service.get_nearby_events(db_engine, NYC[0], NYC[1], radius_km=10)
        assert [e.id for e, _ in rows] == [here.id, far.id]
        assert rows[0][1] < rows[1][1] <= 10

    def test_nearby_respects_limit(self, db_engine, org, music, make_event):
        for _ in range(3):
            make_event(org.id, music.id)
        assert len(event_service.get_nearby_events(db_engine, NYC[0], NYC[1], limit=2)) == 2

    def test_date_range(self, db_engine, org, music, make_event):
        a = make_event(org.id, music.id, start_date=JUNE)
        b = make_event(org.id, music.id, start_date=JUNE + timedelta(days=3))
        make_event(org.id, music.id, start_date=JUNE + timedelta(days=30))

        events = event_service.get_events_by_date_range(
            db_engine, JUNE, JUNE + timedelta(days=7)
        )
        assert [e.id for e in events] == [a.id, b.id]

    def test_date_range_rejects_reversed_window(self, db_engine):
        with pytest.raises(ValidationError):
            event_service.get_events_by_date_range(db_engine, JUNE, JUNE - timedelta(days=1))


# ===========================================================================
# Writes & ownership
# ===========================================================================
class TestEventWrites:
    def test_create_rejects_end_before_start(self, org, music, make_event):
        with pytest.raises(ValidationError, match="end_date must be after start_date"):
            make_event(org.id, music.id, start_date=JUNE, end_date=JUNE - timedelta(hours=1))

    def test_create_rejects_unknown_category(self, org, make_event):
        with pytest.raises(ValidationError, match="Category not found"):
            make_event(org.id, 4242)

    def test_organizer_can_update(self, db_engine, org, music, make_event):
        event = make_event(org.id, music.id)
        updated = event_service.update_event(
            db_engine, event.id, org.id, {"title": "Renamed", "organizer_id": 999}
        )
        assert updated.title == "Renamed"
        assert updated.organizer_id == org.id

    def test_update_checks_merged_dates(self, db_engine, org, music, make_event):
        event = make_event(org.id, music.id, start_date=JUNE)
        with pytest.raises(ValidationError):
            event_service.update_event(
                db_engine, event.id, org.id, {"start_date": JUNE + timedelta(days=1)}
            )

    def test_non_organizer_cannot_update_or_delete(self, db_engine, org, music, make_event, make_user):
        event = make_event(org.id, music.id)
        _, mallory = make_user("mallory")

        with pytest.raises(Forbidden, match="Not authorized to update this event"):
            event_service.update_event(db_engine, event.id, mallory.id, {"title": "x"})
        with pytest.raises(Forbidden, match="Not authorized to delete this event"):
            event_service.delete_event(db_engine, event.id, mallory.id)

    def test_delete_missing(self, db_engine, org):
        with pytest.raises(NotFound):
            event_service.delete_event(db_engine, 777, org.id)

    def test_delete_cascades_to_bookmarks(self, db_engine, org, music, make_event, make_user):
        event = make_event(org.id, music.id)
        _, bob = make_user("bob")
        bookmark_service.add_bookmark(db_engine, bob.id, event.id)

        event_service.delete_event(db_engine, event.id, org.id)
        assert event_service.get_event(db_engine, event.id) is None
        assert bookmark_service.list_bookmarked_events(db_engine, bob.id) == []

    def test_deleting_category_removes_its_events(self, db_engine, org, music, make_event):
        event = make_event(org.id, music.id)
        assert category_service.delete_category(db_engine, music.id)
        assert event_service.get_event(db_engine, event.id) is None


# ===========================================================================
# Detail view
# ===========================================================================
class TestEventDetail:
    def test_anonymous_detail_has_no_viewer_flags(self, db_engine, org, music, make_event):
        event = make_event(org.id, music.id)
        detail = event_service.get_event_detail(db_engine, event.id)
        assert detail.registered_count == 0
        assert detail.is_registered is None
        assert detail.is_bookmarked is None

    def test_viewer_flags(self, db_engine, org, music, make_event, make_user):
        event = make_event(org.id, music.id)
        _, bob = make_user("bob")
        bookmark_service.add_bookmark(db_engine, bob.id, event.id)

        detail = event_service.get_event_detail(db_engine, event.id, bob.id)
        assert detail.is_registered is False
        assert detail.is_bookmarked is True

    def test_missing_event(self, db_engine):
        with pytest.raises(NotFound, match="Event not found"):
            event_service.get_event_detail(db_engine, 404)
