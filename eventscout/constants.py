"""
eventscout.constants — Shared Constants
========================================

Single source of truth for numeric defaults and the seed catalogue.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Geodesy
# ---------------------------------------------------------------------------
EARTH_RADIUS_KM = 6371.0  # mean Earth radius

# ---------------------------------------------------------------------------
# Query defaults
# ---------------------------------------------------------------------------
DEFAULT_NEARBY_RADIUS_KM = 10.0
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# ---------------------------------------------------------------------------
# Registrations
# ---------------------------------------------------------------------------
REGISTRATION_CONFIRMED = "confirmed"

# ---------------------------------------------------------------------------
# Default categories: (name, description, icon)
# ---------------------------------------------------------------------------
DEFAULT_CATEGORIES: list[tuple[str, str, str]] = [
    ("Music", "Live concerts and music festivals", "music"),
    ("Technology", "Tech talks, hackathons, and conferences", "computer"),
    ("Food & Drink", "Food festivals, wine tasting, cooking classes", "fast-food"),
    ("Arts & Culture", "Museum exhibitions, theater, art galleries", "palette"),
    ("Sports & Fitness", "Marathons, yoga classes, sports games", "fitness"),
    ("Networking", "Business mixers and professional meetups", "business"),
    ("Workshops", "Educational workshops and skill-building sessions", "build"),
    ("Community", "Local gatherings, volunteer events", "people"),
    ("Film & Media", "Movie screenings, film festivals", "film"),
    ("Outdoors", "Hiking trips, park events", "leaf"),
    ("Gaming", "Esports tournaments, board game nights", "game-controller"),
    ("Charity & Causes", "Fundraising events, awareness campaigns", "heart"),
]
