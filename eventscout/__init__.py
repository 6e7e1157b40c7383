"""
EventScout — Event Discovery REST Backend
==========================================
Users register and sign in, browse and publish events, find what is
happening near them, bookmark events, and register for (or cancel)
attendance.  Categories organise the catalogue.

Package layout::

    eventscout/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Earth radius, paging defaults, seed catalogue
    ├── errors.py          # Domain error taxonomy (→ HTTP status)
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   ├── models.py      # ORM models (users, events, categories, …)
    │   └── seed.py        # Default category seeder
    ├── engine/
    │   ├── geo.py         # Haversine distance, nearby filter, SQL expression
    │   └── admission.py   # Registration capacity decision
    ├── services/
    │   ├── auth_service.py          # bcrypt + JWT issue/verify
    │   ├── user_service.py          # Profile, password, account deletion
    │   ├── category_service.py      # Category CRUD
    │   ├── event_service.py         # Event CRUD, listing, nearby, date range
    │   ├── registration_service.py  # Attendance admission / cancellation
    │   └── bookmark_service.py      # Bookmarks
    └── api/
        ├── main.py        # FastAPI app + error handlers
        ├── deps.py        # Engine/config/identity dependencies
        ├── auth.py        # /auth register, login, validate
        ├── schemas.py     # Request bodies + response shaping
        └── routes/        # events, categories, users, bookmarks
"""

__version__ = "0.1.0"
