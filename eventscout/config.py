"""
eventscout.config — YAML Configuration Loader
==============================================

Reads ``config.yaml`` for **infrastructure** settings (token lifetime,
hashing cost, paging defaults).  Secrets and connection strings
(``JWT_SECRET``, ``DATABASE_URL``) stay in the environment / ``.env``.

The loaded object is immutable and handed to every component that needs
it; business logic never reaches for ``os.environ`` itself.

Usage::

    from eventscout.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.token_ttl_hours)   # 24
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from eventscout.constants import (
    DEFAULT_NEARBY_RADIUS_KM,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class EventScoutConfig:
    """Immutable configuration loaded from ``config.yaml``."""

    # Identity
    app_name: str = "EventScout"

    # HTTP
    api_port: int = 8000

    # Auth
    token_ttl_hours: int = 24
    bcrypt_rounds: int = 10

    # Queries
    nearby_default_radius_km: float = DEFAULT_NEARBY_RADIUS_KM
    page_size_default: int = DEFAULT_PAGE_SIZE
    page_size_max: int = MAX_PAGE_SIZE

    def clamp_limit(self, limit: int | None) -> int:
        """Return *limit* bounded to ``[1, page_size_max]`` (default when unset)."""
        if not limit or limit < 1:
            return self.page_size_default
        return min(limit, self.page_size_max)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> EventScoutConfig:
    """Read *path* and return an :class:`EventScoutConfig` instance.

    Keys missing from the file fall back to the dataclass defaults.

    Raises
    ------
    FileNotFoundError
        If the YAML file doesn't exist.
    ValueError
        If a numeric setting is out of range.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path.resolve()}\n"
            "Hint: copy config.yaml.example → config.yaml and edit it."
        )

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    defaults = EventScoutConfig()
    cfg = EventScoutConfig(
        app_name=str(raw.get("app_name", defaults.app_name)),
        api_port=int(raw.get("api_port", defaults.api_port)),
        token_ttl_hours=int(raw.get("token_ttl_hours", defaults.token_ttl_hours)),
        bcrypt_rounds=int(raw.get("bcrypt_rounds", defaults.bcrypt_rounds)),
        nearby_default_radius_km=float(
            raw.get("nearby_default_radius_km", defaults.nearby_default_radius_km)
        ),
        page_size_default=int(raw.get("page_size_default", defaults.page_size_default)),
        page_size_max=int(raw.get("page_size_max", defaults.page_size_max)),
    )

    if cfg.token_ttl_hours <= 0:
        raise ValueError("token_ttl_hours must be positive")
    if not 4 <= cfg.bcrypt_rounds <= 31:
        raise ValueError("bcrypt_rounds must be between 4 and 31")
    if cfg.page_size_default > cfg.page_size_max:
        raise ValueError("page_size_default cannot exceed page_size_max")
    return cfg
