"""
eventscout.__main__ — Entry point for ``python -m eventscout``
===============================================================

Wiring:
1. Load .env (secrets, DATABASE_URL).
2. Load config.yaml (port and tuning).
3. Serve the FastAPI app with uvicorn.  The app's lifespan creates the
   engine and makes sure tables and default categories exist.

Run with::

    python -m eventscout
"""

from __future__ import annotations

import logging
import os

import uvicorn
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("eventscout")


def main() -> None:
    """Bootstrap and serve the EventScout API."""
    load_dotenv()

    from eventscout.api.deps import get_config

    cfg = get_config()
    host = os.getenv("API_HOST", "0.0.0.0")
    logger.info("Starting %s API on %s:%d", cfg.app_name, host, cfg.api_port)

    uvicorn.run(
        "eventscout.api.main:app",
        host=host,
        port=cfg.api_port,
        log_config=None,  # keep the basicConfig format above
    )


if __name__ == "__main__":
    main()
