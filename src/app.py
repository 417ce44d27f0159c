"""Storefront backend FastAPI application.

Serves the accounts, sessions and orders API that the storefront's HTTP
gateway talks to.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at import time; PROTEAN_ENV selects the config overlay.
from backend.api.application import create_app
from backend.domain import backend
from storefront.utils.logging import configure_logging

configure_logging()
backend.init()

app = create_app(backend)
