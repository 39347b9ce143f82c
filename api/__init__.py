"""
HTTP API for the order delivery service.

A single FastAPI application exposing business, driver, zip code and order
endpoints under /api.
"""

from api.main import app, create_app

__all__ = ["app", "create_app"]
