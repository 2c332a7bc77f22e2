"""HTTP API layer -- FastAPI application and JSON routes."""

from marketfeed.api.app import create_app

__all__ = ["create_app"]
