"""
HTTP API for DisasterLens.

FastAPI application factory and route modules for alerts, reports,
analysis endpoints and the realtime event stream.
"""

from .app import create_app, build_store

__all__ = ["create_app", "build_store"]
