"""
HTTP API for the storefront engine.

This package provides a single FastAPI application exposing the live cart,
sign-in/sign-out, checkout and storage diagnostics.
"""

from api.main import app

__all__ = ["app"]
