"""
Subgate API package.

Provides the FastAPI application that hosts the billing gateway.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
