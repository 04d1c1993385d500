"""API route modules."""

from specviewer.api.routes import pages, ws

__all__ = ["pages", "ws"]
