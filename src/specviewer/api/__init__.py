"""HTTP and WebSocket surface."""

from specviewer.api.app import create_app

__all__ = ["create_app"]
