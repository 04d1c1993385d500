"""Spec Viewer - live-reloading browser for a folder of markdown specs."""

__version__ = "0.1.0"
