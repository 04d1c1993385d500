"""Reload events and the client connection hub."""

from specviewer.events.registry import ConnectionRegistry, Session
from specviewer.events.types import RELOAD_MESSAGE, ChangeEvent, ChangeKind

__all__ = ["RELOAD_MESSAGE", "ChangeEvent", "ChangeKind", "ConnectionRegistry", "Session"]
