"""Live reload: directory watching and reload broadcasting.

- FileWatcher turns filesystem notifications into ChangeEvents
- ReloadCoordinator forwards each change to the connection registry
"""

from specviewer.reload.coordinator import ReloadCoordinator
from specviewer.reload.watcher import FileWatcher, WatcherError

__all__ = ["FileWatcher", "ReloadCoordinator", "WatcherError"]
