"""Recursive directory watching for live reload.

The root is scheduled once, recursively, so a single inotify instance
holds the watch for every directory beneath it and picks up directories
created later. The watch set records every directory found by the
initial walk or announced by a creation event; it only ever grows.

Notifications arrive on the observer's thread and are handed to the
event loop through an asyncio queue; all bookkeeping happens on the loop.
"""

import asyncio
import logging
import os
import stat
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from specviewer.events.types import ChangeEvent, ChangeKind

logger = logging.getLogger(__name__)

# Moves are reported as a creation at the destination.
_KINDS: dict[str, ChangeKind] = {
    EVENT_TYPE_CREATED: ChangeKind.CREATED,
    EVENT_TYPE_MODIFIED: ChangeKind.MODIFIED,
    EVENT_TYPE_DELETED: ChangeKind.REMOVED,
    EVENT_TYPE_MOVED: ChangeKind.CREATED,
}

_CLOSED = object()


class WatcherError(Exception):
    """Raised when the watcher cannot be started."""


class _LoopForwarder(FileSystemEventHandler):
    """Hands raw watchdog events from the observer thread to the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        self._loop = loop
        self._queue = queue

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop already closed during shutdown.
            logger.debug(f"Dropped event after loop shutdown: {event!r}")


class FileWatcher:
    """Watches a directory tree and yields a ChangeEvent per notification.

    Usage:
        async with FileWatcher(root) as watcher:
            async for event in watcher:
                ...

    No debouncing is done: N low-level writes produce N events.
    Watcher-internal errors go to ``errors`` and never end iteration;
    only ``close()`` does.
    """

    def __init__(
        self,
        root: str | Path,
        observer_factory: Callable[[], BaseObserver] = Observer,
        join_timeout: float = 2.0,
    ):
        self.root = Path(root)
        self.errors: asyncio.Queue[Exception] = asyncio.Queue()
        self._observer = observer_factory()
        self._join_timeout = join_timeout
        self._queue: asyncio.Queue = asyncio.Queue()
        self._handler: _LoopForwarder | None = None
        self._watch_set: set[Path] = set()
        self._started = False
        self._closed = False

    @property
    def watch_set(self) -> frozenset[Path]:
        """Directories currently covered by the recursive watch."""
        return frozenset(self._watch_set)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Walk the root, schedule it recursively and start the observer.

        Must be called from a running event loop. On failure every emitter
        the observer managed to start is stopped before raising.

        Raises:
            WatcherError: If the root cannot be walked or watched.
        """
        if self._started:
            return
        self._handler = _LoopForwarder(asyncio.get_running_loop(), self._queue)

        try:
            directories = self._walk_directories()
            self._observer.schedule(self._handler, str(self.root), recursive=True)
            self._observer.start()
        except OSError as e:
            self._release_observer()
            raise WatcherError(f"Failed to watch {self.root}: {e}") from e

        self._watch_set.update(directories)
        self._started = True
        logger.info(f"Watching {len(self._watch_set)} directories under {self.root}")

    def _walk_directories(self) -> list[Path]:
        if not self.root.is_dir():
            raise NotADirectoryError(f"Not a directory: {self.root}")

        def _raise(err: OSError) -> None:
            raise err

        return [Path(dirpath) for dirpath, _dirs, _files in os.walk(self.root, onerror=_raise)]

    def _release_observer(self) -> bool:
        """Stop every emitter, started or not; returns whether the observer thread ran."""
        was_alive = self._observer.is_alive()
        self._observer.unschedule_all()
        self._observer.stop()
        return was_alive

    def _watch_if_directory(self, path: Path) -> None:
        try:
            is_dir = stat.S_ISDIR(path.stat().st_mode)
        except OSError as e:
            # Gone before we could look at it.
            logger.debug(f"Could not stat {path}: {e}")
            return
        if not is_dir or path in self._watch_set:
            return

        # inotify refuses directories it cannot read and watchdog skips them silently.
        if not os.access(path, os.R_OK | os.X_OK):
            self.errors.put_nowait(WatcherError(f"Failed to watch {path}: permission denied"))
            return

        logger.info(f"Watching new directory {path}")
        self._watch_set.add(path)

    def _translate(self, raw: FileSystemEvent) -> ChangeEvent | None:
        kind = _KINDS.get(raw.event_type)
        if kind is None:
            return None

        if raw.event_type == EVENT_TYPE_MOVED:
            path = Path(os.fsdecode(raw.dest_path))
        else:
            path = Path(os.fsdecode(raw.src_path))

        if kind is ChangeKind.CREATED:
            self._watch_if_directory(path)

        # watchdog touches the parent directory on every create/delete.
        if raw.is_directory and raw.event_type == EVENT_TYPE_MODIFIED:
            return None

        return ChangeEvent(path=path, kind=kind)

    def __aiter__(self) -> AsyncGenerator[ChangeEvent, None]:
        return self._changes()

    async def _changes(self) -> AsyncGenerator[ChangeEvent, None]:
        while not self._closed:
            raw = await self._queue.get()
            if raw is _CLOSED:
                return
            event = self._translate(raw)
            if event is not None:
                yield event

    async def close(self) -> None:
        """Stop the observer and end iteration. Safe to call twice."""
        if self._closed:
            return
        self._closed = True

        if self._release_observer():
            await asyncio.to_thread(self._observer.join, self._join_timeout)

        self._queue.put_nowait(_CLOSED)
        logger.debug(f"Released {len(self._watch_set)} directory watches")

    async def __aenter__(self) -> "FileWatcher":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
