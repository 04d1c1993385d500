"""Loop that turns file changes into reload broadcasts."""

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from pathlib import Path

from specviewer.events import RELOAD_MESSAGE, ConnectionRegistry
from specviewer.reload.watcher import FileWatcher

logger = logging.getLogger(__name__)


class ReloadCoordinator:
    """Owns a FileWatcher and broadcasts a reload for every change it yields.

    The loop services three sources, whichever is ready first:
    - the stop event, which ends the loop and closes the watcher
    - a change event, which triggers ``registry.broadcast(RELOAD_MESSAGE)``
    - a watcher error, which is logged
    """

    def __init__(
        self,
        root: str | Path,
        registry: ConnectionRegistry,
        watcher: FileWatcher | None = None,
    ):
        self.root = Path(root)
        self.registry = registry
        self.watcher = watcher or FileWatcher(self.root)
        self.broadcasts = 0

        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start watching and spawn the coordinator loop.

        Raises:
            WatcherError: If the initial directory walk or watch setup fails.
        """
        if self.running:
            logger.warning("Reload coordinator already running")
            return

        self.watcher.start()
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run())
        logger.info(f"Live reload enabled for {self.root}")

    async def stop(self, timeout: float = 5.0) -> None:
        """Signal the loop to exit and wait for it within ``timeout`` seconds."""
        self._stop_event.set()
        if self._task is None:
            await self.watcher.close()
            return

        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout=timeout)
        except TimeoutError:
            logger.warning("Reload coordinator did not stop in time, cancelling")
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None

    async def run(self) -> None:
        """Consume watcher output until stopped."""
        changes = aiter(self.watcher)
        stop_wait = asyncio.create_task(self._stop_event.wait())
        next_change: asyncio.Future | None = None
        next_error: asyncio.Task | None = None

        try:
            while True:
                if next_change is None:
                    next_change = asyncio.ensure_future(anext(changes, None))
                if next_error is None:
                    next_error = asyncio.create_task(self.watcher.errors.get())

                done, _pending = await asyncio.wait(
                    [stop_wait, next_change, next_error],
                    return_when=asyncio.FIRST_COMPLETED,
                )

                if stop_wait in done:
                    break

                if next_error in done:
                    logger.error(f"Watcher error: {next_error.result()}")
                    next_error = None

                if next_change in done:
                    event = next_change.result()
                    next_change = None
                    if event is None:
                        logger.info("Watcher closed, stopping live reload")
                        break

                    logger.info(f"Reload {event.path} ({event.kind.value})")
                    delivered = await self.registry.broadcast(RELOAD_MESSAGE)
                    self.broadcasts += 1
                    lag = (datetime.now(UTC) - event.detected_at).total_seconds()
                    logger.debug(f"Reload sent to {delivered} clients {lag * 1000:.1f}ms after detection")
        finally:
            for task in (stop_wait, next_change, next_error):
                if task is not None and not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
            await changes.aclose()
            await self.watcher.close()
            logger.info("Live reload stopped")
