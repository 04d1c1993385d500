"""Pytest configuration and fixtures."""

import asyncio
import threading
from pathlib import Path

import pytest
from watchdog.events import FileSystemEventHandler


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio as the async backend."""
    return "asyncio"


class FakeSession:
    """In-memory stand-in for a WebSocket connection."""

    def __init__(self, name: str = "session", fail_on_send: bool = False):
        self.name = name
        self.sent: list[str] = []
        self.closed = False
        self.close_calls = 0
        self.fail_on_send = fail_on_send

    async def send_text(self, data: str) -> None:
        if self.closed or self.fail_on_send:
            raise RuntimeError(f"{self.name} is closed")
        self.sent.append(data)

    async def close(self) -> None:
        self.close_calls += 1
        if self.closed:
            raise RuntimeError(f"{self.name} already closed")
        self.closed = True

    def __repr__(self) -> str:
        return f"FakeSession({self.name!r})"


class FakeObserver:
    """Records scheduled directories and lets tests inject raw events."""

    def __init__(self) -> None:
        self.scheduled: list[str] = []
        self.handler: FileSystemEventHandler | None = None
        self.fail_paths: set[str] = set()
        self.started = False
        self.stopped = False
        self.unscheduled = False
        self._alive = threading.Event()

    def schedule(self, handler: FileSystemEventHandler, path: str, recursive: bool = False) -> None:
        assert recursive is True
        if path in self.fail_paths:
            raise OSError(28, "inotify watch limit reached", path)
        self.handler = handler
        self.scheduled.append(path)

    def unschedule_all(self) -> None:
        self.unscheduled = True

    def start(self) -> None:
        self.started = True
        self._alive.set()

    def stop(self) -> None:
        self.stopped = True
        self._alive.clear()

    def join(self, timeout: float | None = None) -> None:
        return None

    def is_alive(self) -> bool:
        return self._alive.is_set()

    def emit(self, event) -> None:
        assert self.handler is not None
        self.handler.dispatch(event)


@pytest.fixture
def fake_observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def specs_dir(tmp_path: Path) -> Path:
    """A small folder of specs."""
    root = tmp_path / "specs"
    root.mkdir()
    (root / "a.md").write_text("# A\n\nFirst spec")
    (root / "guides").mkdir()
    (root / "guides" / "setup.md").write_text("# Setup\n\n## Install\n\nSteps")
    return root.resolve()


@pytest.fixture
def make_session():
    """Factory for fake sessions."""
    return FakeSession


async def _wait_until(predicate, timeout: float = 2.0, interval: float = 0.01) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError(f"condition not met within {timeout}s")
        await asyncio.sleep(interval)


@pytest.fixture
def wait_until():
    """Poll an async-friendly condition with a deadline."""
    return _wait_until
