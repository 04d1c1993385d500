"""Connection registry for broadcasting reload messages to WebSocket clients."""

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Session(Protocol):
    """A bidirectional message channel to one browser tab.

    Starlette's ``WebSocket`` satisfies this protocol. The session object
    itself is its identity inside the registry.
    """

    async def send_text(self, data: str) -> None: ...

    async def close(self) -> None: ...


class ConnectionRegistry:
    """Set of live client sessions with lock-guarded add/remove/broadcast.

    A session is present if and only if it has been added and not yet
    removed. Every mutation, and every broadcast pass, holds the same lock,
    so membership is never observed mid-change. Sends happen under the lock
    too: a slow peer delays delivery to the others, which is fine for a
    handful of local tabs receiving a few bytes.
    """

    def __init__(self) -> None:
        self._sessions: set[Session] = set()
        self._lock = asyncio.Lock()

    async def add(self, session: Session) -> None:
        """Register a session as live."""
        async with self._lock:
            self._sessions.add(session)
            logger.info(f"Client connected (total clients: {len(self._sessions)})")

    async def remove(self, session: Session) -> None:
        """Unregister a session and close its channel.

        Removing a session that is absent (or already removed) is a no-op.
        """
        async with self._lock:
            if session not in self._sessions:
                return
            self._sessions.discard(session)
            await self._close(session)
            logger.info(f"Client disconnected (total clients: {len(self._sessions)})")

    async def broadcast(self, message: str) -> int:
        """Send a message to every live session.

        Sessions whose send fails are dropped and closed within the same
        pass. Failures are never raised to the caller.

        Returns:
            Number of sessions the message was delivered to.
        """
        delivered = 0
        async with self._lock:
            for session in list(self._sessions):
                try:
                    await session.send_text(message)
                    delivered += 1
                except Exception as e:
                    logger.error(f"Failed to write to websocket, removing client: {e}")
                    self._sessions.discard(session)
                    await self._close(session)
        return delivered

    async def close_all(self) -> None:
        """Remove and close every session."""
        async with self._lock:
            sessions = list(self._sessions)
            self._sessions.clear()
            for session in sessions:
                await self._close(session)
        if sessions:
            logger.info(f"Closed {len(sessions)} client connections")

    @staticmethod
    async def _close(session: Session) -> None:
        # Peer-initiated closes leave the channel already shut.
        try:
            await session.close()
        except Exception as e:
            logger.debug(f"Close on dead session failed: {e}")

    @property
    def count(self) -> int:
        """Get the number of live sessions."""
        return len(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session: object) -> bool:
        return session in self._sessions
