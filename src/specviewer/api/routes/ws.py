"""WebSocket endpoint for live reload."""

import logging

from fastapi import APIRouter, WebSocket

from specviewer.events import ConnectionRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Live-reload channel.

    The server only ever sends the text message ``"reload"``. Anything the
    client sends is ignored; the socket is read solely to answer control
    frames and notice when the tab goes away.
    """
    registry: ConnectionRegistry = websocket.app.state.registry

    await websocket.accept()
    await registry.add(websocket)

    try:
        await _receive_until_closed(websocket)
    finally:
        await registry.remove(websocket)


async def _receive_until_closed(websocket: WebSocket) -> None:
    """Block on incoming frames until the peer disconnects."""
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                return
    except Exception as e:
        logger.error(f"Receive error from {websocket.client}: {e}")
        raise
