"""FastAPI dependencies."""

from fastapi import Request

from specviewer.config import ServerConfig


async def get_config(request: Request) -> ServerConfig:
    """Get the server config from app state."""
    return request.app.state.config
