"""Document browsing routes."""

import logging
from pathlib import Path
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from specviewer.api.deps import get_config
from specviewer.config import ServerConfig
from specviewer.docs import (
    DocNode,
    DocumentNotFound,
    InvalidDocumentPath,
    RenderedDocument,
    build_tree,
    load_document,
    mark_active,
    render_markdown,
)

logger = logging.getLogger(__name__)

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def sidebar_tree(folder: Path, active_path: str = "") -> list[DocNode]:
    """Build the sidebar tree, logging instead of failing on errors."""
    try:
        nodes = build_tree(folder)
    except OSError as e:
        logger.error(f"Error fetching specs: {e}")
        return []
    mark_active(nodes, active_path)
    return nodes


def _render_requested(folder: Path, file: str | None) -> tuple[str, RenderedDocument] | None:
    """Load and render ``file``; None means the caller should redirect home."""
    try:
        path, text = load_document(folder, file)
    except InvalidDocumentPath as e:
        logger.info(f"{e} - redirecting to home")
        return None
    except DocumentNotFound:
        logger.info(f"File not found: {file} - redirecting to home")
        return None
    except OSError as e:
        logger.error(f"Failed to read file {file}: {e}")
        raise HTTPException(status_code=500, detail="Failed to read file") from e

    return path, render_markdown(text)


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    config: Annotated[ServerConfig, Depends(get_config)],
) -> Response:
    """Landing page with the document tree."""
    return templates.TemplateResponse(
        request,
        "home.html",
        {"title": "Home", "specs": sidebar_tree(config.folder), "folder": config.folder},
    )


@router.get("/view", response_class=HTMLResponse)
async def view_document(
    request: Request,
    config: Annotated[ServerConfig, Depends(get_config)],
    file: str | None = Query(default=None, description="Document path relative to the folder"),
) -> Response:
    """Full page for one document."""
    result = _render_requested(config.folder, file)
    if result is None:
        return RedirectResponse("/", status_code=303)

    path, rendered = result
    return templates.TemplateResponse(
        request,
        "viewer.html",
        {
            "title": path,
            "path": path,
            "content": rendered.html,
            "toc": rendered.toc,
            "specs": sidebar_tree(config.folder, path),
        },
    )


@router.get("/api/view", response_class=HTMLResponse)
async def view_content(
    config: Annotated[ServerConfig, Depends(get_config)],
    file: str | None = Query(default=None, description="Document path relative to the folder"),
) -> Response:
    """Rendered document fragment, fetched by the reload script."""
    result = _render_requested(config.folder, file)
    if result is None:
        return RedirectResponse("/", status_code=303)

    _path, rendered = result
    return HTMLResponse(rendered.html)


def not_found_page(request: Request) -> Response:
    """HTML 404 page."""
    config: ServerConfig = request.app.state.config
    return templates.TemplateResponse(
        request,
        "404.html",
        {"title": "Not Found", "specs": sidebar_tree(config.folder)},
        status_code=404,
    )
