"""Document discovery and rendering."""

from specviewer.docs.render import (
    DocumentNotFound,
    InvalidDocumentPath,
    RenderedDocument,
    TocEntry,
    clean_document_path,
    load_document,
    render_markdown,
)
from specviewer.docs.tree import DocNode, build_tree, mark_active

__all__ = [
    "DocNode",
    "DocumentNotFound",
    "InvalidDocumentPath",
    "RenderedDocument",
    "TocEntry",
    "build_tree",
    "clean_document_path",
    "load_document",
    "mark_active",
    "render_markdown",
]
