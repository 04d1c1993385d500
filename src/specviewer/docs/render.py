"""Markdown loading and rendering."""

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.tasklists import tasklists_plugin


class InvalidDocumentPath(ValueError):
    """The requested document path is empty or escapes the root."""


class DocumentNotFound(FileNotFoundError):
    """The requested document does not exist."""


@dataclass
class TocEntry:
    """A heading in the table of contents."""

    level: int
    text: str
    id: str


@dataclass
class RenderedDocument:
    """Rendered HTML plus the headings found while rendering."""

    html: str
    toc: list[TocEntry] = field(default_factory=list)


# Raw HTML in a document is escaped, never passed through.
_md = (
    MarkdownIt("commonmark", {"html": False, "linkify": True})
    .enable(["table", "strikethrough", "linkify"])
    .use(tasklists_plugin)
)

_SLUG_STRIP = re.compile(r"[^\w\- ]")


def clean_document_path(requested: str | None) -> str:
    """Normalize a user-supplied relative document path.

    Raises:
        InvalidDocumentPath: For empty, absolute, or ``..`` paths.
    """
    if not requested:
        raise InvalidDocumentPath("File not specified")

    path = PurePosixPath(requested.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise InvalidDocumentPath(f"Invalid file path: {requested}")

    cleaned = path.as_posix()
    if cleaned in ("", "."):
        raise InvalidDocumentPath("File not specified")
    return cleaned


def load_document(root: str | Path, requested: str | None) -> tuple[str, str]:
    """Read a document below ``root``.

    Returns:
        Tuple of (cleaned relative path, file text).

    Raises:
        InvalidDocumentPath: If the path is rejected.
        DocumentNotFound: If no such file exists.
        OSError: For any other read failure.
    """
    cleaned = clean_document_path(requested)
    full_path = Path(root) / cleaned
    try:
        text = full_path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError as e:
        raise DocumentNotFound(f"File not found: {cleaned}") from e
    return cleaned, text


def slugify(text: str) -> str:
    """Turn heading text into an anchor id (``"Hello World!"`` -> ``"hello-world"``)."""
    slug = _SLUG_STRIP.sub("", text.strip().lower())
    slug = re.sub(r"\s+", "-", slug)
    return slug or "heading"


def _heading_text(inline: Token) -> str:
    parts = [
        child.content
        for child in inline.children or []
        if child.type in ("text", "code_inline")
    ]
    return "".join(parts)


def render_markdown(source: str) -> RenderedDocument:
    """Render markdown to HTML, giving every heading an id."""
    tokens = _md.parse(source)
    toc: list[TocEntry] = []
    seen: dict[str, int] = {}

    for i, token in enumerate(tokens):
        if token.type != "heading_open":
            continue

        text = _heading_text(tokens[i + 1])
        slug = slugify(text)
        if slug in seen:
            seen[slug] += 1
            slug = f"{slug}-{seen[slug]}"
        else:
            seen[slug] = 0

        token.attrSet("id", slug)
        toc.append(TocEntry(level=int(token.tag[1:]), text=text, id=slug))

    html = _md.renderer.render(tokens, _md.options, {})
    return RenderedDocument(html=html, toc=toc)
