"""Document tree for the sidebar."""

from pathlib import Path

from pydantic import BaseModel, Field

MARKDOWN_SUFFIX = ".md"


class DocNode(BaseModel):
    """A markdown file or a directory in the document tree."""

    name: str
    path: str  # POSIX path relative to the root
    is_dir: bool = False
    children: list["DocNode"] = Field(default_factory=list)
    active: bool = False
    open: bool = False


def _is_hidden(entry: Path) -> bool:
    return entry.name.startswith(".")


def build_tree(root: str | Path) -> list[DocNode]:
    """List subdirectories and markdown files under ``root``.

    Hidden (dot-prefixed) entries are skipped. Directories are always
    listed, even when they hold no markdown. Directories sort before
    files, then by name.

    Raises:
        FileNotFoundError: If ``root`` does not exist.
        NotADirectoryError: If ``root`` is not a directory.
    """
    root = Path(root)
    if not root.exists():
        raise FileNotFoundError(f"No such directory: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    return _scan(root, root)


def _scan(root: Path, directory: Path) -> list[DocNode]:
    dirs: list[DocNode] = []
    files: list[DocNode] = []

    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if _is_hidden(entry):
            continue
        rel = entry.relative_to(root).as_posix()
        if entry.is_symlink() and entry.is_dir():
            # Not followed; a link back up the tree would recurse forever.
            continue
        if entry.is_dir():
            dirs.append(DocNode(name=entry.name, path=rel, is_dir=True, children=_scan(root, entry)))
        elif entry.suffix == MARKDOWN_SUFFIX:
            files.append(DocNode(name=entry.name, path=rel))

    return dirs + files


def mark_active(nodes: list[DocNode], active_path: str) -> bool:
    """Flag the file at ``active_path`` and open its ancestor directories.

    Returns:
        True if a matching file was found.
    """
    if not active_path:
        return False

    for node in nodes:
        if node.is_dir:
            if mark_active(node.children, active_path):
                node.open = True
                return True
        elif node.path == active_path:
            node.active = True
            return True
    return False
