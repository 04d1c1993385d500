"""Spec Viewer CLI entry point."""

import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.tree import Tree

from specviewer import __version__
from specviewer.config import DEFAULT_FOLDER, DEFAULT_HOST, DEFAULT_PORT, ServerConfig

console = Console()

BANNER = r"""
  ___ ___  ___  ___   __   ___ _____      _____ ___
 / __| _ \/ _ \/ __|  \ \ / / | __\ \    / / __| _ \
 \__ \  _/  __/ (__    \ V /| | _| \ \/\/ /| _||   /
 |___/_|  \___|\___|    \_/ |_|___| \_/\_/ |___|_|_\
"""


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=console)],
    )
    # inotify internals are chatty at DEBUG
    logging.getLogger("watchdog").setLevel(logging.INFO)


def print_banner(config: ServerConfig) -> None:
    """Print the startup banner."""
    console.print(f"[magenta]{BANNER}[/magenta]")
    body = (
        "[green]●  Server Running[/green]\n\n"
        f"[bold]➜  Local:[/bold]   [magenta]{config.url}[/magenta]\n"
        f"[bold]➜  Folder:[/bold]  [dim]{config.folder}[/dim]\n\n"
        "[dim]Press Ctrl+C to stop[/dim]"
    )
    console.print(Panel(body, border_style="blue", width=60))


def check_folder(folder: Path) -> None:
    """Exit with an error unless ``folder`` is an existing directory."""
    if not folder.exists():
        console.print(f"[red]✗[/red] Folder does not exist: {folder}")
        raise SystemExit(1)
    if not folder.is_dir():
        console.print(f"[red]✗[/red] Not a directory: {folder}")
        raise SystemExit(1)


folder_option = click.option(
    "-f",
    "--folder",
    default=str(DEFAULT_FOLDER),
    envvar="SPECVIEWER_FOLDER",
    show_default=True,
    type=click.Path(path_type=Path),
    help="Folder to watch for specs",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
@click.version_option(__version__, prog_name="specviewer")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Spec Viewer - serve your markdown specs as a live-reloading website."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose)


@cli.command()
@folder_option
@click.option("--host", default=DEFAULT_HOST, envvar="SPECVIEWER_HOST", help="Host to bind to")
@click.option(
    "-p", "--port", default=DEFAULT_PORT, envvar="SPECVIEWER_PORT", type=int, help="Port to run the server on"
)
@click.option("--no-watch", is_flag=True, help="Serve without live reload")
def serve(folder: Path, host: str, port: int, no_watch: bool) -> None:
    """Start the spec viewer server and file watcher."""
    import uvicorn

    from specviewer.api.app import create_app

    check_folder(folder)
    config = ServerConfig(folder=folder, host=host, port=port, watch=not no_watch)

    print_banner(config)

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        timeout_graceful_shutdown=int(config.shutdown_grace),
        log_config=None,
    )

    console.print("[green]✔[/green] Server stopped")


@cli.command()
@folder_option
def tree(folder: Path) -> None:
    """Print the document tree that the sidebar would show."""
    from specviewer.docs import DocNode, build_tree

    check_folder(folder)
    nodes = build_tree(folder)

    def add(branch: Tree, children: list[DocNode]) -> None:
        for node in children:
            if node.is_dir:
                add(branch.add(f"[bold blue]{node.name}/[/bold blue]"), node.children)
            else:
                branch.add(node.name)

    root = Tree(f"[bold]{folder}[/bold]")
    add(root, nodes)
    console.print(root)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
