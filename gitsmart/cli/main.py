"""gitsmart command line interface."""

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from gitsmart import __version__
from gitsmart.core.config import settings
from gitsmart.core.git import GitProcessBridge
from gitsmart.core.routing import build_routes, namespace_for

app = typer.Typer(
    name="gitsmart",
    help="Serve git repositories over the smart HTTP protocol",
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
    pretty_exceptions_enable=False,
)

console = Console()


@app.command()
def serve(
    repository: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        resolve_path=True,
        help="Repository to serve, bare or non-bare",
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", "-p", help="Namespace the repository is served under"
    ),
    host: str = typer.Option(settings.api_host, "--host", help="Address to bind"),
    port: int = typer.Option(settings.api_port, "--port", help="Port to bind"),
    git_binary: str = typer.Option(
        settings.git_binary_path, "--git", help="git executable to invoke"
    ),
    timeout: Optional[float] = typer.Option(
        settings.git_timeout_seconds,
        "--timeout",
        help="Kill git children running longer than this many seconds",
    ),
):
    """Serve a single repository."""
    from gitsmart.main import create_app

    bridge = GitProcessBridge(git_binary=git_binary, timeout=timeout)
    application = create_app({prefix: repository}, bridge=bridge)

    console.print(
        f"[green]Serving[/green] {repository} at "
        f"http://{host}:{port}{namespace_for(prefix) or '/'}"
    )
    uvicorn.run(application, host=host, port=port, log_level=settings.log_level.lower())


@app.command()
def routes(
    prefix: Optional[str] = typer.Option(
        None, "--prefix", "-p", help="Namespace the repository is served under"
    ),
):
    """Show the endpoints a repository would be served on."""
    route_set = build_routes(prefix)

    table = Table(title="Smart HTTP routes")
    table.add_column("Method", style="cyan")
    table.add_column("Path")
    table.add_column("Purpose", style="dim")
    table.add_row("GET", f"{route_set.info_refs}?service=...", "ref advertisement")
    table.add_row("POST", route_set.upload_pack, "fetch / clone")
    table.add_row("POST", route_set.receive_pack, "push")
    console.print(table)


@app.command()
def version():
    """Show version and exit."""
    console.print(f"gitsmart v{__version__}")


if __name__ == "__main__":
    app()
