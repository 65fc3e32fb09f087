"""Typer CLI for matchlab.

Commands
--------
- ``matchlab init``        -- interactive first-time setup
- ``matchlab start``       -- launch the FastAPI server
- ``matchlab status``      -- display current runtime / configuration status
- ``matchlab submissions`` -- list archived submissions
- ``matchlab export``      -- write the archive to an .xlsx workbook
- ``matchlab clear``       -- delete every archived submission
"""

from __future__ import annotations

import socket
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from matchlab.config import (
    DEFAULT_PORT,
    get_archive_backend,
    get_base_dir,
    get_port,
    get_sheets_url,
    is_admin_enabled,
    reload_env,
)
from matchlab.dependencies import build_archive
from matchlab.export import export_filename, export_xlsx
from matchlab.storage.filesystem import ensure_directories, get_data_dir, get_env_path

app = typer.Typer(
    name="matchlab",
    help="Questionnaire-driven ideal match specification",
    add_completion=False,
)
console = Console()

PROVIDERS = ("anthropic", "openai", "bedrock")

API_KEY_ENV_MAP: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "bedrock": "AWS_PROFILE",
}


def _is_port_in_use(port: int) -> bool:
    """Return True if *port* on localhost is currently accepting connections."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.settimeout(1)
        return sock.connect_ex(("127.0.0.1", port)) == 0


def write_env_file(
    path: Path,
    provider: str,
    api_key: str,
    gemini_key: str,
    port: int,
    admin_enabled: bool = False,
) -> None:
    """Write a minimal .env file for matchlab."""
    env_var = API_KEY_ENV_MAP[provider]
    lines = [
        "# matchlab configuration",
        f"MATCHLAB_MODEL_PROVIDER={provider}",
        f"{env_var}={api_key}",
        f"GEMINI_API_KEY={gemini_key}",
        f"MATCHLAB_PORT={port}",
        f"MATCHLAB_ADMIN_ENABLED={'true' if admin_enabled else 'false'}",
        "",
    ]
    path.write_text("\n".join(lines), encoding="utf-8")


def _ask_provider_key(provider: str) -> str:
    """Prompt for the credential the chosen text provider needs."""
    if provider == "bedrock":
        return Prompt.ask(
            "   AWS profile name for Bedrock",
            default="default",
        )
    label = "Anthropic" if provider == "anthropic" else "OpenAI"
    key = Prompt.ask(f"   {label} API key", password=True, default="")
    if not key:
        console.print("[red]A text model key is required. Aborting.[/red]")
        raise typer.Exit(code=1)
    return key


def _ask_port() -> int:
    raw = Prompt.ask("   Server port", default=str(DEFAULT_PORT))
    try:
        return int(raw)
    except ValueError:
        console.print(f"   [yellow]'{raw}' is not a port; using {DEFAULT_PORT}.[/yellow]")
        return DEFAULT_PORT


@app.command()
def init() -> None:
    """Create ~/.matchlab/ and write the initial .env."""

    console.print(
        Panel(
            "[bold cyan]matchlab[/bold cyan] setup",
            subtitle="Questionnaire-driven ideal match specification",
        )
    )

    ensure_directories()
    console.print(f"[green]✓[/green] Data directory ready at {get_data_dir()}\n")

    console.print("[bold]Text analysis[/bold]")
    provider = Prompt.ask("   Provider", choices=list(PROVIDERS), default="anthropic")
    api_key = _ask_provider_key(provider)

    console.print("\n[bold]Portraits[/bold] (optional)")
    gemini_key = Prompt.ask("   Gemini API key, Enter to skip", password=True, default="")

    console.print("\n[bold]Server[/bold]")
    port = _ask_port()
    admin_enabled = Confirm.ask(
        "   Enable the admin view? It lists every submission without a login",
        default=False,
    )

    env_path = get_env_path()
    write_env_file(env_path, provider, api_key, gemini_key, port, admin_enabled)
    reload_env()

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_row("Config", str(env_path))
    summary.add_row("Provider", provider)
    summary.add_row("Portraits", "on" if gemini_key else "[dim]off[/dim]")
    summary.add_row("Port", str(port))
    summary.add_row("Admin view", "[yellow]on[/yellow]" if admin_enabled else "off")
    console.print()
    console.print(Panel(summary, title="[green]Setup complete[/green]"))
    console.print("Run [bold]matchlab start[/bold] to launch the server.")


@app.command()
def start(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int | None = typer.Option(None, help="Override configured port"),
    reload: bool = typer.Option(False, help="Enable auto-reload (development)"),
) -> None:
    """Load configuration and start the matchlab server."""

    import uvicorn

    reload_env()

    effective_port = port if port is not None else get_port()

    env_path = get_env_path()
    if not env_path.exists():
        console.print(
            "[red]Configuration not found.[/red] Run [bold]matchlab init[/bold] first."
        )
        raise typer.Exit(code=1)

    console.print(
        Panel(
            f"Starting [bold cyan]matchlab[/bold cyan] server\n"
            f"  Address : http://{host}:{effective_port}\n"
            f"  Reload  : {'on' if reload else 'off'}",
            title="matchlab",
        )
    )

    uvicorn.run(
        "matchlab.server:app",
        host=host,
        port=effective_port,
        reload=reload,
    )


@app.command()
def status() -> None:
    """Show the current status of matchlab."""

    reload_env()

    base = get_base_dir()
    port = get_port()
    env_exists = get_env_path().exists()
    server_running = _is_port_in_use(port)
    record_count = len(build_archive().list())

    table = Table(title="matchlab status", show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Base directory", str(base))
    table.add_row(
        "Configuration",
        "[green]found[/green]" if env_exists else "[red]missing -- run matchlab init[/red]",
    )
    table.add_row(
        "Server",
        f"[green]running[/green] on port {port}"
        if server_running
        else f"[yellow]stopped[/yellow] (port {port})",
    )
    table.add_row("Archive", get_archive_backend())
    table.add_row("Spreadsheet sync", "[green]on[/green]" if get_sheets_url() else "off")
    table.add_row("Admin view", "[yellow]enabled[/yellow]" if is_admin_enabled() else "disabled")
    table.add_row("Archived records", str(record_count))

    console.print()
    console.print(table)
    console.print()


@app.command()
def submissions() -> None:
    """List archived submissions, oldest first."""

    reload_env()
    records = build_archive().list()
    if not records:
        console.print("[yellow]No submissions archived yet.[/yellow]")
        return

    table = Table(title="Submissions", show_header=True)
    table.add_column("#", style="dim")
    table.add_column("ID")
    table.add_column("Timestamp")
    table.add_column("Name")
    table.add_column("Goal")
    table.add_column("Archetype")
    table.add_column("Score")
    for idx, record in enumerate(records, 1):
        analysis = record.analysis
        table.add_row(
            str(idx),
            record.id[:12],
            record.timestamp,
            record.profile.name,
            record.relationship_goal.value,
            analysis.archetype_title if analysis else "[dim]pending[/dim]",
            f"{analysis.compatibility_score:g}" if analysis else "-",
        )
    console.print(table)


@app.command()
def export(
    output: Path | None = typer.Option(None, help="Workbook path (defaults to the data dir)"),
) -> None:
    """Export every archived submission to an .xlsx workbook."""

    reload_env()
    target = output or get_data_dir() / export_filename()
    try:
        count = export_xlsx(build_archive().list(), target)
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Exported {count} submission(s) to [bold]{target}[/bold]")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete every archived submission."""

    reload_env()
    if not yes and not Confirm.ask("Are you sure you want to delete all user data?", default=False):
        console.print("Aborted.")
        raise typer.Exit(code=1)
    build_archive().clear()
    console.print("[green]✓[/green] Archive cleared.")


if __name__ == "__main__":
    app()
