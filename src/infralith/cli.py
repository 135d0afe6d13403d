"""Typer CLI interface for Infralith Core."""

import asyncio
import os
import signal
import sys
from typing import Optional

import httpx
import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel

app = typer.Typer(
    name="infralith",
    help="Infralith Core - agent swarm and render job orchestration",
    add_completion=False,
)
console = Console()


async def check_service_running(port: int) -> bool:
    """Check if service is already running on port."""
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(f"http://localhost:{port}/health", timeout=2.0)
            return resp.status_code == 200
    except httpx.HTTPError:
        return False


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, "--port", help="HTTP port (default: PORT setting)"),
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST setting)"),
    max_concurrency: Optional[int] = typer.Option(
        None, "--max-concurrency", help="Pipelines allowed to execute at once"
    ),
    delay_scale: Optional[float] = typer.Option(
        None, "--delay-scale", help="Multiplier for simulated step delays (0 = no waiting)"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    reload: bool = typer.Option(
        False, "--reload", help="Enable auto-reload (dev mode)"
    ),
):
    """Start the Infralith Core API."""
    if max_concurrency is not None and max_concurrency < 1:
        console.print("[red]Error:[/red] --max-concurrency must be at least 1")
        raise typer.Exit(1)

    if delay_scale is not None and delay_scale < 0:
        console.print("[red]Error:[/red] --delay-scale cannot be negative")
        raise typer.Exit(1)

    # Set environment variables BEFORE importing settings to ensure they're picked up
    os.environ["DEBUG"] = "true" if debug else "false"
    if max_concurrency is not None:
        os.environ["MAX_CONCURRENCY"] = str(max_concurrency)
    if delay_scale is not None:
        os.environ["STEP_DELAY_SCALE"] = str(delay_scale)

    from .config import Settings

    effective = Settings()
    if host is None:
        host = effective.HOST
    if port is None:
        port = effective.PORT

    # Check if already running
    if asyncio.run(check_service_running(port)):
        console.print(f"[red]Error:[/red] Service already running on port {port}")
        raise typer.Exit(1)

    # Setup signal handlers for graceful shutdown
    def signal_handler(sig, frame):
        console.print("\n[yellow]Shutting down gracefully...[/yellow]")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    console.print(
        Panel.fit(
            f"[bold]{effective.PROJECT_NAME}[/bold]\n\n"
            f"📡 API: http://{host}:{port}\n"
            f"🤖 Agent swarm: POST /api/agent\n"
            f"🎬 Video forge: POST /api/video\n"
            f"⚙️  Max concurrency: {effective.MAX_CONCURRENCY}\n"
            f"⏱️  Delay scale: {effective.STEP_DELAY_SCALE}\n"
            f"🔍 Debug: {'enabled' if debug else 'disabled'}",
            border_style="green",
        )
    )

    uvicorn.run(
        "infralith.main:app",
        host=host,
        port=port,
        log_level="debug" if debug else "info",
        reload=reload,
        access_log=debug,
    )


@app.command()
def version():
    """Print the installed version."""
    from . import __version__

    console.print(f"infralith {__version__}")


if __name__ == "__main__":
    app()
