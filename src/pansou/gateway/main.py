from __future__ import annotations

import os

import typer
import uvicorn

from pansou import __version__

from .app import create_app
from .config import get_settings

cli = typer.Typer(help="Pansou gateway entrypoint")


@cli.command()
def serve(
    host: str = "0.0.0.0",
    port: int = typer.Option(int(os.getenv("PORT", "8888")), help="Port to listen on"),
) -> None:
    """Start the gateway using uvicorn."""

    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower(), lifespan="on")


@cli.command()
def version() -> None:
    typer.echo(__version__)


if __name__ == "__main__":
    cli()
