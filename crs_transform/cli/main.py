"""Main Typer CLI application for CRS tools."""

import logging
from pathlib import Path
from typing import Optional

import typer

from crs_transform.config import ReferencingConfig, get_default_config

app = typer.Typer(
    help="Coordinate reference system tools: transform points and inspect operations",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with a 'referencing' section (defaults to the built-in catalog)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load the CRS catalog shared by all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if config is None:
        ctx.obj = get_default_config()
        return
    try:
        ctx.obj = ReferencingConfig.from_yaml(str(config))
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _register_commands() -> None:
    """
    Import command modules to register commands with the app.

    Commands use the @app.command() decorator, which registers them when
    the module is imported.
    """
    from crs_transform.cli import matrix, projections, transform

    # Avoid "imported but unused" warnings by explicitly using the module
    _ = matrix
    _ = projections
    _ = transform


_register_commands()


if __name__ == "__main__":
    app()
