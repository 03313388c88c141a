"""Map projection listing command."""

from typing import Optional

import typer

from crs_transform.cli.main import app
from crs_transform.exceptions import InvalidArgumentError
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.operation.projection import ProjectionKind


@app.command("projections")
def projections_command(
    method: Optional[str] = typer.Argument(None, help="Only show this method (OGC, EPSG or GeoTIFF name)"),
) -> None:
    """
    List the supported map projections and their parameters.

    Example:
        crs projections
        crs projections "Lambert Conic Conformal (2SP)"
    """
    factory = MathTransformFactory()
    if method is None:
        methods = factory.available_methods()
    else:
        try:
            methods = [factory.get_default_parameters(method).method]
        except InvalidArgumentError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)

    lines = []
    for name in methods:
        aliases = ProjectionKind.parse(name).aliases
        lines.append(name)
        if aliases:
            lines.append(f"  Aliases: {', '.join(aliases)}")
        group = factory.get_default_parameters(name)
        for descriptor in group.descriptors:
            default = "required" if descriptor.required else f"{descriptor.default:g}"
            unit = f" {descriptor.unit}" if descriptor.unit is not None else ""
            lines.append(f"  {descriptor.name:<22} {default}{unit}")
        lines.append("")

    typer.echo("\n".join(lines).rstrip())
