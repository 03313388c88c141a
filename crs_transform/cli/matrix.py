"""Axis swap matrix command."""

from typing import List

import typer

from crs_transform import units
from crs_transform.cli.main import app
from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.exceptions import ReferencingError
from crs_transform.operation.matrix import swap_and_scale_axes


def _parse_axes(text: str) -> List[CoordinateSystemAxis]:
    """Parse "east,north" or "east:degree,north:degree" into axes (metres by default)."""
    axes = []
    for token in text.split(","):
        direction_name, _, unit_name = token.strip().partition(":")
        direction = AxisDirection.parse(direction_name)
        unit = units.unit_for_name(unit_name) if unit_name else units.METRE
        axes.append(CoordinateSystemAxis(direction.value, direction.value[:1], direction, unit))
    return axes


@app.command("axis-swap")
def axis_swap_command(
    source: str = typer.Option(..., "--source", "-s", help="Source axes, e.g. 'north,east' or 'east:degree'"),
    target: str = typer.Option(..., "--target", "-t", help="Target axes, e.g. 'east,north'"),
    allow_reduction: bool = typer.Option(
        False,
        "--allow-reduction",
        help="Allow dropping source axes that have no target counterpart",
    ),
) -> None:
    """
    Print the matrix converting coordinates between two axis orders.

    Example:
        crs axis-swap --source north,east,up --target west,up,south
        crs axis-swap --source east:metre --target east:millimetre
    """
    try:
        matrix = swap_and_scale_axes(_parse_axes(source), _parse_axes(target), allow_reduction)
    except (ReferencingError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for row in matrix.to_list():
        typer.echo("[" + "  ".join(f"{v:10.6g}" for v in row) + "]")
