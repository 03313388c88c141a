"""Point transformation and operation inspection commands."""

import json
from enum import Enum
from typing import List, Optional

import numpy as np
import typer

from crs_transform.cli.main import app
from crs_transform.config import ReferencingConfig
from crs_transform.crs.pyproj_adapter import from_pyproj
from crs_transform.crs.reference_system import CoordinateReferenceSystem
from crs_transform.exceptions import ReferencingError
from crs_transform.operation.coordinate_operation import CoordinateOperation, CoordinateOperationFactory
from crs_transform.operation.transform import ConcatenatedTransform


class OutputFormat(str, Enum):
    """Output format options."""

    HUMAN = "human"
    JSON = "json"


def resolve_crs(config: ReferencingConfig, name: str) -> CoordinateReferenceSystem:
    """Look ``name`` up in the catalog, then fall back to pyproj (e.g. "EPSG:3395").

    Raises:
        typer.Exit: If the CRS cannot be resolved.
    """
    if config.has_crs(name):
        return config.get_crs(name)
    try:
        return from_pyproj(name)
    except ImportError:
        typer.echo(
            f"Error: CRS '{name}' not found. Available CRSs: {', '.join(config.crs_names())}",
            err=True,
        )
        raise typer.Exit(1)
    except ReferencingError as e:
        typer.echo(f"Error: Cannot use CRS '{name}': {e}", err=True)
        raise typer.Exit(1)


def _resolve_operation(ctx: typer.Context, source: Optional[str], target: str) -> CoordinateOperation:
    config: ReferencingConfig = ctx.obj
    source_crs = resolve_crs(config, source or config.default_source)
    target_crs = resolve_crs(config, target)
    try:
        return CoordinateOperationFactory().create_operation(source_crs, target_crs)
    except ReferencingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _parse_points(points: List[str], dimension: int) -> np.ndarray:
    rows = []
    for text in points:
        try:
            values = [float(v) for v in text.split(",")]
        except ValueError:
            typer.echo(f"Error: Invalid point '{text}', expected comma-separated numbers", err=True)
            raise typer.Exit(1)
        if len(values) != dimension:
            typer.echo(
                f"Error: Point '{text}' has {len(values)} ordinate(s), source CRS has {dimension}",
                err=True,
            )
            raise typer.Exit(1)
        rows.append(values)
    return np.array(rows, dtype=np.float64)


@app.command("transform")
def transform_command(
    ctx: typer.Context,
    points: List[str] = typer.Argument(..., help="Points as comma-separated ordinates, e.g. 2.35,48.85"),
    target: str = typer.Option(..., "--target", "-t", help="Target CRS (catalog name or EPSG code)"),
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="Source CRS (defaults to the catalog's default source)",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.HUMAN,
        "--format",
        "-f",
        help="Output format",
    ),
) -> None:
    """
    Transform points from one CRS to another.

    Example:
        crs transform --target world_mercator 2.35,48.85 -74.006,40.7128
        crs transform -s EPSG:4326 -t EPSG:3395 48.85,2.35 --format json
    """
    config: ReferencingConfig = ctx.obj
    operation = _resolve_operation(ctx, source, target)
    source_points = _parse_points(points, operation.source_crs.dimension)
    try:
        target_points = operation.transform_points(source_points)
    except ReferencingError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output_format == OutputFormat.JSON:
        output = json.dumps(
            {
                "source_crs": operation.source_crs.name,
                "target_crs": operation.target_crs.name,
                "points": [
                    {"source": src.tolist(), "target": dst.tolist()}
                    for src, dst in zip(source_points, target_points)
                ],
            },
            indent=2,
        )
    else:
        digits = config.precision
        lines = []
        for src, dst in zip(source_points, target_points):
            src_text = ", ".join(f"{v:.{digits}f}" for v in src)
            dst_text = ", ".join(f"{v:.{digits}f}" for v in dst)
            lines.append(f"({src_text}) -> ({dst_text})")
        output = "\n".join(lines)

    typer.echo(output)


@app.command("operation")
def operation_command(
    ctx: typer.Context,
    target: str = typer.Option(..., "--target", "-t", help="Target CRS (catalog name or EPSG code)"),
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="Source CRS (defaults to the catalog's default source)",
    ),
) -> None:
    """
    Describe the coordinate operation between two CRSs.

    Lists each step of the transform and prints the matrix of affine steps.

    Example:
        crs operation --source wgs84_lat_lon --target world_mercator
    """
    operation = _resolve_operation(ctx, source, target)
    transform = operation.math_transform
    steps = transform.steps if isinstance(transform, ConcatenatedTransform) else [transform]

    lines = [
        "=" * 60,
        f"Operation: {operation.name}",
        "=" * 60,
        f"  Source: {operation.source_crs.name} ({operation.source_crs.dimension}D)",
        f"  Target: {operation.target_crs.name} ({operation.target_crs.dimension}D)",
    ]
    if operation.method is not None:
        lines.append(f"  Method: {operation.method}")
    lines.extend(["", "Steps:"])
    for index, step in enumerate(steps, start=1):
        lines.append(f"  {index}. {type(step).__name__}")
        matrix = getattr(step, "matrix", None)
        if matrix is not None:
            for row in matrix.to_list():
                lines.append("     [" + "  ".join(f"{v:12.6g}" for v in row) + "]")

    typer.echo("\n".join(lines))
