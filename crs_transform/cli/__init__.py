"""CLI module for coordinate reference system tools.

Provides a unified `crs` command-line interface for transforming points,
inspecting coordinate operations and listing map projections.
"""

from crs_transform.cli.main import app

__all__ = ["app"]
