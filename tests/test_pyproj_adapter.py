#!/usr/bin/env python3
"""
Tests for reading CRS definitions through pyproj.

Results are cross-checked against pyproj's own Transformer.

Run with: python -m pytest tests/test_pyproj_adapter.py -v
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crs_transform import units
from crs_transform.crs.axis import AxisDirection
from crs_transform.crs.pyproj_adapter import PYPROJ_AVAILABLE, from_pyproj
from crs_transform.crs.reference_system import GeographicCRS, ProjectedCRS, VerticalCRS
from crs_transform.exceptions import InvalidArgumentError
from crs_transform.operation.coordinate_operation import CoordinateOperationFactory

pytestmark = pytest.mark.skipif(not PYPROJ_AVAILABLE, reason="pyproj not installed")

if PYPROJ_AVAILABLE:
    from pyproj import Transformer


class TestFromPyproj:
    """Test conversion of pyproj CRS objects."""

    def test_geographic_axis_order(self) -> None:
        crs = from_pyproj("EPSG:4326")
        assert isinstance(crs, GeographicCRS)
        assert crs.directions == (AxisDirection.NORTH, AxisDirection.EAST)
        assert crs.axes[0].unit == units.DEGREE
        assert crs.ellipsoid.semi_major == 6378137.0

    def test_world_mercator(self) -> None:
        crs = from_pyproj("EPSG:3395")
        assert isinstance(crs, ProjectedCRS)
        assert crs.conversion.method == "Mercator_1SP"
        assert crs.conversion["scale_factor"] == 1.0

    def test_lambert_in_us_survey_feet(self) -> None:
        crs = from_pyproj("EPSG:32040")
        assert crs.conversion.method == "Lambert_Conformal_Conic_2SP"
        assert crs.conversion["false_easting"] == pytest.approx(609601.2192, abs=1e-4)
        assert crs.axes[0].unit == units.US_SURVEY_FOOT

    def test_vertical(self) -> None:
        crs = from_pyproj("EPSG:5773")
        assert isinstance(crs, VerticalCRS)
        assert crs.directions == (AxisDirection.UP,)

    def test_unsupported_method(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Transverse"):
            from_pyproj("EPSG:32631")

    def test_invalid_definition(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Invalid CRS definition"):
            from_pyproj("not a crs definition")


class TestAgainstPyprojTransformer:
    """Operations built from pyproj definitions match pyproj results."""

    def test_world_mercator(self) -> None:
        operation = CoordinateOperationFactory().create_operation(from_pyproj("EPSG:4326"), from_pyproj("EPSG:3395"))
        x, y = operation.transform_points([48.85, 2.35])
        expected = Transformer.from_crs("EPSG:4326", "EPSG:3395", always_xy=True).transform(2.35, 48.85)
        assert x == pytest.approx(expected[0], abs=1e-3)
        assert y == pytest.approx(expected[1], abs=1e-3)

    def test_texas_south_central(self) -> None:
        operation = CoordinateOperationFactory().create_operation(from_pyproj("EPSG:4267"), from_pyproj("EPSG:32040"))
        x, y = operation.transform_points([28.5, -96.0])
        assert x == pytest.approx(2963503.91, abs=0.05)
        assert y == pytest.approx(254759.80, abs=0.05)
        expected = Transformer.from_crs("EPSG:4267", "EPSG:32040", always_xy=True).transform(-96.0, 28.5)
        assert x == pytest.approx(expected[0], abs=1e-2)
        assert y == pytest.approx(expected[1], abs=1e-2)
