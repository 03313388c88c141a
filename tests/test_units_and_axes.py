#!/usr/bin/env python3
"""
Tests for units of measure and coordinate system axes.

Run with: python -m pytest tests/test_units_and_axes.py -v
"""

import math
import os
import sys
from dataclasses import FrozenInstanceError

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crs_transform import units
from crs_transform.crs import axis
from crs_transform.crs.axis import AxisDirection, CoordinateSystemAxis
from crs_transform.exceptions import IncommensurableUnitsError, InvalidArgumentError

# ============================================================================
# Units
# ============================================================================


class TestUnitConversion:
    """Test conversion factors between units of the same kind."""

    def test_metre_to_millimetre(self) -> None:
        assert units.METRE.converter_to(units.MILLIMETRE) == pytest.approx(1000.0)

    def test_metre_to_centimetre(self) -> None:
        assert units.METRE.converter_to(units.CENTIMETRE) == pytest.approx(100.0)

    def test_us_survey_foot_to_metre(self) -> None:
        assert units.US_SURVEY_FOOT.converter_to(units.METRE) == pytest.approx(1200.0 / 3937.0)

    def test_degree_to_radian(self) -> None:
        assert units.DEGREE.converter_to(units.RADIAN) == pytest.approx(math.pi / 180.0)

    def test_day_to_second(self) -> None:
        assert units.DAY.converter_to(units.SECOND) == pytest.approx(86400.0)

    def test_same_unit_is_exactly_one(self) -> None:
        assert units.DEGREE.converter_to(units.DEGREE) == 1.0

    def test_incompatible_units_raise(self) -> None:
        with pytest.raises(IncommensurableUnitsError):
            units.METRE.converter_to(units.DEGREE)

    def test_incommensurable_error_is_invalid_argument(self) -> None:
        """Callers catching InvalidArgumentError also see unit mismatches."""
        with pytest.raises(InvalidArgumentError):
            units.SECOND.converter_to(units.ONE)

    def test_is_compatible(self) -> None:
        assert units.FOOT.is_compatible(units.KILOMETRE)
        assert not units.FOOT.is_compatible(units.GRAD)

    def test_unit_is_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            units.METRE.factor = 2.0


class TestUnitForName:
    """Test lookup of units by name, symbol and alias."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("metre", units.METRE),
            ("Meters", units.METRE),
            ("m", units.METRE),
            ("degree", units.DEGREE),
            ("US survey foot", units.US_SURVEY_FOOT),
            ("unity", units.ONE),
            ("gon", units.GRAD),
        ],
        ids=["metre", "meters-alias", "symbol", "degree", "us-foot", "unity", "gon-alias"],
    )
    def test_known_names(self, name: str, expected: units.Unit) -> None:
        assert units.unit_for_name(name) == expected

    def test_unknown_name_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown unit"):
            units.unit_for_name("furlong")


# ============================================================================
# Axis directions
# ============================================================================


class TestAxisDirection:
    """Test direction pairs, absolute directions and parsing."""

    @pytest.mark.parametrize(
        "direction,opposite",
        [
            (AxisDirection.NORTH, AxisDirection.SOUTH),
            (AxisDirection.EAST, AxisDirection.WEST),
            (AxisDirection.UP, AxisDirection.DOWN),
            (AxisDirection.FUTURE, AxisDirection.PAST),
            (AxisDirection.ROW_POSITIVE, AxisDirection.ROW_NEGATIVE),
        ],
    )
    def test_opposites_are_symmetric(self, direction: AxisDirection, opposite: AxisDirection) -> None:
        assert direction.opposite() is opposite
        assert opposite.opposite() is direction

    def test_geocentric_has_no_opposite(self) -> None:
        assert AxisDirection.GEOCENTRIC_X.opposite() is None

    def test_absolute(self) -> None:
        assert AxisDirection.SOUTH.absolute() is AxisDirection.NORTH
        assert AxisDirection.NORTH.absolute() is AxisDirection.NORTH
        assert AxisDirection.OTHER.absolute() is AxisDirection.OTHER

    def test_is_reversed(self) -> None:
        assert AxisDirection.WEST.is_reversed()
        assert not AxisDirection.EAST.is_reversed()

    @pytest.mark.parametrize("text", ["north", "NORTH", " North ", "north"])
    def test_parse_case_insensitive(self, text: str) -> None:
        assert AxisDirection.parse(text) is AxisDirection.NORTH

    def test_parse_member_name_with_underscore(self) -> None:
        assert AxisDirection.parse("geocentric_x") is AxisDirection.GEOCENTRIC_X

    def test_parse_camel_case_value(self) -> None:
        assert AxisDirection.parse("displayRight") is AxisDirection.DISPLAY_RIGHT

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid axis direction"):
            AxisDirection.parse("northeast")


class TestCoordinateSystemAxis:
    """Test axis comparison ignoring names."""

    def test_equals_ignore_metadata_ignores_name(self) -> None:
        renamed = CoordinateSystemAxis("Lon", "λ", AxisDirection.EAST, units.DEGREE)
        assert renamed.equals_ignore_metadata(axis.LONGITUDE)
        assert renamed != axis.LONGITUDE

    def test_equals_ignore_metadata_compares_unit(self) -> None:
        grads = CoordinateSystemAxis("Geodetic longitude", "Lon", AxisDirection.EAST, units.GRAD)
        assert not grads.equals_ignore_metadata(axis.LONGITUDE)

    def test_equals_ignore_metadata_compares_direction(self) -> None:
        assert not axis.EASTING.equals_ignore_metadata(axis.NORTHING)
