#!/usr/bin/env python3
"""
Tests for parameter descriptors and parameter value groups.

Run with: python -m pytest tests/test_parameters.py -v
"""

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crs_transform import units
from crs_transform.exceptions import InvalidArgumentError, ParameterNotFoundError
from crs_transform.parameters import ParameterDescriptor, ParameterValueGroup, normalize_name

# ============================================================================
# Test Fixtures
# ============================================================================


@pytest.fixture
def descriptors():
    """Return a small descriptor set: one mandatory length, one angle, one scale."""
    return (
        ParameterDescriptor("semi_major", minimum=0.0, unit=units.METRE, strictly_positive=True),
        ParameterDescriptor(
            "central_meridian", 0.0, -180.0, 180.0, units.DEGREE,
            aliases=("Longitude of natural origin",),
        ),
        ParameterDescriptor("scale_factor", 1.0, 0.0, math.inf, units.ONE, strictly_positive=True),
    )


@pytest.fixture
def group(descriptors) -> ParameterValueGroup:
    """Return an empty group for a fictitious method."""
    return ParameterValueGroup("Test_Method", descriptors)


# ============================================================================
# Descriptor Tests
# ============================================================================


class TestParameterDescriptor:
    """Test descriptor matching and validation."""

    def test_normalize_name(self) -> None:
        assert normalize_name("Longitude of natural origin") == "longitudeofnaturalorigin"
        assert normalize_name("semi_major") == normalize_name("Semi-Major")

    def test_matches_canonical_name_and_alias(self, descriptors) -> None:
        meridian = descriptors[1]
        assert meridian.matches("central_meridian")
        assert meridian.matches("LONGITUDE OF NATURAL ORIGIN")
        assert not meridian.matches("latitude_of_origin")

    def test_required_when_default_is_nan(self, descriptors) -> None:
        assert descriptors[0].required
        assert not descriptors[1].required

    def test_validate_range(self, descriptors) -> None:
        with pytest.raises(InvalidArgumentError, match="must be in range"):
            descriptors[1].validate(181.0)

    def test_validate_strictly_positive(self, descriptors) -> None:
        with pytest.raises(InvalidArgumentError, match="must be positive"):
            descriptors[2].validate(0.0)

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_validate_rejects_non_finite(self, descriptors, value: float) -> None:
        with pytest.raises(InvalidArgumentError, match="must be finite"):
            descriptors[1].validate(value)


# ============================================================================
# Group Tests
# ============================================================================


class TestParameterValueGroup:
    """Test value storage, defaults and lookups."""

    def test_defaults(self, group: ParameterValueGroup) -> None:
        assert group["central_meridian"] == 0.0
        assert group["scale_factor"] == 1.0

    def test_missing_mandatory_value_raises(self, group: ParameterValueGroup) -> None:
        with pytest.raises(InvalidArgumentError, match="semi_major"):
            group.value("semi_major")

    def test_set_by_alias(self, group: ParameterValueGroup) -> None:
        group.set("Longitude of natural origin", 110.0)
        assert group["central_meridian"] == 110.0
        assert group.is_set("central_meridian")

    def test_set_with_unit_conversion(self, group: ParameterValueGroup) -> None:
        group.set("semi_major", 6378.137, units.KILOMETRE)
        assert group["semi_major"] == pytest.approx(6378137.0)

    def test_set_returns_group_for_chaining(self, group: ParameterValueGroup) -> None:
        result = group.set("semi_major", 1.0).set("scale_factor", 0.5)
        assert result is group

    def test_setitem(self, group: ParameterValueGroup) -> None:
        group["scale_factor"] = 0.9996
        assert group["scale_factor"] == 0.9996

    def test_set_invalid_value_raises(self, group: ParameterValueGroup) -> None:
        with pytest.raises(InvalidArgumentError):
            group["scale_factor"] = -1.0

    def test_unknown_parameter_raises(self, group: ParameterValueGroup) -> None:
        with pytest.raises(ParameterNotFoundError, match="Must be one of"):
            group.set("false_easting", 0.0)

    def test_contains_and_iter(self, group: ParameterValueGroup) -> None:
        assert "Longitude of natural origin" in group
        assert "false_easting" not in group
        assert 42 not in group
        assert list(group) == ["semi_major", "central_meridian", "scale_factor"]

    def test_as_dict_reports_nan_for_unset_mandatory(self, group: ParameterValueGroup) -> None:
        values = group.as_dict()
        assert math.isnan(values["semi_major"])
        assert values["scale_factor"] == 1.0

    def test_copy_is_independent(self, group: ParameterValueGroup) -> None:
        group["semi_major"] = 10.0
        clone = group.copy()
        clone["semi_major"] = 20.0
        assert group["semi_major"] == 10.0
        assert clone["semi_major"] == 20.0

    def test_values_in_constructor(self, descriptors) -> None:
        group = ParameterValueGroup("Test_Method", descriptors, {"semi_major": 5.0})
        assert group["semi_major"] == 5.0

    def test_equality_treats_unset_mandatory_as_equal(self, descriptors) -> None:
        assert ParameterValueGroup("Test_Method", descriptors) == ParameterValueGroup("test method", descriptors)

    def test_equality_compares_values(self, descriptors) -> None:
        a = ParameterValueGroup("Test_Method", descriptors, {"semi_major": 5.0})
        b = ParameterValueGroup("Test_Method", descriptors, {"semi_major": 6.0})
        assert a != b

    def test_unhashable(self, group: ParameterValueGroup) -> None:
        with pytest.raises(TypeError):
            hash(group)
