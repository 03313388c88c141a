#!/usr/bin/env python3
"""
Tests for the Mercator and Lambert Conformal Conic projections.

Reference values are the worked examples of EPSG Guidance Note 7-2.
Property-based tests check that forward and inverse projections agree.

Run with: python -m pytest tests/test_projection.py -v
"""

import math
import os
import sys

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from crs_transform.crs.datum import CLARKE_1866, INTERNATIONAL_1924, WGS84_ELLIPSOID, Ellipsoid
from crs_transform.exceptions import InvalidArgumentError, TransformDomainError
from crs_transform.geometry import DirectPosition2D
from crs_transform.operation.math_transform_factory import MathTransformFactory
from crs_transform.operation.projection import (
    InverseMapProjection,
    LambertConformalParameters,
    MapProjection,
    MercatorParameters,
    ProjectionKind,
    default_parameters,
    msfn,
)
from crs_transform.operation.transform import IdentityTransform

# ============================================================================
# Test Fixtures
# ============================================================================

KRASSOWSKI = Ellipsoid.from_inverse_flattening("Krassowsky 1940", 6378245.0, 298.3)


def mercator(kind=ProjectionKind.MERCATOR_1SP, ellipsoid=WGS84_ELLIPSOID, **kwargs) -> MapProjection:
    parameters = MercatorParameters(ellipsoid.semi_major, ellipsoid.semi_minor, **kwargs)
    return MapProjection(kind, parameters)


def lambert(kind=ProjectionKind.LAMBERT_CONFORMAL_2SP, ellipsoid=CLARKE_1866, **kwargs) -> MapProjection:
    parameters = LambertConformalParameters(ellipsoid.semi_major, ellipsoid.semi_minor, **kwargs)
    return MapProjection(kind, parameters)


@pytest.fixture
def texas() -> MapProjection:
    """NAD27 / Texas South Central, in metres."""
    return lambert(
        central_meridian=-99.0,
        latitude_of_origin=27.833333333,
        standard_parallel_1=28.383333333,
        standard_parallel_2=30.283333333,
        false_easting=609601.218,
    )


@pytest.fixture
def batavia() -> MapProjection:
    """Batavia / NEIEZ (Mercator variant A)."""
    parameters = MercatorParameters(
        semi_major=6377397.155,
        semi_minor=6356078.963,
        central_meridian=110.0,
        scale_factor=0.997,
        false_easting=3900000.0,
        false_northing=900000.0,
    )
    return MapProjection(ProjectionKind.MERCATOR_1SP, parameters)


# ============================================================================
# Reference Points
# ============================================================================


class TestReferencePoints:
    """Forward and inverse projection of published example points."""

    def test_mercator_1sp(self, batavia: MapProjection) -> None:
        x, y = batavia.transform_points([120.0, -3.0])
        assert x == pytest.approx(5009726.58, abs=0.01)
        assert y == pytest.approx(569150.82, abs=0.01)

    def test_mercator_1sp_inverse(self, batavia: MapProjection) -> None:
        lon, lat = batavia.inverse().transform_points([5009726.58, 569150.82])
        assert lon == pytest.approx(120.0, abs=1e-7)
        assert lat == pytest.approx(-3.0, abs=1e-7)

    def test_mercator_2sp(self) -> None:
        projection = mercator(
            ProjectionKind.MERCATOR_2SP, KRASSOWSKI, standard_parallel_1=42.0, central_meridian=51.0
        )
        x, y = projection.transform_points([53.0, 53.0])
        assert x == pytest.approx(165704.29, abs=0.05)
        assert y == pytest.approx(5171848.07, abs=0.05)

    def test_lambert_2sp(self, texas: MapProjection) -> None:
        x, y = texas.transform_points([-96.0, 28.5])
        assert x == pytest.approx(903277.7965, abs=0.001)
        assert y == pytest.approx(77650.94219, abs=0.001)

    def test_lambert_2sp_inverse(self, texas: MapProjection) -> None:
        lon, lat = texas.inverse().transform_points([903277.7965, 77650.94219])
        assert lon == pytest.approx(-96.0, abs=1e-7)
        assert lat == pytest.approx(28.5, abs=1e-7)

    def test_lambert_1sp(self) -> None:
        jamaica = lambert(
            ProjectionKind.LAMBERT_CONFORMAL_1SP,
            latitude_of_origin=18.0,
            central_meridian=-77.0,
            scale_factor=1.0,
            false_easting=250000.0,
            false_northing=150000.0,
        )
        x, y = jamaica.transform_points([-76.943683333, 17.932166667])
        assert x == pytest.approx(255966.58, abs=0.05)
        assert y == pytest.approx(142493.51, abs=0.05)

    def test_lambert_belgium(self) -> None:
        belge = lambert(
            ProjectionKind.LAMBERT_CONFORMAL_2SP_BELGIUM,
            INTERNATIONAL_1924,
            central_meridian=4.356939722,
            latitude_of_origin=90.0,
            standard_parallel_1=49.833333333,
            standard_parallel_2=51.166666667,
            false_easting=150000.01,
            false_northing=5400088.44,
        )
        x, y = belge.transform_points([5.807370278, 50.679572500])
        assert x == pytest.approx(251763.20, abs=0.05)
        assert y == pytest.approx(153034.13, abs=0.05)
        lon, lat = belge.inverse().transform_points([x, y])
        assert lon == pytest.approx(5.807370278, abs=1e-8)
        assert lat == pytest.approx(50.679572500, abs=1e-8)

    def test_spherical_mercator(self) -> None:
        sphere = Ellipsoid.sphere("Sphere", 6378137.0)
        projection = mercator(ellipsoid=sphere)
        assert projection.is_spherical
        x, y = projection.transform_points([10.0, 45.0])
        assert x == pytest.approx(6378137.0 * math.radians(10.0))
        assert y == pytest.approx(6378137.0 * math.log(math.tan(math.radians(67.5))))


# ============================================================================
# Round Trips (property-based)
# ============================================================================


def round_trip_projection(kind: ProjectionKind) -> MapProjection:
    """A realistic projection of each kind, taken from the reference examples."""
    if kind is ProjectionKind.MERCATOR_1SP:
        return mercator(false_easting=500000.0)
    if kind is ProjectionKind.MERCATOR_2SP:
        return mercator(kind, KRASSOWSKI, standard_parallel_1=42.0, central_meridian=51.0)
    if kind is ProjectionKind.LAMBERT_CONFORMAL_1SP:
        return lambert(
            kind,
            latitude_of_origin=18.0,
            central_meridian=-77.0,
            false_easting=250000.0,
            false_northing=150000.0,
        )
    if kind is ProjectionKind.LAMBERT_CONFORMAL_2SP:
        return lambert(
            central_meridian=-99.0,
            latitude_of_origin=27.833333333,
            standard_parallel_1=28.383333333,
            standard_parallel_2=30.283333333,
            false_easting=609601.218,
        )
    return lambert(
        kind,
        INTERNATIONAL_1924,
        central_meridian=4.356939722,
        latitude_of_origin=90.0,
        standard_parallel_1=49.833333333,
        standard_parallel_2=51.166666667,
        false_easting=150000.01,
        false_northing=5400088.44,
    )


# (longitude range, latitude range) sampled for each kind
ROUND_TRIP_DOMAINS = {
    ProjectionKind.MERCATOR_1SP: ((-179.0, 179.0), (-85.0, 85.0)),
    ProjectionKind.MERCATOR_2SP: ((-120.0, 179.0), (-85.0, 85.0)),
    ProjectionKind.LAMBERT_CONFORMAL_1SP: ((-150.0, -5.0), (0.0, 80.0)),
    ProjectionKind.LAMBERT_CONFORMAL_2SP: ((-150.0, -50.0), (5.0, 85.0)),
    ProjectionKind.LAMBERT_CONFORMAL_2SP_BELGIUM: ((-10.0, 20.0), (40.0, 60.0)),
}


def draw_point(data, kind: ProjectionKind):
    (lon_min, lon_max), (lat_min, lat_max) = ROUND_TRIP_DOMAINS[kind]
    lon = data.draw(st.floats(min_value=lon_min, max_value=lon_max), label="lon")
    lat = data.draw(st.floats(min_value=lat_min, max_value=lat_max), label="lat")
    return lon, lat


class TestRoundTrip:
    """Forward then inverse returns the input, and the other way around."""

    @pytest.mark.parametrize("kind", list(ProjectionKind))
    @given(data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_inverse_of_forward(self, kind: ProjectionKind, data) -> None:
        lon, lat = draw_point(data, kind)
        projection = round_trip_projection(kind)
        back = projection.inverse().transform_points(projection.transform_points([lon, lat]))
        assert back[0] == pytest.approx(lon, abs=1e-6)
        assert back[1] == pytest.approx(lat, abs=1e-6)

    @pytest.mark.parametrize("kind", list(ProjectionKind))
    @given(data=st.data())
    @settings(max_examples=50, deadline=None)
    def test_forward_of_inverse(self, kind: ProjectionKind, data) -> None:
        projection = round_trip_projection(kind)
        easting, northing = projection.transform_points(draw_point(data, kind))
        geographic = projection.inverse().transform_points([easting, northing])
        again = projection.transform_points(geographic)
        assert again[0] == pytest.approx(easting, abs=1e-2)
        assert again[1] == pytest.approx(northing, abs=1e-2)

    @given(
        lon=st.floats(min_value=-60.0, max_value=60.0),
        lat=st.floats(min_value=-80.0, max_value=-5.0),
    )
    @settings(max_examples=50)
    def test_southern_lambert_on_sphere(self, lon: float, lat: float) -> None:
        projection = lambert(
            ellipsoid=Ellipsoid.sphere("Sphere", 6371000.0),
            latitude_of_origin=-40.0,
            standard_parallel_1=-30.0,
            standard_parallel_2=-50.0,
        )
        back = projection.inverse().transform_points(projection.transform_points([lon, lat]))
        assert back[0] == pytest.approx(lon, abs=1e-6)
        assert back[1] == pytest.approx(lat, abs=1e-6)

    def test_batch_matches_single_points(self, texas: MapProjection) -> None:
        points = np.array([[-96.0, 28.5], [-99.0, 27.833333333], [-100.5, 31.0]])
        batch = texas.transform_points(points)
        assert batch.shape == (3, 2)
        for point, projected in zip(points, batch):
            assert np.array_equal(texas.transform_points(point), projected)

    def test_input_array_not_modified(self, texas: MapProjection) -> None:
        points = np.array([[-96.0, 28.5]])
        texas.transform_points(points)
        assert points.tolist() == [[-96.0, 28.5]]


# ============================================================================
# Domain and Parameter Errors
# ============================================================================


class TestDomain:
    """Poles, range checks and NaN handling."""

    @pytest.mark.parametrize("lat", [90.0, -90.0])
    def test_mercator_pole_raises(self, lat: float) -> None:
        with pytest.raises(TransformDomainError, match="undefined"):
            mercator().transform_points([0.0, lat])

    def test_lambert_opposite_pole_raises(self, texas: MapProjection) -> None:
        with pytest.raises(TransformDomainError, match="opposite pole"):
            texas.transform_points([-99.0, -90.0])

    def test_lambert_same_pole_is_apex(self, texas: MapProjection) -> None:
        apex = texas.transform_points([-50.0, 90.0])
        other = texas.transform_points([-150.0, 90.0])
        assert np.allclose(apex, other)
        assert apex[0] == pytest.approx(609601.218)

    def test_lambert_pole_origin(self) -> None:
        polar = lambert(latitude_of_origin=90.0, standard_parallel_1=60.0, standard_parallel_2=70.0)
        x, y = polar.transform_points([0.0, 90.0])
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize("point", [[200.0, 0.0], [-180.1, 0.0], [0.0, 91.0]])
    def test_out_of_range_raises(self, point) -> None:
        with pytest.raises(TransformDomainError, match="out of range"):
            mercator().transform_points(point)

    def test_longitude_slack_accepted(self) -> None:
        x, _ = mercator().transform_points([180.0 + 1e-7, 0.0])
        assert math.isfinite(x)

    def test_nan_passes_through(self, texas: MapProjection) -> None:
        result = texas.transform_points([[math.nan, 28.5], [-96.0, 28.5]])
        assert np.all(np.isnan(result[0]))
        assert result[1][0] == pytest.approx(903277.7965, abs=0.001)

    def test_nan_passes_through_inverse(self, texas: MapProjection) -> None:
        result = texas.inverse().transform_points([math.nan, math.nan])
        assert np.all(np.isnan(result))

    def test_first_bad_point_fails_whole_batch(self) -> None:
        with pytest.raises(TransformDomainError):
            mercator().transform_points([[0.0, 0.0], [0.0, 90.0]])


class TestParameters:
    """Construction-time validation and parameter group handling."""

    def test_mercator_2sp_parallel_at_pole(self) -> None:
        with pytest.raises(InvalidArgumentError, match="pole"):
            mercator(ProjectionKind.MERCATOR_2SP, standard_parallel_1=90.0)

    def test_antipodal_parallels(self) -> None:
        with pytest.raises(InvalidArgumentError, match="antipodal"):
            lambert(standard_parallel_1=30.0, standard_parallel_2=-30.0)

    def test_wrong_parameter_struct(self) -> None:
        parameters = LambertConformalParameters(6378137.0, 6356752.0)
        with pytest.raises(InvalidArgumentError, match="expects MercatorParameters"):
            MapProjection(ProjectionKind.MERCATOR_1SP, parameters)

    def test_semi_minor_exceeds_semi_major(self) -> None:
        with pytest.raises(InvalidArgumentError, match="exceeds"):
            MapProjection(ProjectionKind.MERCATOR_1SP, MercatorParameters(6356752.0, 6378137.0))

    def test_central_meridian_out_of_range(self) -> None:
        with pytest.raises(InvalidArgumentError, match="central_meridian"):
            mercator(central_meridian=181.0)

    def test_lambert_1sp_equals_tangent_2sp(self) -> None:
        one = lambert(ProjectionKind.LAMBERT_CONFORMAL_1SP, latitude_of_origin=40.0)
        two = lambert(latitude_of_origin=40.0, standard_parallel_1=40.0, standard_parallel_2=40.0)
        points = [[-5.0, 35.0], [3.0, 50.0]]
        assert np.allclose(one.transform_points(points), two.transform_points(points), atol=1e-6)

    def test_mercator_2sp_equals_scaled_1sp(self) -> None:
        phi = math.radians(42.0)
        scale = float(msfn(WGS84_ELLIPSOID.eccentricity_squared, math.sin(phi), math.cos(phi)))
        one = mercator(scale_factor=scale)
        two = mercator(ProjectionKind.MERCATOR_2SP, standard_parallel_1=42.0)
        assert np.allclose(one.transform_points([10.0, 60.0]), two.transform_points([10.0, 60.0]), atol=1e-6)

    def test_from_parameters(self) -> None:
        group = default_parameters(ProjectionKind.LAMBERT_CONFORMAL_2SP)
        group.set("semi_major", CLARKE_1866.semi_major).set("semi_minor", CLARKE_1866.semi_minor)
        group.set("Longitude of false origin", -99.0)
        group.set("Latitude of false origin", 27.833333333)
        group.set("Latitude of 1st standard parallel", 28.383333333)
        group.set("Latitude of 2nd standard parallel", 30.283333333)
        group.set("Easting at false origin", 609601.218)
        projection = MapProjection.from_parameters(group)
        x, y = projection.transform_points([-96.0, 28.5])
        assert x == pytest.approx(903277.7965, abs=0.001)
        assert y == pytest.approx(77650.94219, abs=0.001)

    def test_from_parameters_missing_semi_major(self) -> None:
        with pytest.raises(InvalidArgumentError, match="semi_major"):
            MapProjection.from_parameters(default_parameters(ProjectionKind.MERCATOR_1SP))

    def test_parameter_values_round_trip(self, texas: MapProjection) -> None:
        assert MapProjection.from_parameters(texas.parameter_values()) == texas


class TestMathTransformContract:
    """Inverse caching, equality and position transforms."""

    def test_inverse_is_cached_and_symmetric(self, texas: MapProjection) -> None:
        inverse = texas.inverse()
        assert isinstance(inverse, InverseMapProjection)
        assert texas.inverse() is inverse
        assert inverse.inverse() is texas

    def test_equality_and_hash(self, texas: MapProjection) -> None:
        other = MapProjection(texas.kind, texas.parameters)
        assert other == texas
        assert hash(other) == hash(texas)
        assert other.inverse() == texas.inverse()

    def test_dimensions(self, batavia: MapProjection) -> None:
        assert batavia.source_dimensions == 2
        assert batavia.inverse().target_dimensions == 2
        assert not batavia.is_identity()

    def test_transform_position(self, batavia: MapProjection) -> None:
        result = batavia.transform(DirectPosition2D(120.0, -3.0))
        assert isinstance(result, DirectPosition2D)
        assert result.x == pytest.approx(5009726.58, abs=0.01)

    def test_transform_in_place(self, batavia: MapProjection) -> None:
        position = DirectPosition2D(120.0, -3.0)
        assert batavia.transform(position, position) is position
        assert position.y == pytest.approx(569150.82, abs=0.01)


class TestProjectionKind:
    """Method name resolution."""

    @pytest.mark.parametrize(
        "name,kind",
        [
            ("Mercator_1SP", ProjectionKind.MERCATOR_1SP),
            ("Mercator (variant B)", ProjectionKind.MERCATOR_2SP),
            ("Lambert Conic Conformal (2SP)", ProjectionKind.LAMBERT_CONFORMAL_2SP),
            ("lambert_conformal_conic_1sp", ProjectionKind.LAMBERT_CONFORMAL_1SP),
            ("9803", ProjectionKind.LAMBERT_CONFORMAL_2SP_BELGIUM),
        ],
    )
    def test_parse(self, name: str, kind: ProjectionKind) -> None:
        assert ProjectionKind.parse(name) is kind

    def test_parse_unknown(self) -> None:
        with pytest.raises(ValueError, match="Unsupported projection method"):
            ProjectionKind.parse("Transverse_Mercator")


class TestMathTransformFactory:
    """Builder registries belong to each factory instance."""

    def wgs84_mercator_group(self, factory: MathTransformFactory):
        group = factory.get_default_parameters("Mercator_1SP")
        group["semi_major"] = WGS84_ELLIPSOID.semi_major
        group["semi_minor"] = WGS84_ELLIPSOID.semi_minor
        return group

    def test_register_affects_only_that_factory(self) -> None:
        custom = MathTransformFactory()
        custom.register(ProjectionKind.MERCATOR_1SP, lambda group: IdentityTransform(2))
        group = self.wgs84_mercator_group(custom)
        assert custom.create_parameterized_transform(group).is_identity()
        assert isinstance(MathTransformFactory().create_parameterized_transform(group), MapProjection)

    def test_available_methods(self) -> None:
        assert MathTransformFactory().available_methods() == [kind.value for kind in ProjectionKind]

    def test_unknown_method(self) -> None:
        with pytest.raises(InvalidArgumentError, match="Unsupported projection method"):
            MathTransformFactory().get_default_parameters("Polyconic")
