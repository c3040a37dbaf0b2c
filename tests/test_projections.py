import math

import pytest

from common.constants import GeodeticConstants
from common.types import LatLon
from georeferencing.coordinate_models import web_mercator_scale_factors
from georeferencing.projections import (
    ProjectionError,
    PyprojTransform,
    TransformFailure,
    compute_grid_compensation,
)

UTM32_SPEC = "+proj=utm +zone=32 +datum=WGS84"


def test_parse_specification() -> None:
    assert PyprojTransform.parse_specification(UTM32_SPEC) == (True, "")
    valid, diagnostic = PyprojTransform.parse_specification("+proj=nonsense")
    assert not valid
    assert diagnostic


def test_invalid_specification_raises_projection_error() -> None:
    with pytest.raises(ProjectionError):
        PyprojTransform("+proj=nonsense")


def test_legacy_init_syntax_is_accepted() -> None:
    transform = PyprojTransform("+init=epsg:25832")
    assert transform.specification == "+init=epsg:25832"
    x, y = transform.forward(9.0, 50.0)
    assert x == pytest.approx(500000.0, abs=0.01)


def test_forward_inverse_round_trip() -> None:
    transform = PyprojTransform(UTM32_SPEC)
    x, y = transform.forward(7.567778, 50.358944)
    lon, lat = transform.inverse(x, y)
    assert lon == pytest.approx(7.567778, abs=1e-9)
    assert lat == pytest.approx(50.358944, abs=1e-9)


def test_forward_outside_domain_fails() -> None:
    transform = PyprojTransform("+init=epsg:3857")
    with pytest.raises(TransformFailure):
        transform.forward(0.0, 90.0)


def test_grid_compensation_on_utm_central_meridian() -> None:
    compensation = compute_grid_compensation(PyprojTransform(UTM32_SPEC), LatLon(50.0, 9.0))
    k0 = GeodeticConstants.UTM_CENTRAL_SCALE_FACTOR.value
    assert compensation.grid_scale_factor == pytest.approx(k0, abs=1e-7)
    assert compensation.meridional_scale == pytest.approx(k0, abs=1e-7)
    assert compensation.parallel_scale == pytest.approx(k0, abs=1e-7)
    assert compensation.convergence_deg == pytest.approx(0.0, abs=1e-7)


def test_grid_compensation_convergence_east_of_central_meridian() -> None:
    compensation = compute_grid_compensation(PyprojTransform(UTM32_SPEC), LatLon(50.0, 10.0))
    # gamma ~ dlon * sin(lat)
    assert compensation.convergence_deg == pytest.approx(math.sin(math.radians(50.0)), abs=1e-3)
    assert compensation.convergence_deg > 0.0


def test_grid_compensation_web_mercator_is_not_conformal() -> None:
    compensation = compute_grid_compensation(PyprojTransform("+init=epsg:3857"), LatLon(50.0, 6.48))
    k, h = web_mercator_scale_factors(math.radians(50.0))
    assert compensation.parallel_scale == pytest.approx(k, rel=1e-6)
    assert compensation.meridional_scale == pytest.approx(h, rel=1e-6)
    assert compensation.grid_scale_factor == pytest.approx(math.sqrt(k * h), rel=1e-6)
    assert compensation.convergence_deg == pytest.approx(0.0, abs=1e-7)


def test_grid_compensation_undefined_at_pole() -> None:
    with pytest.raises(TransformFailure):
        compute_grid_compensation(PyprojTransform(UTM32_SPEC), LatLon(90.0, 0.0))
