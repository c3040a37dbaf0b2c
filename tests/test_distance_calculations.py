import pytest

from common.types import LatLon
from georeferencing.distance_calculations import (
    compute_azimuth,
    geodesic_distance,
    geodesic_inverse,
)


def test_one_degree_of_latitude() -> None:
    # Meridian arc length of one degree around 45 deg N on WGS84
    distance = geodesic_distance(LatLon(44.5, 0.0), LatLon(45.5, 0.0))
    assert distance == pytest.approx(111132.0, abs=5.0)


def test_azimuths() -> None:
    assert compute_azimuth(LatLon(0.0, 0.0), LatLon(0.0, 1.0)) == pytest.approx(90.0)
    result = geodesic_inverse(LatLon(0.0, 0.0), LatLon(0.0, 1.0))
    assert result.azimuth_forward_deg == pytest.approx(90.0)
    assert 0.0 <= result.azimuth_back_deg < 360.0


def test_distance_is_symmetric() -> None:
    a, b = LatLon(50.358944, 7.567778), LatLon(49.201167, 8.131111)
    assert geodesic_distance(a, b) == pytest.approx(geodesic_distance(b, a))
