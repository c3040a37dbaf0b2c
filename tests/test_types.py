import math

import pytest

from common.types import LatLon, MapCoord, ProjectedCoord


def test_latlon_rejects_latitude_out_of_range() -> None:
    with pytest.raises(ValueError):
        LatLon(91.0, 7.0)
    with pytest.raises(ValueError):
        LatLon(-90.5, 7.0)


def test_latlon_accepts_poles_and_any_longitude() -> None:
    assert LatLon(90.0, 0.0).latitude == 90.0
    assert LatLon(-90.0, 540.0).longitude == 540.0


def test_latlon_radians_round_trip() -> None:
    koblenz = LatLon(50.358944, 7.567778)
    lat_rad, lon_rad = koblenz.to_radians()
    assert lat_rad == pytest.approx(math.radians(50.358944))
    restored = LatLon.from_radians(lat_rad, lon_rad)
    assert restored.latitude == pytest.approx(koblenz.latitude)
    assert restored.longitude == pytest.approx(koblenz.longitude)


def test_latlon_is_immutable_value() -> None:
    point = LatLon(50.0, 9.0)
    assert point == LatLon(50.0, 9.0)
    with pytest.raises(AttributeError):
        point.latitude = 51.0  # type: ignore[misc]


def test_map_coord_arithmetic() -> None:
    a = MapCoord(3.0, 4.0)
    b = MapCoord(1.0, -2.0)
    assert a + b == MapCoord(4.0, 2.0)
    assert a - b == MapCoord(2.0, 6.0)
    assert -a == MapCoord(-3.0, -4.0)
    assert a * 2 == MapCoord(6.0, 8.0)
    assert 2 * a == MapCoord(6.0, 8.0)
    assert a / 2 == MapCoord(1.5, 2.0)


def test_planar_length_and_distance() -> None:
    assert MapCoord(3.0, 4.0).length() == pytest.approx(5.0)
    assert ProjectedCoord(100.0, 100.0).distance_to(ProjectedCoord(103.0, 104.0)) == pytest.approx(5.0)


def test_map_and_projected_coords_do_not_mix() -> None:
    with pytest.raises(TypeError):
        MapCoord(1.0, 1.0) + ProjectedCoord(1.0, 1.0)
    assert MapCoord(1.0, 1.0) != ProjectedCoord(1.0, 1.0)
