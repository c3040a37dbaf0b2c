import math

import pytest

from common.units import Q_, angle_degrees, ensure_quantity, map_to_ground_length


def test_map_to_ground_length_bare_millimeters() -> None:
    ground = map_to_ground_length(4.0, scale_denominator=15000)
    assert ground.to("m").magnitude == pytest.approx(60.0)


def test_map_to_ground_length_converts_units() -> None:
    ground = map_to_ground_length(Q_(1, "cm"), scale_denominator=1000)
    assert ground.to("m").magnitude == pytest.approx(10.0)


def test_map_to_ground_length_rejects_non_length() -> None:
    with pytest.raises(ValueError):
        map_to_ground_length(Q_(3, "s"), scale_denominator=1000)


def test_ensure_quantity_applies_default_unit() -> None:
    assert ensure_quantity(2.5, "mm") == Q_(2.5, "mm")
    assert ensure_quantity(Q_(1, "m"), "mm") == Q_(1, "m")


def test_angle_degrees() -> None:
    assert angle_degrees(20.0) == 20.0
    assert angle_degrees(Q_(math.pi / 2, "radian")) == pytest.approx(90.0)
    assert angle_degrees(Q_(30, "arcminute")) == pytest.approx(0.5)


def test_angle_degrees_rejects_lengths() -> None:
    with pytest.raises(ValueError):
        angle_degrees(Q_(1, "m"))
