"""
Units for Map, Ground and Angle Measures.

A map document mixes lengths on paper (millimeters), lengths on the ground
and in the projected grid (meters), and angles that users quote in degrees.
All of them go through the `pint` registry below, so a paper length can
never be taken for a ground length by accident.

Example Usage
-------------
>>> from common.units import Q_, map_to_ground_length
>>> map_to_ground_length(Q_(4, 'mm'), scale_denominator=15000).to('m').magnitude
60.0
"""

from functools import wraps
from typing import Callable, Dict, Union
import inspect

import pint
from pint import UnitRegistry as PintUnitRegistry

# One registry for the whole process; quantities from different registries
# cannot be combined.
ureg = PintUnitRegistry()
Q_ = ureg.Quantity


# Base unit of each kind of measure
STANDARD_UNITS = {
    # Lengths
    "map_length": "millimeter",
    "ground_length": "meter",
    "projected_length": "meter",

    # Positions
    "latitude": "degree",
    "longitude": "degree",

    # Orientation
    "angle": "degree",
    "declination": "degree",
    "grivation": "degree",
    "convergence": "degree",
}


def _check_dimension(value, unit: str, what: str) -> None:
    if not isinstance(value, pint.Quantity):
        return
    if not value.is_compatible_with(unit):
        raise ValueError(f"{what} must be convertible to {unit}, got {value.units}")


def validate_units(expected_units: Dict[str, str]):
    """Decorator checking the dimensions of quantity arguments and results.

    Bare numbers pass unchecked; they are interpreted by the function.

    Parameters
    ----------
    expected_units : dict
        Argument name -> unit. The key 'return' checks the result.

    Raises
    ------
    ValueError
        If a quantity has the wrong dimension.
    """
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            arguments = signature.bind(*args, **kwargs).arguments
            for name, unit in expected_units.items():
                if name != 'return' and name in arguments:
                    _check_dimension(arguments[name], unit, f"Argument '{name}'")

            result = func(*args, **kwargs)
            if 'return' in expected_units:
                _check_dimension(result, expected_units['return'], f"Result of {func.__name__}")
            return result
        return wrapper
    return decorator


def ensure_quantity(value: Union[float, pint.Quantity], default_unit: str) -> pint.Quantity:
    """Attach `default_unit` to a bare number; quantities pass through."""
    if isinstance(value, pint.Quantity):
        return value
    return Q_(value, default_unit)


def angle_degrees(value: Union[float, pint.Quantity]) -> float:
    """Return an angle as a plain float in degrees.

    Bare numbers are taken to be degrees, which is how declination and
    grivation are quoted on maps. Quantities in any angle unit (radian,
    arcminute, ...) are converted.

    Raises
    ------
    ValueError
        If a quantity is not an angle.
    """
    quantity = ensure_quantity(value, STANDARD_UNITS["angle"])
    _check_dimension(quantity, STANDARD_UNITS["angle"], "Angle")
    return float(quantity.to(STANDARD_UNITS["angle"]).magnitude)


@validate_units({'map_length': 'mm', 'return': 'm'})
def map_to_ground_length(
    map_length: Union[float, pint.Quantity],
    scale_denominator: int
) -> pint.Quantity:
    """Convert a length on paper to the corresponding ground length.

    Parameters
    ----------
    map_length : float or pint.Quantity
        Length on the map. Bare numbers are millimeters.
    scale_denominator : int
        Nominal map scale denominator (e.g. 15000 for 1:15000).

    Returns
    -------
    pint.Quantity
        Ground length in meters.

    Notes
    -----
    ground = map_length * scale_denominator, so at the default 1:1000 one
    map millimeter is one ground meter.
    """
    length = ensure_quantity(map_length, STANDARD_UNITS["map_length"])
    return (length * scale_denominator).to(STANDARD_UNITS["ground_length"])
