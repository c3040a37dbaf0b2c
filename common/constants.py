"""
Geodetic Constants and Georeferencing Defaults.

Ellipsoid constants carry their provenance, so that every number a
georeferencing computes can be traced back to a published definition.
The module-level defaults are the state a fresh georeferencing starts in.

References
----------
- NIMA TR8350.2 (2000): Department of Defense World Geodetic System 1984
- DMA TM 8358.2 (1989): The Universal Grids: UTM and UPS
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A numeric constant together with where it comes from.

    Attributes
    ----------
    value : float
        Nominal value.
    uncertainty : float
        1-sigma uncertainty; 0.0 for defining constants.
    unit : str
        Unit of `value`.
    source : str
        Publication defining the value.
    description : str
        What the constant is.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Constants of the WGS84 ellipsoid and of the UTM grid.

    Every geographic coordinate passed to or returned by a georeferencing
    refers to WGS84.
    """

    # WGS84 defining parameters (NIMA TR8350.2, table 3.1)

    EARTH_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="NIMA TR8350.2",
        description="Equatorial radius a of the WGS84 ellipsoid"
    )

    EARTH_FLATTENING: Final[Constant] = Constant(
        value=1.0 / 298.257223563,
        uncertainty=0.0,
        unit="dimensionless",
        source="NIMA TR8350.2",
        description="Flattening f = (a - b) / a of the WGS84 ellipsoid"
    )

    # Transverse Mercator grids

    UTM_CENTRAL_SCALE_FACTOR: Final[Constant] = Constant(
        value=0.9996,
        uncertainty=0.0,
        unit="dimensionless",
        source="DMA TM 8358.2",
        description="Scale factor on the central meridian of a UTM zone"
    )


# Latitude/longitude of every geographic coordinate
GEOGRAPHIC_CRS: Final[str] = "EPSG:4326"

# Nominal map scale 1:1000, i.e. one map millimetre is one ground metre
DEFAULT_SCALE_DENOMINATOR: Final[int] = 1000

# Declination and grivation are kept with this many decimal places (degrees)
ANGLE_DECIMALS: Final[int] = 2

# Latitude/longitude offset used when probing projection distortion (radians)
PROBE_DELTA_RAD: Final[float] = 1e-6

LOCAL_CRS_ID: Final[str] = "Local"
