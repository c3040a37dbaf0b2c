"""
Reference Ellipsoids and Their Curvature.

Grid scale factors are ratios of grid lengths to ground lengths. The ground
side of that ratio comes from here: how many meters on the ellipsoid one
radian of latitude or longitude spans at a given latitude.

Scientific Context
------------------
Domain: Geodesy, map projections

The ground length of an angular step depends on the direction:

    north-south:  ds = M dφ            (meridian radius of curvature)
    east-west:    ds = N cos φ dλ      (parallel circle radius)

Treating the Earth as a sphere would misstate these by up to 1%, two orders
of magnitude more than the UTM scale factor 0.9996 differs from 1.

References
----------
- NIMA TR8350.2: WGS84 parameters
- Snyder, J.P. (1987). Map Projections - A Working Manual, eq. 4-18, 4-20.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np

from common.constants import GeodeticConstants


@dataclass(frozen=True)
class EllipsoidParameters:
    """A rotational ellipsoid given by its equatorial radius and flattening.

    Attributes
    ----------
    a : float
        Equatorial radius in meters.
    f : float
        Flattening (a - b) / a.
    name : str
        Short name, e.g. "WGS84".
    """
    a: float
    f: float
    name: str

    @property
    def b(self) -> float:
        """Polar radius in meters."""
        return self.a * (1.0 - self.f)

    @property
    def e2(self) -> float:
        """Squared first eccentricity, f (2 - f)."""
        return self.f * (2.0 - self.f)

    def curvature_term(self, latitude_rad: float) -> float:
        """W = sqrt(1 - e² sin²φ), shared by both radii of curvature."""
        return float(np.sqrt(1.0 - self.e2 * np.sin(latitude_rad) ** 2))


# Datum of every latitude/longitude handled by a georeferencing
WGS84Ellipsoid = EllipsoidParameters(
    a=GeodeticConstants.EARTH_SEMI_MAJOR_AXIS.value,
    f=GeodeticConstants.EARTH_FLATTENING.value,
    name="WGS84"
)


def radius_of_curvature_meridian(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> float:
    """Radius of curvature M of the meridian, in meters.

    Parameters
    ----------
    latitude_rad : float
        Geodetic latitude in radians.
    ellipsoid : EllipsoidParameters
        Reference ellipsoid (default: WGS84).

    Notes
    -----
    M = a (1 - e²) / W³. For WGS84 M grows from about 6,335 km at the
    equator to about 6,400 km at the poles.
    """
    w = ellipsoid.curvature_term(latitude_rad)
    return float(ellipsoid.a * (1.0 - ellipsoid.e2) / w ** 3)


def radius_of_curvature_prime_vertical(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> float:
    """Radius of curvature N in the prime vertical, in meters.

    N = a / W; it equals a on the equator.
    """
    return float(ellipsoid.a / ellipsoid.curvature_term(latitude_rad))


def ground_meters_per_radian(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> Tuple[float, float]:
    """Ground length of one radian of latitude and of longitude.

    Returns
    -------
    Tuple[float, float]
        (M, N cos φ): meters per radian along the meridian and along the
        parallel at the given latitude.
    """
    return (
        radius_of_curvature_meridian(latitude_rad, ellipsoid),
        radius_of_curvature_prime_vertical(latitude_rad, ellipsoid) * float(np.cos(latitude_rad))
    )


def web_mercator_scale_factors(
    latitude_rad: float,
    ellipsoid: EllipsoidParameters = WGS84Ellipsoid
) -> Tuple[float, float]:
    """Nominal scale factors of "Web Mercator" (EPSG:3857).

    Web Mercator applies spherical Mercator formulas to ellipsoidal
    coordinates, so it is not conformal: the east-west and north-south
    scale factors differ slightly.

    Returns
    -------
    Tuple[float, float]
        (k, h): east-west (parallel) and north-south (meridional) scale.

    Notes
    -----
    x = a λ and y = a ln tan(π/4 + φ/2), hence
    k = a / (N cos φ)  and  h = a / (M cos φ).
    """
    per_rad_lat, per_rad_lon = ground_meters_per_radian(latitude_rad, ellipsoid)
    cos_lat = float(np.cos(latitude_rad))
    return ellipsoid.a / per_rad_lon, ellipsoid.a / (per_rad_lat * cos_lat)
