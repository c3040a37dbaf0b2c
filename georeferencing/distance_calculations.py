"""
Geodesics on the WGS84 Ellipsoid.

A georeferencing is only correct if lengths measured on the map agree with
lengths on the ground. The ground truth for such checks is the geodesic:
the shortest path between two geographic coordinates on the ellipsoid.

Implementation
--------------
`pyproj.Geod` solves the inverse geodesic problem with Karney's algorithm,
accurate to nanometers for any pair of points, antipodal ones included.

References
----------
- Karney, C.F.F. (2013). Algorithms for geodesics. Journal of Geodesy, 87(1), 43-55.
"""

from dataclasses import dataclass

from pyproj import Geod

from common.types import LatLon
from georeferencing.coordinate_models import WGS84Ellipsoid


_wgs84_geod = Geod(a=WGS84Ellipsoid.a, f=WGS84Ellipsoid.f)


@dataclass(frozen=True)
class GeodesicResult:
    """Solution of the inverse geodesic problem.

    Attributes
    ----------
    distance_m : float
        Length of the geodesic in meters.
    azimuth_forward_deg : float
        Direction at the first point towards the second, clockwise from
        true north, in [0, 360).
    azimuth_back_deg : float
        Direction at the second point towards the first, in [0, 360).
    """
    distance_m: float
    azimuth_forward_deg: float
    azimuth_back_deg: float


def geodesic_inverse(first: LatLon, second: LatLon) -> GeodesicResult:
    """Distance and azimuths between two geographic coordinates.

    Examples
    --------
    >>> result = geodesic_inverse(LatLon(50.0, 9.0), LatLon(50.0, 9.01))
    >>> round(result.distance_m)
    717
    """
    az_forward, az_back, distance_m = _wgs84_geod.inv(
        first.longitude, first.latitude, second.longitude, second.latitude
    )
    return GeodesicResult(
        distance_m=float(distance_m),
        azimuth_forward_deg=float(az_forward) % 360.0,
        azimuth_back_deg=float(az_back) % 360.0
    )


def geodesic_distance(first: LatLon, second: LatLon) -> float:
    """Length of the geodesic between two points, in meters."""
    return geodesic_inverse(first, second).distance_m


def compute_azimuth(first: LatLon, second: LatLon) -> float:
    """Forward azimuth from `first` to `second` in degrees, [0, 360)."""
    return geodesic_inverse(first, second).azimuth_forward_deg
