"""
Coordinate Value Types for the Georeferencing System.

This module defines the small immutable value types exchanged between the
three coordinate spaces of a map document:

- ``MapCoord``: the local drawing grid, in MILLIMETERS on paper, with the
  y axis pointing down.
- ``ProjectedCoord``: easting/northing in a projected grid, in METERS.
- ``LatLon``: geodetic latitude/longitude on WGS84, in DEGREES.

Design Rationale
----------------
Keeping the three spaces in distinct types means a projected coordinate can
never be passed where a map coordinate is expected without an explicit
conversion through a georeferencing.
"""

from dataclasses import dataclass
from typing import Tuple
import numpy as np


@dataclass(frozen=True)
class LatLon:
    """A geographic coordinate on the WGS84 ellipsoid.

    Attributes
    ----------
    latitude : float
        Geodetic latitude in DEGREES. Range: [-90, 90].
    longitude : float
        Geodetic longitude in DEGREES, positive east.

    Examples
    --------
    >>> koblenz = LatLon(50.358944, 7.567778)
    >>> lat_rad, lon_rad = koblenz.to_radians()
    """
    latitude: float  # degrees
    longitude: float  # degrees

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(
                f"Latitude {self.latitude} deg out of range [-90, 90]. "
                f"Did you swap latitude and longitude?"
            )

    def to_radians(self) -> Tuple[float, float]:
        """Convert to radians.

        Returns
        -------
        Tuple[float, float]
            (latitude_radians, longitude_radians)
        """
        return float(np.radians(self.latitude)), float(np.radians(self.longitude))

    @classmethod
    def from_radians(cls, lat_rad: float, lon_rad: float) -> 'LatLon':
        """Create coordinate from radians.

        Parameters
        ----------
        lat_rad : float
            Latitude in radians.
        lon_rad : float
            Longitude in radians.

        Returns
        -------
        LatLon
            Coordinate with internally stored degrees.
        """
        return cls(
            latitude=float(np.degrees(lat_rad)),
            longitude=float(np.degrees(lon_rad))
        )


@dataclass(frozen=True)
class _PlanarCoord:
    """Shared arithmetic of the two planar coordinate types."""
    x: float
    y: float

    def __add__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(self.x + other.x, self.y + other.y)

    def __sub__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return type(self)(self.x - other.x, self.y - other.y)

    def __neg__(self):
        return type(self)(-self.x, -self.y)

    def __mul__(self, factor: float):
        return type(self)(self.x * factor, self.y * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float):
        return type(self)(self.x / divisor, self.y / divisor)

    def length(self) -> float:
        """Euclidean length of the coordinate taken as a vector."""
        return float(np.hypot(self.x, self.y))

    def distance_to(self, other) -> float:
        """Euclidean distance to another coordinate of the same space."""
        return (other - self).length()


@dataclass(frozen=True)
class MapCoord(_PlanarCoord):
    """A position in the map's drawing grid.

    Attributes
    ----------
    x : float
        Position in MILLIMETERS on paper, positive to the right.
    y : float
        Position in MILLIMETERS on paper, positive DOWN.
    """


@dataclass(frozen=True)
class ProjectedCoord(_PlanarCoord):
    """A position in a projected coordinate reference system.

    Attributes
    ----------
    x : float
        Easting in METERS.
    y : float
        Northing in METERS.
    """
