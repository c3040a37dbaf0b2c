"""
Map Projection Transforms with Distortion Probing.

This module is the only place where the projection engine is touched.
Everything else in the system sees a narrow interface: parse a
specification, transform points forward (geographic to projected) and
inverse (projected to geographic), and measure the local distortion of the
projection at a point.

Scientific Context
------------------
Domain: Cartography, mathematical geodesy

Every projection distorts. At a given point the distortion of a conformal
projection is fully described by two numbers:

1. The grid scale factor: ratio of a short length in the projected grid to
   the corresponding length on the ellipsoid (0.9996 on a UTM central
   meridian, about 1.0 some 180 km off it).
2. The meridian convergence: the angle between grid north and true north.

Both are needed to relate a map drawn on the grid to the real world.

Implementation
--------------
`PyprojTransform` wraps `pyproj` (PROJ). Distortion is measured by a
finite-difference probe that works for any projection PROJ supports,
including non-conformal ones such as Web Mercator.

References
----------
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
- Tissot, A. (1859). Mémoire sur la représentation des surfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple
import math
import warnings

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from common.constants import GEOGRAPHIC_CRS, PROBE_DELTA_RAD
from common.logging_config import get_logger
from common.types import LatLon
from georeferencing.coordinate_models import ground_meters_per_radian

logger = get_logger(__name__)


class ProjectionError(Exception):
    """A projection specification could not be parsed.

    The message is the engine's diagnostic text.
    """


class TransformFailure(Exception):
    """A point could not be transformed, e.g. it lies outside the domain
    of validity of the projection."""


@dataclass(frozen=True)
class GridCompensation:
    """Local distortion of a projection at a point.

    Attributes
    ----------
    convergence_deg : float
        Meridian convergence in degrees: the angle of grid north measured
        clockwise from true north. Positive east of a transverse Mercator
        central meridian in the northern hemisphere.
    grid_scale_factor : float
        Square root of the areal scale of the projection, i.e. the mean
        linear scale factor.
    meridional_scale : float
        Scale factor along the meridian (h).
    parallel_scale : float
        Scale factor along the parallel (k).

    Notes
    -----
    - For a conformal projection: meridional_scale == parallel_scale ==
      grid_scale_factor.
    """
    convergence_deg: float
    grid_scale_factor: float
    meridional_scale: float
    parallel_scale: float


class ProjectionTransform(ABC):
    """Abstract base class for projection engines.

    A transform is created from a specification string and is immutable
    afterwards. Longitude/latitude are always in degrees and in this
    order, projected coordinates always easting/northing.
    """

    @property
    @abstractmethod
    def specification(self) -> str:
        """The specification string this transform was created from."""
        pass

    @abstractmethod
    def forward(self, longitude: float, latitude: float) -> Tuple[float, float]:
        """Transform geographic coordinates to projected coordinates.

        Raises
        ------
        TransformFailure
            If the point cannot be projected.
        """
        pass

    @abstractmethod
    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        """Transform projected coordinates to (longitude, latitude).

        Raises
        ------
        TransformFailure
            If the point cannot be unprojected.
        """
        pass

    @classmethod
    @abstractmethod
    def from_specification(cls, specification: str) -> 'ProjectionTransform':
        """Create a transform for a specification.

        Raises
        ------
        ProjectionError
            If the specification is not understood by the engine.
        """
        pass

    @classmethod
    def parse_specification(cls, specification: str) -> Tuple[bool, str]:
        """Check whether the engine understands a specification.

        Returns
        -------
        Tuple[bool, str]
            (valid, diagnostic_text); the diagnostic is empty when valid.
        """
        try:
            cls.from_specification(specification)
        except ProjectionError as e:
            return False, str(e)
        return True, ""


class PyprojTransform(ProjectionTransform):
    """Projection transform backed by pyproj/PROJ.

    Parameters
    ----------
    specification : str
        Anything `pyproj.CRS.from_user_input` accepts: a PROJ string
        ("+proj=utm +zone=32 +datum=WGS84"), an authority code
        ("EPSG:25832"), the legacy "+init=epsg:25832" syntax, or WKT.
    geographic_crs : str
        CRS of the latitude/longitude side (default: WGS84).

    Notes
    -----
    Each instance owns its transformers. Nothing is shared between
    instances, so independent georeferencings never contend for engine
    state.
    """

    def __init__(self, specification: str, geographic_crs: str = GEOGRAPHIC_CRS):
        self._specification = specification

        # PROJ warns about the legacy +init syntax, which map files still use.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", FutureWarning)
            try:
                self._crs_geo = CRS.from_user_input(geographic_crs)
                self._crs_proj = CRS.from_user_input(specification)
                self._to_proj = Transformer.from_crs(self._crs_geo, self._crs_proj, always_xy=True)
                self._to_geo = Transformer.from_crs(self._crs_proj, self._crs_geo, always_xy=True)
            except (CRSError, ProjError) as e:
                raise ProjectionError(str(e) or f"Invalid specification: {specification!r}") from e

        logger.debug(f"Parsed {specification!r} as {self._crs_proj.name!r}")

    @classmethod
    def from_specification(cls, specification: str) -> 'PyprojTransform':
        return cls(specification)

    @property
    def specification(self) -> str:
        return self._specification

    @property
    def crs(self) -> CRS:
        """The parsed projected CRS."""
        return self._crs_proj

    def forward(self, longitude: float, latitude: float) -> Tuple[float, float]:
        return self._checked(self._to_proj, longitude, latitude)

    def inverse(self, x: float, y: float) -> Tuple[float, float]:
        return self._checked(self._to_geo, x, y)

    @staticmethod
    def _checked(transformer: Transformer, a: float, b: float) -> Tuple[float, float]:
        try:
            u, v = transformer.transform(a, b, errcheck=True)
        except ProjError as e:
            raise TransformFailure(str(e)) from e
        if not (math.isfinite(u) and math.isfinite(v)):
            raise TransformFailure(f"No finite result for ({a}, {b})")
        return float(u), float(v)


def compute_grid_compensation(
    transform: ProjectionTransform,
    lat_lon: LatLon,
    delta: float = PROBE_DELTA_RAD
) -> GridCompensation:
    """Measure the local distortion of a projection numerically.

    The point is offset by ±delta along the meridian and along the parallel
    and projected. Central differences give the Jacobian of the projection
    with respect to ground lengths on the WGS84 ellipsoid.

    Parameters
    ----------
    transform : ProjectionTransform
        The projection to analyze.
    lat_lon : LatLon
        Location of the probe.
    delta : float
        Angular offset in radians for numerical differentiation.

    Returns
    -------
    GridCompensation
        Convergence and scale factors at the point.

    Raises
    ------
    TransformFailure
        If any probe point cannot be projected, or the point is a pole.
    """
    lat_rad, lon_rad = lat_lon.to_radians()
    cos_lat = np.cos(lat_rad)
    if abs(cos_lat) < 1e-9:
        raise TransformFailure("Grid compensation is undefined at the poles")

    def project(d_lat: float, d_lon: float) -> Tuple[float, float]:
        return transform.forward(
            float(np.degrees(lon_rad + d_lon)),
            float(np.degrees(lat_rad + d_lat))
        )

    # ∂x/∂λ, ∂y/∂λ (east-west)
    x_e, y_e = project(0.0, delta)
    x_w, y_w = project(0.0, -delta)
    dxdl = (x_e - x_w) / (2 * delta)
    dydl = (y_e - y_w) / (2 * delta)

    # ∂x/∂φ, ∂y/∂φ (north-south)
    x_n, y_n = project(delta, 0.0)
    x_s, y_s = project(-delta, 0.0)
    dxdp = (x_n - x_s) / (2 * delta)
    dydp = (y_n - y_s) / (2 * delta)

    # Grid displacement per ground meter towards east and towards true north
    per_rad_lat, per_rad_lon = ground_meters_per_radian(lat_rad)
    east = np.array([dxdl, dydl]) / per_rad_lon
    north = np.array([dxdp, dydp]) / per_rad_lat

    h = float(np.hypot(*north))
    k = float(np.hypot(*east))
    det = east[0] * north[1] - east[1] * north[0]

    # True north points at -convergence on the grid
    convergence = -float(np.degrees(np.arctan2(north[0], north[1])))

    return GridCompensation(
        convergence_deg=convergence,
        grid_scale_factor=float(np.sqrt(abs(det))),
        meridional_scale=h,
        parallel_scale=k
    )
