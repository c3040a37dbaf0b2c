"""
Georeferencing of a Map Document.

This module relates the three coordinate spaces of a map:

    map (mm on paper)  <-- affine -->  projected (m)  <-- projection -->  geographic (deg)

The affine part is owned here. It is determined by a pair of reference
points (one map coordinate and the projected coordinate of the same spot),
a linear scale and a rotation:

- scale: combined scale factor × auxiliary scale factor × scale denominator
- rotation: grivation, the angle from grid north to magnetic north, which is
  the "up" direction of the map

The projection part is delegated to a `ProjectionTransform`.

Scale Factors
-------------
The combined scale factor is the ratio of a projected (grid) length to the
corresponding ground length. Setting a geographic reference point measures
it from the projection (grid scale factor). The auxiliary scale factor is an
independent correction, typically the elevation factor; a ground length is
then the ellipsoidal length divided by the auxiliary factor. Both factors
survive changes of the projected CRS.

Angles
------
- convergence: grid north measured clockwise from true north, taken from
  the projection at the reference point
- declination: magnetic north measured clockwise from true north
- grivation = declination - convergence

Declination and grivation are kept to 0.01°. The rounding residue of the
grivation is reported as the grivation error.
"""

from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Callable, Dict, Optional, Sequence, Tuple, Union
import math

import numpy as np
import pint

from common.constants import (
    ANGLE_DECIMALS,
    DEFAULT_SCALE_DENOMINATOR,
    GEOGRAPHIC_CRS,
    LOCAL_CRS_ID,
    PROBE_DELTA_RAD,
)
from common.logging_config import get_logger
from common.types import LatLon, MapCoord, ProjectedCoord
from common.units import angle_degrees, map_to_ground_length
from georeferencing.crs_template import CRSTemplateRegistry
from georeferencing.projections import (
    GridCompensation,
    ProjectionError,
    ProjectionTransform,
    PyprojTransform,
    TransformFailure,
    compute_grid_compensation,
)

logger = get_logger(__name__)


class GeoreferencingState(Enum):
    """Whether a real-world CRS is configured."""
    LOCAL = "Local"
    PROJECTED = "Projected"


@dataclass
class GeoreferencingConfig:
    """Configuration for a georeferencing.

    Attributes
    ----------
    geographic_crs : str
        CRS of all latitude/longitude values.
    probe_delta_rad : float
        Angular offset used when measuring convergence and grid scale factor.
    angle_decimals : int
        Decimal places kept for declination and grivation (degrees).
    default_scale_denominator : int
        Scale denominator of a new georeferencing.
    """
    geographic_crs: str = GEOGRAPHIC_CRS
    probe_delta_rad: float = PROBE_DELTA_RAD
    angle_decimals: int = ANGLE_DECIMALS
    default_scale_denominator: int = DEFAULT_SCALE_DENOMINATOR


TransformFactory = Callable[[str], ProjectionTransform]
Angle = Union[float, pint.Quantity]


class Georeferencing:
    """The georeferencing of one map document.

    A new georeferencing is in LOCAL state: no real-world CRS, scale
    1:1000, unit scale factors, no rotation, both reference points at the
    origin.

    All state changes go through the setters, which recompute every derived
    quantity (convergence, grivation, affine transform) from the primary
    inputs. Conversions never modify state.

    Parameters
    ----------
    config : GeoreferencingConfig, optional
        Engine and rounding settings.
    transform_factory : callable, optional
        Creates a `ProjectionTransform` from a specification string and
        raises `ProjectionError` for invalid ones. Default: `PyprojTransform`.

    Examples
    --------
    >>> georef = Georeferencing()
    >>> georef.set_projected_crs("UTM", "+proj=utm +zone=32 +datum=WGS84", ["32"])
    True
    >>> georef.set_geographic_ref_point(LatLon(50.0, 9.0))
    >>> round(georef.get_combined_scale_factor(), 4)
    0.9996

    Notes
    -----
    Not safe for concurrent mutation. Concurrent conversions are fine as
    long as no setter runs.
    """

    def __init__(
        self,
        config: Optional[GeoreferencingConfig] = None,
        transform_factory: Optional[TransformFactory] = None
    ):
        self.config = config or GeoreferencingConfig()
        if transform_factory is None:
            transform_factory = partial(PyprojTransform, geographic_crs=self.config.geographic_crs)
        self._transform_factory = transform_factory

        self._state = GeoreferencingState.LOCAL
        self._scale_denominator = self.config.default_scale_denominator
        self._combined_scale_factor = 1.0
        self._auxiliary_scale_factor = 1.0
        self._grid_scale_factor = 1.0
        self._declination = 0.0
        self._grivation = 0.0
        self._grivation_error = 0.0
        self._convergence = 0.0
        self._map_ref_point = MapCoord(0.0, 0.0)
        self._projected_ref_point = ProjectedCoord(0.0, 0.0)
        self._geographic_ref_point: Optional[LatLon] = None

        self._crs_id = LOCAL_CRS_ID
        self._crs_spec = ""
        self._crs_parameters: Tuple[str, ...] = ()
        self._error_text = ""
        self._projection: Optional[ProjectionTransform] = None

        self._update_transformation()

    # =========================================================================
    # State and CRS
    # =========================================================================

    def get_state(self) -> GeoreferencingState:
        return self._state

    def is_local(self) -> bool:
        return self._state is GeoreferencingState.LOCAL

    def is_valid(self) -> bool:
        """True in LOCAL state, or if the projected CRS spec was parsed."""
        return self.is_local() or self._projection is not None

    def get_error_text(self) -> str:
        """Diagnostic of the last rejected specification, empty when valid."""
        return self._error_text

    def set_projected_crs(
        self,
        crs_id: str,
        spec: str,
        parameters: Sequence[str] = ()
    ) -> bool:
        """Set the projected coordinate reference system.

        Parameters
        ----------
        crs_id : str
            Identifier, usually a template id such as "EPSG" or "UTM".
        spec : str
            Complete projection specification.
        parameters : sequence of str
            Template parameter values the spec was built from.

        Returns
        -------
        bool
            Whether the specification was accepted. Callers must check
            the result (or `is_valid()`) after every call.

        Notes
        -----
        On success the reference points are reconciled: a known geographic
        reference point is projected into the new CRS, otherwise the
        geographic reference point is derived from the projected one.
        Convergence and grivation are recomputed; declination, the combined
        and the auxiliary scale factor are kept.

        On failure the id, spec and parameters are still stored so they can
        be shown and corrected, the state becomes an invalid PROJECTED
        state, and `get_error_text()` holds the diagnostic. Reference
        points and scale factors keep their last values. Without a
        projection there is no convergence: it drops to zero, the grid
        scale factor to 1, and the grivation becomes the declination.
        """
        parameters = tuple(str(p) for p in parameters)

        try:
            projection = self._transform_factory(spec)
        except ProjectionError as e:
            self._state = GeoreferencingState.PROJECTED
            self._crs_id, self._crs_spec, self._crs_parameters = crs_id, spec, parameters
            self._projection = None
            self._error_text = str(e) or f"Invalid specification: {spec!r}"
            self._convergence = 0.0
            self._grid_scale_factor = 1.0
            self._update_grivation()
            self._update_transformation()
            logger.warning(f"Rejected projected CRS {crs_id!r} ({spec!r}): {self._error_text}")
            return False

        self._state = GeoreferencingState.PROJECTED
        self._crs_id, self._crs_spec, self._crs_parameters = crs_id, spec, parameters
        self._projection = projection
        self._error_text = ""
        logger.info(f"Projected CRS set to {crs_id!r}: {spec}")

        if self._geographic_ref_point is not None:
            projected, ok = self.to_projected_coords(self._geographic_ref_point)
            if ok:
                self._projected_ref_point = projected
            else:
                logger.warning(
                    f"Geographic reference point {self._geographic_ref_point} "
                    f"is outside the domain of {crs_id!r}"
                )
        else:
            lat_lon, ok = self.to_geographic_coords(self._projected_ref_point)
            if ok:
                self._geographic_ref_point = lat_lon

        self._update_grid_compensation(update_grivation=True, update_scale_factor=False)
        return True

    def set_local_state(self) -> None:
        """Drop the projected CRS and return to LOCAL state.

        The affine transform keeps its reference points and scale factors;
        grivation becomes the declination since convergence is zero.
        """
        self._state = GeoreferencingState.LOCAL
        self._crs_id = LOCAL_CRS_ID
        self._crs_spec = ""
        self._crs_parameters = ()
        self._projection = None
        self._error_text = ""
        self._convergence = 0.0
        self._grid_scale_factor = 1.0
        self._update_grivation()
        self._update_transformation()
        logger.info("Georeferencing set to local state")

    def get_projected_crs_id(self) -> str:
        return self._crs_id

    def get_projected_crs_spec(self) -> str:
        return self._crs_spec

    def get_projected_crs_parameters(self) -> Tuple[str, ...]:
        return self._crs_parameters

    def get_projected_crs_name(self) -> str:
        """Display name of the projected CRS: the template name if the id
        names a template, else the id itself."""
        if self.is_local():
            return LOCAL_CRS_ID
        template = CRSTemplateRegistry().find(self._crs_id)
        return template.name if template else self._crs_id

    def get_projected_coordinates_name(self) -> str:
        """Display label of projected coordinates, e.g. "EPSG 5514 coordinates"."""
        if self.is_local():
            return "Local coordinates"
        template = CRSTemplateRegistry().find(self._crs_id)
        if template is None:
            return self._crs_id
        return template.coordinates_name(self._crs_parameters)

    # =========================================================================
    # Reference points
    # =========================================================================

    def get_map_ref_point(self) -> MapCoord:
        return self._map_ref_point

    def set_map_ref_point(self, point: MapCoord) -> None:
        self._map_ref_point = point
        self._update_transformation()

    def get_projected_ref_point(self) -> ProjectedCoord:
        return self._projected_ref_point

    def set_projected_ref_point(
        self,
        point: ProjectedCoord,
        update_grivation: bool = True,
        update_scale_factor: bool = True
    ) -> None:
        """Set the projected coordinates of the reference point.

        With a valid projected CRS the geographic reference point follows,
        and convergence and grid scale factor are measured there. Otherwise
        the geographic reference point becomes unknown, so that the next
        valid CRS keeps this projected reference point.

        Parameters
        ----------
        point : ProjectedCoord
            New projected reference point.
        update_grivation : bool
            Recompute grivation from the declination. If False the
            grivation is kept and the declination follows instead.
        update_scale_factor : bool
            Replace the combined scale factor with the measured grid scale
            factor.
        """
        self._projected_ref_point = point
        if self._projection is None:
            # Cannot be unprojected now; the next valid CRS derives it again.
            self._geographic_ref_point = None
            self._update_transformation()
            return

        lat_lon, ok = self.to_geographic_coords(point)
        self._geographic_ref_point = lat_lon if ok else None
        if not ok:
            logger.warning(f"Projected reference point {point} cannot be unprojected")
        self._update_grid_compensation(update_grivation, update_scale_factor)

    def get_geographic_ref_point(self) -> Optional[LatLon]:
        """Geographic reference point, or None if it is not known."""
        return self._geographic_ref_point

    def set_geographic_ref_point(
        self,
        lat_lon: LatLon,
        update_grivation: bool = True,
        update_scale_factor: bool = True
    ) -> None:
        """Set the geographic coordinates of the reference point.

        With a valid projected CRS the point is projected to become the
        projected reference point, and the convergence and grid scale
        factor of the projection are measured there. In LOCAL state the
        point is only stored; convergence stays zero.

        Parameters
        ----------
        lat_lon : LatLon
            New geographic reference point.
        update_grivation : bool
            Recompute grivation from the declination. If False the
            grivation is kept and the declination follows instead.
        update_scale_factor : bool
            Replace the combined scale factor with the measured grid scale
            factor.

        Notes
        -----
        A point outside the domain of the projection is rejected with a
        warning and leaves the georeferencing unchanged.
        """
        if self._projection is None:
            self._geographic_ref_point = lat_lon
            return

        projected, ok = self.to_projected_coords(lat_lon)
        if not ok:
            logger.warning(
                f"Geographic reference point {lat_lon} is outside the domain of "
                f"{self._crs_id!r}; keeping the previous reference point"
            )
            return

        self._geographic_ref_point = lat_lon
        self._projected_ref_point = projected
        self._update_grid_compensation(update_grivation, update_scale_factor)

    # =========================================================================
    # Scale
    # =========================================================================

    def get_scale_denominator(self) -> int:
        return self._scale_denominator

    def set_scale_denominator(self, value: int) -> None:
        """Set the nominal map scale denominator (e.g. 15000 for 1:15000)."""
        if isinstance(value, bool) or int(value) != value or value <= 0:
            raise ValueError(f"Scale denominator must be a positive integer, got {value!r}")
        self._scale_denominator = int(value)
        self._update_transformation()

    def get_combined_scale_factor(self) -> float:
        return self._combined_scale_factor

    def set_combined_scale_factor(self, value: float) -> None:
        """Set the ratio of grid length to ground length.

        Raises
        ------
        ValueError
            If the value is not a finite, strictly positive number.
        """
        self._combined_scale_factor = self._checked_scale_factor(value, "Combined scale factor")
        self._update_transformation()

    def get_auxiliary_scale_factor(self) -> float:
        return self._auxiliary_scale_factor

    def set_auxiliary_scale_factor(self, value: float) -> None:
        """Set the auxiliary (e.g. elevation) scale factor.

        Raises
        ------
        ValueError
            If the value is not a finite, strictly positive number.
        """
        self._auxiliary_scale_factor = self._checked_scale_factor(value, "Auxiliary scale factor")
        self._update_transformation()

    def get_grid_scale_factor(self) -> float:
        """Grid scale factor last measured from the projection (1.0 if none)."""
        return self._grid_scale_factor

    @staticmethod
    def _checked_scale_factor(value: float, what: str) -> float:
        value = float(value)
        if not (math.isfinite(value) and value > 0.0):
            raise ValueError(f"{what} must be strictly positive, got {value}")
        return value

    # =========================================================================
    # Orientation
    # =========================================================================

    def get_declination(self) -> float:
        return self._declination

    def set_declination(self, value: Angle) -> None:
        """Set the magnetic declination and recompute the grivation.

        Parameters
        ----------
        value : float or pint.Quantity
            Declination in degrees (bare numbers) or as an angle quantity.
        """
        self._declination = self._round_angle(angle_degrees(value))
        self._update_grivation()
        self._update_transformation()

    def get_grivation(self) -> float:
        return self._grivation

    def set_grivation(self, value: Angle) -> None:
        """Set the grivation directly; the declination follows."""
        self._grivation = self._round_angle(angle_degrees(value))
        self._declination = self._round_angle(self._grivation + self._convergence)
        self._grivation_error = (self._declination - self._convergence) - self._grivation
        self._update_transformation()

    def get_grivation_error(self) -> float:
        return self._grivation_error

    def get_convergence(self) -> float:
        return self._convergence

    def _round_angle(self, value: float) -> float:
        factor = 10 ** self.config.angle_decimals
        return float(np.floor(value * factor + 0.5) / factor)

    def _update_grivation(self) -> None:
        exact = self._declination - self._convergence
        self._grivation = self._round_angle(exact)
        self._grivation_error = exact - self._grivation

    def _update_grid_compensation(
        self,
        update_grivation: bool = True,
        update_scale_factor: bool = True
    ) -> None:
        """Measure convergence and grid scale factor at the reference point,
        then rebuild everything that depends on them."""
        compensation: Optional[GridCompensation] = None
        if self._projection is not None and self._geographic_ref_point is not None:
            try:
                compensation = compute_grid_compensation(
                    self._projection,
                    self._geographic_ref_point,
                    self.config.probe_delta_rad
                )
            except TransformFailure as e:
                logger.warning(f"Grid compensation unavailable at {self._geographic_ref_point}: {e}")

        if compensation is None:
            self._convergence = 0.0
            self._grid_scale_factor = 1.0
        else:
            self._convergence = compensation.convergence_deg
            self._grid_scale_factor = compensation.grid_scale_factor
            if update_scale_factor:
                self._combined_scale_factor = compensation.grid_scale_factor
            logger.debug(
                f"Grid compensation at {self._geographic_ref_point}: "
                f"convergence={compensation.convergence_deg:.6f} deg, "
                f"scale={compensation.grid_scale_factor:.8f}"
            )

        if update_grivation:
            self._update_grivation()
        else:
            self._declination = self._round_angle(self._grivation + self._convergence)
            self._grivation_error = (self._declination - self._convergence) - self._grivation

        self._update_transformation()

    # =========================================================================
    # Affine map <-> projected transform
    # =========================================================================

    def _update_transformation(self) -> None:
        """Rebuild the map <-> projected matrices from the primary state.

        map -> projected:
            p = P0 + s * R(g) * F * (m - M0)
        with F = diag(1, -1) flipping the downward map y axis and R(g) the
        clockwise rotation by the grivation g.
        """
        scale = (
            self._combined_scale_factor
            * self._auxiliary_scale_factor
            * self._scale_denominator / 1000.0
        )
        g = np.radians(self._grivation)
        rotation = np.array([
            [np.cos(g), np.sin(g)],
            [-np.sin(g), np.cos(g)],
        ])
        flip = np.diag([1.0, -1.0])

        m0 = np.array([self._map_ref_point.x, self._map_ref_point.y])
        p0 = np.array([self._projected_ref_point.x, self._projected_ref_point.y])

        linear = scale * rotation @ flip
        from_map = np.eye(3)
        from_map[:2, :2] = linear
        from_map[:2, 2] = p0 - linear @ m0

        # R is orthonormal and F its own inverse, so the inverse is exact.
        linear_inv = flip @ rotation.T / scale
        to_map = np.eye(3)
        to_map[:2, :2] = linear_inv
        to_map[:2, 2] = m0 - linear_inv @ p0

        self._from_map = from_map
        self._to_map = to_map

    @staticmethod
    def _apply(matrix: np.ndarray, x: float, y: float) -> Tuple[float, float]:
        u, v, _ = matrix @ np.array([x, y, 1.0])
        return float(u), float(v)

    # =========================================================================
    # Conversions
    # =========================================================================

    def to_projected_coords(self, lat_lon: LatLon) -> Tuple[ProjectedCoord, bool]:
        """Project geographic coordinates.

        Returns
        -------
        Tuple[ProjectedCoord, bool]
            The projected coordinates and whether the transform succeeded.
            Fails in LOCAL state, with an invalid CRS, and for points
            outside the domain of the projection.
        """
        if self._projection is None:
            return ProjectedCoord(0.0, 0.0), False
        try:
            x, y = self._projection.forward(lat_lon.longitude, lat_lon.latitude)
        except TransformFailure as e:
            logger.debug(f"Cannot project {lat_lon}: {e}")
            return ProjectedCoord(0.0, 0.0), False
        return ProjectedCoord(x, y), True

    def to_geographic_coords(self, projected: ProjectedCoord) -> Tuple[LatLon, bool]:
        """Unproject projected coordinates; same failure contract as
        `to_projected_coords`."""
        if self._projection is None:
            return LatLon(0.0, 0.0), False
        try:
            longitude, latitude = self._projection.inverse(projected.x, projected.y)
            return LatLon(latitude, longitude), True
        except (TransformFailure, ValueError) as e:
            logger.debug(f"Cannot unproject {projected}: {e}")
            return LatLon(0.0, 0.0), False

    def to_map_coords(self, projected: ProjectedCoord) -> MapCoord:
        """Convert projected coordinates to map coordinates (affine, exact)."""
        return MapCoord(*self._apply(self._to_map, projected.x, projected.y))

    def map_to_projected(self, map_coord: MapCoord) -> ProjectedCoord:
        """Convert map coordinates to projected coordinates (affine, exact)."""
        return ProjectedCoord(*self._apply(self._from_map, map_coord.x, map_coord.y))

    def lat_lon_to_map(self, lat_lon: LatLon) -> Tuple[MapCoord, bool]:
        """Geographic to map coordinates; fails where projecting fails."""
        projected, ok = self.to_projected_coords(lat_lon)
        return self.to_map_coords(projected), ok

    def map_to_lat_lon(self, map_coord: MapCoord) -> Tuple[LatLon, bool]:
        """Map to geographic coordinates; fails where unprojecting fails."""
        return self.to_geographic_coords(self.map_to_projected(map_coord))

    def map_length_to_ground(self, length: Union[float, pint.Quantity]) -> float:
        """Ground length in meters of a length on the map (mm if bare)."""
        return float(map_to_ground_length(length, self._scale_denominator).magnitude)

    # =========================================================================
    # Snapshot
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        """The persistent state, as plain JSON-compatible values."""
        geo = self._geographic_ref_point
        return {
            "state": self._state.value,
            "projected_crs_id": self._crs_id,
            "projected_crs_spec": self._crs_spec,
            "projected_crs_parameters": list(self._crs_parameters),
            "map_ref_point": [self._map_ref_point.x, self._map_ref_point.y],
            "projected_ref_point": [self._projected_ref_point.x, self._projected_ref_point.y],
            "geographic_ref_point": None if geo is None else [geo.latitude, geo.longitude],
            "scale_denominator": self._scale_denominator,
            "combined_scale_factor": self._combined_scale_factor,
            "auxiliary_scale_factor": self._auxiliary_scale_factor,
            "declination": self._declination,
        }

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        config: Optional[GeoreferencingConfig] = None,
        transform_factory: Optional[TransformFactory] = None
    ) -> 'Georeferencing':
        """Rebuild a georeferencing from `to_dict` output.

        The setters are replayed, so derived values (convergence, grivation)
        are recomputed rather than trusted.
        """
        georef = cls(config, transform_factory)
        georef.set_scale_denominator(data.get("scale_denominator", georef.config.default_scale_denominator))
        georef.set_map_ref_point(MapCoord(*data.get("map_ref_point", (0.0, 0.0))))
        georef.set_projected_ref_point(ProjectedCoord(*data.get("projected_ref_point", (0.0, 0.0))))

        state = GeoreferencingState(data.get("state", GeoreferencingState.LOCAL.value))
        geo = data.get("geographic_ref_point")
        if state is GeoreferencingState.PROJECTED:
            georef.set_projected_crs(
                data["projected_crs_id"],
                data["projected_crs_spec"],
                data.get("projected_crs_parameters", ())
            )
        elif geo is not None:
            georef.set_geographic_ref_point(LatLon(*geo))

        georef.set_combined_scale_factor(data.get("combined_scale_factor", 1.0))
        georef.set_auxiliary_scale_factor(data.get("auxiliary_scale_factor", 1.0))
        georef.set_declination(data.get("declination", 0.0))
        return georef
