"""
Georeferencing Module for the Map Georeferencing System.

All relations between map, projected and geographic coordinates are
computed here. The projection engine is only reached through
`georeferencing.projections`.

This module provides:
- WGS84 ellipsoid model and radii of curvature
- Geodesic distance calculations
- Projection transforms with grid compensation probing
- CRS specification templates
- The Georeferencing of a map document
"""

from georeferencing.coordinate_models import (
    EllipsoidParameters,
    WGS84Ellipsoid,
    radius_of_curvature_meridian,
    radius_of_curvature_prime_vertical,
    ground_meters_per_radian,
    web_mercator_scale_factors,
)

from georeferencing.distance_calculations import (
    GeodesicResult,
    geodesic_inverse,
    geodesic_distance,
    compute_azimuth,
)

from georeferencing.projections import (
    ProjectionError,
    TransformFailure,
    GridCompensation,
    ProjectionTransform,
    PyprojTransform,
    compute_grid_compensation,
)

from georeferencing.crs_template import (
    CRSTemplateParameter,
    FullSpecParameter,
    IntRangeParameter,
    UTMZoneParameter,
    CRSTemplate,
    CRSTemplateRegistry,
    substitute_placeholders,
)

from georeferencing.georeferencing import (
    GeoreferencingState,
    GeoreferencingConfig,
    Georeferencing,
)

__all__ = [
    # Coordinate models
    "EllipsoidParameters",
    "WGS84Ellipsoid",
    "radius_of_curvature_meridian",
    "radius_of_curvature_prime_vertical",
    "ground_meters_per_radian",
    "web_mercator_scale_factors",
    # Distance calculations
    "GeodesicResult",
    "geodesic_inverse",
    "geodesic_distance",
    "compute_azimuth",
    # Projections
    "ProjectionError",
    "TransformFailure",
    "GridCompensation",
    "ProjectionTransform",
    "PyprojTransform",
    "compute_grid_compensation",
    # CRS templates
    "CRSTemplateParameter",
    "FullSpecParameter",
    "IntRangeParameter",
    "UTMZoneParameter",
    "CRSTemplate",
    "CRSTemplateRegistry",
    "substitute_placeholders",
    # Georeferencing
    "GeoreferencingState",
    "GeoreferencingConfig",
    "Georeferencing",
]
