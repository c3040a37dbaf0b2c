"""
Common utilities and infrastructure for the Map Georeferencing System.

This package provides foundational components used across all modules:
- Geodetic constants and georeferencing defaults
- Unit registry for map, ground and angle measures
- Coordinate value types
- Logging infrastructure
"""

from common.constants import GeodeticConstants
from common.units import ureg, Q_, map_to_ground_length, angle_degrees
from common.types import (
    LatLon,
    MapCoord,
    ProjectedCoord,
)
from common.logging_config import get_logger

__all__ = [
    "GeodeticConstants",
    "ureg",
    "Q_",
    "map_to_ground_length",
    "angle_degrees",
    "LatLon",
    "MapCoord",
    "ProjectedCoord",
    "get_logger",
]
