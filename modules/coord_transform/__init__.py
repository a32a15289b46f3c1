"""
Convenience exports for the coordinate conversion helpers.
"""

from .core import (
    batch_convert,
    bd09_to_gcj02,
    bd09_to_wgs84,
    convert,
    gcj02_to_bd09,
    gcj02_to_wgs84,
    get_converter,
    out_of_china,
    transform_lat,
    transform_lng,
    wgs84_to_bd09,
    wgs84_to_gcj02,
)
from .geometry import convert_geometry, convert_ring
from .schemas import Coordinate, CoordType

__all__ = [
    "Coordinate",
    "CoordType",
    "batch_convert",
    "bd09_to_gcj02",
    "bd09_to_wgs84",
    "convert",
    "convert_geometry",
    "convert_ring",
    "gcj02_to_bd09",
    "gcj02_to_wgs84",
    "get_converter",
    "out_of_china",
    "transform_lat",
    "transform_lng",
    "wgs84_to_bd09",
    "wgs84_to_gcj02",
]
