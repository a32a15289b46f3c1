import logging
from numbers import Real
from typing import List, Sequence

from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

from .core import get_converter

logger = logging.getLogger(__name__)


def convert_ring(
    ring: Sequence[Sequence[float]],
    from_type: str,
    to_type: str,
) -> List[List[float]]:
    """
    Convert a ring / polyline of [lng, lat] points between coordinate systems.

    Malformed points (not a pair, non-numeric) are skipped.
    """
    converter = get_converter(from_type, to_type)
    out: List[List[float]] = []
    for pt in ring or []:
        if not isinstance(pt, (list, tuple)) or len(pt) < 2:
            logger.debug("Skip malformed point: %r", pt)
            continue
        try:
            lng = float(pt[0])
            lat = float(pt[1])
        except (TypeError, ValueError):
            logger.debug("Skip non-numeric point: %r", pt)
            continue
        out.append(list(converter(lng, lat).as_tuple()))
    return out


def convert_geometry(geom: BaseGeometry, from_type: str, to_type: str) -> BaseGeometry:
    """
    Convert every vertex of a Shapely geometry, keeping its type.

    Args:
        geom: Any Shapely geometry with (lng, lat) vertices.
        from_type: Source coordinate system ("wgs84", "gcj02" or "bd09").
        to_type: Target coordinate system.

    Returns:
        A new geometry; empty geometries are returned unchanged.
    """
    converter = get_converter(from_type, to_type)
    if geom.is_empty:
        return geom

    def _apply(x, y, z=None):
        # shapely hands over scalars or coordinate arrays depending on version
        if isinstance(x, Real):
            return converter(float(x), float(y)).as_tuple()
        pairs = [converter(float(lng), float(lat)) for lng, lat in zip(x, y)]
        return [p.lng for p in pairs], [p.lat for p in pairs]

    return transform(_apply, geom)
