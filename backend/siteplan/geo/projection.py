"""Geographic ↔ local metric projection (WGS84 ↔ UTM) via pyproj.

Geometries use (x=lon, y=lat) order on the geographic side. The UTM zone is
picked from a representative coordinate of the input geometry.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Protocol

from pyproj import CRS, Transformer
from shapely.geometry import LineString, MultiPolygon, Point, Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"


class Projection(Protocol):
    def to_metric(self, geometry: BaseGeometry) -> tuple[BaseGeometry, CRS]: ...

    def to_geographic(self, geometry: BaseGeometry, crs: CRS) -> BaseGeometry: ...


def utm_zone(longitude: float) -> int:
    """6°-wide UTM zone number, clamped to 1..60."""
    zone = int((longitude + 180) / 6) + 1
    return min(max(zone, 1), 60)


def utm_crs(longitude: float, latitude: float) -> CRS:
    epsg = (32600 if latitude >= 0 else 32700) + utm_zone(longitude)
    return CRS.from_epsg(epsg)


def representative_coordinate(geometry: BaseGeometry) -> tuple[float, float]:
    """First vertex for simple geometries, centroid otherwise."""
    if isinstance(geometry, Point):
        return (geometry.x, geometry.y)
    if isinstance(geometry, LineString) and not geometry.is_empty:
        return geometry.coords[0]
    if isinstance(geometry, Polygon) and not geometry.is_empty:
        return geometry.exterior.coords[0]
    if isinstance(geometry, MultiPolygon) and not geometry.is_empty:
        return geometry.geoms[0].exterior.coords[0]
    c = geometry.centroid
    return (c.x, c.y)


@lru_cache(maxsize=32)
def _transformer(source: str, target: str) -> Transformer:
    return Transformer.from_crs(source, target, always_xy=True)


class UtmProjection:
    """Projection into the UTM zone that contains the geometry."""

    def to_metric(self, geometry: BaseGeometry) -> tuple[BaseGeometry, CRS]:
        lon, lat = representative_coordinate(geometry)[:2]
        crs = utm_crs(lon, lat)
        return self.to_crs(geometry, crs), crs

    def to_crs(self, geometry: BaseGeometry, crs: CRS) -> BaseGeometry:
        transformer = _transformer(WGS84, crs.srs)
        return transform(transformer.transform, geometry)

    def to_geographic(self, geometry: BaseGeometry, crs: CRS) -> BaseGeometry:
        transformer = _transformer(crs.srs, WGS84)
        return transform(transformer.transform, geometry)
