"""Restriction geometries — areas the layout must keep clear of.

Restrictions come from a ``RestrictionSource``. Each type has a clearance
distance: only restrictions closer to the plot than that distance are
returned, and point/line restrictions are grown by it before they are
subtracted from the grid.

File-backed data uses one GeoJSON FeatureCollection per type with
coordinates stored as [lat, lon].
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pyproj import CRS
from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry

from siteplan.geo.projection import UtmProjection

logger = logging.getLogger(__name__)


class RestrictionType(str, enum.Enum):
    HERITAGE_SITE = "heritage_site"
    HERITAGE_AREA = "heritage_area"
    PROTECTION_ZONE = "protection_zone"
    BUFFER_ZONE = "buffer_zone"
    BUILDINGS = "buildings"
    ROADS = "roads"


CLEARANCES: dict[RestrictionType, float] = {
    RestrictionType.HERITAGE_SITE: 200.0,
    RestrictionType.HERITAGE_AREA: 100.0,
    RestrictionType.PROTECTION_ZONE: 50.0,
    RestrictionType.BUFFER_ZONE: 20.0,
    RestrictionType.BUILDINGS: 2.0,
    RestrictionType.ROADS: 1.0,
}

FILE_NAMES: dict[RestrictionType, str] = {
    RestrictionType.HERITAGE_SITE: "okn_place.json",
    RestrictionType.HERITAGE_AREA: "okn_granica.json",
    RestrictionType.PROTECTION_ZONE: "okn_zona.json",
    RestrictionType.BUFFER_ZONE: "okn_zashit.json",
    RestrictionType.BUILDINGS: "buildings.json",
    RestrictionType.ROADS: "roads.json",
}


@dataclass(frozen=True)
class Restriction:
    geometry: BaseGeometry
    type: RestrictionType
    name: str = ""

    def exclusion_polygon(self, clearance: float | None = None) -> Polygon | None:
        """Polygon to subtract: polygons as-is, other geometries grown by the clearance."""
        if self.geometry.is_empty:
            return None
        if isinstance(self.geometry, Polygon):
            return self.geometry
        grown = self.geometry.buffer(CLEARANCES[self.type] if clearance is None else clearance)
        return grown if isinstance(grown, Polygon) and not grown.is_empty else None


class RestrictionSource(Protocol):
    def get_restrictions_near(
        self,
        geometry: BaseGeometry,
        restriction_type: RestrictionType,
        clearance: float,
    ) -> list[Restriction]: ...


def within_clearance(geometry: BaseGeometry, items: list[Restriction], clearance: float) -> list[Restriction]:
    return [r for r in items if geometry.distance(r.geometry) < clearance]


class InMemoryRestrictionSource:
    """Restrictions held in memory, already in the plot's metric frame."""

    def __init__(self, restrictions: list[Restriction] | None = None) -> None:
        self.restrictions = list(restrictions or [])

    def get_restrictions_near(
        self,
        geometry: BaseGeometry,
        restriction_type: RestrictionType,
        clearance: float,
    ) -> list[Restriction]:
        items = [r for r in self.restrictions if r.type == restriction_type]
        return within_clearance(geometry, items, clearance)


class GeoJsonRestrictionSource:
    """One GeoJSON file per restriction type under ``data_dir``.

    With ``project=True`` features are projected on load, into ``crs`` when
    given (the plot's frame) and into their own UTM zone otherwise. With
    ``project=False`` coordinates are used as given. Every file is parsed
    once, when the source is built; the instance is read-only afterwards.
    """

    def __init__(self, data_dir: str | Path, project: bool = True, crs: CRS | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.project = project
        self.crs = crs
        self._projection = UtmProjection()
        self._restrictions: dict[RestrictionType, list[Restriction]] = {
            rtype: self._read(rtype) for rtype in RestrictionType
        }

    def get_restrictions_near(
        self,
        geometry: BaseGeometry,
        restriction_type: RestrictionType,
        clearance: float,
    ) -> list[Restriction]:
        return within_clearance(geometry, self.load(restriction_type), clearance)

    def load(self, restriction_type: RestrictionType) -> list[Restriction]:
        return self._restrictions[restriction_type]

    def _read(self, restriction_type: RestrictionType) -> list[Restriction]:
        path = self.data_dir / FILE_NAMES[restriction_type]
        if not path.exists():
            logger.debug("No restriction file %s", path)
            return []
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
        restrictions = self.parse(data, restriction_type)
        logger.info("Loaded %d %s restrictions", len(restrictions), restriction_type.value)
        return restrictions

    def parse(self, data: dict, restriction_type: RestrictionType) -> list[Restriction]:
        """Polygon and Point features; malformed or other features are skipped."""
        result: list[Restriction] = []
        for feature in data.get("features", []):
            try:
                geom = _feature_geometry(feature.get("geometry") or {})
            except (KeyError, TypeError, ValueError, IndexError) as e:
                logger.debug("Skipping malformed %s feature: %s", restriction_type.value, e)
                continue
            if geom is None:
                continue
            if self.project and self.crs is not None:
                geom = self._projection.to_crs(geom, self.crs)
            elif self.project:
                geom, _ = self._projection.to_metric(geom)
            name = (feature.get("properties") or {}).get("hintContent") or restriction_type.value
            result.append(Restriction(geometry=geom, type=restriction_type, name=str(name)))
        return result


def _feature_geometry(node: dict) -> BaseGeometry | None:
    gtype = node["type"]
    coords = node["coordinates"]
    if gtype == "Polygon":
        rings = [[(float(c[1]), float(c[0])) for c in ring] for ring in coords]
        if not rings or len(rings[0]) < 3:
            return None
        return Polygon(rings[0], rings[1:])
    if gtype == "Point":
        return Point(float(coords[1]), float(coords[0]))
    logger.debug("Unsupported restriction geometry type %s", gtype)
    return None
