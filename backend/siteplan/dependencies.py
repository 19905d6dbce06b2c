"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from pyproj import CRS

from siteplan.config import settings
from siteplan.geo.restrictions import GeoJsonRestrictionSource, RestrictionSource


def get_settings():
    return settings


@lru_cache(maxsize=8)
def _geojson_source(data_dir: str, crs: str) -> GeoJsonRestrictionSource:
    return GeoJsonRestrictionSource(data_dir, crs=CRS.from_user_input(crs))


def get_restriction_source(crs: CRS) -> RestrictionSource | None:
    """File-backed restrictions projected into ``crs``; None when no data directory is configured."""
    if not settings.restrictions_data_dir:
        return None
    return _geojson_source(settings.restrictions_data_dir, crs.to_string())
