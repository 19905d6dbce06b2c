"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class LatLng(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class GenerateLayoutRequest(BaseModel):
    polygon_points: list[LatLng] = Field(
        ...,
        min_length=3,
        description="Plot boundary in WGS84, open or closed ring",
    )
    max_floors: int | None = Field(default=None, ge=1, description="Upper bound on floors per section")
    gross_floor_area: float | None = Field(
        default=None,
        gt=0,
        description="Target total floor area in square metres",
    )
    seed: int | None = Field(default=None, description="RNG seed; the server default when omitted")
    include_visuals: bool = Field(default=False, description="Attach per-stage SVG previews")
