"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from siteplan.models.requests import LatLng


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    stages_registered: int = 0


class BayResponse(BaseModel):
    start: LatLng
    end: LatLng
    edge_index: int
    floors: int
    height: float


class SectionResponse(BaseModel):
    template_id: str
    polygon: list[LatLng]
    floors: int
    min_floors: int
    max_floors: int
    height: float
    area: float
    commercial: bool = False
    apartments_area: float = 0.0
    commercial_area: float = 0.0
    parking_places: int = 0
    residents: int = 0
    kindergarten_places: int = 0
    school_places: int = 0
    cost: float = 0.0
    useful_area: float = 0.0
    bays: list[BayResponse] = Field(default_factory=list)


class FloorAdjustmentResponse(BaseModel):
    status: str
    iterations: int = 0
    total_floor_area: float = 0.0
    target: float | None = None


class LayoutResponse(BaseModel):
    name: str
    street_density: float
    sections: list[SectionResponse] = Field(default_factory=list)
    streets: list[list[LatLng]] = Field(default_factory=list)
    parks: list[list[LatLng]] = Field(default_factory=list)
    built_up_area: float = 0.0
    useful_area: float = 0.0
    cost: float = 0.0
    insolation: float = 1.0
    value: float = 0.0
    total_floor_area: float = 0.0
    floor_adjustment: FloorAdjustmentResponse | None = None


class GenerateLayoutResponse(BaseModel):
    layouts: list[LayoutResponse] = Field(default_factory=list)
    processing_time_ms: float = 0.0
    passes_failed: int = 0
    cancelled: bool = False
    errors: dict[str, str] = Field(default_factory=dict)
    visuals: dict[str, dict[str, str]] = Field(default_factory=dict)
