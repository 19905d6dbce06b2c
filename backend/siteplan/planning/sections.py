"""Placed buildings (sections) and their derived metrics.

All derived fields are a pure function of (footprint area, floors,
commercial flag) and are recomputed through ``update_metrics`` on every
floor change.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from shapely.geometry import Polygon

STORY_HEIGHT = 3.2
RESIDENTIAL_EFFICIENCY = 0.8
COMMERCIAL_SHARE = 0.75
AREA_PER_PARKING = 80.0
AREA_PER_RESIDENT = 30.0
KINDERGARTEN_PER_1000 = 50
SCHOOL_PER_1000 = 115


@dataclass
class Bay:
    """Fixed-length facade segment along one footprint edge."""

    start: tuple[float, float]
    end: tuple[float, float]
    edge_index: int
    floors: int
    height: float

    @property
    def length(self) -> float:
        return math.dist(self.start, self.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": list(self.start),
            "end": list(self.end),
            "edge_index": self.edge_index,
            "floors": self.floors,
            "height": self.height,
        }


@dataclass
class Section:
    polygon: Polygon
    min_floors: int
    max_floors: int
    floors: int = 1
    template_id: str = "single"
    commercial: bool = False
    story_height: float = STORY_HEIGHT
    bay_length: float = 3.0

    # Derived
    height: float = 0.0
    apartments_area: float = 0.0
    commercial_area: float = 0.0
    parking_places: int = 0
    residents: int = 0
    kindergarten_places: int = 0
    school_places: int = 0
    bays: list[Bay] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.min_floors > self.max_floors:
            raise ValueError(f"min_floors {self.min_floors} > max_floors {self.max_floors}")
        self.floors = min(max(self.floors, self.min_floors), self.max_floors)

    @property
    def area(self) -> float:
        return float(self.polygon.area)

    @property
    def gross_floor_area(self) -> float:
        return self.area * self.floors

    @property
    def cost(self) -> float:
        return float(round(self.area * (self.floors + 2)))

    @property
    def useful_area(self) -> float:
        return float(round(self.floors * self.area))

    def can_add_floor(self) -> bool:
        return self.floors < self.max_floors

    def can_remove_floor(self) -> bool:
        return self.floors > self.min_floors

    def set_floors(self, floors: int) -> None:
        if not self.min_floors <= floors <= self.max_floors:
            raise ValueError(f"floors {floors} outside [{self.min_floors}, {self.max_floors}]")
        self.floors = floors
        self.update_metrics()

    def update_metrics(self, commercial: bool | None = None) -> None:
        """Recompute every derived field. ``commercial`` overrides the stored flag."""
        if commercial is not None:
            self.commercial = commercial
        area = self.area
        self.height = self.floors * self.story_height
        self.apartments_area = float(round(area * (self.floors - (1 if self.commercial else 0)) * RESIDENTIAL_EFFICIENCY))
        self.commercial_area = float(round(area * COMMERCIAL_SHARE if self.commercial else 0.0))
        self.parking_places = int(round(self.apartments_area / AREA_PER_PARKING))
        self.residents = int(round(self.apartments_area / AREA_PER_RESIDENT))
        self.kindergarten_places = self.residents * KINDERGARTEN_PER_1000 // 1000
        self.school_places = self.residents * SCHOOL_PER_1000 // 1000
        self.bays = split_into_bays(self.polygon, self.floors, self.height, self.bay_length)

    def to_dict(self) -> dict[str, Any]:
        return {
            "template_id": self.template_id,
            "polygon": [list(c) for c in self.polygon.exterior.coords],
            "floors": self.floors,
            "min_floors": self.min_floors,
            "max_floors": self.max_floors,
            "height": self.height,
            "area": self.area,
            "commercial": self.commercial,
            "apartments_area": self.apartments_area,
            "commercial_area": self.commercial_area,
            "parking_places": self.parking_places,
            "residents": self.residents,
            "kindergarten_places": self.kindergarten_places,
            "school_places": self.school_places,
            "cost": self.cost,
            "useful_area": self.useful_area,
            "bays": [b.to_dict() for b in self.bays],
        }


def split_into_bays(polygon: Polygon, floors: int, height: float, bay_length: float = 3.0) -> list[Bay]:
    """Cut every exterior edge into max(1, floor(len / bay_length)) equal bays."""
    coords = list(polygon.exterior.coords)
    bays: list[Bay] = []
    for i in range(len(coords) - 1):
        (x0, y0), (x1, y1) = coords[i][:2], coords[i + 1][:2]
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            continue
        n = max(1, math.floor(length / bay_length))
        for k in range(n):
            t0, t1 = k / n, (k + 1) / n
            bays.append(
                Bay(
                    start=(x0 + (x1 - x0) * t0, y0 + (y1 - y0) * t0),
                    end=(x0 + (x1 - x0) * t1, y0 + (y1 - y0) * t1),
                    edge_index=i,
                    floors=floors,
                    height=height,
                )
            )
    return bays
