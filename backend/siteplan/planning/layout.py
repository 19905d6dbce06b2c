"""Layout assembly — package one generation pass into a scored, immutable Layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from shapely.geometry import LineString, Point, Polygon

from siteplan.planning.floors import FloorAdjustment
from siteplan.planning.sections import Section

# Insolation analysis is not part of generation; layouts are scored as fully lit.
DEFAULT_INSOLATION = 1.0


@dataclass(frozen=True)
class Layout:
    name: str
    plot: Polygon
    sections: tuple[Section, ...]
    streets: tuple[LineString, ...] = ()
    parks: tuple[Polygon, ...] = ()
    blocks: tuple[Polygon, ...] = ()
    entry_points: tuple[Point, ...] = ()
    street_density: float = 1.0
    built_up_area: float = 0.0
    useful_area: float = 0.0
    cost: float = 0.0
    insolation: float = DEFAULT_INSOLATION
    value: float = 0.0
    floor_adjustment: FloorAdjustment | None = None

    @property
    def total_floor_area(self) -> float:
        return sum(s.gross_floor_area for s in self.sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "street_density": self.street_density,
            "sections": [s.to_dict() for s in self.sections],
            "streets": [[list(c) for c in line.coords] for line in self.streets],
            "parks": [[list(c) for c in park.exterior.coords] for park in self.parks],
            "built_up_area": self.built_up_area,
            "useful_area": self.useful_area,
            "cost": self.cost,
            "insolation": self.insolation,
            "value": self.value,
            "total_floor_area": self.total_floor_area,
        }


def assemble_layout(
    name: str,
    plot: Polygon,
    sections: list[Section],
    streets: list[LineString],
    parks: list[Polygon],
    blocks: list[Polygon] | None = None,
    entry_points: list[Point] | None = None,
    street_density: float = 1.0,
    floor_adjustment: FloorAdjustment | None = None,
    insolation: float = DEFAULT_INSOLATION,
) -> Layout:
    """Summary metrics: built-up = Σ footprint, value = insolation⁴ × useful area."""
    useful_area = sum(s.useful_area for s in sections)
    return Layout(
        name=name,
        plot=plot,
        sections=tuple(sections),
        streets=tuple(streets),
        parks=tuple(parks),
        blocks=tuple(blocks or ()),
        entry_points=tuple(entry_points or ()),
        street_density=street_density,
        built_up_area=sum(s.area for s in sections),
        useful_area=useful_area,
        cost=sum(s.cost for s in sections),
        insolation=insolation,
        value=insolation**4 * useful_area,
        floor_adjustment=floor_adjustment,
    )
