"""PassContext — the single mutable state object flowing through one generation pass.

One context per street-density variant. It owns its grid, clusters and RNG
stream; nothing here is shared between passes except the read-only plot and
restriction polygons.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field

from shapely.geometry import LineString, Point, Polygon

from siteplan.engine.config import GenerationConfig
from siteplan.planning.floors import FloorAdjustment
from siteplan.planning.grid import Cluster, SpatialGrid
from siteplan.planning.layout import Layout
from siteplan.planning.placement import PlacedBuilding
from siteplan.planning.sections import Section
from siteplan.planning.streets import StreetNetwork
from siteplan.utils.timing import TimingContext


@dataclass
class PassContext:
    """Shared state for a single layout variant."""

    plot: Polygon
    name: str = "Layout"
    config: GenerationConfig = field(default_factory=GenerationConfig)
    rng: random.Random = field(default_factory=lambda: random.Random(1))
    timer: TimingContext = field(default_factory=TimingContext)
    street_density: float = 1.0
    # Exclusion polygons in the plot's metric frame (read-only)
    restrictions: list[Polygon] = field(default_factory=list)
    # Request overrides
    max_floors: int | None = None
    gross_floor_area: float | None = None

    # --- Streets ---
    entry_points: list[Point] = field(default_factory=list)
    # Plot ring with every entry point spliced in as a vertex
    plot_with_entries: Polygon | None = None
    network: StreetNetwork | None = None
    blocks: list[Polygon] = field(default_factory=list)

    # --- Grid ---
    grid: SpatialGrid | None = None
    clusters: list[Cluster] = field(default_factory=list)
    sub_blocks: list[Polygon] = field(default_factory=list)

    # --- Buildings ---
    parks: list[Polygon] = field(default_factory=list)
    placements: list[PlacedBuilding] = field(default_factory=list)
    sections: list[Section] = field(default_factory=list)
    floor_adjustment: FloorAdjustment | None = None

    # --- Result ---
    layout: Layout | None = None

    # --- Pass metadata ---
    completed_stages: set[str] = field(default_factory=set)
    errors: dict[str, str] = field(default_factory=dict)
    # Step previews keyed by stage id (only when config.capture_visuals)
    visuals: dict[str, str] = field(default_factory=dict)

    @property
    def streets(self) -> list[LineString]:
        return self.network.streets if self.network is not None else []

    @property
    def effective_max_floors(self) -> int:
        return self.max_floors if self.max_floors is not None else self.config.max_floors

    @property
    def failed(self) -> bool:
        return bool(self.errors)
