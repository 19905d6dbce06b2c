"""Building placement — fit catalog templates onto a secondary grid inside a sub-block."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field

from shapely.geometry import Polygon, box

from siteplan.engine.config import GenerationConfig
from siteplan.planning.grid import SpatialGrid
from siteplan.planning.sections import Section
from siteplan.planning.templates import BuildingTemplate, all_templates, get_template

logger = logging.getLogger(__name__)


@dataclass
class PlacedBuilding:
    template: BuildingTemplate
    polygon: Polygon | None = None
    col: int = 0
    row: int = 0
    group_id: int = 0
    # Single centered square on a narrow block
    fallback: bool = False


@dataclass
class SecondaryGrid:
    """Secondary cells over one sub-block. ``assigned`` holds group ids, -1 when free."""

    start_x: float
    start_y: float
    pitch: float
    available: list[list[bool]] = field(default_factory=list)
    assigned: list[list[int]] = field(default_factory=list)

    @property
    def cols(self) -> int:
        return len(self.available)

    @property
    def rows(self) -> int:
        return len(self.available[0]) if self.available else 0

    def free_mask(self) -> list[list[bool]]:
        return [
            [self.available[c][r] and self.assigned[c][r] < 0 for r in range(self.rows)]
            for c in range(self.cols)
        ]

    def claim(self, template: BuildingTemplate, col: int, row: int, group_id: int) -> None:
        for dc, dr in template.cells:
            if self.assigned[col + dc][row + dr] >= 0:
                raise ValueError(f"Cell ({col + dc}, {row + dr}) already assigned")
            self.assigned[col + dc][row + dr] = group_id


def place_buildings(
    block: Polygon,
    grid: SpatialGrid,
    rng: random.Random,
    config: GenerationConfig | None = None,
) -> list[PlacedBuilding]:
    """Footprints inside ``block`` that clear the availability grid."""
    config = config or GenerationConfig()
    min_x, min_y, max_x, max_y = block.bounds
    width, height = max_x - min_x, max_y - min_y

    if width < config.small_block_threshold or height < config.small_block_threshold:
        single = place_single(block, grid, config)
        return [single] if single is not None else []

    size = rng.choice(config.section_sizes)
    secondary = build_secondary_grid(block, grid, size, config)
    if secondary.cols == 0 or secondary.rows == 0:
        return []

    placed: list[PlacedBuilding] = []
    for building in assign_templates(secondary, rng):
        polygon = building.template.polygon(
            building.col,
            building.row,
            secondary.pitch,
            secondary.start_x,
            secondary.start_y,
            config.outline_spacing_ratio,
        )
        if block.contains(polygon) and grid.can_place_polygon(polygon, config.placement_buffer):
            building.polygon = polygon
            placed.append(building)
    logger.debug("Placed %d buildings (module %.0f) in block of %.0f", len(placed), size, block.area)
    return placed


def place_single(block: Polygon, grid: SpatialGrid, config: GenerationConfig) -> PlacedBuilding | None:
    """One centered square for narrow blocks."""
    min_x, min_y, max_x, max_y = block.bounds
    size = min(max_x - min_x, max_y - min_y) - config.small_block_margin
    if size <= 1:
        return None
    cx, cy = (min_x + max_x) / 2, (min_y + max_y) / 2
    square = box(cx - size / 2, cy - size / 2, cx + size / 2, cy + size / 2)
    if not block.contains(square) or not grid.can_place_polygon(square, config.placement_buffer):
        return None
    return PlacedBuilding(template=get_template("single"), polygon=square, fallback=True)


def build_secondary_grid(
    block: Polygon,
    grid: SpatialGrid,
    building_size: float,
    config: GenerationConfig,
) -> SecondaryGrid:
    """Centered secondary grid; a cell is available if its inset test square fits."""
    min_x, min_y, max_x, max_y = block.bounds
    spacing = config.section_spacing
    pitch = building_size + spacing
    cols = math.floor((max_x - min_x) / pitch)
    rows = math.floor((max_y - min_y) / pitch)
    if cols <= 0 or rows <= 0:
        return SecondaryGrid(0.0, 0.0, pitch)

    start_x = min_x + ((max_x - min_x) - cols * pitch) / 2
    start_y = min_y + ((max_y - min_y) - rows * pitch) / 2
    side = building_size - spacing

    available: list[list[bool]] = []
    for c in range(cols):
        column: list[bool] = []
        for r in range(rows):
            x = start_x + c * pitch + spacing / 2
            y = start_y + r * pitch + spacing / 2
            test = box(x, y, x + side, y + side)
            column.append(block.contains(test) and grid.can_place_polygon(test, config.placement_buffer))
        available.append(column)

    return SecondaryGrid(
        start_x=start_x,
        start_y=start_y,
        pitch=pitch,
        available=available,
        assigned=[[-1] * rows for _ in range(cols)],
    )


def assign_templates(secondary: SecondaryGrid, rng: random.Random) -> list[PlacedBuilding]:
    """Row-major scan; at each free cell pick a fitting template weighted by cell count."""
    placed: list[PlacedBuilding] = []
    templates = all_templates()
    group_id = 0
    for row in range(secondary.rows):
        for col in range(secondary.cols):
            if not secondary.available[col][row] or secondary.assigned[col][row] >= 0:
                continue
            free = secondary.free_mask()
            fitting = [t for t in templates if t.fits(col, row, free)]
            if not fitting:
                continue
            template = rng.choices(fitting, weights=[t.size for t in fitting], k=1)[0]
            secondary.claim(template, col, row, group_id)
            placed.append(PlacedBuilding(template=template, col=col, row=row, group_id=group_id))
            group_id += 1
    return placed


def floor_range(
    building: PlacedBuilding,
    max_floors: int | None = None,
    default_max_floors: int = 9,
) -> tuple[int, int]:
    """Template range capped by ``max_floors``; the narrow-block square spans [max//3, max]."""
    if building.fallback:
        hi = max(1, max_floors if max_floors is not None else default_max_floors)
        return max(1, hi // 3), hi
    lo, hi = building.template.min_floors, building.template.max_floors
    if max_floors is not None:
        hi = max(1, min(hi, max_floors))
    return min(lo, hi), hi


def section_for(building: PlacedBuilding, max_floors: int | None, config: GenerationConfig) -> Section:
    if building.polygon is None:
        raise ValueError(f"Building {building.template.id} at ({building.col}, {building.row}) has no footprint")
    lo, hi = floor_range(building, max_floors, config.max_floors)
    section = Section(
        polygon=building.polygon,
        min_floors=lo,
        max_floors=hi,
        floors=lo,
        template_id=building.template.id,
        story_height=config.story_height,
        bay_length=config.bay_length,
    )
    section.update_metrics()
    return section
