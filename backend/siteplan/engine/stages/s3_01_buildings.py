"""P3.01 — Buildings.

Per sub-block: inset by the setback, drop slivers, turn small or randomly
chosen sub-blocks into parks, and place template footprints on the rest.
A sub-block that receives no building becomes a park too.
"""

from __future__ import annotations

import logging

from shapely.geometry import Polygon

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.planning.placement import place_buildings, section_for

logger = logging.getLogger(__name__)


def _parts(geom) -> list[Polygon]:
    if geom.is_empty:
        return []
    if isinstance(geom, Polygon):
        return [geom]
    return [g for g in getattr(geom, "geoms", []) if isinstance(g, Polygon) and not g.is_empty]


@stage(
    id="P3.01",
    layer=Layer.BUILDINGS,
    dependencies=["P2.01"],
    description="Place building footprints in sub-blocks; the rest become parks",
)
def buildings(ctx: PassContext) -> None:
    cfg = ctx.config
    dropped = 0
    for sub_block in ctx.sub_blocks:
        for part in _parts(sub_block.buffer(-cfg.block_setback)):
            if part.area < cfg.min_sub_block_area:
                dropped += 1
                continue
            if part.area < cfg.min_buildable_area or ctx.rng.random() < cfg.park_probability:
                ctx.parks.append(part)
                continue
            placed = place_buildings(part, ctx.grid, ctx.rng, cfg)
            if not placed:
                ctx.parks.append(part)
                continue
            ctx.placements.extend(placed)
            ctx.sections.extend(section_for(b, ctx.max_floors, cfg) for b in placed)

    logger.debug(
        "%s: %d sections, %d parks, %d slivers dropped",
        ctx.name,
        len(ctx.sections),
        len(ctx.parks),
        dropped,
    )
