"""P1.01 — Availability Grid.

One grid over the whole plot. Each block, inset by the street half-width,
opens the cells it mostly covers; restrictions and street centrelines then
close every cell they touch.
"""

from __future__ import annotations

import logging

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_grid
from siteplan.planning.grid import SpatialGrid

logger = logging.getLogger(__name__)


@stage(
    id="P1.01",
    layer=Layer.GRID,
    dependencies=["P0.03"],
    description="Rasterize blocks into an availability grid",
)
def availability_grid(ctx: PassContext) -> None:
    cfg = ctx.config
    grid = SpatialGrid(ctx.plot, cfg.cell_size)

    for block in ctx.blocks:
        inset = block.buffer(-cfg.street_half_width) if ctx.streets else block
        if inset.is_empty:
            continue
        grid.mark_available_area(inset, cfg.availability_threshold)

    closed = grid.subtract_restrictions(ctx.restrictions)
    closed += grid.subtract_restrictions(ctx.streets)

    logger.debug(
        "%s: grid %dx%d, %d available, %d closed by restrictions and streets",
        ctx.name,
        grid.x_cells,
        grid.y_cells,
        grid.available_count,
        closed,
    )
    ctx.grid = grid
    if cfg.capture_visuals:
        ctx.visuals["P1.01"] = render_grid(ctx.plot, grid)
