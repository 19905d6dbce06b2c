"""P2.01 — Sub-blocks.

Split oversized clusters into sub-blocks inside the area window and aspect
bound, then trace each cell group back into a polygon.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_sub_blocks
from siteplan.planning.subdivide import subdivide_clusters


@stage(
    id="P2.01",
    layer=Layer.BLOCKS,
    dependencies=["P1.02"],
    description="Subdivide clusters into sub-blocks",
)
def sub_blocks(ctx: PassContext) -> None:
    ctx.sub_blocks = subdivide_clusters(ctx.grid, ctx.clusters, ctx.config)
    if ctx.config.capture_visuals:
        ctx.visuals["P2.01"] = render_sub_blocks(ctx.plot, ctx.sub_blocks)
