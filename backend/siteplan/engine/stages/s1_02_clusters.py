"""P1.02 — Clusters.

Maximal 4-connected regions of available cells.
"""

from __future__ import annotations

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.engine.visuals import render_clusters


@stage(
    id="P1.02",
    layer=Layer.GRID,
    dependencies=["P1.01"],
    description="Cluster available cells (4-connectivity)",
)
def clusters(ctx: PassContext) -> None:
    ctx.clusters = ctx.grid.clusterize_4_directional()
    if ctx.config.capture_visuals:
        ctx.visuals["P1.02"] = render_clusters(ctx.plot, ctx.grid, ctx.clusters)
