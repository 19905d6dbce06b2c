"""P0.02 — Street Network.

Greedy best-angle connection of entry points, including projections onto
streets already built.
"""

from __future__ import annotations

import logging

from siteplan.engine.context import PassContext
from siteplan.engine.registry import Layer, stage
from siteplan.planning.streets import build_streets

logger = logging.getLogger(__name__)


@stage(
    id="P0.02",
    layer=Layer.STREETS,
    dependencies=["P0.01"],
    description="Connect entry points into a street network",
)
def street_network(ctx: PassContext) -> None:
    plot = ctx.plot_with_entries if ctx.plot_with_entries is not None else ctx.plot
    ctx.network = build_streets(plot, ctx.entry_points, ctx.config)
    if ctx.network.remaining:
        logger.debug(
            "%s: %d entry points left unconnected",
            ctx.name,
            len(ctx.network.remaining),
        )
