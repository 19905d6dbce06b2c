"""Pipeline orchestrator — runs the stages of one pass in dependency order, one pass per street density."""

from __future__ import annotations

import importlib
import logging
import pkgutil
import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any

from shapely.geometry import Polygon

from siteplan.engine.config import GenerationConfig
from siteplan.engine.context import PassContext
from siteplan.engine.registry import StageRegistry, get_registry
from siteplan.geo.restrictions import CLEARANCES, RestrictionSource, RestrictionType
from siteplan.planning.layout import Layout
from siteplan.planning.plot import validate_plot
from siteplan.utils.timing import TimingContext, TimingNode

logger = logging.getLogger(__name__)

STAGES_PACKAGE = "siteplan.engine.stages"


@dataclass
class GenerationResult:
    """Completed layouts of one request. Failed or empty passes contribute no layout."""

    layouts: list[Layout] = field(default_factory=list)
    # Layout name -> "stage id: message"
    errors: dict[str, str] = field(default_factory=dict)
    # Layout name -> stage id -> SVG
    visuals: dict[str, dict[str, str]] = field(default_factory=dict)
    timing: TimingNode | None = None
    cancelled: bool = False

    @property
    def timing_dict(self) -> dict[str, Any]:
        return self.timing.to_dict() if self.timing is not None else {}


class Pipeline:
    """Orchestrates layout generation."""

    def __init__(
        self,
        registry: StageRegistry | None = None,
        config: GenerationConfig | None = None,
    ) -> None:
        self.registry = registry or get_registry()
        self.config = config or GenerationConfig()

    def run(self, ctx: PassContext) -> PassContext:
        """Run every stage on ``ctx``. The first failing stage ends the pass."""
        start = time.perf_counter()
        ordered = self.registry.resolve_order()

        logger.debug("%s: %d stages queued", ctx.name, len(ordered))

        for spec in ordered:
            t0 = time.perf_counter()
            try:
                with ctx.timer.measure(spec.id):
                    spec.fn(ctx)
                ctx.completed_stages.add(spec.id)
                elapsed = (time.perf_counter() - t0) * 1000
                logger.debug("  %s completed in %.1fms", spec.id, elapsed)
            except Exception as e:
                ctx.errors[spec.id] = str(e)
                logger.warning("  %s FAILED in %s: %s", spec.id, ctx.name, e)
                break

        total = (time.perf_counter() - start) * 1000
        logger.info(
            "%s complete: %d/%d stages in %.0fms",
            ctx.name,
            len(ctx.completed_stages),
            len(ordered),
            total,
        )
        return ctx

    def generate(
        self,
        plot: Polygon | list[tuple[float, float]],
        *,
        restrictions: RestrictionSource | None = None,
        max_floors: int | None = None,
        gross_floor_area: float | None = None,
        seed: int | None = None,
        cancel_event: threading.Event | None = None,
        timeout_s: float | None = None,
    ) -> GenerationResult:
        """Generate one layout per street density.

        Raises ``InvalidPlotError`` before any pass when the plot is unusable.
        Cancellation and the deadline are checked between passes; layouts
        finished before that point are returned.
        """
        polygon = validate_plot(plot)
        deadline = time.monotonic() + timeout_s if timeout_s else None
        timer = TimingContext("generate")
        result = GenerationResult()

        with timer.measure("restrictions"):
            exclusions = self.load_restrictions(polygon, restrictions)

        master = random.Random(self.config.seed if seed is None else seed)
        densities = self.config.street_densities
        logger.info("Generation: %d passes queued, %d exclusion zones", len(densities), len(exclusions))

        for index, density in enumerate(densities):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Generation cancelled after %d passes", index)
                result.cancelled = True
                break
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Generation deadline reached after %d passes", index)
                result.cancelled = True
                break

            ctx = PassContext(
                plot=polygon,
                name=f"Layout {index + 1}",
                config=self.config,
                rng=random.Random(master.getrandbits(64)),
                timer=timer,
                street_density=density,
                restrictions=exclusions,
                max_floors=max_floors,
                gross_floor_area=gross_floor_area,
            )
            with timer.measure(ctx.name):
                self.run(ctx)

            if ctx.failed:
                result.errors[ctx.name] = "; ".join(f"{sid}: {msg}" for sid, msg in ctx.errors.items())
            elif ctx.layout is not None:
                result.layouts.append(ctx.layout)
            else:
                logger.info("%s produced no sections", ctx.name)
            if ctx.visuals:
                result.visuals[ctx.name] = dict(ctx.visuals)

        logger.info(
            "Generation complete: %d layouts, %d failed passes",
            len(result.layouts),
            len(result.errors),
        )
        logger.debug("Timing:\n%s", timer.report())
        result.timing = timer.finish()
        return result

    def load_restrictions(
        self,
        plot: Polygon,
        source: RestrictionSource | None,
    ) -> list[Polygon]:
        """Exclusion polygons near ``plot``, one source query per enabled type."""
        if source is None:
            return []
        exclusions: list[Polygon] = []
        for value in self.config.restriction_types:
            rtype = RestrictionType(value)
            clearance = CLEARANCES[rtype]
            for restriction in source.get_restrictions_near(plot, rtype, clearance):
                polygon = restriction.exclusion_polygon(clearance)
                if polygon is not None:
                    exclusions.append(polygon)
        return exclusions

    @property
    def stage_count(self) -> int:
        return self.registry.count


def register_stages() -> None:
    """Import all stage modules so @stage decorators fire."""
    package = importlib.import_module(STAGES_PACKAGE)
    for _, module_name, _ in pkgutil.iter_modules(package.__path__):
        importlib.import_module(f"{STAGES_PACKAGE}.{module_name}")


def create_pipeline(config: GenerationConfig | None = None) -> Pipeline:
    """Factory function for creating a pipeline instance with every stage registered."""
    register_stages()
    return Pipeline(config=config)
