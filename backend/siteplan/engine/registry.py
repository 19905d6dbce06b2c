"""Stage registry — each generation stage is a function registered with ``@stage``.

A stage module lives under ``siteplan.engine.stages`` and mutates the
``PassContext`` it is given:

    @stage(id="P1.02", layer=Layer.GRID, dependencies=["P1.01"])
    def clusterize(ctx: PassContext) -> None:
        ctx.clusters = ctx.grid.clusterize_4_directional()
"""

from __future__ import annotations

import enum
import heapq
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from siteplan.engine.context import PassContext

logger = logging.getLogger(__name__)


class Layer(enum.IntEnum):
    STREETS = 0
    GRID = 1
    BLOCKS = 2
    BUILDINGS = 3
    ASSEMBLY = 4


@dataclass
class StageSpec:
    id: str
    layer: Layer
    fn: Callable[["PassContext"], None]
    dependencies: list[str] = field(default_factory=list)
    description: str = ""

    @property
    def sort_key(self) -> tuple[int, str]:
        return int(self.layer), self.id


class StageRegistry:
    """Generation stages keyed by id."""

    def __init__(self) -> None:
        self._stages: dict[str, StageSpec] = {}

    def register(self, spec: StageSpec) -> None:
        if spec.id in self._stages:
            raise ValueError(f"Duplicate stage ID: {spec.id}")
        self._stages[spec.id] = spec
        logger.debug("Registered stage %s (%s)", spec.id, spec.layer.name)

    def get(self, stage_id: str) -> StageSpec:
        return self._stages[stage_id]

    def all(self) -> list[StageSpec]:
        return sorted(self._stages.values(), key=lambda s: s.sort_key)

    def resolve_order(self) -> list[StageSpec]:
        """Every stage after its dependencies; ties go to the lower (layer, id).

        Raises ``ValueError`` for a dependency on an unregistered stage or a cycle.
        """
        waiting: dict[str, int] = {}
        dependents: dict[str, list[str]] = {sid: [] for sid in self._stages}
        for sid, spec in self._stages.items():
            unknown = [d for d in spec.dependencies if d not in self._stages]
            if unknown:
                raise ValueError(f"Stage {sid} depends on unregistered stages: {unknown}")
            waiting[sid] = len(set(spec.dependencies))
            for dep in set(spec.dependencies):
                dependents[dep].append(sid)

        ready = [self._stages[sid].sort_key for sid, n in waiting.items() if n == 0]
        heapq.heapify(ready)
        ordered: list[StageSpec] = []
        while ready:
            _, sid = heapq.heappop(ready)
            ordered.append(self._stages[sid])
            for other in dependents[sid]:
                waiting[other] -= 1
                if waiting[other] == 0:
                    heapq.heappush(ready, self._stages[other].sort_key)

        if len(ordered) != len(self._stages):
            stuck = sorted(set(self._stages) - {s.id for s in ordered})
            raise ValueError(f"Circular dependency detected among: {stuck}")
        return ordered

    @property
    def count(self) -> int:
        return len(self._stages)


_registry = StageRegistry()


def get_registry() -> StageRegistry:
    return _registry


def stage(
    *,
    id: str,
    layer: Layer,
    dependencies: list[str] | None = None,
    description: str = "",
):
    """Register the decorated function in the global registry."""

    def decorator(fn: Callable[["PassContext"], None]):
        _registry.register(
            StageSpec(
                id=id,
                layer=layer,
                fn=fn,
                dependencies=list(dependencies or []),
                description=description,
            )
        )
        return fn

    return decorator
