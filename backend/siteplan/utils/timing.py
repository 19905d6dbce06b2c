"""Nested wall-clock timing, carried explicitly through a generation run.

    timer = TimingContext("generate")
    with timer.measure("streets"):
        ...
    logger.debug("\n%s", timer.report())
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any


@dataclass
class TimingNode:
    name: str
    elapsed_ms: float = 0.0
    children: list[TimingNode] = field(default_factory=list)

    @property
    def self_ms(self) -> float:
        """Time not accounted for by child measurements."""
        return self.elapsed_ms - sum(c.elapsed_ms for c in self.children)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "elapsed_ms": round(self.elapsed_ms, 1),
            "self_ms": round(self.self_ms, 1),
            "children": [c.to_dict() for c in self.children],
        }


class TimingContext:
    """Tree of named measurements. One instance per request, never shared."""

    def __init__(self, name: str = "root") -> None:
        self.root = TimingNode(name)
        self._stack: list[TimingNode] = [self.root]
        self._started = time.perf_counter()

    @contextmanager
    def measure(self, name: str) -> Iterator[TimingNode]:
        node = TimingNode(name)
        self._stack[-1].children.append(node)
        self._stack.append(node)
        t0 = time.perf_counter()
        try:
            yield node
        finally:
            node.elapsed_ms = (time.perf_counter() - t0) * 1000
            self._stack.pop()

    def finish(self) -> TimingNode:
        self.root.elapsed_ms = (time.perf_counter() - self._started) * 1000
        return self.root

    def report(self) -> str:
        """Indented text report: name, total and self time in seconds."""
        self.finish()
        width = _max_name_length(self.root)
        lines: list[str] = []
        _format(self.root, 0, width, lines)
        return "\n".join(lines)


def _max_name_length(node: TimingNode, depth: int = 0) -> int:
    own = len(node.name) + depth * 2
    return max([own] + [_max_name_length(c, depth + 1) for c in node.children])


def _format(node: TimingNode, depth: int, width: int, lines: list[str]) -> None:
    indent = "  " * depth
    label = node.name.ljust(width - depth * 2)
    lines.append(
        f"{indent}{label} {node.elapsed_ms / 1000:.3f} (self: {node.self_ms / 1000:.3f})"
    )
    for child in node.children:
        _format(child, depth + 1, width, lines)
