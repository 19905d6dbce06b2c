"""Spatial grid — square-cell availability raster over a polygon's bounding box.

Cells start unavailable. ``mark_available_area`` opens cells mostly covered
by a polygon (> 50% of the cell), ``subtract_restrictions`` closes every cell
a restriction touches. The asymmetry (generous inclusion, conservative
exclusion) is intentional and downstream placement relies on it.

A grid belongs to exactly one generation pass.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict

import numpy as np
import shapely
from numpy.typing import NDArray
from scipy import ndimage
from shapely.geometry import Polygon, box

logger = logging.getLogger(__name__)

Cell = tuple[int, int]
Cluster = list[Cell]


class SpatialGrid:
    """Boolean availability per (col, row) cell, stored as ``cells[col, row]``."""

    def __init__(self, bounds: Polygon, cell_size: float = 10.0) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        min_x, min_y, max_x, max_y = bounds.bounds
        self.start_x = float(min_x)
        self.start_y = float(min_y)
        self.end_x = float(max_x)
        self.end_y = float(max_y)
        self.cell_size = float(cell_size)
        self.x_cells = max(1, math.ceil((self.end_x - self.start_x) / self.cell_size))
        self.y_cells = max(1, math.ceil((self.end_y - self.start_y) / self.cell_size))
        self.cells: NDArray[np.bool_] = np.zeros((self.x_cells, self.y_cells), dtype=bool)

    # ===== Availability =====

    def mark_available_area(self, area: Polygon, threshold: float = 0.5) -> int:
        """Open cells whose overlap with ``area`` exceeds ``threshold`` of a cell. Returns count opened."""
        cols, rows = self._range_for(area.bounds)
        if cols.size == 0:
            return 0
        boxes = self._cell_boxes(cols, rows)
        overlap = shapely.area(shapely.intersection(boxes, area))
        hit = overlap > self.cell_size * self.cell_size * threshold
        newly = hit & ~self.cells[cols, rows]
        self.cells[cols[hit], rows[hit]] = True
        return int(np.count_nonzero(newly))

    def subtract_restrictions(self, restrictions: list[Polygon]) -> int:
        """Close every cell that intersects any restriction. Returns count closed."""
        closed = 0
        for restriction in restrictions:
            if restriction is None or restriction.is_empty:
                continue
            cols, rows = self._range_for(restriction.bounds)
            if cols.size == 0:
                continue
            boxes = self._cell_boxes(cols, rows)
            hit = shapely.intersects(boxes, restriction) & self.cells[cols, rows]
            self.cells[cols[hit], rows[hit]] = False
            closed += int(np.count_nonzero(hit))
        return closed

    def is_cell_available(self, col: int, row: int) -> bool:
        if col < 0 or col >= self.x_cells or row < 0 or row >= self.y_cells:
            return False
        return bool(self.cells[col, row])

    def can_place_polygon(self, polygon: Polygon, buffer: float = 0.0) -> bool:
        """True iff ``polygon`` (grown by ``buffer``) touches no unavailable cell in its range."""
        check = polygon.buffer(buffer) if buffer > 0 else polygon
        cols, rows = self._range_for(check.bounds)
        if cols.size == 0:
            return True
        blocked = ~self.cells[cols, rows]
        if not blocked.any():
            return True
        boxes = self._cell_boxes(cols[blocked], rows[blocked])
        return not bool(shapely.intersects(boxes, check).any())

    @property
    def available_count(self) -> int:
        return int(np.count_nonzero(self.cells))

    @property
    def restricted_count(self) -> int:
        return int(self.cells.size - self.available_count)

    # ===== Clustering =====

    def clusterize_4_directional(self) -> list[Cluster]:
        """Maximal 4-connected clusters of available cells, in raster order."""
        labels, count = ndimage.label(self.cells)  # default structure is 4-connectivity
        if count == 0:
            return []
        groups: dict[int, Cluster] = defaultdict(list)
        for col, row in np.argwhere(labels > 0):
            groups[int(labels[col, row])].append((int(col), int(row)))
        return [groups[k] for k in range(1, count + 1)]

    def cluster_to_precise_polygon(self, cluster: Cluster) -> Polygon | None:
        """Trace the outline of a cell set from its exposed cell edges.

        Edges are stitched on the integer corner lattice, then mapped to world
        coordinates. Returns None when the ring cannot be closed with at least
        4 points. Only one ring is traced, starting at the lowest exposed
        edge, so holes and detached parts are not represented.
        """
        if not cluster:
            return None
        cell_set = set(cluster)
        edges: list[tuple[Cell, Cell]] = []
        for col, row in cluster:
            if (col, row - 1) not in cell_set:
                edges.append(((col, row), (col + 1, row)))
            if (col + 1, row) not in cell_set:
                edges.append(((col + 1, row), (col + 1, row + 1)))
            if (col, row + 1) not in cell_set:
                edges.append(((col + 1, row + 1), (col, row + 1)))
            if (col - 1, row) not in cell_set:
                edges.append(((col, row + 1), (col, row)))

        ring = _stitch_edges(edges)
        if ring is None or len(ring) < 4:
            logger.debug("Cluster of %d cells did not close into a ring", len(cluster))
            return None
        polygon = Polygon([self._cell_origin(c, r) for c, r in ring])
        if not polygon.is_valid:
            fixed = polygon.buffer(0)
            if not isinstance(fixed, Polygon) or fixed.is_empty:
                return None
            polygon = fixed
        return polygon

    # ===== Geometry views =====

    def cell_polygon(self, col: int, row: int) -> Polygon:
        x, y = self._cell_origin(col, row)
        return box(x, y, x + self.cell_size, y + self.cell_size)

    def available_cells(self) -> list[Polygon]:
        return [self.cell_polygon(int(c), int(r)) for c, r in np.argwhere(self.cells)]

    def restricted_cells(self) -> list[Polygon]:
        return [self.cell_polygon(int(c), int(r)) for c, r in np.argwhere(~self.cells)]

    def world_to_grid(self, x: float, y: float) -> Cell:
        return (
            math.floor((x - self.start_x) / self.cell_size),
            math.floor((y - self.start_y) / self.cell_size),
        )

    # ===== Internals =====

    def _cell_origin(self, col: int, row: int) -> tuple[float, float]:
        return (self.start_x + col * self.cell_size, self.start_y + row * self.cell_size)

    def _range_for(self, bounds: tuple[float, float, float, float]) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
        """Flattened (cols, rows) index arrays covering a world-space envelope.

        One extra cell on the low side so cells touching the envelope edge are included.
        """
        min_x, min_y, max_x, max_y = bounds
        c0, r0 = self.world_to_grid(min_x, min_y)
        c1, r1 = self.world_to_grid(max_x, max_y)
        c0, r0 = max(0, c0 - 1), max(0, r0 - 1)
        c1, r1 = min(self.x_cells - 1, c1), min(self.y_cells - 1, r1)
        if c0 > c1 or r0 > r1:
            empty = np.empty(0, dtype=np.int64)
            return empty, empty
        cols, rows = np.meshgrid(np.arange(c0, c1 + 1), np.arange(r0, r1 + 1), indexing="ij")
        return cols.ravel(), rows.ravel()

    def _cell_boxes(self, cols: NDArray[np.int64], rows: NDArray[np.int64]) -> NDArray[np.object_]:
        x = self.start_x + cols * self.cell_size
        y = self.start_y + rows * self.cell_size
        return shapely.box(x, y, x + self.cell_size, y + self.cell_size)


def _stitch_edges(edges: list[tuple[Cell, Cell]]) -> list[Cell] | None:
    """Chain lattice edges end-to-start into one ring, beginning from the lowest edge."""
    if not edges:
        return None

    by_start: dict[Cell, list[int]] = defaultdict(list)
    by_end: dict[Cell, list[int]] = defaultdict(list)
    for i, (a, b) in enumerate(edges):
        by_start[a].append(i)
        by_end[b].append(i)

    first = min(range(len(edges)), key=lambda i: (edges[i][0][1], edges[i][0][0]))
    used = {first}
    coords = [edges[first][0], edges[first][1]]

    while len(used) < len(edges) and coords[0] != coords[-1]:
        open_end = coords[-1]
        nxt = next((i for i in by_start[open_end] if i not in used), None)
        if nxt is not None:
            coords.append(edges[nxt][1])
        else:
            nxt = next((i for i in by_end[open_end] if i not in used), None)
            if nxt is None:
                break
            coords.append(edges[nxt][0])
        used.add(nxt)

    if len(coords) > 2 and coords[0] != coords[-1]:
        coords.append(coords[0])
    return coords
