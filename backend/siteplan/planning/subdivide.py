"""Block subdivision — split oversized clusters into sub-blocks near the top of an area window.

Works on cell lists only; polygons are traced by the owning SpatialGrid at
the end. Sizes are compared in cells (area / cell²).

Per oversized cluster:
    1. PCA orientation over cell coordinates
    2. rotate cells about their centroid into that frame
    3. choose a cols × rows bucket grid aiming at ~85% of max cells per bucket
    4. bucket cells by rotated coordinate
    5. recurse on buckets still too large, split buckets too elongated
    6. merge undersized buckets into the best nearby bucket
    7. final aspect pass
"""

from __future__ import annotations

import logging
import math

import numpy as np
from shapely.geometry import Polygon

from siteplan.engine.config import GenerationConfig
from siteplan.planning.grid import Cell, Cluster, SpatialGrid
from siteplan.utils.geometry import aspect_ratio, pca_orientation, rotate_points

logger = logging.getLogger(__name__)


class BlockSubdivider:
    """Cell-space subdivision bound to one grid's cell size."""

    def __init__(self, cell_size: float, config: GenerationConfig | None = None) -> None:
        self.config = config or GenerationConfig()
        self.cell_size = cell_size
        cell_area = cell_size * cell_size
        self.min_cells = math.ceil(self.config.min_block_area / cell_area)
        self.max_cells = math.floor(self.config.max_block_area / cell_area)
        self.target_cells = max(1, int(self.max_cells * self.config.target_fill))

    # ===== Public =====

    def subdivide(self, cluster: Cluster) -> list[Cluster]:
        """Split ``cluster`` into cell groups. Clusters within max cells are returned whole."""
        if not cluster:
            return []
        if len(cluster) <= self.max_cells:
            return [cluster]
        return self._subdivide(cluster, self.orientation(cluster), depth=0)

    def orientation(self, cells: Cluster) -> float:
        return pca_orientation(_as_array(cells), self.config.orientation_snap_deg)

    def aspect(self, cells: Cluster) -> float:
        """Aspect ratio of the cell bounding box, always >= 1."""
        if len(cells) < 2:
            return 1.0
        arr = _as_array(cells)
        width = (arr[:, 0].max() - arr[:, 0].min() + 1) * self.cell_size
        height = (arr[:, 1].max() - arr[:, 1].min() + 1) * self.cell_size
        return aspect_ratio(width, height)

    # ===== Recursive split =====

    def _subdivide(self, cluster: Cluster, angle: float, depth: int) -> list[Cluster]:
        if len(cluster) <= self.max_cells:
            return [cluster]
        cfg = self.config

        rotated = self._rotated(cluster, angle)
        min_x, min_y = rotated.min(axis=0)
        max_x, max_y = rotated.max(axis=0)
        width, height = max_x - min_x, max_y - min_y

        num_blocks = max(2, len(cluster) // self.target_cells)
        cols, rows = self.find_bucket_grid(width, height, num_blocks)
        while cols * rows > num_blocks * 1.5 and cols > 1 and rows > 1:
            cols -= 1
            rows -= 1

        buckets = _distribute(cluster, rotated, (min_x, min_y, max_x, max_y), cols, rows)
        if max(len(b) for b in buckets) >= len(cluster) or depth >= cfg.max_subdivision_depth:
            logger.debug("Subdivision stalled on %d cells at depth %d", len(cluster), depth)
            return [cluster]

        result: list[Cluster] = []
        for bucket in buckets:
            if not bucket:
                continue
            if len(bucket) > self.max_cells:
                result.extend(self._subdivide(bucket, self.orientation(bucket), depth + 1))
            elif len(bucket) >= self.min_cells * 0.8 and self.aspect(bucket) > cfg.max_aspect_ratio:
                result.extend(self.split_for_aspect(bucket, angle))
            else:
                result.append(bucket)

        result = self.merge_small(result)
        return self.finalize(result)

    def find_bucket_grid(self, width: float, height: float, target_blocks: int) -> tuple[int, int]:
        """(cols, rows) of buckets for a rotated extent, favouring fewer larger buckets."""
        target_ratio = self.config.target_aspect_ratio
        if width <= 0 or height <= 0:
            return (max(2, target_blocks), 1)

        cluster_aspect = width / height
        cols = max(1, math.ceil(math.sqrt(target_blocks * cluster_aspect)))
        rows = max(1, math.ceil(target_blocks / cols))
        while cols * rows > target_blocks * 1.2 and cols > 1 and rows > 1:
            if cols > rows:
                cols -= 1
            else:
                rows -= 1

        block_aspect = (width / cols) / (height / rows)
        if block_aspect > target_ratio * 1.5 or block_aspect < 1.0 / (target_ratio * 1.5):
            best_score = math.inf
            best = (cols, rows)
            low = math.ceil(target_blocks * 0.7)
            high = math.ceil(target_blocks * 1.5)
            for c in range(max(1, cols - 2), cols + 3):
                for r in range(max(1, rows - 2), rows + 3):
                    if c * r < low or c * r > high:
                        continue
                    aspect = (width / c) / (height / r)
                    aspect_score = abs(aspect - target_ratio) / target_ratio
                    count_score = abs(c * r - target_blocks) / target_blocks
                    score = aspect_score * 0.6 + count_score * 0.4
                    if score < best_score:
                        best_score = score
                        best = (c, r)
            cols, rows = best
        return cols, rows

    def split_for_aspect(self, block: Cluster, angle: float) -> list[Cluster]:
        """Cut along the longer rotated axis into ceil(aspect / target) >= 2 strips."""
        rotated = self._rotated(block, angle)
        min_x, min_y = rotated.min(axis=0)
        max_x, max_y = rotated.max(axis=0)
        width, height = max_x - min_x, max_y - min_y
        target = self.config.target_aspect_ratio

        if height <= 0 or width / max(height, 1e-9) > target:
            axis, extent, origin = 0, width, min_x
            current = width / height if height > 0 else math.inf
        else:
            axis, extent, origin = 1, height, min_y
            current = height / width if width > 0 else math.inf
        if extent <= 0:
            return [block]

        splits = max(2, math.ceil(current / target)) if math.isfinite(current) else 2
        splits = min(splits, len(block))
        step = extent / splits
        index = np.minimum(splits - 1, ((rotated[:, axis] - origin) / step).astype(int))

        parts: list[Cluster] = [[] for _ in range(splits)]
        for cell, k in zip(block, index):
            parts[int(k)].append(cell)
        return [p for p in parts if p]

    def merge_small(self, blocks: list[Cluster]) -> list[Cluster]:
        """Merge blocks under min cells into the best partner, smallest first."""
        if len(blocks) <= 1:
            return blocks
        limit = self.max_cells * self.config.merge_overshoot
        centroids = [_centroid(b) for b in blocks]
        merged = [False] * len(blocks)
        result: list[Cluster] = []

        for i in sorted(range(len(blocks)), key=lambda k: len(blocks[k])):
            if merged[i]:
                continue
            if len(blocks[i]) >= self.min_cells:
                result.append(blocks[i])
                merged[i] = True
                continue

            best_j, best_score = -1, math.inf
            for j in range(len(blocks)):
                if j == i or merged[j]:
                    continue
                size = len(blocks[i]) + len(blocks[j])
                if size > limit:
                    continue
                dist = math.dist(centroids[i], centroids[j])
                size_score = abs(size - self.max_cells * 0.8) / self.max_cells
                score = dist * 0.5 + size_score * 0.5
                if score < best_score:
                    best_j, best_score = j, score

            if best_j >= 0:
                result.append(blocks[i] + blocks[best_j])
                merged[best_j] = True
            else:
                result.append(blocks[i])
            merged[i] = True

        return result

    def finalize(self, blocks: list[Cluster]) -> list[Cluster]:
        """Last aspect pass: split elongated blocks only when the pieces come out reasonable."""
        cfg = self.config
        result: list[Cluster] = []
        for block in blocks:
            if len(block) < self.min_cells * 0.7 or self.aspect(block) <= cfg.max_aspect_ratio:
                result.append(block)
                continue

            parts = self.split_for_aspect(block, self.orientation(block))
            if len(block) > self.max_cells:
                ok = all(self.aspect(p) <= cfg.max_aspect_ratio * 1.2 for p in parts)
            else:
                ok = len(parts) == 2 and all(len(p) >= self.min_cells * 0.5 for p in parts)
            if ok:
                result.extend(parts)
            else:
                result.append(block)
        return result

    def _rotated(self, cells: Cluster, angle: float):
        arr = _as_array(cells)
        centre = arr.mean(axis=0)
        return rotate_points(arr, -angle, (float(centre[0]), float(centre[1])))


def subdivide_clusters(
    grid: SpatialGrid,
    clusters: list[Cluster],
    config: GenerationConfig | None = None,
) -> list[Polygon]:
    """Subdivide every cluster and trace each resulting cell group into a polygon."""
    subdivider = BlockSubdivider(grid.cell_size, config)
    polygons: list[Polygon] = []
    for cluster in clusters:
        for group in subdivider.subdivide(cluster):
            poly = grid.cluster_to_precise_polygon(group)
            if poly is not None:
                polygons.append(poly)
    logger.debug("Subdivided %d clusters into %d sub-blocks", len(clusters), len(polygons))
    return polygons


def _as_array(cells: list[Cell]):
    return np.asarray(cells, dtype=np.float64).reshape(-1, 2)


def _centroid(cells: Cluster) -> tuple[float, float]:
    arr = _as_array(cells)
    return (float(arr[:, 0].mean()), float(arr[:, 1].mean()))


def _distribute(
    cluster: Cluster,
    rotated,
    extent: tuple[float, float, float, float],
    cols: int,
    rows: int,
) -> list[Cluster]:
    """Bucket cells into a cols × rows grid over the rotated extent."""
    min_x, min_y, max_x, max_y = extent
    cell_w = (max_x - min_x) / cols
    cell_h = (max_y - min_y) / rows
    if cell_w <= 0:
        cell_w = 1.0
    if cell_h <= 0:
        cell_h = 1.0
    ci = np.minimum(cols - 1, ((rotated[:, 0] - min_x) / cell_w).astype(int))
    ri = np.minimum(rows - 1, ((rotated[:, 1] - min_y) / cell_h).astype(int))
    buckets: list[Cluster] = [[] for _ in range(cols * rows)]
    for cell, c, r in zip(cluster, ci, ri):
        buckets[int(r) * cols + int(c)].append(cell)
    return buckets
