"""Building template catalog — polyomino footprints as a data table.

Each template lists the secondary-grid cells it occupies (col, row offsets)
and an explicit outline. Outline vertices are stored as coefficient pairs:

    x = ax * module + bx * gap
    y = ay * module + by * gap

where ``module`` is the built width of one cell and ``gap`` the spacing
between neighbouring cells. Filled corners between cells come from the
outline, not from unioning unit squares.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from shapely.geometry import Polygon


class BuildingCategory(str, enum.Enum):
    GENERIC = "generic"
    RESIDENTIAL = "residential"
    EDUCATION = "education"
    MEDICAL = "medical"


# (ax, bx, ay, by)
OutlineVertex = tuple[int, int, int, int]


@dataclass(frozen=True)
class BuildingTemplate:
    id: str
    cells: tuple[tuple[int, int], ...]
    outline: tuple[OutlineVertex, ...]
    category: BuildingCategory
    min_floors: int
    max_floors: int

    @property
    def size(self) -> int:
        return len(self.cells)

    def polygon(self, col: int, row: int, pitch: float, start_x: float, start_y: float, spacing_ratio: float = 0.15) -> Polygon:
        """Footprint anchored at secondary cell (col, row) of a grid with the given pitch."""
        gap = pitch * spacing_ratio
        module = pitch - gap
        x0 = start_x + col * pitch + gap / 2
        y0 = start_y + row * pitch + gap / 2
        return Polygon(
            [(x0 + ax * module + bx * gap, y0 + ay * module + by * gap) for ax, bx, ay, by in self.outline]
        )

    def fits(self, col: int, row: int, free: list[list[bool]]) -> bool:
        """True if every cell lands inside the grid on a free (available, unassigned) cell."""
        cols = len(free)
        rows = len(free[0]) if cols else 0
        for dc, dr in self.cells:
            c, r = col + dc, row + dr
            if c < 0 or c >= cols or r < 0 or r >= rows or not free[c][r]:
                return False
        return True


def _rect(n_cols: int, n_rows: int) -> tuple[OutlineVertex, ...]:
    w = (n_cols, n_cols - 1)
    h = (n_rows, n_rows - 1)
    return ((0, 0, 0, 0), (w[0], w[1], 0, 0), (w[0], w[1], h[0], h[1]), (0, 0, h[0], h[1]))


def _strip(name: str, n: int, horizontal: bool) -> BuildingTemplate:
    cells = tuple((i, 0) if horizontal else (0, i) for i in range(n))
    outline = _rect(n, 1) if horizontal else _rect(1, n)
    return BuildingTemplate(name, cells, outline, BuildingCategory.RESIDENTIAL, 1, 5)


CATALOG: tuple[BuildingTemplate, ...] = (
    BuildingTemplate("single", ((0, 0),), _rect(1, 1), BuildingCategory.GENERIC, 1, 5),
    _strip("line2_h", 2, True),
    _strip("line2_v", 2, False),
    _strip("line3_h", 3, True),
    _strip("line3_v", 3, False),
    _strip("line4_h", 4, True),
    _strip("line4_v", 4, False),
    BuildingTemplate(
        "l3_standard",
        ((0, 0), (0, 1), (1, 0)),
        ((0, 0, 0, 0), (2, 1, 0, 0), (2, 1, 1, 0), (1, 0, 1, 0), (1, 0, 2, 1), (0, 0, 2, 1)),
        BuildingCategory.RESIDENTIAL, 1, 5,
    ),
    BuildingTemplate(
        "l3_mirror",
        ((0, 0), (1, 0), (1, 1)),
        ((0, 0, 0, 0), (2, 1, 0, 0), (2, 1, 2, 1), (1, 1, 2, 1), (1, 1, 1, 0), (0, 0, 1, 0)),
        BuildingCategory.RESIDENTIAL, 1, 5,
    ),
    BuildingTemplate(
        "l4",
        ((0, 0), (0, 1), (0, 2), (1, 2)),
        ((0, 0, 0, 0), (1, 0, 0, 0), (1, 0, 2, 2), (2, 1, 2, 2), (2, 1, 3, 2), (0, 0, 3, 2)),
        BuildingCategory.MEDICAL, 3, 10,
    ),
    BuildingTemplate(
        "l5",
        ((0, 0), (0, 1), (0, 2), (1, 2), (2, 2)),
        ((0, 0, 0, 0), (1, 0, 0, 0), (1, 0, 2, 2), (3, 2, 2, 2), (3, 2, 3, 2), (0, 0, 3, 2)),
        BuildingCategory.EDUCATION, 2, 8,
    ),
    BuildingTemplate(
        "square2x2",
        ((0, 0), (1, 0), (0, 1), (1, 1)),
        _rect(2, 2),
        BuildingCategory.RESIDENTIAL, 1, 5,
    ),
    BuildingTemplate(
        "square3x3",
        tuple((c, r) for r in range(3) for c in range(3)),
        _rect(3, 3),
        BuildingCategory.EDUCATION, 2, 8,
    ),
    BuildingTemplate(
        "t4",
        ((0, 0), (1, 0), (2, 0), (1, 1)),
        (
            (0, 0, 0, 0), (3, 2, 0, 0), (3, 2, 1, 0), (2, 1, 1, 0),
            (2, 1, 2, 1), (1, 1, 2, 1), (1, 1, 1, 0), (0, 0, 1, 0),
        ),
        BuildingCategory.MEDICAL, 3, 10,
    ),
)

_BY_ID: dict[str, BuildingTemplate] = {t.id: t for t in CATALOG}


def get_template(template_id: str) -> BuildingTemplate:
    return _BY_ID[template_id]


def all_templates() -> tuple[BuildingTemplate, ...]:
    return CATALOG
