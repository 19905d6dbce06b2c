"""Generation configuration — every tunable constant of a layout run."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GenerationConfig:
    """Constants for streets, grid, subdivision, placement and floors.

    Lengths are in the plot's metric units (metres), areas in square units.
    """

    # Boundary entry points
    collinear_tolerance_deg: float = 30.0
    min_corner_edge_length: float = 80.0
    max_segment_length: float = 120.0
    ring_snap_tolerance: float = 1e-8

    # Street network
    min_cross_distance: float = 30.0
    cross_tolerance: float = 1.0
    crossing_end_tolerance: float = 0.01
    incidence_tolerance: float = 1e-4
    split_tolerance: float = 1e-6
    max_street_iterations: int = 500
    street_half_width: float = 5.0  # cleared from the grid on both sides

    # Decomposition
    noding_grid_size: float = 1e-9

    # Spatial grid
    cell_size: float = 10.0
    availability_threshold: float = 0.5

    # Block subdivision
    min_block_area: float = 12000.0
    max_block_area: float = 30000.0
    max_aspect_ratio: float = 2.0
    target_aspect_ratio: float = 1.2
    target_fill: float = 0.85
    orientation_snap_deg: float = 5.0
    merge_overshoot: float = 1.2
    max_subdivision_depth: int = 8

    # Sub-block handling
    block_setback: float = 6.0
    min_sub_block_area: float = 100.0
    min_buildable_area: float = 500.0
    park_probability: float = 0.1

    # Building placement
    section_sizes: tuple[float, ...] = (24.0, 32.0)
    section_spacing: float = 4.0
    small_block_threshold: float = 30.0
    small_block_margin: float = 4.0
    placement_buffer: float = 1.0
    outline_spacing_ratio: float = 0.15

    # Floors and metrics
    max_floors: int = 9
    floor_tolerance: float = 0.05
    max_floor_iterations: int = 10000
    story_height: float = 3.2
    bay_length: float = 3.0

    # Restriction types queried from the source, by value
    restriction_types: tuple[str, ...] = (
        "heritage_site",
        "heritage_area",
        "protection_zone",
        "buffer_zone",
        "buildings",
        "roads",
    )

    # Variants
    street_densities: tuple[float, ...] = field(default_factory=lambda: (0.6, 1.0, 1.4))
    seed: int = 1

    # Step previews
    capture_visuals: bool = False
