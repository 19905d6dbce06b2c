"""POST /api/layouts/generate — layout variants for a WGS84 plot."""

from __future__ import annotations

import asyncio
import functools
import logging
import time

from fastapi import APIRouter, HTTPException
from pyproj import CRS
from shapely.geometry import LineString

from siteplan.config import settings
from siteplan.dependencies import get_restriction_source
from siteplan.engine.config import GenerationConfig
from siteplan.engine.pipeline import GenerationResult, create_pipeline
from siteplan.geo.projection import UtmProjection
from siteplan.models.requests import GenerateLayoutRequest, LatLng
from siteplan.models.responses import (
    BayResponse,
    FloorAdjustmentResponse,
    GenerateLayoutResponse,
    LayoutResponse,
    SectionResponse,
)
from siteplan.planning.layout import Layout
from siteplan.planning.plot import InvalidPlotError, validate_plot
from siteplan.planning.sections import Bay

router = APIRouter()
logger = logging.getLogger(__name__)


def _to_latlng(coords) -> list[LatLng]:
    return [LatLng(lat=y, lng=x) for x, y in coords]


def _bay_response(bay: Bay, projection: UtmProjection, crs: CRS) -> BayResponse:
    start, end = _to_latlng(projection.to_geographic(LineString([bay.start, bay.end]), crs).coords)
    return BayResponse(start=start, end=end, edge_index=bay.edge_index, floors=bay.floors, height=bay.height)


def _layout_response(layout: Layout, projection: UtmProjection, crs: CRS) -> LayoutResponse:
    """Unproject every geometry of ``layout`` back to WGS84."""
    sections = []
    for section in layout.sections:
        ring = projection.to_geographic(section.polygon, crs)
        data = section.to_dict()
        data["polygon"] = _to_latlng(ring.exterior.coords)
        data["bays"] = [_bay_response(bay, projection, crs) for bay in section.bays]
        sections.append(SectionResponse(**data))

    streets = [
        _to_latlng(projection.to_geographic(street, crs).coords)
        for street in layout.streets
        if isinstance(street, LineString)
    ]
    parks = [_to_latlng(projection.to_geographic(park, crs).exterior.coords) for park in layout.parks]

    adjustment = None
    if layout.floor_adjustment is not None:
        fa = layout.floor_adjustment
        adjustment = FloorAdjustmentResponse(
            status=fa.status.value,
            iterations=fa.iterations,
            total_floor_area=fa.total_floor_area,
            target=fa.target,
        )

    return LayoutResponse(
        name=layout.name,
        street_density=layout.street_density,
        sections=sections,
        streets=streets,
        parks=parks,
        built_up_area=layout.built_up_area,
        useful_area=layout.useful_area,
        cost=layout.cost,
        insolation=layout.insolation,
        value=layout.value,
        total_floor_area=layout.total_floor_area,
        floor_adjustment=adjustment,
    )


@router.post("/layouts/generate", response_model=GenerateLayoutResponse)
async def generate_layouts(request: GenerateLayoutRequest) -> GenerateLayoutResponse:
    start = time.perf_counter()

    try:
        plot = validate_plot([(p.lng, p.lat) for p in request.polygon_points])
    except InvalidPlotError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    projection = UtmProjection()
    metric_plot, crs = projection.to_metric(plot)
    logger.info("Generate: plot %.0f m² in %s", metric_plot.area, crs.to_string())

    pipeline = create_pipeline(GenerationConfig(capture_visuals=request.include_visuals))
    run = functools.partial(
        pipeline.generate,
        metric_plot,
        restrictions=get_restriction_source(crs),
        max_floors=request.max_floors,
        gross_floor_area=request.gross_floor_area,
        seed=request.seed if request.seed is not None else settings.default_seed,
        timeout_s=settings.request_timeout_s,
    )

    # Generation is CPU-bound; keep the event loop free
    try:
        result: GenerationResult = await asyncio.get_running_loop().run_in_executor(None, run)
    except InvalidPlotError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    elapsed = (time.perf_counter() - start) * 1000
    return GenerateLayoutResponse(
        layouts=[_layout_response(layout, projection, crs) for layout in result.layouts],
        processing_time_ms=round(elapsed, 1),
        passes_failed=len(result.errors),
        cancelled=result.cancelled,
        errors=result.errors,
        visuals=result.visuals,
    )
