"""
Dives Router - List, read and save a diver's dives.

Validation, conflict and lookup failures surface as divelog errors and are
translated to HTTP responses by the handlers registered in api.main.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from divelog.pagination import Pager

from ..dependencies import get_dive_service
from ..schemas.divelog import (
    DiveListResponse,
    DiveRequest,
    DiveResponse,
    DiveUpdateRequest,
    PageDataResponse,
)
from ..services.dive_service import DiveService
from ..services.divelog_repository import DiveFilter
from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/divers/{owner_id}/dives", tags=["dives"])


@router.get("", response_model=DiveListResponse)
async def list_dives(
    owner_id: str,
    page: int = Query(1, description="Page number, 1-based"),
    page_size: int = Query(0, description="Dives per page; out of range uses the default"),
    sort: str | None = Query(None, description="Column to sort by (number, date, max_depth, bottom_time, site)"),
    direction: str | None = Query(None, description="asc or desc"),
    dive_site_id: str | None = Query(None),
    buddy_id: str | None = Query(None),
    trip_id: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    service: DiveService = Depends(get_dive_service),
    settings: Settings = Depends(get_settings),
) -> DiveListResponse:
    pager = Pager.create(page, page_size, settings.default_page_size)
    dive_filter = DiveFilter(
        dive_site_id=dive_site_id,
        buddy_id=buddy_id,
        trip_id=trip_id,
        date_from=date_from,
        date_to=date_to,
    )
    try:
        dives, page_data = await service.list_dives(owner_id, pager, dive_filter, sort, direction)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return DiveListResponse(
        dives=[DiveResponse.from_dive(dive, service.compute_dive_metrics(dive)) for dive in dives],
        page=PageDataResponse.from_page_data(page_data),
    )


@router.get("/{dive_id}", response_model=DiveResponse)
async def get_dive(owner_id: str, dive_id: str, service: DiveService = Depends(get_dive_service)) -> DiveResponse:
    dive = await service.get_dive(owner_id, dive_id)
    return DiveResponse.from_dive(dive, service.compute_dive_metrics(dive))


@router.post("", response_model=DiveResponse, status_code=201)
async def create_dive(
    owner_id: str,
    request: DiveRequest,
    service: DiveService = Depends(get_dive_service),
) -> DiveResponse:
    dive = await service.create_dive(owner_id, request.to_form())
    return DiveResponse.from_dive(dive, service.compute_dive_metrics(dive))


@router.put("/{dive_id}", response_model=DiveResponse)
async def update_dive(
    owner_id: str,
    dive_id: str,
    request: DiveUpdateRequest,
    service: DiveService = Depends(get_dive_service),
) -> DiveResponse:
    dive = await service.update_dive(owner_id, dive_id, request.version, request.to_form())
    return DiveResponse.from_dive(dive, service.compute_dive_metrics(dive))
