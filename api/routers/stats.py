"""
Stats Router - Rollups of a diver's dive history.

The combined endpoint returns all five rollups or fails as a whole; each
rollup also has its own endpoint that fails independently.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_stats_service
from ..schemas.divelog import (
    AggregateStatsResponse,
    DimensionalStatsResponse,
    DiveStatsResponse,
    dimensional_list,
)
from ..services.stats_service import StatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/divers/{owner_id}/stats", tags=["stats"])


@router.get("", response_model=DiveStatsResponse)
async def get_dive_stats(owner_id: str, service: StatsService = Depends(get_stats_service)) -> DiveStatsResponse:
    return DiveStatsResponse.from_stats(await service.get_dive_stats(owner_id))


@router.get("/general", response_model=AggregateStatsResponse)
async def get_general_stats(
    owner_id: str, service: StatsService = Depends(get_stats_service)
) -> AggregateStatsResponse:
    return AggregateStatsResponse.from_stats(await service.get_general_stats(owner_id))


@router.get("/by-month", response_model=list[DimensionalStatsResponse])
async def get_stats_by_month(
    owner_id: str, service: StatsService = Depends(get_stats_service)
) -> list[DimensionalStatsResponse]:
    return dimensional_list(await service.get_stats_by_month(owner_id))


@router.get("/by-country", response_model=list[DimensionalStatsResponse])
async def get_stats_by_country(
    owner_id: str, service: StatsService = Depends(get_stats_service)
) -> list[DimensionalStatsResponse]:
    return dimensional_list(await service.get_stats_by_country(owner_id))


@router.get("/by-dive-site", response_model=list[DimensionalStatsResponse])
async def get_stats_by_dive_site(
    owner_id: str, service: StatsService = Depends(get_stats_service)
) -> list[DimensionalStatsResponse]:
    return dimensional_list(await service.get_stats_by_dive_site(owner_id))


@router.get("/by-buddy", response_model=list[DimensionalStatsResponse])
async def get_stats_by_buddy(
    owner_id: str, service: StatsService = Depends(get_stats_service)
) -> list[DimensionalStatsResponse]:
    return dimensional_list(await service.get_stats_by_buddy(owner_id))
