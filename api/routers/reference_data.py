"""
Reference Data Router - Lookup tables shared by every diver.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from ..dependencies import get_reference_data
from ..schemas.divelog import ReferenceItemResponse
from ..services.reference_data import ReferenceData

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reference-data", tags=["reference-data"])


@router.get("/{kind}", response_model=list[ReferenceItemResponse])
async def list_reference_data(
    kind: str,
    sort_by_name: bool = Query(False, description="Order by name instead of the table's own order"),
    reference_data: ReferenceData = Depends(get_reference_data),
) -> list[ReferenceItemResponse]:
    items = await reference_data.for_kind(kind).list(sort_by_name=sort_by_name)
    return [ReferenceItemResponse.from_item(item) for item in items]


@router.get("/{kind}/{item_id}", response_model=ReferenceItemResponse)
async def get_reference_item(
    kind: str,
    item_id: str,
    reference_data: ReferenceData = Depends(get_reference_data),
) -> ReferenceItemResponse:
    return ReferenceItemResponse.from_item(await reference_data.for_kind(kind).get_one_by_id(item_id))


@router.post("/invalidate", status_code=204)
async def invalidate_reference_data(reference_data: ReferenceData = Depends(get_reference_data)) -> None:
    """Drop every cached table so the next read reloads from PocketBase."""
    reference_data.store.invalidate()
    logger.info("Reference data cache invalidated via API")
