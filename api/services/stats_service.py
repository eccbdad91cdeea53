"""Stats service - rollups of a diver's history.

Each of the five result sets fetches its own rows and can be requested and can
fail on its own. get_dive_stats runs all five together and returns either all
of them or nothing.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from divelog.errors import NoDataError
from divelog.stats import (
    AggregateDiveStats,
    DimensionalStats,
    DiveStats,
    StatDimension,
    StatRow,
    general_stats,
    lifetime_buddy_stats,
    lifetime_site_stats,
    stats_by_buddy,
    stats_by_country,
    stats_by_dive_site,
    stats_by_month,
)

from .record_mappers import map_stat_row

if TYPE_CHECKING:
    from .divelog_repository import DivelogRepository

logger = logging.getLogger(__name__)


class StatsService:
    """Business logic for dive stats - fully testable with mocked repository."""

    def __init__(self, repository: DivelogRepository, timeout: float | None = None) -> None:
        """Initialize with repository for data access.

        Args:
            repository: DivelogRepository instance for data access.
            timeout: Deadline for each rollup query; the repository's read
                deadline when omitted.
        """
        self.repo = repository
        self.timeout = timeout

    async def _rows(self, owner_id: str, dimension: StatDimension) -> list[StatRow]:
        records = await self.repo.fetch_stat_rows(owner_id, dimension, timeout=self.timeout)
        return [map_stat_row(record) for record in records]

    async def get_general_stats(self, owner_id: str) -> AggregateDiveStats:
        """
        Raises:
            NoDataError: If the owner has not logged any dives.
        """
        rows = await self._rows(owner_id, StatDimension.GENERAL)
        if not rows:
            raise NoDataError(f"owner {owner_id} has no dives")
        return general_stats(rows)

    async def get_stats_by_month(self, owner_id: str) -> list[DimensionalStats]:
        return stats_by_month(await self._rows(owner_id, StatDimension.MONTH))

    async def get_stats_by_country(self, owner_id: str) -> list[DimensionalStats]:
        return stats_by_country(await self._rows(owner_id, StatDimension.COUNTRY))

    async def get_stats_by_dive_site(self, owner_id: str) -> list[DimensionalStats]:
        rows = await self._rows(owner_id, StatDimension.DIVE_SITE)
        return stats_by_dive_site(rows, lifetime_site_stats(rows))

    async def get_stats_by_buddy(self, owner_id: str) -> list[DimensionalStats]:
        rows = await self._rows(owner_id, StatDimension.BUDDY)
        return stats_by_buddy(rows, lifetime_buddy_stats(rows))

    async def get_dive_stats(self, owner_id: str) -> DiveStats:
        """All five rollups.

        The sub-computations share one task group: if any fails, or the caller
        is cancelled, the rest are cancelled and nothing is returned.

        Raises:
            NoDataError: If the owner has not logged any dives.
        """
        try:
            async with asyncio.TaskGroup() as tg:
                general = tg.create_task(self.get_general_stats(owner_id))
                by_month = tg.create_task(self.get_stats_by_month(owner_id))
                by_country = tg.create_task(self.get_stats_by_country(owner_id))
                by_dive_site = tg.create_task(self.get_stats_by_dive_site(owner_id))
                by_buddy = tg.create_task(self.get_stats_by_buddy(owner_id))
        except ExceptionGroup as eg:
            no_data = eg.subgroup(NoDataError)
            if no_data is None:
                logger.error(f"Stats rollups failed for owner {owner_id}: {eg.exceptions}")
            raise _first(no_data or eg) from None

        return DiveStats(
            general=general.result(),
            by_month=by_month.result(),
            by_country=by_country.result(),
            by_dive_site=by_dive_site.result(),
            by_buddy=by_buddy.result(),
        )


def _first(group: BaseExceptionGroup[Any]) -> BaseException:
    """Unwrap a task group failure so callers see the original error type."""
    exc: BaseException = group
    while isinstance(exc, BaseExceptionGroup):
        exc = exc.exceptions[0]
    return exc
