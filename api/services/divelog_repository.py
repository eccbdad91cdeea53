"""Data access layer for the dive log.

This module isolates all PocketBase interactions for the dive log services,
enabling dependency injection and testability. Every call runs the blocking
PocketBase client in a worker thread under a deadline; PocketBase failures are
translated into divelog errors here so services never see transport types.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from pocketbase.client import ClientResponseError  # type: ignore[attr-defined]

from divelog.errors import (
    DependencyError,
    DependencyTimeoutError,
    DuplicateKeyError,
    NotFoundError,
    UpdateConflictError,
)
from divelog.pagination import Pager
from divelog.stats import StatDimension

from .record_mappers import DIVE_EXPAND, format_datetime

if TYPE_CHECKING:
    from pocketbase import PocketBase

logger = logging.getLogger(__name__)

DIVES = "dives"
DIVE_SITES = "dive_sites"

# Expansions each stats dimension needs; month also needs the site for its timezone.
STAT_EXPANDS: dict[StatDimension, str] = {
    StatDimension.GENERAL: "dive_site",
    StatDimension.MONTH: "dive_site",
    StatDimension.COUNTRY: "dive_site,dive_site.country",
    StatDimension.DIVE_SITE: "dive_site,dive_site.country",
    StatDimension.BUDDY: "dive_site,buddy,buddy.agency",
}


def quote(value: str) -> str:
    """Quote a string for a PocketBase filter expression."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True)
class DiveFilter:
    """Optional narrowing of a diver's dive list."""

    dive_site_id: str | None = None
    buddy_id: str | None = None
    trip_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None

    def to_filter(self, owner_id: str) -> str:
        clauses = [f"owner = {quote(owner_id)}"]
        if self.dive_site_id:
            clauses.append(f"dive_site = {quote(self.dive_site_id)}")
        if self.buddy_id:
            clauses.append(f"buddy = {quote(self.buddy_id)}")
        if self.trip_id:
            clauses.append(f"trip = {quote(self.trip_id)}")
        if self.date_from is not None:
            clauses.append(f"date_time_in >= {quote(format_datetime(self.date_from))}")
        if self.date_to is not None:
            clauses.append(f"date_time_in <= {quote(format_datetime(self.date_to))}")
        return " && ".join(clauses)


def _unique_field(e: ClientResponseError) -> str | None:
    """Name of the field PocketBase rejected as not unique, if any."""
    body = getattr(e, "data", None) or {}
    field_errors = body.get("data", {}) if isinstance(body, dict) else {}
    if not isinstance(field_errors, dict):
        return None
    for field, detail in field_errors.items():
        if isinstance(detail, dict) and detail.get("code") == "validation_not_unique":
            return str(field)
    return None


def translate_error(e: ClientResponseError, what: str) -> Exception:
    """Map a PocketBase error to the matching divelog error."""
    status = getattr(e, "status", 0)
    if status == 404:
        return NotFoundError(f"{what} not found")
    unique_field = _unique_field(e)
    if unique_field is not None:
        return DuplicateKeyError(unique_field, f"{unique_field} is already in use")
    logger.error(f"PocketBase error during {what}: status={status}, body={getattr(e, 'data', None)}")
    return DependencyError(f"{what} failed: {e}")


class DivelogRepository:
    """Data access layer for dives, stats rows and reference tables.

    All methods that interact with PocketBase are isolated here,
    allowing the service layer to be tested with mocked data.
    """

    def __init__(
        self,
        pb: PocketBase,
        read_timeout: float = 1.0,
        write_timeout: float = 2.0,
    ) -> None:
        """Initialize with PocketBase client.

        Args:
            pb: PocketBase client instance.
            read_timeout: Deadline in seconds for each read.
            write_timeout: Deadline in seconds for each write.
        """
        self.pb = pb
        self.read_timeout = read_timeout
        self.write_timeout = write_timeout

    async def _call(self, what: str, fn: Callable[..., Any], *args: Any, timeout: float, **kwargs: Any) -> Any:
        try:
            async with asyncio.timeout(timeout):
                return await asyncio.to_thread(fn, *args, **kwargs)
        except TimeoutError as e:
            logger.warning(f"PocketBase {what} exceeded {timeout}s deadline")
            raise DependencyTimeoutError(f"{what} timed out after {timeout}s") from e
        except ClientResponseError as e:
            raise translate_error(e, what) from e

    async def _read(self, what: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return await self._call(what, fn, *args, timeout=self.read_timeout, **kwargs)

    async def _write(self, what: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return await self._call(what, fn, *args, timeout=self.write_timeout, **kwargs)

    async def fetch_dives_for_owner(
        self,
        owner_id: str,
        pager: Pager,
        dive_filter: DiveFilter | None = None,
        sort: str = "-number,id",
    ) -> tuple[list[Any], int]:
        """Fetch one page of a diver's dives.

        Returns:
            The page of dive records and the total number of matching dives.
        """
        dive_filter = dive_filter or DiveFilter()
        result = await self._read(
            "list dives",
            self.pb.collection(DIVES).get_list,
            pager.page,
            pager.page_size,
            query_params={"filter": dive_filter.to_filter(owner_id), "sort": sort, "expand": DIVE_EXPAND},
        )
        return list(result.items), int(result.total_items)

    async def fetch_dive(self, owner_id: str, dive_id: str) -> Any:
        """Fetch one dive, scoped to its owner.

        Raises:
            NotFoundError: If the dive does not exist or belongs to someone else.
        """
        return await self._read(
            f"fetch dive {dive_id}",
            self.pb.collection(DIVES).get_first_list_item,
            f"id = {quote(dive_id)} && owner = {quote(owner_id)}",
            query_params={"expand": DIVE_EXPAND},
        )

    async def fetch_previous_dive(self, owner_id: str, before: datetime) -> Any | None:
        """The owner's latest dive starting before ``before``, or None."""
        result = await self._read(
            "fetch previous dive",
            self.pb.collection(DIVES).get_list,
            1,
            1,
            query_params={
                "filter": f"owner = {quote(owner_id)} && date_time_in < {quote(format_datetime(before))}",
                "sort": "-date_time_in,-number",
                "fields": "id,date_time_in,bottom_time",
            },
        )
        return result.items[0] if result.items else None

    async def fetch_dive_site_timezone(self, site_id: str) -> str:
        """IANA timezone of a dive site.

        Raises:
            NotFoundError: If the site does not exist.
        """
        record = await self._read(
            f"fetch dive site {site_id}",
            self.pb.collection(DIVE_SITES).get_one,
            site_id,
            query_params={"fields": "id,timezone"},
        )
        return str(getattr(record, "timezone", "") or "")

    async def fetch_stat_rows(self, owner_id: str, dimension: StatDimension, timeout: float | None = None) -> list[Any]:
        """Fetch every dive of an owner with the relations a stats dimension needs.

        The buddy dimension only fetches dives that recorded a buddy.
        """
        filter_str = f"owner = {quote(owner_id)}"
        if dimension is StatDimension.BUDDY:
            filter_str += ' && buddy != ""'
        return await self._call(
            f"fetch {dimension} stats",
            self.pb.collection(DIVES).get_full_list,
            query_params={"filter": filter_str, "expand": STAT_EXPANDS[dimension], "sort": "date_time_in,id"},
            timeout=timeout or self.read_timeout,
        )

    async def fetch_reference_rows(self, collection: str, sort: str) -> list[Any]:
        return await self._read(
            f"load {collection}",
            self.pb.collection(collection).get_full_list,
            query_params={"sort": f"{sort},id"},
        )

    async def id_exists(self, collection: str, record_id: str) -> bool:
        result = await self._read(
            f"check {collection} {record_id}",
            self.pb.collection(collection).get_list,
            1,
            1,
            query_params={"filter": f"id = {quote(record_id)}", "fields": "id"},
        )
        return int(result.total_items) > 0

    async def insert_dive(self, owner_id: str, values: dict[str, Any]) -> Any:
        """Create a dive at version 1.

        Raises:
            DuplicateKeyError: If the owner already has a dive with this number.
        """
        data = {**values, "owner": owner_id, "version": 1}
        record = await self._write("create dive", self.pb.collection(DIVES).create, data)
        logger.info(f"Created dive {record.id} #{values.get('number')} for owner {owner_id}")
        return record

    async def update_dive(self, owner_id: str, dive_id: str, version: int, values: dict[str, Any]) -> Any:
        """Update a dive if ``version`` is still current, bumping the version.

        The version check and the write are separate PocketBase calls, so two
        writers racing between them can both succeed.

        Raises:
            NotFoundError: If the dive does not exist or belongs to someone else.
            UpdateConflictError: If the stored version differs from ``version``.
        """
        current = await self._read(
            f"fetch dive {dive_id}",
            self.pb.collection(DIVES).get_one,
            dive_id,
            query_params={"fields": "id,owner,version"},
        )
        if str(getattr(current, "owner", "")) != owner_id:
            raise NotFoundError(f"dive {dive_id} not found")
        stored_version = int(getattr(current, "version", 1) or 1)
        if stored_version != version:
            logger.info(f"Version conflict on dive {dive_id}: submitted {version}, stored {stored_version}")
            raise UpdateConflictError("dive", dive_id, version, stored_version)

        data = {**values, "version": version + 1}
        return await self._write(f"update dive {dive_id}", self.pb.collection(DIVES).update, dive_id, data)
