"""Dive history rollups.

PocketBase has no GROUP BY, so rollups are computed here from one row per dive.
``aggregate`` is the single aggregation primitive and ``rollup`` the single
grouping primitive; each dimension is just a key extractor plus an ordering.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TypeVar

from .errors import NoDataError
from .models import Buddy, Country, DiveSite

TOP_N = 10

K = TypeVar("K")


class StatDimension(StrEnum):
    GENERAL = "general"
    MONTH = "month"
    COUNTRY = "country"
    DIVE_SITE = "dive_site"
    BUDDY = "buddy"


@dataclass(frozen=True)
class StatRow:
    """The fields of one dive that the rollups need.

    date_time_in is already projected into the dive site's timezone so months
    bucket on the diver's local calendar.
    """

    dive_id: str
    date_time_in: datetime
    bottom_time: timedelta
    max_depth: float
    avg_depth: float | None
    dive_site: DiveSite
    buddy: Buddy | None = None

    @property
    def country(self) -> Country | None:
        return self.dive_site.country


@dataclass(frozen=True)
class AggregateDiveStats:
    dive_count: int
    first_dive: datetime
    last_dive: datetime
    bottom_time_avg: timedelta
    bottom_time_max: timedelta
    bottom_time_sum: timedelta
    avg_depth_avg: float
    avg_depth_max: float
    max_depth_avg: float
    max_depth_max: float


@dataclass(frozen=True)
class DimensionalStats:
    """An aggregate for one value of a dimension.

    ``entity`` is set for the dive site and buddy dimensions and carries that
    entity's own lifetime stats for the owner.
    """

    key: str
    label: str
    stats: AggregateDiveStats
    entity: DiveSite | Buddy | None = None


@dataclass(frozen=True)
class DiveStats:
    general: AggregateDiveStats
    by_month: list[DimensionalStats]
    by_country: list[DimensionalStats]
    by_dive_site: list[DimensionalStats]
    by_buddy: list[DimensionalStats]


def aggregate(rows: Iterable[StatRow]) -> AggregateDiveStats:
    """Aggregate a set of dives.

    Dives without an average depth are left out of the avg-depth figures; if
    none recorded one, those figures are 0.0.

    Raises:
        NoDataError: If there are no rows.
    """
    rows = list(rows)
    if not rows:
        raise NoDataError("no dives to aggregate")

    count = len(rows)
    bottom_times = [r.bottom_time for r in rows]
    bottom_time_sum = sum(bottom_times, timedelta(0))
    avg_depths = [r.avg_depth for r in rows if r.avg_depth is not None]
    max_depths = [r.max_depth for r in rows]

    return AggregateDiveStats(
        dive_count=count,
        first_dive=min(r.date_time_in for r in rows),
        last_dive=max(r.date_time_in for r in rows),
        bottom_time_avg=bottom_time_sum / count,
        bottom_time_max=max(bottom_times),
        bottom_time_sum=bottom_time_sum,
        avg_depth_avg=sum(avg_depths) / len(avg_depths) if avg_depths else 0.0,
        avg_depth_max=max(avg_depths) if avg_depths else 0.0,
        max_depth_avg=sum(max_depths) / count,
        max_depth_max=max(max_depths),
    )


def group_rows(rows: Iterable[StatRow], key: Callable[[StatRow], K | None]) -> dict[K, list[StatRow]]:
    """Group rows by key, dropping rows whose key is None."""
    groups: dict[K, list[StatRow]] = {}
    for row in rows:
        value = key(row)
        if value is None:
            continue
        groups.setdefault(value, []).append(row)
    return groups


def rollup(
    rows: Iterable[StatRow],
    key: Callable[[StatRow], K | None],
    order: Callable[[tuple[K, AggregateDiveStats]], object],
    limit: int | None = None,
) -> list[tuple[K, AggregateDiveStats]]:
    """Aggregate each group and return them ordered, optionally truncated."""
    grouped = [(k, aggregate(group)) for k, group in group_rows(rows, key).items()]
    grouped.sort(key=order)
    return grouped if limit is None else grouped[:limit]


def by_count_then_id(item: tuple[K, AggregateDiveStats]) -> tuple[int, K]:
    """Most dives first; ties broken on the key ascending."""
    k, stats = item
    return (-stats.dive_count, k)


def month_key(row: StatRow) -> str:
    return f"{row.date_time_in:%Y-%m}"


def country_key(row: StatRow) -> str | None:
    return row.country.id if row.country is not None else None


def dive_site_key(row: StatRow) -> str:
    return row.dive_site.id


def buddy_key(row: StatRow) -> str | None:
    return row.buddy.id if row.buddy is not None else None


def general_stats(rows: Iterable[StatRow]) -> AggregateDiveStats:
    return aggregate(rows)


def stats_by_month(rows: Iterable[StatRow]) -> list[DimensionalStats]:
    """One entry per month with at least one dive, most recent month first."""
    months = rollup(rows, month_key, order=lambda item: item[0])
    months.reverse()
    return [
        DimensionalStats(key=k, label=f"{stats.first_dive:%B %Y}", stats=stats)
        for k, stats in months
    ]


def stats_by_country(rows: Iterable[StatRow], limit: int = TOP_N) -> list[DimensionalStats]:
    rows = list(rows)
    names = {r.country.id: r.country.name for r in rows if r.country is not None}
    return [
        DimensionalStats(key=k, label=names[k], stats=stats)
        for k, stats in rollup(rows, country_key, order=by_count_then_id, limit=limit)
    ]


def lifetime_site_stats(rows: Iterable[StatRow]) -> dict[str, DiveSite]:
    """Each site the owner has dived, carrying its dives_at/first/last values."""
    sites: dict[str, DiveSite] = {}
    for site_id, group in group_rows(rows, dive_site_key).items():
        stats = aggregate(group)
        sites[site_id] = dataclasses.replace(
            group[0].dive_site,
            dives_at=stats.dive_count,
            first_dive_at=stats.first_dive,
            last_dive_at=stats.last_dive,
        )
    return sites


def lifetime_buddy_stats(rows: Iterable[StatRow]) -> dict[str, Buddy]:
    """Each buddy the owner has dived with, carrying dives_with/first/last values."""
    buddies: dict[str, Buddy] = {}
    for buddy_id, group in group_rows(rows, buddy_key).items():
        stats = aggregate(group)
        buddy = group[0].buddy
        assert buddy is not None
        buddies[buddy_id] = dataclasses.replace(
            buddy,
            dives_with=stats.dive_count,
            first_dive_with=stats.first_dive,
            last_dive_with=stats.last_dive,
        )
    return buddies


def stats_by_dive_site(
    rows: Iterable[StatRow],
    lifetime: dict[str, DiveSite] | None = None,
    limit: int = TOP_N,
) -> list[DimensionalStats]:
    rows = list(rows)
    if lifetime is None:
        lifetime = lifetime_site_stats(rows)
    return [
        DimensionalStats(key=k, label=lifetime[k].name, stats=stats, entity=lifetime[k])
        for k, stats in rollup(rows, dive_site_key, order=by_count_then_id, limit=limit)
    ]


def stats_by_buddy(
    rows: Iterable[StatRow],
    lifetime: dict[str, Buddy] | None = None,
    limit: int = TOP_N,
) -> list[DimensionalStats]:
    """Top buddies. Dives without a buddy are not counted."""
    rows = list(rows)
    if lifetime is None:
        lifetime = lifetime_buddy_stats(rows)
    return [
        DimensionalStats(key=k, label=lifetime[k].name, stats=stats, entity=lifetime[k])
        for k, stats in rollup(rows, buddy_key, order=by_count_then_id, limit=limit)
    ]
