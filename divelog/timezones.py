"""Dive site timezone handling.

Divers log the time shown on their watch at the dive site. Before storing, that
wall-clock time is read as local to the site's IANA timezone and converted to
UTC; on the way back out the stored instant is projected into the same zone so
the diver sees the wall-clock time they entered.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import TimezoneResolutionError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=512)
def load_zone(name: str) -> ZoneInfo:
    """Resolve an IANA zone identifier.

    Raises:
        TimezoneResolutionError: If the name is blank or not a known zone.
    """
    if not name or not name.strip():
        raise TimezoneResolutionError("dive site has no timezone")
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning(f"Unknown timezone {name!r}: {e}")
        raise TimezoneResolutionError(f"unknown timezone {name!r}") from e


def is_known_zone(name: str) -> bool:
    try:
        load_zone(name)
    except TimezoneResolutionError:
        return False
    return True


def site_local_to_utc(wall_clock: datetime, zone_name: str) -> datetime:
    """Read the wall-clock fields of ``wall_clock`` as local to ``zone_name``.

    Any tzinfo already attached is discarded without shifting the clock value.
    Ambiguous times during a DST fold resolve to the first occurrence.
    """
    zone = load_zone(zone_name)
    return wall_clock.replace(tzinfo=zone, fold=0).astimezone(UTC)


def utc_to_site_local(instant: datetime, zone_name: str) -> datetime:
    """Project a stored instant into the dive site's timezone.

    Naive instants are taken to be UTC, which is how they are stored.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=UTC)
    return instant.astimezone(load_zone(zone_name))
