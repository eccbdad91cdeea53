"""Derived per-dive values.

Pure functions over a fully populated Dive. Values that cannot be computed from
the logged data come back as 0.0 (or None for the surface interval) rather than
raising, so a template can always render them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .models import Dive

# Sites at or above this altitude (metres) are always altitude dives.
ALTITUDE_DIVE_THRESHOLD = 300
# Between this altitude and ALTITUDE_DIVE_THRESHOLD, dives at or below
# ALTITUDE_CORRECTION_DEPTH need altitude-corrected tables.
ALTITUDE_CORRECTION_MIN_ALTITUDE = 91
ALTITUDE_CORRECTION_DEPTH = 44.0
DEEP_DIVE_DEPTH = 30.0

# Number of cylinders breathed from, keyed by lower-cased tank configuration name.
TANK_CONFIGURATION_CYLINDERS: dict[str, int] = {
    "single": 1,
    "single tank": 1,
    "sidemount": 2,
    "twinset": 2,
}


@dataclass(frozen=True)
class DiveMetrics:
    """Everything derived from a single dive for display."""

    gas_used: float
    sac_rate: float
    is_altitude_dive: bool
    is_deep_dive: bool
    is_training_dive: bool


def date_time_out(dive: Dive) -> datetime:
    return dive.date_time_in + dive.bottom_time


def pressure_delta(dive: Dive) -> int:
    if dive.pressure_in is None or dive.pressure_out is None:
        return 0
    return dive.pressure_in - dive.pressure_out


def gas_used(dive: Dive) -> float:
    """Litres of gas (at surface pressure) used on the dive.

    Returns 0.0 when there is no pressure drop or the tank configuration is not
    one we know how to count cylinders for.
    """
    delta = pressure_delta(dive)
    if delta == 0:
        return 0.0

    cylinders = TANK_CONFIGURATION_CYLINDERS.get(dive.tank_configuration.name.strip().lower())
    if cylinders is None:
        return 0.0

    return cylinders * dive.tank_volume * delta


def sac_rate(dive: Dive) -> float:
    """Surface Air Consumption rate in litres per minute.

    Requires gas used, an average depth and a non-zero bottom time. Returns 0.0
    if the value cannot be calculated.
    """
    used = gas_used(dive)
    minutes = dive.bottom_time.total_seconds() / 60
    if used == 0.0 or dive.avg_depth is None or minutes <= 0:
        return 0.0

    litres_per_minute = used / minutes
    avg_pressure_ata = dive.avg_depth / 10.0 + 1.0
    return litres_per_minute / avg_pressure_ata


def is_altitude_dive(dive: Dive) -> bool:
    altitude = dive.dive_site.altitude
    if altitude >= ALTITUDE_DIVE_THRESHOLD:
        return True
    return ALTITUDE_CORRECTION_MIN_ALTITUDE <= altitude < ALTITUDE_DIVE_THRESHOLD and (
        dive.max_depth >= ALTITUDE_CORRECTION_DEPTH
    )


def is_deep_dive(dive: Dive) -> bool:
    return dive.max_depth > DEEP_DIVE_DEPTH


def is_training_dive(dive: Dive) -> bool:
    return dive.certification is not None


def surface_interval(previous: Dive | None, dive: Dive) -> timedelta | None:
    """Time spent on the surface between the previous dive's exit and this entry.

    None when there is no previous dive or the logged times overlap.
    """
    if previous is None:
        return None
    return surface_interval_since(date_time_out(previous), dive.date_time_in)


def surface_interval_since(previous_exit: datetime, date_time_in: datetime) -> timedelta | None:
    interval = date_time_in - previous_exit
    if interval < timedelta(0):
        return None
    return interval


def compute_dive_metrics(dive: Dive) -> DiveMetrics:
    return DiveMetrics(
        gas_used=gas_used(dive),
        sac_rate=sac_rate(dive),
        is_altitude_dive=is_altitude_dive(dive),
        is_deep_dive=is_deep_dive(dive),
        is_training_dive=is_training_dive(dive),
    )
