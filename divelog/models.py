"""Core domain models for the dive log.

These are plain value objects; they know nothing about PocketBase or HTTP.
Optional associations are modelled as ``X | None`` and are built by a single
mapping function per entity in api.services.record_mappers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .reference_data import (
    Agency,
    BuddyRole,
    Current,
    DiveProperty,
    EntryPoint,
    Equipment,
    GasMix,
    TankConfiguration,
    TankMaterial,
    Waves,
)


@dataclass(frozen=True)
class Currency:
    id: str
    iso_alpha: str = ""
    iso_number: int = 0
    name: str = ""
    exponent: int = 2


@dataclass(frozen=True)
class Country:
    id: str
    name: str = ""
    iso_number: int = 0
    iso2_code: str = ""
    iso3_code: str = ""
    dialing_code: str = ""
    capital: str = ""
    continent: str = ""
    currency: Currency | None = None


@dataclass(frozen=True)
class Price:
    amount: float
    currency: Currency

    def __str__(self) -> str:
        return f"{self.amount:.{self.currency.exponent}f} {self.currency.iso_alpha}"


@dataclass
class DiveSite:
    """A dive site owned by a diver.

    dives_at, first_dive_at and last_dive_at are derived rolling stats; they are
    only populated when the site is projected by the stats engine.
    """

    id: str
    version: int = 1
    owner_id: str = ""
    name: str = ""
    alt_name: str = ""
    location: str = ""
    region: str = ""
    country: Country | None = None
    timezone: str = "UTC"
    latitude: float | None = None
    longitude: float | None = None
    water_body: str = ""
    water_type: str = ""
    altitude: int = 0
    max_depth: float | None = None
    notes: str = ""
    rating: int | None = None
    dives_at: int = 0
    first_dive_at: datetime | None = None
    last_dive_at: datetime | None = None


@dataclass
class Buddy:
    """A dive buddy. dives_with and friends are derived, owner-scoped stats."""

    id: str
    version: int = 1
    owner_id: str = ""
    name: str = ""
    email: str = ""
    phone_number: str = ""
    agency: Agency | None = None
    agency_member_num: str = ""
    dives_with: int = 0
    first_dive_with: datetime | None = None
    last_dive_with: datetime | None = None
    notes: str = ""

    def __str__(self) -> str:
        if self.agency is None:
            return self.name
        member = f" #{self.agency_member_num}" if self.agency_member_num else ""
        return f"{self.name} ({self.agency.acronym}{member})"


@dataclass(frozen=True)
class Operator:
    id: str
    owner_id: str = ""
    operator_type: str = ""
    name: str = ""
    street: str = ""
    suburb: str = ""
    state: str = ""
    postcode: str = ""
    country: Country | None = None
    website_url: str = ""
    email_address: str = ""
    phone_number: str = ""
    comments: str = ""


@dataclass(frozen=True)
class Trip:
    id: str
    owner_id: str = ""
    name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str = ""
    rating: int | None = None
    operator: Operator | None = None
    price: Price | None = None
    notes: str = ""

    @property
    def duration(self) -> timedelta:
        if self.start_date is None or self.end_date is None:
            return timedelta(0)
        return self.end_date - self.start_date

    def __str__(self) -> str:
        if self.start_date is None or self.end_date is None:
            return self.name
        return f"{self.name} ({self.start_date:%Y-%m-%d} to {self.end_date:%Y-%m-%d})"


@dataclass(frozen=True)
class Certification:
    id: str
    owner_id: str = ""
    course_name: str = ""
    agency: Agency | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    operator: Operator | None = None
    instructor: Buddy | None = None
    price: Price | None = None
    rating: int | None = None
    notes: str = ""

    def __str__(self) -> str:
        if self.start_date is None or self.end_date is None:
            return self.course_name
        return f"{self.course_name} ({self.start_date:%Y-%m-%d} to {self.end_date:%Y-%m-%d})"


@dataclass
class Dive:
    """A logged dive.

    date_time_in is always timezone aware. When read back from storage it is
    projected into the dive site's timezone.
    """

    id: str
    owner_id: str
    number: int
    dive_site: DiveSite
    date_time_in: datetime
    max_depth: float
    bottom_time: timedelta
    tank_configuration: TankConfiguration
    tank_material: TankMaterial
    tank_volume: float
    gas_mix: GasMix
    fo2: float
    entry_point: EntryPoint
    version: int = 1
    activity: str = ""
    operator: Operator | None = None
    price: Price | None = None
    trip: Trip | None = None
    certification: Certification | None = None
    surface_interval: timedelta | None = None
    avg_depth: float | None = None
    safety_stop: timedelta | None = None
    water_temp: int | None = None
    air_temp: int | None = None
    visibility: float | None = None
    current: Current | None = None
    waves: Waves | None = None
    buddy: Buddy | None = None
    buddy_role: BuddyRole | None = None
    weight: float | None = None
    weight_notes: str = ""
    equipment: list[Equipment] = field(default_factory=list)
    equipment_notes: str = ""
    pressure_in: int | None = None
    pressure_out: int | None = None
    gas_mix_notes: str = ""
    properties: list[DiveProperty] = field(default_factory=list)
    rating: int | None = None
    notes: str = ""
