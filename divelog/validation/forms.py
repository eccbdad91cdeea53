"""Input shapes validated by the rulesets in rules.py.

Forms carry raw, possibly incomplete user input. Identifiers are PocketBase
record ids; durations are whole minutes as entered by the diver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class DiveForm:
    number: int | None = None
    activity: str = ""
    dive_site_id: str = ""
    operator_id: str | None = None
    price_amount: float | None = None
    price_currency_id: str | None = None
    trip_id: str | None = None
    certification_id: str | None = None
    date_time_in: datetime | None = None
    max_depth: float | None = None
    avg_depth: float | None = None
    bottom_time_minutes: int | None = None
    safety_stop_minutes: float | None = None
    water_temp: int | None = None
    air_temp: int | None = None
    visibility: float | None = None
    current_id: str | None = None
    waves_id: str | None = None
    buddy_id: str | None = None
    buddy_role_id: str | None = None
    weight: float | None = None
    weight_notes: str = ""
    equipment_ids: list[str] = field(default_factory=list)
    equipment_notes: str = ""
    tank_configuration_id: str = ""
    tank_material_id: str = ""
    tank_volume: float | None = None
    gas_mix_id: str = ""
    fo2: float | None = None
    pressure_in: int | None = None
    pressure_out: int | None = None
    gas_mix_notes: str = ""
    entry_point_id: str = ""
    property_ids: list[str] = field(default_factory=list)
    rating: int | None = None
    notes: str = ""


@dataclass
class DiveSiteForm:
    name: str = ""
    alt_name: str = ""
    location: str = ""
    region: str = ""
    country_id: str = ""
    timezone: str = ""
    latitude: float | None = None
    longitude: float | None = None
    water_body_id: str = ""
    water_type_id: str = ""
    altitude: int = 0
    max_depth: float | None = None
    notes: str = ""
    rating: int | None = None


@dataclass
class TripForm:
    name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str = ""
    rating: int | None = None
    operator_id: str | None = None
    price_amount: float | None = None
    price_currency_id: str | None = None
    notes: str = ""


@dataclass
class CertificationForm:
    course_id: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    operator_id: str = ""
    instructor_id: str = ""
    price_amount: float | None = None
    price_currency_id: str | None = None
    rating: int | None = None
    notes: str = ""


@dataclass
class OperatorForm:
    name: str = ""
    operator_type_id: str = ""
    street: str = ""
    suburb: str = ""
    state: str = ""
    postcode: str = ""
    country_id: str = ""
    website_url: str = ""
    email_address: str = ""
    phone_number: str = ""
    comments: str = ""


@dataclass
class BuddyForm:
    name: str = ""
    email: str = ""
    phone_number: str = ""
    agency_id: str | None = None
    agency_member_num: str = ""
    notes: str = ""
