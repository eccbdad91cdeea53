"""PocketBase record -> domain model mapping.

One function per entity. Optional associations come from the record's
``expand`` block; an association that was not expanded (or is empty) maps to
None. PocketBase hands back empty strings and zeros for unset fields, so the
helpers here normalise those before they reach the domain models.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from divelog.models import Buddy, Certification, Country, Currency, Dive, DiveSite, Operator, Price, Trip
from divelog.reference_data import (
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
from divelog.stats import StatRow
from divelog.timezones import utc_to_site_local

T = TypeVar("T")

# Expansions needed to build a fully populated Dive.
DIVE_EXPAND = ",".join(
    [
        "dive_site",
        "dive_site.country",
        "dive_site.country.currency",
        "operator",
        "operator.country",
        "currency",
        "trip",
        "certification",
        "certification.agency",
        "current",
        "waves",
        "buddy",
        "buddy.agency",
        "buddy_role",
        "equipment",
        "tank_configuration",
        "tank_material",
        "gas_mix",
        "entry_point",
        "properties",
    ]
)

PB_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def expanded(record: Any, name: str) -> Any | None:
    """Return an expanded relation, or None if it was not expanded."""
    expand = getattr(record, "expand", None) or {}
    value = expand.get(name) if isinstance(expand, dict) else getattr(expand, name, None)
    if isinstance(value, list):
        return value[0] if value else None
    return value or None


def expanded_list(record: Any, name: str) -> list[Any]:
    expand = getattr(record, "expand", None) or {}
    value = expand.get(name) if isinstance(expand, dict) else getattr(expand, name, None)
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def parse_datetime(value: Any) -> datetime | None:
    """Parse a PocketBase datetime (always UTC) into an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    text = str(value).strip().replace("T", " ").removesuffix("Z")
    try:
        parsed = datetime.strptime(text, PB_DATETIME_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(text)
    return parsed.replace(tzinfo=UTC) if parsed.tzinfo is None else parsed.astimezone(UTC)


def format_datetime(value: datetime) -> str:
    """Render an aware datetime the way PocketBase stores and filters them."""
    return value.astimezone(UTC).strftime(PB_DATETIME_FORMAT)[:-3] + "Z"


def optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def recorded(value: Any) -> float | None:
    """A measurement whose valid range excludes 0; PocketBase stores an unset number as 0."""
    number = optional_float(value)
    return None if not number else number


def minutes(value: Any) -> timedelta | None:
    number = optional_float(value)
    return None if number is None else timedelta(minutes=number)


def text(record: Any, name: str) -> str:
    return str(getattr(record, name, "") or "")


def map_currency(record: Any | None) -> Currency | None:
    if record is None:
        return None
    return Currency(
        id=record.id,
        iso_alpha=text(record, "iso_alpha"),
        iso_number=int(getattr(record, "iso_number", 0) or 0),
        name=text(record, "name"),
        exponent=int(getattr(record, "exponent", 2) or 0),
    )


def map_country(record: Any | None) -> Country | None:
    if record is None:
        return None
    return Country(
        id=record.id,
        name=text(record, "name"),
        iso_number=int(getattr(record, "iso_number", 0) or 0),
        iso2_code=text(record, "iso2_code"),
        iso3_code=text(record, "iso3_code"),
        dialing_code=text(record, "dialing_code"),
        capital=text(record, "capital"),
        continent=text(record, "continent"),
        currency=map_currency(expanded(record, "currency")),
    )


def map_price(record: Any, amount_field: str = "price") -> Price | None:
    """Price from an amount field plus the expanded ``currency`` relation."""
    amount = optional_float(getattr(record, amount_field, None))
    currency = map_currency(expanded(record, "currency"))
    if amount is None or currency is None:
        return None
    return Price(amount=amount, currency=currency)


def map_dive_site(record: Any) -> DiveSite:
    return DiveSite(
        id=record.id,
        version=int(getattr(record, "version", 1) or 1),
        owner_id=text(record, "owner"),
        name=text(record, "name"),
        alt_name=text(record, "alt_name"),
        location=text(record, "location"),
        region=text(record, "region"),
        country=map_country(expanded(record, "country")),
        timezone=text(record, "timezone") or "UTC",
        latitude=optional_float(getattr(record, "latitude", None)),
        longitude=optional_float(getattr(record, "longitude", None)),
        water_body=text(record, "water_body"),
        water_type=text(record, "water_type"),
        altitude=int(getattr(record, "altitude", 0) or 0),
        max_depth=optional_float(getattr(record, "max_depth", None)),
        notes=text(record, "notes"),
        rating=optional_int(getattr(record, "rating", None)),
    )


def map_buddy(record: Any | None) -> Buddy | None:
    if record is None:
        return None
    agency = expanded(record, "agency")
    return Buddy(
        id=record.id,
        version=int(getattr(record, "version", 1) or 1),
        owner_id=text(record, "owner"),
        name=text(record, "name"),
        email=text(record, "email"),
        phone_number=text(record, "phone_number"),
        agency=Agency.from_record(agency) if agency is not None else None,
        agency_member_num=text(record, "agency_member_num"),
        notes=text(record, "notes"),
    )


def map_operator(record: Any | None) -> Operator | None:
    if record is None:
        return None
    operator_type = expanded(record, "operator_type")
    return Operator(
        id=record.id,
        owner_id=text(record, "owner"),
        operator_type=text(operator_type, "name") if operator_type is not None else "",
        name=text(record, "name"),
        street=text(record, "street"),
        suburb=text(record, "suburb"),
        state=text(record, "state"),
        postcode=text(record, "postcode"),
        country=map_country(expanded(record, "country")),
        website_url=text(record, "website_url"),
        email_address=text(record, "email_address"),
        phone_number=text(record, "phone_number"),
        comments=text(record, "comments"),
    )


def map_trip(record: Any | None) -> Trip | None:
    if record is None:
        return None
    return Trip(
        id=record.id,
        owner_id=text(record, "owner"),
        name=text(record, "name"),
        start_date=parse_datetime(getattr(record, "start_date", None)),
        end_date=parse_datetime(getattr(record, "end_date", None)),
        description=text(record, "description"),
        rating=optional_int(getattr(record, "rating", None)),
        operator=map_operator(expanded(record, "operator")),
        price=map_price(record),
        notes=text(record, "notes"),
    )


def map_certification(record: Any | None) -> Certification | None:
    if record is None:
        return None
    agency = expanded(record, "agency")
    return Certification(
        id=record.id,
        owner_id=text(record, "owner"),
        course_name=text(record, "course_name"),
        agency=Agency.from_record(agency) if agency is not None else None,
        start_date=parse_datetime(getattr(record, "start_date", None)),
        end_date=parse_datetime(getattr(record, "end_date", None)),
        operator=map_operator(expanded(record, "operator")),
        instructor=map_buddy(expanded(record, "instructor")),
        price=map_price(record),
        rating=optional_int(getattr(record, "rating", None)),
        notes=text(record, "notes"),
    )


def _reference(kind: type[T], record: Any, name: str) -> T | None:
    related = expanded(record, name)
    return kind.from_record(related) if related is not None else None  # type: ignore[attr-defined]


def map_dive(record: Any) -> Dive:
    """Build a Dive from a record fetched with DIVE_EXPAND.

    date_time_in is projected into the dive site's timezone.

    Raises:
        ValueError: If a required relation was not expanded.
    """
    site_record = expanded(record, "dive_site")
    if site_record is None:
        raise ValueError(f"dive {record.id} has no dive site")
    dive_site = map_dive_site(site_record)

    required = {
        name: _reference(kind, record, name)
        for name, kind in (
            ("tank_configuration", TankConfiguration),
            ("tank_material", TankMaterial),
            ("gas_mix", GasMix),
            ("entry_point", EntryPoint),
        )
    }
    missing = [name for name, value in required.items() if value is None]
    if missing:
        raise ValueError(f"dive {record.id} is missing {', '.join(missing)}")

    date_time_in = parse_datetime(getattr(record, "date_time_in", None))
    if date_time_in is None:
        raise ValueError(f"dive {record.id} has no start time")

    # The pair is stored together; a zero start pressure means neither was logged.
    pressure_in = optional_int(getattr(record, "pressure_in", None)) or None
    pressure_out = None if pressure_in is None else optional_int(getattr(record, "pressure_out", None))

    return Dive(
        id=record.id,
        version=int(getattr(record, "version", 1) or 1),
        owner_id=text(record, "owner"),
        number=int(getattr(record, "number", 0) or 0),
        activity=text(record, "activity"),
        dive_site=dive_site,
        operator=map_operator(expanded(record, "operator")),
        price=map_price(record),
        trip=map_trip(expanded(record, "trip")),
        certification=map_certification(expanded(record, "certification")),
        date_time_in=utc_to_site_local(date_time_in, dive_site.timezone),
        max_depth=float(getattr(record, "max_depth", 0) or 0),
        avg_depth=recorded(getattr(record, "avg_depth", None)),
        bottom_time=minutes(getattr(record, "bottom_time", None)) or timedelta(0),
        safety_stop=minutes(getattr(record, "safety_stop", None)),
        water_temp=optional_int(getattr(record, "water_temp", None)),
        air_temp=optional_int(getattr(record, "air_temp", None)),
        visibility=optional_float(getattr(record, "visibility", None)),
        current=_reference(Current, record, "current"),
        waves=_reference(Waves, record, "waves"),
        buddy=map_buddy(expanded(record, "buddy")),
        buddy_role=_reference(BuddyRole, record, "buddy_role"),
        weight=optional_float(getattr(record, "weight", None)),
        weight_notes=text(record, "weight_notes"),
        equipment=[Equipment.from_record(r) for r in expanded_list(record, "equipment")],
        equipment_notes=text(record, "equipment_notes"),
        tank_configuration=required["tank_configuration"],
        tank_material=required["tank_material"],
        tank_volume=float(getattr(record, "tank_volume", 0) or 0),
        gas_mix=required["gas_mix"],
        fo2=float(getattr(record, "fo2", 0) or 0),
        pressure_in=pressure_in,
        pressure_out=pressure_out,
        gas_mix_notes=text(record, "gas_mix_notes"),
        entry_point=required["entry_point"],
        properties=[DiveProperty.from_record(r) for r in expanded_list(record, "properties")],
        rating=optional_int(getattr(record, "rating", None)),
        notes=text(record, "notes"),
    )


def map_stat_row(record: Any) -> StatRow:
    """Build a StatRow from a dive record with dive_site (and optionally buddy) expanded."""
    site_record = expanded(record, "dive_site")
    if site_record is None:
        raise ValueError(f"dive {record.id} has no dive site")
    dive_site = map_dive_site(site_record)
    date_time_in = parse_datetime(getattr(record, "date_time_in", None))
    if date_time_in is None:
        raise ValueError(f"dive {record.id} has no start time")
    return StatRow(
        dive_id=record.id,
        date_time_in=utc_to_site_local(date_time_in, dive_site.timezone),
        bottom_time=minutes(getattr(record, "bottom_time", None)) or timedelta(0),
        max_depth=float(getattr(record, "max_depth", 0) or 0),
        avg_depth=recorded(getattr(record, "avg_depth", None)),
        dive_site=dive_site,
        buddy=map_buddy(expanded(record, "buddy")),
    )
