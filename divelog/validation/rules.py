"""Validation rulesets, one per entity.

Every applicable rule runs; nothing short-circuits. Bounds live in the tables
below so the dive, dive site and trip rules agree with each other.
"""

from __future__ import annotations

from datetime import datetime

from ..timezones import is_known_zone
from .forms import BuddyForm, CertificationForm, DiveForm, DiveSiteForm, OperatorForm, TripForm
from .gas_mix import check_gas_mix
from .validator import (
    BLANK_MESSAGE,
    EMAIL_RX,
    SELECT_MESSAGE,
    Validator,
    check_between,
    check_max_chars,
    is_http_url,
    matches,
    not_blank,
)

DEPTH_RANGE = (4, 350)  # metres
ALTITUDE_RANGE = (-422, 7_000)  # metres
BOTTOM_TIME_RANGE = (10, 1_440)  # minutes
SAFETY_STOP_RANGE = (0, 6)  # minutes
WATER_TEMP_RANGE = (-3, 50)  # celsius
AIR_TEMP_RANGE = (-90, 60)  # celsius
VISIBILITY_RANGE = (0, 80)  # metres
WEIGHT_RANGE = (0, 99.99)  # kilograms
TANK_VOLUME_RANGE = (2, 22)  # litres
PRESSURE_RANGE = (0, 1_000)  # bar
RATING_RANGE = (0, 10)
PRICE_RANGE = (0, 9_999_999_999.99)
LATITUDE_RANGE = (-90, 90)
LONGITUDE_RANGE = (-180, 180)

NAME_MAX_CHARS = 256
SHORT_NOTES_MAX_CHARS = 4_096
NOTES_MAX_CHARS = 65_536
EMAIL_MAX_CHARS = 254
PHONE_MAX_CHARS = 32
POSTCODE_MAX_CHARS = 16
URL_MAX_CHARS = 2_048
MEMBER_NUM_MAX_CHARS = 64


def check_price(v: Validator, amount: float | None, currency_id: str | None) -> None:
    """Price and currency must be given together, and the amount must be in range."""
    has_amount = amount is not None
    has_currency = bool(currency_id)
    v.check_field(
        has_amount == has_currency,
        "price",
        "Price and currency must both be supplied, or neither",
    )
    check_between(v, amount, "price", *PRICE_RANGE)


def check_pressures(v: Validator, pressure_in: int | None, pressure_out: int | None) -> None:
    """Start and end pressure must be given together, and each must be in range."""
    if (pressure_in is None) != (pressure_out is None):
        missing = "pressure_in" if pressure_in is None else "pressure_out"
        v.check_field(False, missing, "Start and end pressure must both be supplied, or neither")
    check_between(v, pressure_in, "pressure_in", *PRESSURE_RANGE, unit="bar")
    check_between(v, pressure_out, "pressure_out", *PRESSURE_RANGE, unit="bar")


def check_date_order(v: Validator, start: datetime | None, end: datetime | None) -> None:
    v.check_field(start is not None, "start_date", BLANK_MESSAGE)
    v.check_field(end is not None, "end_date", BLANK_MESSAGE)
    if start is not None and end is not None:
        v.check_field(start <= end, "end_date", "This field cannot be before the start date")


def validate_dive(form: DiveForm, gas_mix_name: str | None = None) -> Validator:
    """Run every dive rule against ``form``.

    Args:
        form: The submitted dive.
        gas_mix_name: Name of the selected gas mix, which decides the FO2 rules.
            Without it only the universal FO2 range is checked.

    Returns:
        The populated Validator; callers may add further checks before
        snapshotting it with ``as_failure()``.
    """
    v = Validator()

    v.check_field(form.number is not None and form.number >= 1, "number", "This field must be a positive number")
    v.check_field(not_blank(form.activity), "activity", BLANK_MESSAGE)
    check_max_chars(v, form.activity, "activity", NAME_MAX_CHARS)
    v.check_field(bool(form.dive_site_id), "dive_site_id", SELECT_MESSAGE)

    check_price(v, form.price_amount, form.price_currency_id)

    v.check_field(form.date_time_in is not None, "date_time_in", BLANK_MESSAGE)

    v.check_field(form.max_depth is not None, "max_depth", BLANK_MESSAGE)
    check_between(v, form.max_depth, "max_depth", *DEPTH_RANGE, unit="m")
    check_between(v, form.avg_depth, "avg_depth", *DEPTH_RANGE, unit="m")
    if form.max_depth is not None and form.avg_depth is not None:
        v.check_field(
            form.max_depth > form.avg_depth,
            "avg_depth",
            "Average depth must be less than the maximum depth",
        )

    v.check_field(form.bottom_time_minutes is not None, "bottom_time_minutes", BLANK_MESSAGE)
    check_between(v, form.bottom_time_minutes, "bottom_time_minutes", *BOTTOM_TIME_RANGE, unit="minutes")
    check_between(v, form.safety_stop_minutes, "safety_stop_minutes", *SAFETY_STOP_RANGE, unit="minutes")

    check_between(v, form.water_temp, "water_temp", *WATER_TEMP_RANGE)
    check_between(v, form.air_temp, "air_temp", *AIR_TEMP_RANGE)
    check_between(v, form.visibility, "visibility", *VISIBILITY_RANGE, unit="m")

    check_between(v, form.weight, "weight", *WEIGHT_RANGE, unit="kg")
    check_max_chars(v, form.weight_notes, "weight_notes", SHORT_NOTES_MAX_CHARS)
    check_max_chars(v, form.equipment_notes, "equipment_notes", SHORT_NOTES_MAX_CHARS)

    v.check_field(bool(form.tank_configuration_id), "tank_configuration_id", SELECT_MESSAGE)
    v.check_field(bool(form.tank_material_id), "tank_material_id", SELECT_MESSAGE)
    v.check_field(form.tank_volume is not None, "tank_volume", BLANK_MESSAGE)
    check_between(v, form.tank_volume, "tank_volume", *TANK_VOLUME_RANGE, unit="L")

    v.check_field(bool(form.gas_mix_id), "gas_mix_id", SELECT_MESSAGE)
    check_gas_mix(v, gas_mix_name, form.fo2)

    check_pressures(v, form.pressure_in, form.pressure_out)
    if form.pressure_in is not None and form.pressure_out is not None:
        v.check_field(
            form.pressure_in > form.pressure_out,
            "pressure_out",
            "End pressure must be less than the start pressure",
        )
    check_max_chars(v, form.gas_mix_notes, "gas_mix_notes", SHORT_NOTES_MAX_CHARS)

    v.check_field(bool(form.entry_point_id), "entry_point_id", SELECT_MESSAGE)
    check_between(v, form.rating, "rating", *RATING_RANGE)
    check_max_chars(v, form.notes, "notes", NOTES_MAX_CHARS)

    return v


def validate_dive_site(form: DiveSiteForm) -> Validator:
    v = Validator()

    v.check_field(not_blank(form.name), "name", BLANK_MESSAGE)
    check_max_chars(v, form.name, "name", NAME_MAX_CHARS)
    check_max_chars(v, form.alt_name, "alt_name", NAME_MAX_CHARS)
    v.check_field(not_blank(form.location), "location", BLANK_MESSAGE)
    check_max_chars(v, form.location, "location", NAME_MAX_CHARS)
    check_max_chars(v, form.region, "region", NAME_MAX_CHARS)
    v.check_field(bool(form.country_id), "country_id", SELECT_MESSAGE)
    v.check_field(is_known_zone(form.timezone), "timezone", "This field must be a valid time zone")

    check_between(v, form.latitude, "latitude", *LATITUDE_RANGE)
    check_between(v, form.longitude, "longitude", *LONGITUDE_RANGE)
    check_between(v, form.altitude, "altitude", *ALTITUDE_RANGE, unit="m")
    check_between(v, form.max_depth, "max_depth", *DEPTH_RANGE, unit="m")

    check_max_chars(v, form.notes, "notes", NOTES_MAX_CHARS)
    check_between(v, form.rating, "rating", *RATING_RANGE)

    return v


def validate_trip(form: TripForm) -> Validator:
    v = Validator()

    v.check_field(not_blank(form.name), "name", BLANK_MESSAGE)
    check_max_chars(v, form.name, "name", NAME_MAX_CHARS)
    check_date_order(v, form.start_date, form.end_date)
    check_max_chars(v, form.description, "description", SHORT_NOTES_MAX_CHARS)
    check_between(v, form.rating, "rating", *RATING_RANGE)
    check_price(v, form.price_amount, form.price_currency_id)
    check_max_chars(v, form.notes, "notes", NOTES_MAX_CHARS)

    return v


def validate_certification(form: CertificationForm) -> Validator:
    v = Validator()

    v.check_field(bool(form.course_id), "course_id", SELECT_MESSAGE)
    check_date_order(v, form.start_date, form.end_date)
    v.check_field(bool(form.operator_id), "operator_id", SELECT_MESSAGE)
    v.check_field(bool(form.instructor_id), "instructor_id", SELECT_MESSAGE)
    check_price(v, form.price_amount, form.price_currency_id)
    check_between(v, form.rating, "rating", *RATING_RANGE)
    check_max_chars(v, form.notes, "notes", NOTES_MAX_CHARS)

    return v


def validate_operator(form: OperatorForm) -> Validator:
    v = Validator()

    v.check_field(not_blank(form.name), "name", BLANK_MESSAGE)
    check_max_chars(v, form.name, "name", NAME_MAX_CHARS)
    v.check_field(bool(form.operator_type_id), "operator_type_id", SELECT_MESSAGE)
    check_max_chars(v, form.street, "street", NAME_MAX_CHARS)
    check_max_chars(v, form.suburb, "suburb", NAME_MAX_CHARS)
    check_max_chars(v, form.state, "state", NAME_MAX_CHARS)
    check_max_chars(v, form.postcode, "postcode", POSTCODE_MAX_CHARS)
    v.check_field(bool(form.country_id), "country_id", SELECT_MESSAGE)

    v.check_field(
        form.website_url == "" or is_http_url(form.website_url),
        "website_url",
        "This field must be a valid HTTP or HTTPS URL",
    )
    check_max_chars(v, form.website_url, "website_url", URL_MAX_CHARS)
    check_max_chars(v, form.email_address, "email_address", EMAIL_MAX_CHARS)
    v.check_field(
        form.email_address == "" or matches(form.email_address, EMAIL_RX),
        "email_address",
        "This field must be a valid email address",
    )
    check_max_chars(v, form.phone_number, "phone_number", PHONE_MAX_CHARS)
    check_max_chars(v, form.comments, "comments", SHORT_NOTES_MAX_CHARS)

    return v


def validate_buddy(form: BuddyForm) -> Validator:
    v = Validator()

    v.check_field(not_blank(form.name), "name", BLANK_MESSAGE)
    check_max_chars(v, form.name, "name", NAME_MAX_CHARS)
    check_max_chars(v, form.email, "email", EMAIL_MAX_CHARS)
    v.check_field(
        form.email == "" or matches(form.email, EMAIL_RX),
        "email",
        "This field must be a valid email address",
    )
    check_max_chars(v, form.phone_number, "phone_number", PHONE_MAX_CHARS)
    check_max_chars(v, form.agency_member_num, "agency_member_num", MEMBER_NUM_MAX_CHARS)
    v.check_field(
        form.agency_member_num == "" or bool(form.agency_id),
        "agency_member_num",
        "An agency must be selected to record a member number",
    )
    check_max_chars(v, form.notes, "notes", NOTES_MAX_CHARS)

    return v
